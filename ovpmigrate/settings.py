"""
Django settings for the ovpmigrate project.

Only the pieces needed to run management commands are configured: there is
no web frontend and no models. Every OVPMIGRATE_* value can be overridden
from the environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'ovpmigrate-local-only')

DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() in ('1', 'true', 'yes')

ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'transfer',
]

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

USE_TZ = True
TIME_ZONE = 'UTC'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


def _env_int(name, default):
    value = os.environ.get(name, '')
    if value == '':
        return default
    return int(value)


# Kaltura account
OVPMIGRATE_PARTNER_ID = os.environ.get('OVPMIGRATE_PARTNER_ID', '')
OVPMIGRATE_SECRET = os.environ.get('OVPMIGRATE_SECRET', '')
OVPMIGRATE_SERVICE_URL = os.environ.get('OVPMIGRATE_SERVICE_URL', 'https://cdnapisec.kaltura.com')
# 0 = user session, 2 = admin session
OVPMIGRATE_SESSION_TYPE = _env_int('OVPMIGRATE_SESSION_TYPE', 2)
OVPMIGRATE_HTTP_TIMEOUT = _env_int('OVPMIGRATE_HTTP_TIMEOUT', 30)

# Local name -> Kaltura entry id, as a JSON object, or a path to a JSON file
OVPMIGRATE_ENTRIES = os.environ.get('OVPMIGRATE_ENTRIES', '')
OVPMIGRATE_ENTRIES_FILE = os.environ.get('OVPMIGRATE_ENTRIES_FILE', '')

# Output layout: <OUTPUT_BASE>/<OUTPUT_ROOT_DIR>/{Originals,Vimeo_Optimised}
OVPMIGRATE_OUTPUT_BASE = os.environ.get(
    'OVPMIGRATE_OUTPUT_BASE', str(Path.home() / 'Desktop')
)
OVPMIGRATE_OUTPUT_ROOT_DIR = os.environ.get(
    'OVPMIGRATE_OUTPUT_ROOT_DIR', 'Kaltura_Content_For_Vimeo'
)

# Flavor selection
OVPMIGRATE_TARGET_EXTENSION = os.environ.get('OVPMIGRATE_TARGET_EXTENSION', 'mp4')
# Flavor params id 100 is the usual web/mobile MP4 rendition. Empty disables the preference.
OVPMIGRATE_PREFERRED_FLAVOR_PARAMS_ID = os.environ.get(
    'OVPMIGRATE_PREFERRED_FLAVOR_PARAMS_ID', '100'
)

# Encoding: 'fixed', 'adaptive' or 'composition'
OVPMIGRATE_ENCODING_MODE = os.environ.get('OVPMIGRATE_ENCODING_MODE', 'adaptive')
# Still image for composition mode. A black 1080p frame is generated when unset.
OVPMIGRATE_STATIC_IMAGE_PATH = os.environ.get('OVPMIGRATE_STATIC_IMAGE_PATH', '')

OVPMIGRATE_PREFERRED_FRAME = (1920, 1080)
OVPMIGRATE_MINIMUM_FRAME = (1280, 720)
OVPMIGRATE_DEFAULT_FRAME_RATE = 25.0
OVPMIGRATE_KEYFRAME_FALLBACK = 48

OVPMIGRATE_VIDEO_CODEC = 'libx264'
OVPMIGRATE_VIDEO_CRF = 18
OVPMIGRATE_VIDEO_PRESET = 'medium'
OVPMIGRATE_VIDEO_PROFILE = 'high'
OVPMIGRATE_VIDEO_LEVEL = '4.0'
OVPMIGRATE_PIX_FMT = 'yuv420p'
OVPMIGRATE_AUDIO_CODEC = 'aac'
OVPMIGRATE_AUDIO_BITRATE = '320k'
OVPMIGRATE_AUDIO_SAMPLE_RATE = 48000
