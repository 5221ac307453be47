"""
Kaltura and output layout constants.

Centralized definitions of API values, encoding modes and file naming.
"""

# Kaltura API endpoint path, relative to the service URL
API_PATH = '/api_v3/index.php'

# Kaltura JSON response format
RESPONSE_FORMAT_JSON = 1

# KalturaFlavorAssetStatus.READY
FLAVOR_STATUS_READY = 2

KALTURA_EXCEPTION_TYPE = 'KalturaAPIException'

# Encoding modes
ENCODING_MODE_FIXED = 'fixed'
ENCODING_MODE_ADAPTIVE = 'adaptive'
ENCODING_MODE_COMPOSITION = 'composition'

ENCODING_MODES = [ENCODING_MODE_FIXED, ENCODING_MODE_ADAPTIVE, ENCODING_MODE_COMPOSITION]

# Output layout
ORIGINALS_DIR_NAME = 'Originals'
OPTIMISED_DIR_NAME = 'Vimeo_Optimised'

ORIGINAL_SUFFIX = '_original'
ORIGINAL_AUDIO_SUFFIX = '_original_audio'
OUTPUT_SUFFIX = '_Vimeo'

LOG_FILE_PREFIX = 'migration_log_'
DEFAULT_STATIC_IMAGE_NAME = 'black_background_1920x1080.png'
