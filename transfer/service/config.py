"""
Configuration adapter for migration settings.

Reads Django settings once and freezes them into a MigrationConfig value
that is passed explicitly to every service function.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from transfer.service.constants import (
    ENCODING_MODE_COMPOSITION,
    ENCODING_MODES,
    LOG_FILE_PREFIX,
    OPTIMISED_DIR_NAME,
    ORIGINAL_AUDIO_SUFFIX,
    ORIGINAL_SUFFIX,
    ORIGINALS_DIR_NAME,
    OUTPUT_SUFFIX,
)


@dataclass(frozen=True)
class MigrationConfig:
    """Everything a migration run needs, fixed at startup"""

    partner_id: str
    secret: str
    entries: Mapping[str, str]
    output_root: Path
    service_url: str = 'https://cdnapisec.kaltura.com'
    session_type: int = 2
    http_timeout: int = 30
    encoding_mode: str = 'adaptive'
    static_image_path: Optional[Path] = None
    preferred_flavor_params_id: Optional[str] = '100'
    target_extension: str = 'mp4'
    preferred_frame: Tuple[int, int] = (1920, 1080)
    minimum_frame: Tuple[int, int] = (1280, 720)
    default_frame_rate: float = 25.0
    keyframe_fallback: int = 48
    video_codec: str = 'libx264'
    video_crf: int = 18
    video_preset: str = 'medium'
    video_profile: str = 'high'
    video_level: str = '4.0'
    pix_fmt: str = 'yuv420p'
    audio_codec: str = 'aac'
    audio_bitrate: str = '320k'
    audio_sample_rate: int = 48000

    def __post_init__(self):
        # Freeze the mapping so no component can add or drop entries mid-run
        object.__setattr__(self, 'entries', MappingProxyType(dict(self.entries)))
        object.__setattr__(self, 'output_root', Path(self.output_root))

    @property
    def originals_dir(self):
        return self.output_root / ORIGINALS_DIR_NAME

    @property
    def output_dir(self):
        return self.output_root / OPTIMISED_DIR_NAME

    @property
    def is_composition(self):
        return self.encoding_mode == ENCODING_MODE_COMPOSITION

    def original_path(self, local_name):
        """Where the downloaded flavor for local_name is stored"""
        suffix = ORIGINAL_AUDIO_SUFFIX if self.is_composition else ORIGINAL_SUFFIX
        return self.originals_dir / f'{local_name}{suffix}.{self.target_extension}'

    def output_path(self, local_name):
        """Where the Vimeo-ready file for local_name is written"""
        return self.output_dir / f'{local_name}{OUTPUT_SUFFIX}.mp4'

    def log_path(self, started_at):
        """Run log path, named from the run's start time"""
        return self.output_root / f"{LOG_FILE_PREFIX}{started_at.strftime('%Y%m%d_%H%M%S')}.log"


def parse_entries(value):
    """
    Parse a local name -> entry id mapping.

    Args:
        value: dict, JSON object string, or empty

    Returns:
        dict: {local_name: entry_id}

    Raises:
        ImproperlyConfigured: If the value is not a flat string mapping
    """
    if not value:
        return {}

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ImproperlyConfigured(f'Entries are not valid JSON: {e}')

    if not isinstance(value, dict):
        raise ImproperlyConfigured('Entries must be a JSON object of local name -> entry id')

    entries = {}
    for local_name, entry_id in value.items():
        if not isinstance(local_name, str) or not local_name.strip():
            raise ImproperlyConfigured(f'Invalid local name: {local_name!r}')
        if not isinstance(entry_id, str) or not entry_id.strip():
            raise ImproperlyConfigured(f'Invalid entry id for {local_name!r}: {entry_id!r}')
        entries[local_name.strip()] = entry_id.strip()
    return entries


def read_entries_file(path):
    """Load entries from a JSON file"""
    path = Path(path).expanduser()
    try:
        text = path.read_text()
    except OSError as e:
        raise ImproperlyConfigured(f'Cannot read entries file {path}: {e}')
    return parse_entries(text)


def parse_entry_arg(arg):
    """
    Parse a NAME=ENTRY_ID command-line argument.

    Example:
        >>> parse_entry_arg('My_Series_Episode_01=1_abcdef12')
        ('My_Series_Episode_01', '1_abcdef12')
    """
    local_name, sep, entry_id = arg.partition('=')
    if not sep or not local_name.strip() or not entry_id.strip():
        raise ValueError(f'Expected NAME=ENTRY_ID, got {arg!r}')
    return local_name.strip(), entry_id.strip()


def _preferred_flavor_id(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def load_config(
    entries=None,
    entries_file=None,
    encoding_mode=None,
    output_base=None,
    output_root_dir=None,
    static_image_path=None,
    preferred_flavor_params_id=None,
):
    """
    Build the MigrationConfig for this run from Django settings.

    Keyword arguments override the matching settings (used by CLI options).
    Explicit entries win over an entries file, which wins over settings.

    Returns:
        MigrationConfig

    Raises:
        ImproperlyConfigured: On an unknown encoding mode or malformed entries
    """
    if entries is not None:
        entries = parse_entries(entries)
    elif entries_file:
        entries = read_entries_file(entries_file)
    elif settings.OVPMIGRATE_ENTRIES:
        entries = parse_entries(settings.OVPMIGRATE_ENTRIES)
    elif settings.OVPMIGRATE_ENTRIES_FILE:
        entries = read_entries_file(settings.OVPMIGRATE_ENTRIES_FILE)
    else:
        entries = {}

    encoding_mode = encoding_mode or settings.OVPMIGRATE_ENCODING_MODE
    if encoding_mode not in ENCODING_MODES:
        raise ImproperlyConfigured(
            f"Unknown encoding mode {encoding_mode!r}, expected one of {', '.join(ENCODING_MODES)}"
        )

    base = Path(output_base or settings.OVPMIGRATE_OUTPUT_BASE).expanduser()
    output_root = base / (output_root_dir or settings.OVPMIGRATE_OUTPUT_ROOT_DIR)

    image = static_image_path if static_image_path is not None else settings.OVPMIGRATE_STATIC_IMAGE_PATH
    image = Path(image).expanduser() if image else None

    if preferred_flavor_params_id is None:
        preferred_flavor_params_id = settings.OVPMIGRATE_PREFERRED_FLAVOR_PARAMS_ID

    return MigrationConfig(
        partner_id=str(settings.OVPMIGRATE_PARTNER_ID),
        secret=settings.OVPMIGRATE_SECRET,
        entries=entries,
        output_root=output_root,
        service_url=settings.OVPMIGRATE_SERVICE_URL.rstrip('/'),
        session_type=int(settings.OVPMIGRATE_SESSION_TYPE),
        http_timeout=int(settings.OVPMIGRATE_HTTP_TIMEOUT),
        encoding_mode=encoding_mode,
        static_image_path=image,
        preferred_flavor_params_id=_preferred_flavor_id(preferred_flavor_params_id),
        target_extension=settings.OVPMIGRATE_TARGET_EXTENSION.lstrip('.').lower(),
        preferred_frame=tuple(settings.OVPMIGRATE_PREFERRED_FRAME),
        minimum_frame=tuple(settings.OVPMIGRATE_MINIMUM_FRAME),
        default_frame_rate=float(settings.OVPMIGRATE_DEFAULT_FRAME_RATE),
        keyframe_fallback=int(settings.OVPMIGRATE_KEYFRAME_FALLBACK),
        video_codec=settings.OVPMIGRATE_VIDEO_CODEC,
        video_crf=int(settings.OVPMIGRATE_VIDEO_CRF),
        video_preset=settings.OVPMIGRATE_VIDEO_PRESET,
        video_profile=settings.OVPMIGRATE_VIDEO_PROFILE,
        video_level=str(settings.OVPMIGRATE_VIDEO_LEVEL),
        pix_fmt=settings.OVPMIGRATE_PIX_FMT,
        audio_codec=settings.OVPMIGRATE_AUDIO_CODEC,
        audio_bitrate=settings.OVPMIGRATE_AUDIO_BITRATE,
        audio_sample_rate=int(settings.OVPMIGRATE_AUDIO_SAMPLE_RATE),
    )
