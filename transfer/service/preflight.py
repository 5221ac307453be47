"""
Startup checks.

Everything here is fatal for the run: missing tools, output directories that
cannot be created, or a composition image that cannot be prepared.
"""

import shutil
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from transfer.service.constants import DEFAULT_STATIC_IMAGE_NAME, ENCODING_MODE_ADAPTIVE


class SetupError(Exception):
    """Raised when the run cannot start"""

    pass


def required_tools(encoding_mode):
    """External executables needed for an encoding mode"""
    tools = ['ffmpeg']
    if encoding_mode == ENCODING_MODE_ADAPTIVE:
        tools.append('ffprobe')
    return tools


def check_tools(encoding_mode):
    """
    Find required executables that are not on PATH.

    Returns:
        list: Names of missing tools (empty when all are present)
    """
    return [tool for tool in required_tools(encoding_mode) if shutil.which(tool) is None]


def ensure_output_dirs(config, logger=None):
    """
    Create the originals and output directories.

    Returns:
        tuple: (originals_dir, output_dir)

    Raises:
        SetupError: If a directory cannot be created
    """
    for directory in (config.originals_dir, config.output_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SetupError(f'Failed to create directory: {directory} ({e})')

    if logger:
        logger(f'Output directories ready: {config.originals_dir} and {config.output_dir}')
    return config.originals_dir, config.output_dir


def generate_background(path, size=(1920, 1080)):
    """Write a plain black PNG of the given size"""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new('RGB', size, 'black').save(path, 'PNG')
    return path


def prepare_static_image(config, logger=None):
    """
    Pick the still image for composition mode.

    A configured, readable image is used as is. Otherwise a black frame of
    the preferred size is generated under the output root.

    Returns:
        Path to the image

    Raises:
        SetupError: If the configured image is unreadable or generation fails
    """

    def log(message):
        if logger:
            logger(message)

    image_path = config.static_image_path
    if image_path and Path(image_path).is_file():
        try:
            with Image.open(image_path) as img:
                img.verify()
        except (UnidentifiedImageError, OSError) as e:
            raise SetupError(f'Static image {image_path} is not a readable image: {e}')
        log(f'Using provided static image: {image_path}')
        return Path(image_path)

    default_image = config.output_root / DEFAULT_STATIC_IMAGE_NAME
    log(
        'Static image path not set or file not found. '
        f'Generating a default black background image: {default_image}'
    )
    try:
        return generate_background(default_image, size=config.preferred_frame)
    except OSError as e:
        raise SetupError(f'Failed to generate default black background image: {e}')
