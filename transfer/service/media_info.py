"""
Media stream inspection.

Runs ffprobe on a downloaded file and parses width, height and frame rate of
the first video stream.
"""

import subprocess
from dataclasses import dataclass
from typing import Optional


class ProbeError(Exception):
    """Raised when ffprobe fails or reports no usable video stream"""

    pass


@dataclass(frozen=True)
class MediaStreamInfo:
    """Geometry and frame rate of a video stream"""

    width: Optional[int] = None
    height: Optional[int] = None
    frame_rate_num: Optional[int] = None
    frame_rate_den: Optional[int] = None


def _to_int(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_probe_output(text):
    """
    Parse ffprobe output for width, height and r_frame_rate.

    Accepts either one comma separated line ("1920,1080,30000/1001") or one
    value per line. Fields are positional: width, height, frame rate.

    Returns:
        MediaStreamInfo

    Raises:
        ProbeError: If the output has no fields at all
    """
    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if not lines:
        raise ProbeError('ffprobe reported no video stream')

    if ',' in lines[0]:
        fields = [part.strip() for part in lines[0].split(',')]
    else:
        fields = lines

    fields += [''] * (3 - len(fields))
    width, height, rate = fields[:3]

    num, _, den = rate.partition('/')
    num = _to_int(num)
    # "25" without a denominator is a whole frame rate
    den = _to_int(den) if den else (1 if num is not None else None)

    return MediaStreamInfo(
        width=_to_int(width),
        height=_to_int(height),
        frame_rate_num=num,
        frame_rate_den=den,
    )


def compute_frame_rate(numerator, denominator, default=25.0):
    """
    Turn a rational frame rate into a float.

    Falls back to ``default`` when either part is missing or the denominator
    is zero.

    Example:
        >>> compute_frame_rate(30000, 1001)
        29.97002997002997
        >>> compute_frame_rate(30, 0)
        25.0
    """
    if numerator is None or denominator is None or denominator == 0:
        return float(default)
    rate = numerator / denominator
    if rate <= 0:
        return float(default)
    return rate


def probe_video_stream(file_path, logger=None):
    """
    Inspect the first video stream of a file with ffprobe.

    Args:
        file_path: Path to media file
        logger: Optional callable(str) for logging

    Returns:
        MediaStreamInfo

    Raises:
        ProbeError: If ffprobe cannot run, exits non-zero or prints nothing
    """

    def log(message):
        if logger:
            logger(message)

    cmd = [
        'ffprobe',
        '-v', 'error',
        '-select_streams', 'v:0',
        '-show_entries', 'stream=width,height,r_frame_rate',
        '-of', 'csv=p=0',
        str(file_path),
    ]

    log(f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=60)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ProbeError(f'ffprobe could not run: {e}')

    if result.returncode != 0:
        raise ProbeError(f'ffprobe failed with code {result.returncode}')

    info = parse_probe_output(result.stdout)
    log(
        f'Source stream: {info.width}x{info.height} @ '
        f'{info.frame_rate_num}/{info.frame_rate_den}'
    )
    return info
