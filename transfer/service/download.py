"""
Download service for Kaltura flavors.

Streams a resolved flavor URL to a local file over HTTP.
"""

from dataclasses import dataclass
from pathlib import Path

import requests


class DownloadError(Exception):
    """Raised when a transfer fails or produces an empty file"""

    pass


@dataclass
class DownloadedFileInfo:
    """Information about a downloaded file"""

    path: Path
    file_size: int
    extension: str


def _request_failure(error):
    # requests puts the full URL, query string included, into its messages
    response = getattr(error, 'response', None)
    status = getattr(response, 'status_code', None)
    if status:
        return f'{type(error).__name__} (HTTP {status})'
    return type(error).__name__


def _discard(path):
    if path.exists():
        path.unlink()


def download_direct(url, out_path, timeout=30, logger=None):
    """
    Download a file directly via HTTP.

    The partial or empty file is removed before an error is raised, so a later
    run starts from a clean slate.

    Args:
        url: Direct download URL
        out_path: Output file path (Path object or str)
        timeout: Request timeout in seconds
        logger: Optional callable(str) for logging

    Returns:
        DownloadedFileInfo

    Raises:
        DownloadError: On transfer errors or a zero-length result
    """

    def log(message):
        if logger:
            logger(message)

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    log(f'Saving to: {out_path}')

    try:
        response = requests.get(url, stream=True, timeout=timeout)
        response.raise_for_status()

        with open(out_path, 'wb') as f:
            for chunk in response.iter_content(chunk_size=8192):
                f.write(chunk)
    except requests.RequestException as e:
        _discard(out_path)
        raise DownloadError(f'Download failed: {_request_failure(e)}')
    except OSError as e:
        _discard(out_path)
        raise DownloadError(f'Could not write {out_path}: {e}')

    file_size = out_path.stat().st_size
    if file_size == 0:
        _discard(out_path)
        raise DownloadError(f"Downloaded file '{out_path}' is empty")

    log(f'Downloaded {file_size} bytes')

    return DownloadedFileInfo(path=out_path, file_size=file_size, extension=out_path.suffix)
