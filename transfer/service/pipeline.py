"""
Main migration service entrypoint.

Runs resolve -> download -> transcode for each configured entry, one at a
time, skipping any entry that fails.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from transfer.service.constants import ENCODING_MODE_ADAPTIVE
from transfer.service.download import DownloadError, download_direct
from transfer.service.media_info import ProbeError, probe_video_stream
from transfer.service.process import TranscodeError, compose_still_image, transcode_for_vimeo
from transfer.service.profile import derive_profile, fixed_profile
from transfer.service.resolve import ResolveError, resolve

STATUS_SUCCESS = 'success'
STATUS_SKIPPED = 'skipped'
STATUS_FAILED = 'failed'


@dataclass(frozen=True)
class Outcome:
    """Result of processing one entry"""

    local_name: str
    entry_id: str
    status: str
    reason: str = ''
    original_path: Optional[Path] = None
    output_path: Optional[Path] = None

    @property
    def succeeded(self):
        return self.status == STATUS_SUCCESS

    @property
    def skipped(self):
        return self.status == STATUS_SKIPPED

    @property
    def failed(self):
        return self.status == STATUS_FAILED

    def to_dict(self):
        return {
            'local_name': self.local_name,
            'entry_id': self.entry_id,
            'status': self.status,
            'reason': self.reason,
            'original_path': str(self.original_path) if self.original_path else None,
            'output_path': str(self.output_path) if self.output_path else None,
        }


@dataclass
class BatchResult:
    """Outcomes of a whole run"""

    outcomes: List[Outcome] = field(default_factory=list)

    def _count(self, status):
        return sum(1 for outcome in self.outcomes if outcome.status == status)

    @property
    def succeeded(self):
        return self._count(STATUS_SUCCESS)

    @property
    def skipped(self):
        return self._count(STATUS_SKIPPED)

    @property
    def failed(self):
        return self._count(STATUS_FAILED)

    def to_dict(self):
        return {
            'total': len(self.outcomes),
            'succeeded': self.succeeded,
            'skipped': self.skipped,
            'failed': self.failed,
            'items': [outcome.to_dict() for outcome in self.outcomes],
        }


def _describe(error):
    return f'{type(error).__name__}: {error}'


def select_profile(original_path, config, logger=None):
    """
    Choose the encoding profile for a downloaded original.

    Adaptive mode probes the file; a failed probe falls back to the fixed
    profile. Fixed and composition modes always use the fixed profile.
    """
    if config.encoding_mode != ENCODING_MODE_ADAPTIVE:
        return fixed_profile(config)

    try:
        info = probe_video_stream(original_path, logger=logger)
    except ProbeError as e:
        if logger:
            logger(f'Could not inspect {original_path} ({e}), using fixed encoding settings')
        return fixed_profile(config)
    return derive_profile(info, config)


def process(local_name, entry_id, token, config, image_path=None, logger=None):
    """
    Resolve, download and transcode one entry.

    Each step is skipped when its output file already exists, so re-running a
    finished batch does no work and reports every entry as skipped.

    Args:
        local_name: Base name for local files
        entry_id: Kaltura entry id
        token: Session token (KS)
        config: MigrationConfig
        image_path: Still image for composition mode
        logger: Optional callable(str) for logging

    Returns:
        Outcome
    """

    def log(message):
        if logger:
            logger(message)

    original_path = config.original_path(local_name)
    output_path = config.output_path(local_name)

    def outcome(status, reason=''):
        return Outcome(
            local_name=local_name,
            entry_id=entry_id,
            status=status,
            reason=reason,
            original_path=original_path if original_path.exists() else None,
            output_path=output_path if output_path.exists() else None,
        )

    log(f'--- Processing Entry: {local_name} (Kaltura ID: {entry_id}) ---')

    # Empty files are leftovers from an interrupted transcode or transfer
    if output_path.exists() and output_path.stat().st_size == 0:
        log(f"Removing empty output '{output_path}'")
        output_path.unlink()

    if output_path.exists():
        log(f"Vimeo-optimised file '{output_path}' already exists. Skipping re-encoding.")
        return outcome(STATUS_SKIPPED, 'output already exists')

    if original_path.exists() and original_path.stat().st_size == 0:
        log(f"Removing empty original '{original_path}'")
        original_path.unlink()

    try:
        if original_path.exists():
            log(f"Original file '{original_path}' already exists. Skipping download.")
        else:
            derivative = resolve(entry_id, token, config, logger=logger)
            log(f"Downloading original from Kaltura to '{original_path}'...")
            download_direct(
                derivative.download_url, original_path, timeout=config.http_timeout, logger=logger
            )
            log(f"Download complete for '{local_name}'.")

        profile = select_profile(original_path, config, logger=logger)

        if config.is_composition:
            image_path = image_path or config.static_image_path
            if not image_path:
                raise TranscodeError('No static image available for composition')
            compose_still_image(image_path, original_path, output_path, profile, logger=logger)
        else:
            transcode_for_vimeo(original_path, output_path, profile, logger=logger)
    except (ResolveError, DownloadError, TranscodeError) as e:
        return outcome(STATUS_FAILED, _describe(e))

    log(f"Video creation complete for '{local_name}'. Output: '{output_path}'.")
    return outcome(STATUS_SUCCESS)


def dry_run_entry(local_name, entry_id, token, config, logger=None):
    """Resolve an entry without downloading anything"""
    try:
        derivative = resolve(entry_id, token, config, logger=logger)
    except ResolveError as e:
        return Outcome(local_name, entry_id, STATUS_FAILED, _describe(e))
    return Outcome(
        local_name,
        entry_id,
        STATUS_SKIPPED,
        f'dry run: would download flavor {derivative.flavor_id} '
        f'(params {derivative.flavor_params_id})',
    )


def run_batch(config, token, image_path=None, dry_run=False, logger=None, on_outcome=None):
    """
    Process every configured entry in turn.

    Per-entry failures never stop the batch.

    Args:
        config: MigrationConfig
        token: Session token (KS)
        image_path: Still image for composition mode
        dry_run: Only resolve flavors, no download or transcode
        logger: Optional callable(str) for logging
        on_outcome: Optional callable(Outcome) called after each entry

    Returns:
        BatchResult
    """
    result = BatchResult()

    for local_name, entry_id in config.entries.items():
        if dry_run:
            entry_outcome = dry_run_entry(local_name, entry_id, token, config, logger=logger)
        else:
            entry_outcome = process(
                local_name, entry_id, token, config, image_path=image_path, logger=logger
            )
        result.outcomes.append(entry_outcome)
        if on_outcome:
            on_outcome(entry_outcome)

    return result
