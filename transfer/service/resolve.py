"""
Flavor resolution.

Looks up the flavor assets of a Kaltura entry and picks the one to download.
"""

from dataclasses import dataclass
from typing import Optional

import requests

from transfer.service.constants import FLAVOR_STATUS_READY
from transfer.service.kaltura import call_api, extract_error, unwrap_result


class ResolveError(Exception):
    """Raised when an entry's download URL cannot be determined"""

    pass


class NotFound(ResolveError):
    """Raised when Kaltura reports an entry-level error (e.g. unknown entry id)"""

    pass


class NoDerivative(ResolveError):
    """Raised when no flavor of the entry matches the selection rules"""

    pass


@dataclass(frozen=True)
class ResolvedDerivative:
    """The flavor chosen for download"""

    download_url: str
    flavor_id: Optional[str] = None
    flavor_params_id: Optional[str] = None
    original_filename: Optional[str] = None


def _is_ready(flavor, target_extension):
    ext = str(flavor.get('fileExt') or '').lstrip('.').lower()
    try:
        status = int(flavor.get('status'))
    except (TypeError, ValueError):
        return False
    return ext == target_extension and status == FLAVOR_STATUS_READY


def select_derivative(flavors, target_extension='mp4', preferred_params_id=None):
    """
    Pick a flavor from an entry's flavor list.

    Rules, first match wins:
    1. Ready flavor in the target container with the preferred flavor params id
    2. First ready flavor in the target container

    Args:
        flavors: List of flavor asset dicts as returned by flavorAsset.getByEntryId
        target_extension: Container extension without dot (e.g. 'mp4')
        preferred_params_id: Preferred flavor params id, or None

    Returns:
        dict or None
    """
    target_extension = target_extension.lstrip('.').lower()
    candidates = [f for f in flavors if isinstance(f, dict) and _is_ready(f, target_extension)]

    if preferred_params_id is not None:
        preferred = str(preferred_params_id)
        for flavor in candidates:
            if str(flavor.get('flavorParamsId')) == preferred:
                return flavor

    return candidates[0] if candidates else None


def build_download_url(service_url, partner_id, entry_id, flavor_id, token):
    """
    Build the playManifest download URL for a flavor.

    Deterministic given its inputs, so it can be checked without network access.
    """
    return (
        f"{service_url.rstrip('/')}/p/{partner_id}/sp/{partner_id}00/playManifest"
        f'/entryId/{entry_id}/flavorId/{flavor_id}/format/download/protocol/https'
        f'?ks={token}'
    )


def fetch_flavors(entry_id, token, config):
    """
    Fetch all flavor assets of an entry.

    Raises:
        NotFound: If Kaltura returns an error object for the entry
        ResolveError: On transport errors or an unexpected payload
    """
    try:
        payload = call_api(
            config.service_url,
            'flavorAsset',
            'getByEntryId',
            {'entryId': entry_id, 'ks': token},
            timeout=config.http_timeout,
        )
    except requests.exceptions.JSONDecodeError as e:
        raise ResolveError(f'Flavor lookup for {entry_id} did not return JSON: {e}')
    except requests.RequestException as e:
        raise ResolveError(f'Flavor lookup failed for {entry_id}: {e}')
    except ValueError as e:
        raise ResolveError(f'Flavor lookup for {entry_id} did not return JSON: {e}')

    error_message = extract_error(payload)
    if error_message:
        raise NotFound(f'{entry_id}: {error_message}')

    flavors = unwrap_result(payload)
    if isinstance(flavors, dict) and 'objects' in flavors:
        flavors = flavors['objects']
    if not isinstance(flavors, list):
        raise ResolveError(f'Unexpected flavor lookup response for {entry_id}')
    return flavors


def resolve(entry_id, token, config, logger=None):
    """
    Resolve the download URL of an entry.

    Args:
        entry_id: Kaltura entry id
        token: Session token (KS)
        config: MigrationConfig
        logger: Optional callable(str) for logging

    Returns:
        ResolvedDerivative

    Raises:
        NotFound: Unknown entry or other entry-level API error
        NoDerivative: No flavor matches the selection rules
        ResolveError: Transport or payload errors
    """

    def log(message):
        if logger:
            logger(message)

    log(f'Fetching details for Kaltura entry ID: {entry_id}...')
    flavors = fetch_flavors(entry_id, token, config)

    flavor = select_derivative(
        flavors,
        target_extension=config.target_extension,
        preferred_params_id=config.preferred_flavor_params_id,
    )
    if flavor is None:
        raise NoDerivative(
            f'No suitable {config.target_extension.upper()} flavor found for entry ID: {entry_id}. '
            'It might not be processed yet.'
        )

    flavor_id = flavor.get('id')
    url = flavor.get('url')
    if not url:
        if not flavor_id:
            raise NoDerivative(f'Flavor found for entry ID {entry_id}, but it has no URL or id.')
        url = build_download_url(
            config.service_url, config.partner_id, entry_id, flavor_id, token
        )

    params_id = flavor.get('flavorParamsId')
    resolved = ResolvedDerivative(
        download_url=url,
        flavor_id=str(flavor_id) if flavor_id else None,
        flavor_params_id=str(params_id) if params_id is not None else None,
        original_filename=flavor.get('fileName') or None,
    )
    log(f'Found flavor {resolved.flavor_id} (params {resolved.flavor_params_id}) for entry ID {entry_id}')
    return resolved
