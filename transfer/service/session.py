"""
Kaltura session (KS) acquisition.
"""

import requests

from transfer.service.kaltura import call_api, extract_error, unwrap_result


class AuthError(Exception):
    """Raised when no session token could be obtained. Fatal for the run."""

    pass


def _token_from_payload(payload):
    result = unwrap_result(payload)
    if isinstance(result, str):
        return result.strip()
    if isinstance(result, dict):
        token = result.get('ks')
        if isinstance(token, str):
            return token.strip()
    return ''


def acquire_session(partner_id, secret, service_url, session_type=2, timeout=30, logger=None):
    """
    Exchange partner credentials for a session token.

    One attempt, no retry.

    Args:
        partner_id: Kaltura partner id
        secret: Partner (admin or user) secret
        service_url: Kaltura base URL
        session_type: 0 for a user session, 2 for an admin session
        timeout: Request timeout in seconds
        logger: Optional callable(str) for logging

    Returns:
        str: The KS token

    Raises:
        AuthError: If the request fails or the response carries no token
    """

    def log(message):
        if logger:
            logger(message)

    log('Attempting to get Kaltura session token...')

    try:
        payload = call_api(
            service_url,
            'session',
            'start',
            {'partnerId': partner_id, 'secret': secret, 'type': session_type},
            timeout=timeout,
        )
    except requests.exceptions.JSONDecodeError as e:
        raise AuthError(f'Session response was not JSON: {e}')
    except requests.RequestException as e:
        raise AuthError(f'Session request failed: {e}')
    except ValueError as e:
        raise AuthError(f'Session response was not JSON: {e}')

    error_message = extract_error(payload)
    if error_message:
        raise AuthError(error_message)

    token = _token_from_payload(payload)
    if not token:
        raise AuthError('Unknown error during session token retrieval.')

    log('Successfully obtained Kaltura session token.')
    return token
