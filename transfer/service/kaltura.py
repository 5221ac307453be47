"""
Minimal Kaltura API v3 client.

Form-encoded POSTs to /api_v3/index.php with JSON responses.
"""

import requests

from transfer.service.constants import API_PATH, KALTURA_EXCEPTION_TYPE, RESPONSE_FORMAT_JSON


def api_url(service_url):
    return f"{service_url.rstrip('/')}{API_PATH}"


def call_api(service_url, service, action, params, timeout=30):
    """
    Call a Kaltura service action.

    Args:
        service_url: Base URL, e.g. https://cdnapisec.kaltura.com
        service: Kaltura service name (e.g. 'session')
        action: Action name (e.g. 'start')
        params: Dict of action parameters
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON payload (dict, list or str)

    Raises:
        requests.RequestException: On transport or HTTP status errors
        ValueError: If the body is not JSON
    """
    data = {'service': service, 'action': action, 'format': RESPONSE_FORMAT_JSON}
    data.update(params)

    response = requests.post(api_url(service_url), data=data, timeout=timeout)
    response.raise_for_status()
    return response.json()


def extract_error(payload):
    """
    Return the error message of an error payload, or None.

    Kaltura reports failures either as a bare KalturaAPIException object or
    wrapped as {"error": {"code": ..., "message": ...}}.
    """
    if not isinstance(payload, dict):
        return None

    if payload.get('objectType') == KALTURA_EXCEPTION_TYPE:
        return payload.get('message') or payload.get('code') or 'Unknown Kaltura error'

    error = payload.get('error')
    if error:
        if isinstance(error, dict):
            return error.get('message') or error.get('code') or 'Unknown Kaltura error'
        return str(error)

    return None


def unwrap_result(payload):
    """Strip the optional {"result": ...} envelope"""
    if isinstance(payload, dict) and 'result' in payload:
        return payload['result']
    return payload
