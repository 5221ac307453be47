"""
Tests for service/session.py and service/kaltura.py
"""

from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase

from transfer.service.kaltura import api_url, extract_error, unwrap_result
from transfer.service.session import AuthError, acquire_session

SERVICE_URL = 'https://kaltura.example.com'


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    return response


class KalturaHelpersTest(SimpleTestCase):
    """Tests for the API helpers"""

    def test_api_url(self):
        self.assertEqual(
            api_url('https://kaltura.example.com/'),
            'https://kaltura.example.com/api_v3/index.php',
        )

    def test_extract_error_exception_object(self):
        payload = {
            'objectType': 'KalturaAPIException',
            'code': 'ENTRY_ID_NOT_FOUND',
            'message': 'Entry id "1_x" not found',
        }
        self.assertEqual(extract_error(payload), 'Entry id "1_x" not found')

    def test_extract_error_wrapped(self):
        payload = {'error': {'code': 'INVALID_KS', 'message': 'Invalid KS'}}
        self.assertEqual(extract_error(payload), 'Invalid KS')

    def test_extract_error_none(self):
        self.assertIsNone(extract_error({'result': {'ks': 'abc'}}))
        self.assertIsNone(extract_error('abc'))
        self.assertIsNone(extract_error([]))

    def test_unwrap_result(self):
        self.assertEqual(unwrap_result({'result': [1]}), [1])
        self.assertEqual(unwrap_result([1]), [1])


class AcquireSessionTest(SimpleTestCase):
    """Tests for session token acquisition"""

    @patch('transfer.service.kaltura.requests.post')
    def test_plain_string_token(self, mock_post):
        mock_post.return_value = _response('djJ8MTIzNDV8token')

        token = acquire_session('12345', 's3cret', SERVICE_URL)

        self.assertEqual(token, 'djJ8MTIzNDV8token')
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], f'{SERVICE_URL}/api_v3/index.php')
        data = kwargs['data']
        self.assertEqual(data['service'], 'session')
        self.assertEqual(data['action'], 'start')
        self.assertEqual(data['partnerId'], '12345')
        self.assertEqual(data['secret'], 's3cret')
        self.assertEqual(data['type'], 2)
        self.assertEqual(data['format'], 1)

    @patch('transfer.service.kaltura.requests.post')
    def test_wrapped_token(self, mock_post):
        mock_post.return_value = _response({'result': {'ks': 'abc'}})
        self.assertEqual(acquire_session('1', 'x', SERVICE_URL), 'abc')

    @patch('transfer.service.kaltura.requests.post')
    def test_session_type_passed(self, mock_post):
        mock_post.return_value = _response('abc')
        acquire_session('1', 'x', SERVICE_URL, session_type=0)
        self.assertEqual(mock_post.call_args.kwargs['data']['type'], 0)

    @patch('transfer.service.kaltura.requests.post')
    def test_error_payload_raises(self, mock_post):
        mock_post.return_value = _response(
            {
                'objectType': 'KalturaAPIException',
                'code': 'START_SESSION_ERROR',
                'message': 'Error while starting session for partner [1]',
            }
        )
        with self.assertRaises(AuthError) as ctx:
            acquire_session('1', 'bad', SERVICE_URL)
        self.assertIn('Error while starting session', str(ctx.exception))

    @patch('transfer.service.kaltura.requests.post')
    def test_missing_token_raises(self, mock_post):
        mock_post.return_value = _response({'result': {}})
        with self.assertRaises(AuthError) as ctx:
            acquire_session('1', 'x', SERVICE_URL)
        self.assertIn('Unknown error', str(ctx.exception))

    @patch('transfer.service.kaltura.requests.post')
    def test_empty_string_raises(self, mock_post):
        mock_post.return_value = _response('')
        with self.assertRaises(AuthError):
            acquire_session('1', 'x', SERVICE_URL)

    @patch('transfer.service.kaltura.requests.post')
    def test_transport_error_raises(self, mock_post):
        mock_post.side_effect = requests.ConnectionError('connection refused')
        with self.assertRaises(AuthError):
            acquire_session('1', 'x', SERVICE_URL)

    @patch('transfer.service.kaltura.requests.post')
    def test_non_json_raises(self, mock_post):
        response = MagicMock()
        response.json.side_effect = ValueError('Expecting value')
        mock_post.return_value = response
        with self.assertRaises(AuthError):
            acquire_session('1', 'x', SERVICE_URL)

    @patch('transfer.service.kaltura.requests.post')
    def test_html_body_reported_as_not_json(self, mock_post):
        response = MagicMock()
        response.json.side_effect = requests.exceptions.JSONDecodeError('Expecting value', '<html>', 0)
        mock_post.return_value = response
        with self.assertRaises(AuthError) as ctx:
            acquire_session('1', 'x', SERVICE_URL)
        self.assertIn('not JSON', str(ctx.exception))

    @patch('transfer.service.kaltura.requests.post')
    def test_single_attempt(self, mock_post):
        mock_post.side_effect = requests.Timeout('timed out')
        with self.assertRaises(AuthError):
            acquire_session('1', 'x', SERVICE_URL)
        self.assertEqual(mock_post.call_count, 1)

    @patch('transfer.service.kaltura.requests.post')
    def test_logger_called(self, mock_post):
        mock_post.return_value = _response('abc')
        logs = []
        acquire_session('1', 'x', SERVICE_URL, logger=logs.append)
        self.assertTrue(any('Successfully obtained' in line for line in logs))
