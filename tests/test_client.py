"""Tests for the Plaid HTTP client."""

import unittest
from unittest.mock import Mock, patch

import requests

from plaid_node.api.client import PlaidApiClient
from plaid_node.models.core import PlaidCredentials
from plaid_node.utils.error_handler import TransportError, UpstreamApiError


def make_response(status_code=200, payload=None, text='', json_error=False):
    response = Mock()
    response.status_code = status_code
    response.text = text
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = payload
    return response


class TestPlaidApiClient(unittest.TestCase):
    """Test request construction and response classification"""

    def setUp(self):
        self.session = Mock()
        self.credentials = PlaidCredentials(client_id='client', secret='secret')
        self.client = PlaidApiClient(self.credentials, timeout=12.5, session=self.session)

    def test_post_sends_credentials_in_headers_and_body(self):
        self.session.post.return_value = make_response(payload={'accounts': [], 'request_id': 'req-1'})

        data = self.client.post('/accounts/get', {'access_token': 'access-1'})

        self.assertEqual(data['request_id'], 'req-1')
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], 'https://sandbox.plaid.com/accounts/get')
        self.assertEqual(kwargs['json'], {'access_token': 'access-1', 'client_id': 'client', 'secret': 'secret'})
        self.assertEqual(kwargs['headers']['PLAID-CLIENT-ID'], 'client')
        self.assertEqual(kwargs['headers']['PLAID-SECRET'], 'secret')
        self.assertEqual(kwargs['timeout'], 12.5)

    def test_production_base_url(self):
        credentials = PlaidCredentials(client_id='c', secret='s', environment='Production')
        client = PlaidApiClient(credentials, session=self.session)
        self.session.post.return_value = make_response(payload={})

        client.post('/item/get')

        self.assertEqual(self.session.post.call_args[0][0], 'https://production.plaid.com/item/get')

    def test_body_is_not_mutated(self):
        self.session.post.return_value = make_response(payload={})
        body = {'count': 10}

        self.client.post('/transactions/sync', body)

        self.assertEqual(body, {'count': 10})

    def test_upstream_error_passthrough(self):
        self.session.post.return_value = make_response(400, payload={
            'error_type': 'INVALID_INPUT',
            'error_code': 'INVALID_ACCESS_TOKEN',
            'error_message': 'token invalid',
            'display_message': None,
            'request_id': 'req-2',
        })

        with self.assertRaises(UpstreamApiError) as context:
            self.client.post('/accounts/get', {'access_token': 'bad'})

        error = context.exception
        self.assertEqual(error.error_code, 'INVALID_ACCESS_TOKEN')
        self.assertEqual(error.error_message, 'token invalid')
        self.assertEqual(error.error_type, 'INVALID_INPUT')
        self.assertEqual(error.request_id, 'req-2')
        self.assertEqual(error.status_code, 400)

    def test_wrapped_upstream_error(self):
        self.session.post.return_value = make_response(400, payload={
            'body': {'error_code': 'ITEM_LOGIN_REQUIRED', 'error_message': 'login required'}
        })

        with self.assertRaises(UpstreamApiError) as context:
            self.client.post('/item/get')

        self.assertEqual(context.exception.error_code, 'ITEM_LOGIN_REQUIRED')

    def test_unstructured_error_status(self):
        self.session.post.return_value = make_response(502, text='Bad Gateway', json_error=True)

        with self.assertRaises(UpstreamApiError) as context:
            self.client.post('/item/get')

        self.assertEqual(context.exception.error_code, 'PLAID_ERROR')
        self.assertIn('502', context.exception.error_message)
        self.assertIn('Bad Gateway', context.exception.error_message)

    def test_network_failure(self):
        self.session.post.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(TransportError) as context:
            self.client.post('/item/get')

        self.assertIn('connection refused', context.exception.error_message)

    def test_timeout(self):
        self.session.post.side_effect = requests.Timeout("read timed out")

        with self.assertRaises(TransportError) as context:
            self.client.post('/item/get')

        self.assertIn('timed out', context.exception.error_message)

    def test_malformed_body(self):
        self.session.post.return_value = make_response(200, text='<html>', json_error=True)

        with self.assertRaises(TransportError):
            self.client.post('/item/get')

        self.session.post.return_value = make_response(200, payload=['not', 'an', 'object'])

        with self.assertRaises(TransportError):
            self.client.post('/item/get')

    def test_close_keeps_external_session(self):
        self.client.close()
        self.session.close.assert_not_called()

    def test_close_owned_session(self):
        client = PlaidApiClient(self.credentials)
        session = client.session

        with patch.object(session, 'close') as close:
            with client:
                pass

        close.assert_called_once()


if __name__ == '__main__':
    unittest.main()
