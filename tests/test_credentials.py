"""Tests for environment resolution and access-token strategies."""

import unittest
from unittest.mock import Mock

from plaid_node.api.credentials import (
    PRODUCTION_URL,
    SANDBOX_URL,
    ClientOnlyResolver,
    PublicTokenExchangeResolver,
    StoredAccessTokenResolver,
    build_headers,
    resolve_base_url,
    select_token_resolver,
)
from plaid_node.models.core import PlaidCredentials
from plaid_node.utils.error_handler import AuthResolutionError


class TestEnvironmentResolution(unittest.TestCase):
    """Test base URL and header resolution"""

    def test_production(self):
        self.assertEqual(resolve_base_url('production'), PRODUCTION_URL)
        self.assertEqual(resolve_base_url('PRODUCTION'), PRODUCTION_URL)
        self.assertEqual(resolve_base_url(' Production '), PRODUCTION_URL)

    def test_everything_else_is_sandbox(self):
        for environment in ('sandbox', 'development', '', None, 'prod'):
            self.assertEqual(resolve_base_url(environment), SANDBOX_URL)

    def test_headers(self):
        credentials = PlaidCredentials(client_id='client', secret='secret')

        headers = build_headers(credentials)

        self.assertEqual(headers['PLAID-CLIENT-ID'], 'client')
        self.assertEqual(headers['PLAID-SECRET'], 'secret')
        self.assertEqual(headers['Plaid-Version'], '2020-09-14')
        self.assertEqual(headers['Content-Type'], 'application/json')


class TestCredentialsModel(unittest.TestCase):
    """Test PlaidCredentials construction from host mappings"""

    def test_from_camel_case(self):
        credentials = PlaidCredentials.from_dict({
            'clientId': 'client',
            'secret': 'secret',
            'environment': 'production',
            'accessToken': 'access-sandbox-1',
            'authMethod': 'accessToken',
        })

        self.assertEqual(credentials.client_id, 'client')
        self.assertEqual(credentials.environment, 'production')
        self.assertEqual(credentials.access_token, 'access-sandbox-1')
        self.assertEqual(credentials.auth_method, 'accessToken')
        self.assertIsNone(credentials.public_token)

    def test_blank_values_are_absent(self):
        credentials = PlaidCredentials.from_dict({'client_id': 'c', 'secret': 's', 'access_token': '  '})

        self.assertIsNone(credentials.access_token)
        self.assertEqual(credentials.environment, 'sandbox')


class TestTokenResolvers(unittest.TestCase):
    """Test access-token strategy selection and resolution"""

    def setUp(self):
        self.client = Mock()

    def test_default_selection(self):
        self.assertIsInstance(
            select_token_resolver(PlaidCredentials('c', 's', access_token='a', public_token='p')),
            StoredAccessTokenResolver
        )
        self.assertIsInstance(
            select_token_resolver(PlaidCredentials('c', 's', public_token='p')),
            PublicTokenExchangeResolver
        )
        self.assertIsInstance(select_token_resolver(PlaidCredentials('c', 's')), ClientOnlyResolver)

    def test_explicit_method_wins(self):
        credentials = PlaidCredentials('c', 's', access_token='a', auth_method='clientOnly')
        self.assertIsInstance(select_token_resolver(credentials), ClientOnlyResolver)

    def test_unknown_method_is_client_only(self):
        credentials = PlaidCredentials('c', 's', access_token='a', auth_method='oauth')
        self.assertIsInstance(select_token_resolver(credentials), ClientOnlyResolver)

    def test_stored_token(self):
        resolver = StoredAccessTokenResolver()

        self.assertEqual(resolver.resolve(PlaidCredentials('c', 's', access_token='a'), self.client), 'a')
        with self.assertRaises(AuthResolutionError):
            resolver.resolve(PlaidCredentials('c', 's'), self.client)
        self.client.post.assert_not_called()

    def test_public_token_exchanged_once(self):
        self.client.post.return_value = {'access_token': 'access-1', 'item_id': 'item-1'}
        resolver = PublicTokenExchangeResolver()
        credentials = PlaidCredentials('c', 's', public_token='public-1')

        self.assertEqual(resolver.resolve(credentials, self.client), 'access-1')
        self.assertEqual(resolver.resolve(credentials, self.client), 'access-1')

        self.client.post.assert_called_once_with('/item/public_token/exchange', {'public_token': 'public-1'})

    def test_public_token_missing(self):
        with self.assertRaises(AuthResolutionError):
            PublicTokenExchangeResolver().resolve(
                PlaidCredentials('c', 's', auth_method='publicToken'), self.client
            )

    def test_exchange_without_access_token(self):
        self.client.post.return_value = {'item_id': 'item-1'}

        with self.assertRaises(AuthResolutionError):
            PublicTokenExchangeResolver().resolve(PlaidCredentials('c', 's', public_token='p'), self.client)

    def test_client_only(self):
        with self.assertRaises(AuthResolutionError) as context:
            ClientOnlyResolver().resolve(PlaidCredentials('c', 's', access_token='a'), self.client)
        self.assertEqual(context.exception.error_code, 'AUTH_RESOLUTION_ERROR')


if __name__ == '__main__':
    unittest.main()
