"""Integration tests for configuration, plugins and node execution."""

import json
import os
import tempfile
import unittest
from unittest.mock import Mock

from plaid_node.node import PlaidNode
from plaid_node.utils.config_manager import ConfigManager


PLUGIN_SOURCE = '''
from plaid_node.operations.accounts import AccountGetAllOperation
from plaid_node.utils.plugin_manager import OperationPlugin


class CheckingOnlyAccounts(AccountGetAllOperation):
    source = "checking_only"

    def map_response(self, response, request):
        records = super().map_response(response, request)
        return [record for record in records if record["subtype"] == "checking"]


class CheckingOnlyPlugin(OperationPlugin):
    def get_name(self):
        return "checking_only"

    def get_operation_class(self):
        return CheckingOnlyAccounts

    def get_priority(self):
        return 1
'''


class TestConfigPluginIntegration(unittest.TestCase):
    """Test integration between configuration, plugin and execution layers"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, 'test_config.json')
        self.plugin_dir = os.path.join(self.temp_dir, 'plugins')
        os.makedirs(self.plugin_dir)

        with open(os.path.join(self.plugin_dir, 'checking_only.py'), 'w') as f:
            f.write(PLUGIN_SOURCE)

    def tearDown(self):
        """Clean up test fixtures"""
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def load_node(self, config_data, session):
        with open(self.config_file, 'w') as f:
            json.dump(config_data, f)

        config = ConfigManager(config_path=self.config_file).load_config()
        return PlaidNode(config, session=session)

    def test_plugin_overrides_builtin_operation(self):
        """Test that a configured plugin directory replaces account/getAll"""
        session = Mock()
        response = Mock(status_code=200)
        response.json.return_value = {'accounts': [
            {'account_id': 'acc_1', 'subtype': 'checking'},
            {'account_id': 'acc_2', 'subtype': 'savings'},
        ]}
        session.post.return_value = response

        node = self.load_node({'plugin_directories': [self.plugin_dir]}, session)
        results = node.execute(
            [{}],
            {'resource': 'account', 'operation': 'getAll'},
            {'clientId': 'client', 'secret': 'secret', 'accessToken': 'access-1'}
        )

        self.assertEqual([r.json['account_id'] for r in results], ['acc_1'])
        self.assertEqual(results[0].json['source'], 'checking_only')
        self.assertIn('checking_only', node.plugin_manager.get_available_plugins())

    def test_config_drives_timeout_and_defaults(self):
        """Test that configured timeout, count and country codes reach the request"""
        session = Mock()
        response = Mock(status_code=200)
        response.json.return_value = {'institutions': []}
        session.post.return_value = response

        node = self.load_node({
            'request_timeout': 7.5,
            'default_country_codes': ['GB', 'IE'],
        }, session)
        node.execute(
            [{}],
            {'resource': 'institution', 'operation': 'search', 'query': 'monzo'},
            {'clientId': 'client', 'secret': 'secret'}
        )

        kwargs = session.post.call_args.kwargs
        self.assertEqual(kwargs['timeout'], 7.5)
        self.assertEqual(kwargs['json']['country_codes'], ['GB', 'IE'])

    def test_invalid_config_falls_back_to_defaults(self):
        """Test that an invalid configuration still yields a working node"""
        node = self.load_node({'request_timeout': 'slow'}, Mock())

        self.assertEqual(node.config.request_timeout, 30.0)
        self.assertEqual(len(node.describe()), 12)


if __name__ == '__main__':
    unittest.main()
