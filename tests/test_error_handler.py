"""Tests for error classification, normalization and structured logging."""

import json
import logging
import os
import tempfile
import unittest

import requests

from plaid_node.utils.error_handler import (
    ErrorCategory,
    ErrorHandler,
    ParameterError,
    PlaidNodeError,
    TransportError,
    UpstreamApiError,
    build_error_record,
    classify_exception,
    format_error_message,
    normalize_error_payload,
)


class TestNormalizeErrorPayload(unittest.TestCase):
    """Test upstream error body normalization"""

    ERROR = {
        'error_type': 'ITEM_ERROR',
        'error_code': 'ITEM_LOGIN_REQUIRED',
        'error_message': 'the login details of this item have changed',
        'display_message': 'Please log in again',
        'request_id': 'req-1',
    }

    def test_bare_payload(self):
        normalized = normalize_error_payload(self.ERROR)

        self.assertEqual(normalized['error_code'], 'ITEM_LOGIN_REQUIRED')
        self.assertEqual(normalized['error_message'], 'the login details of this item have changed')
        self.assertEqual(normalized['error_type'], 'ITEM_ERROR')
        self.assertEqual(normalized['request_id'], 'req-1')

    def test_wrappers_normalize_to_same_shape(self):
        bare = normalize_error_payload(self.ERROR)

        self.assertEqual(normalize_error_payload({'data': self.ERROR}), bare)
        self.assertEqual(normalize_error_payload({'body': self.ERROR}), bare)
        self.assertEqual(normalize_error_payload({'response': {'data': self.ERROR}}), bare)

    def test_no_error_present(self):
        self.assertIsNone(normalize_error_payload(None))
        self.assertIsNone(normalize_error_payload('Internal Server Error'))
        self.assertIsNone(normalize_error_payload({'message': 'oops'}))
        self.assertIsNone(normalize_error_payload({'error_code': None}))

    def test_display_message_fallback(self):
        normalized = normalize_error_payload({'error_code': 'RATE_LIMIT_EXCEEDED', 'display_message': 'slow down'})

        self.assertEqual(normalized['error_message'], 'slow down')


class TestClassification(unittest.TestCase):
    """Test exception classification and error records"""

    def test_node_errors_pass_through(self):
        error = ParameterError("Parameter 'query' is required", 'query')
        self.assertIs(classify_exception(error), error)

    def test_requests_exception_is_transport(self):
        classified = classify_exception(requests.ConnectionError('boom'))

        self.assertIsInstance(classified, TransportError)
        self.assertEqual(classified.error_code, 'TRANSPORT_ERROR')
        self.assertEqual(classified.category, ErrorCategory.NETWORK)

    def test_other_exception(self):
        classified = classify_exception(KeyError('accounts'))

        self.assertIsInstance(classified, PlaidNodeError)
        self.assertEqual(classified.error_code, 'UNKNOWN')

    def test_error_record(self):
        error = UpstreamApiError('INVALID_ACCESS_TOKEN', 'token invalid')

        record = build_error_record(error, 'account', 'getAll')

        self.assertTrue(record['error'])
        self.assertEqual(record['error_code'], 'INVALID_ACCESS_TOKEN')
        self.assertEqual(record['error_message'], 'token invalid')
        self.assertEqual(record['resource'], 'account')
        self.assertEqual(record['operation'], 'getAll')
        self.assertIn('processed_at', record)

    def test_format_error_message(self):
        error = UpstreamApiError('INVALID_ACCESS_TOKEN', 'token invalid')

        self.assertEqual(format_error_message(error), 'Plaid API Error (INVALID_ACCESS_TOKEN): token invalid')


class TestErrorHandler(unittest.TestCase):
    """Test error collection and JSON log files"""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil
        error_logger = logging.getLogger('plaid_node.errors')
        for handler in error_logger.handlers:
            handler.close()
        error_logger.handlers.clear()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_record_error_and_summary(self):
        handler = ErrorHandler()

        handler.record_error(UpstreamApiError('INVALID_ACCESS_TOKEN', 'token invalid', request_id='req-1'),
                             item_index=2, resource='item', operation='get')
        handler.record_error(ParameterError("Parameter 'query' is required"),
                             item_index=0, resource='institution', operation='search')
        handler.log_warning("Unknown auth method", "UNKNOWN_AUTH_METHOD", ErrorCategory.AUTHENTICATION)

        summary = handler.get_error_summary()
        self.assertEqual(summary['total_errors'], 2)
        self.assertEqual(summary['total_warnings'], 1)
        self.assertEqual(summary['errors_by_category'], {'upstream': 1, 'parameter': 1})
        self.assertEqual(summary['errors_by_code']['INVALID_ACCESS_TOKEN'], 1)
        self.assertEqual(summary['failed_items'], [0, 2])

        item_errors = handler.get_errors_for_item(2)
        self.assertEqual(len(item_errors), 1)
        self.assertEqual(item_errors[0].context['request_id'], 'req-1')

        handler.clear_errors()
        self.assertFalse(handler.has_errors())

    def test_json_log_files(self):
        handler = ErrorHandler(log_directory=self.temp_dir)

        handler.record_error(TransportError('timed out'), item_index=1, resource='item', operation='get')
        for file_handler in handler.logger.handlers:
            file_handler.flush()

        error_files = [name for name in os.listdir(self.temp_dir) if name.startswith('errors_')]
        self.assertEqual(len(error_files), 1)

        with open(os.path.join(self.temp_dir, error_files[0])) as f:
            entry = json.loads(f.readline())

        self.assertEqual(entry['level'], 'ERROR')
        self.assertEqual(entry['error_code'], 'TRANSPORT_ERROR')
        self.assertEqual(entry['item_index'], 1)
        self.assertEqual(entry['resource'], 'item')

    def test_previous_file_handlers_are_closed(self):
        first = ErrorHandler(log_directory=self.temp_dir)
        first_handlers = list(first.logger.handlers)
        self.assertEqual(len(first_handlers), 2)

        second = ErrorHandler(log_directory=self.temp_dir)

        for file_handler in first_handlers:
            self.assertIsNone(file_handler.stream)
            self.assertNotIn(file_handler, second.logger.handlers)
        self.assertEqual(len(second.logger.handlers), 2)


if __name__ == '__main__':
    unittest.main()
