"""Utility functions and helpers"""

from .error_handler import (
    AuthResolutionError,
    ErrorCategory,
    ErrorHandler,
    ErrorSeverity,
    NodeOperationError,
    ParameterError,
    PlaidNodeError,
    TransportError,
    UpstreamApiError,
    normalize_error_payload,
)
from .validation import ParameterReader, format_date, parse_account_ids
from .enrichment import (
    calculate_spending_score,
    detect_recurring,
    enhance_categories,
    format_transaction_amount,
)
from .config_manager import ConfigManager, get_default_config_manager
from .plugin_manager import PluginManager, OperationPlugin, SimpleOperationPlugin

__all__ = [
    'AuthResolutionError',
    'ErrorCategory',
    'ErrorHandler',
    'ErrorSeverity',
    'NodeOperationError',
    'ParameterError',
    'PlaidNodeError',
    'TransportError',
    'UpstreamApiError',
    'normalize_error_payload',
    'ParameterReader',
    'format_date',
    'parse_account_ids',
    'calculate_spending_score',
    'detect_recurring',
    'enhance_categories',
    'format_transaction_amount',
    'ConfigManager',
    'get_default_config_manager',
    'PluginManager',
    'OperationPlugin',
    'SimpleOperationPlugin',
]
