"""Error kinds, classification and structured error logging for the Plaid node."""

import json
import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, asdict
import sys

import requests


class ErrorSeverity(Enum):
    """Error severity levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification"""
    PARAMETER = "parameter"
    AUTHENTICATION = "authentication"
    UPSTREAM = "upstream"
    NETWORK = "network"
    CONFIGURATION = "configuration"
    PLUGIN = "plugin"
    SYSTEM = "system"


class PlaidNodeError(Exception):
    """Base class for failures attributed to one input item"""

    error_code = "UNKNOWN"
    category = ErrorCategory.SYSTEM

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_message = message
        if error_code:
            self.error_code = error_code


class ParameterError(PlaidNodeError):
    """A required parameter is missing or malformed"""

    error_code = "PARAMETER_ERROR"
    category = ErrorCategory.PARAMETER

    def __init__(self, message: str, parameter: Optional[str] = None):
        super().__init__(message)
        self.parameter = parameter


class AuthResolutionError(PlaidNodeError):
    """The access token for an account-scoped operation cannot be resolved"""

    error_code = "AUTH_RESOLUTION_ERROR"
    category = ErrorCategory.AUTHENTICATION


class UpstreamApiError(PlaidNodeError):
    """Plaid answered with a non-2xx status

    The upstream error code and message are kept verbatim.
    """

    category = ErrorCategory.UPSTREAM

    def __init__(self,
                 error_code: str,
                 error_message: str,
                 error_type: Optional[str] = None,
                 display_message: Optional[str] = None,
                 request_id: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(error_message, error_code)
        self.error_type = error_type
        self.display_message = display_message
        self.request_id = request_id
        self.status_code = status_code


class TransportError(PlaidNodeError):
    """Network failure, timeout or undecodable response body"""

    error_code = "TRANSPORT_ERROR"
    category = ErrorCategory.NETWORK


class NodeOperationError(Exception):
    """Raised in strict mode; aborts the whole batch"""

    def __init__(self, message: str, item_index: int, cause: Optional[PlaidNodeError] = None):
        super().__init__(message)
        self.item_index = item_index
        self.cause = cause

    @property
    def error_code(self) -> Optional[str]:
        return self.cause.error_code if self.cause else None


def normalize_error_payload(payload: Any) -> Optional[Dict[str, Any]]:
    """Reduce an upstream error body to a single internal shape

    Plaid error objects may reach us bare or wrapped in a ``data``,
    ``body`` or ``response`` key depending on the HTTP layer that produced
    them.

    Args:
        payload: Decoded response body (or wrapper)

    Returns:
        Dictionary with error_code, error_message, error_type,
        display_message and request_id, or None if no Plaid error is present
    """
    seen = 0
    while isinstance(payload, dict) and 'error_code' not in payload and seen < 3:
        for wrapper in ('data', 'body', 'response'):
            if isinstance(payload.get(wrapper), dict):
                payload = payload[wrapper]
                break
        else:
            return None
        seen += 1

    if not isinstance(payload, dict) or not payload.get('error_code'):
        return None

    return {
        'error_code': payload.get('error_code'),
        'error_message': payload.get('error_message') or payload.get('display_message') or '',
        'error_type': payload.get('error_type'),
        'display_message': payload.get('display_message'),
        'request_id': payload.get('request_id'),
    }


def classify_exception(exception: Exception) -> PlaidNodeError:
    """Map any exception raised while handling an item onto a node error kind"""
    if isinstance(exception, PlaidNodeError):
        return exception
    if isinstance(exception, requests.RequestException):
        return TransportError(str(exception))
    return PlaidNodeError(str(exception))


def build_error_record(error: PlaidNodeError, resource: Optional[str], operation: Optional[str]) -> Dict[str, Any]:
    """Build the record emitted in place of results in failure-tolerant mode"""
    return {
        'error': True,
        'error_message': error.error_message,
        'error_code': error.error_code,
        'resource': resource,
        'operation': operation,
        'processed_at': datetime.now(timezone.utc).isoformat(),
    }


def format_error_message(error: PlaidNodeError) -> str:
    """Human-readable message combining error code and message"""
    return f"Plaid API Error ({error.error_code}): {error.error_message}"


@dataclass
class ErrorDetail:
    """Detailed error information"""
    timestamp: str
    severity: str
    category: str
    error_code: str
    message: str
    item_index: Optional[int] = None
    resource: Optional[str] = None
    operation: Optional[str] = None
    stack_trace: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)


class ErrorHandler:
    """Collects per-item failures and logs them as structured records"""

    def __init__(self, log_directory: Optional[str] = None, enable_console: bool = False):
        self.log_directory = Path(log_directory) if log_directory else None
        if self.log_directory:
            self.log_directory.mkdir(parents=True, exist_ok=True)

        self.errors: List[ErrorDetail] = []
        self.warnings: List[ErrorDetail] = []

        self._setup_logging(enable_console)

    def _setup_logging(self, enable_console: bool):
        """Set up structured JSON logging"""
        self.logger = logging.getLogger('plaid_node.errors')

        # Close and clear existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        class JSONFormatter(logging.Formatter):
            def format(self, record):
                log_entry = {
                    'timestamp': datetime.fromtimestamp(record.created).isoformat(),
                    'level': record.levelname,
                    'logger': record.name,
                    'message': record.getMessage(),
                    'module': record.module,
                    'function': record.funcName,
                    'line': record.lineno
                }

                # Add extra fields if present
                for extra_field in ('error_code', 'category', 'item_index', 'resource', 'operation', 'context'):
                    if hasattr(record, extra_field):
                        log_entry[extra_field] = getattr(record, extra_field)

                return json.dumps(log_entry, default=str)

        if self.log_directory:
            log_file = self.log_directory / f"plaid_node_{datetime.now().strftime('%Y%m%d')}.jsonl"
            file_handler = logging.FileHandler(log_file)
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(file_handler)

            error_file = self.log_directory / f"errors_{datetime.now().strftime('%Y%m%d')}.jsonl"
            error_handler = logging.FileHandler(error_file)
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(JSONFormatter())
            self.logger.addHandler(error_handler)

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
            self.logger.addHandler(console_handler)

    def record_error(self,
                     error: PlaidNodeError,
                     item_index: Optional[int] = None,
                     resource: Optional[str] = None,
                     operation: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Record a classified failure for one input item"""
        stack_trace = None
        if error.__traceback__ is not None:
            stack_trace = ''.join(traceback.format_exception(type(error), error, error.__traceback__))

        context = dict(context or {})
        if isinstance(error, UpstreamApiError):
            context.setdefault('request_id', error.request_id)
            context.setdefault('status_code', error.status_code)

        error_detail = ErrorDetail(
            timestamp=datetime.now(timezone.utc).isoformat(),
            severity=ErrorSeverity.ERROR.value,
            category=error.category.value,
            error_code=error.error_code,
            message=error.error_message,
            item_index=item_index,
            resource=resource,
            operation=operation,
            stack_trace=stack_trace,
            context=context
        )

        self.errors.append(error_detail)

        self.logger.error(
            f"Item {item_index} failed ({resource}/{operation}): {format_error_message(error)}",
            extra={
                'error_code': error.error_code,
                'category': error.category.value,
                'item_index': item_index,
                'resource': resource,
                'operation': operation,
                'context': context
            }
        )

        return error_detail

    def log_warning(self,
                    message: str,
                    warning_code: str,
                    category: ErrorCategory = ErrorCategory.SYSTEM,
                    context: Optional[Dict[str, Any]] = None) -> ErrorDetail:
        """Log a warning with detailed information"""
        warning_detail = ErrorDetail(
            timestamp=datetime.now(timezone.utc).isoformat(),
            severity=ErrorSeverity.WARNING.value,
            category=category.value,
            error_code=warning_code,
            message=message,
            context=context or {}
        )

        self.warnings.append(warning_detail)

        self.logger.warning(
            message,
            extra={
                'error_code': warning_code,
                'category': category.value,
                'context': context or {}
            }
        )

        return warning_detail

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary of all errors and warnings"""
        errors_by_category: Dict[str, int] = {}
        errors_by_code: Dict[str, int] = {}

        for error in self.errors:
            errors_by_category[error.category] = errors_by_category.get(error.category, 0) + 1
            errors_by_code[error.error_code] = errors_by_code.get(error.error_code, 0) + 1

        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'errors_by_category': errors_by_category,
            'errors_by_code': errors_by_code,
            'failed_items': sorted(set(e.item_index for e in self.errors if e.item_index is not None)),
        }

    def clear_errors(self):
        """Clear all accumulated errors and warnings"""
        self.errors.clear()
        self.warnings.clear()

    def has_errors(self) -> bool:
        """Check if any errors have been logged"""
        return len(self.errors) > 0

    def get_errors_for_item(self, item_index: int) -> List[ErrorDetail]:
        """Get all errors for a specific input item"""
        return [error for error in self.errors if error.item_index == item_index]
