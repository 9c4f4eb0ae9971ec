"""Parameter parsing and validation for node operations."""

from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from .error_handler import ParameterError


MAX_TRANSACTION_COUNT = 500


def parse_account_ids(account_ids: Any) -> Optional[List[str]]:
    """Parse a comma-separated account id filter

    Args:
        account_ids: Comma-separated string, list of ids or None

    Returns:
        List of trimmed ids, or None when no filter was given
    """
    if account_ids is None:
        return None
    if isinstance(account_ids, (list, tuple)):
        parts = [str(part).strip() for part in account_ids]
    else:
        if not str(account_ids).strip():
            return None
        parts = [part.strip() for part in str(account_ids).split(',')]

    parsed = [part for part in parts if part]
    return parsed or None


def format_date(value: Any, parameter: str = "date") -> str:
    """Normalize a date or ISO date-time to YYYY-MM-DD

    Raises:
        ParameterError: If the value is empty or not a valid date
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    if value is None or not str(value).strip():
        raise ParameterError(f"Parameter '{parameter}' is required", parameter)

    date_part = str(value).strip().split('T')[0].split(' ')[0]
    try:
        return datetime.strptime(date_part, "%Y-%m-%d").date().isoformat()
    except ValueError:
        raise ParameterError(
            f"Parameter '{parameter}' must be a date (YYYY-MM-DD), got '{value}'",
            parameter
        )


def parse_string_list(value: Any, default: Optional[List[str]] = None) -> List[str]:
    """Accept a list or a comma-separated string"""
    if value is None or value == '' or value == []:
        return list(default or [])
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value]
    else:
        items = [item.strip() for item in str(value).split(',')]
    return [item for item in items if item] or list(default or [])


def parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


class ParameterReader:
    """Reads resolved node parameters for one input item"""

    def __init__(self, parameters: Mapping[str, Any]):
        self.parameters: Dict[str, Any] = dict(parameters or {})

    def get(self, name: str, default: Any = None) -> Any:
        value = self.parameters.get(name)
        return default if value is None else value

    def require_string(self, name: str) -> str:
        """Get a non-empty string parameter

        Raises:
            ParameterError: If the parameter is missing or blank
        """
        value = self.parameters.get(name)
        if value is None or not str(value).strip():
            raise ParameterError(f"Parameter '{name}' is required", name)
        return str(value).strip()

    def optional_string(self, name: str) -> Optional[str]:
        value = self.parameters.get(name)
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    def get_int(self, name: str, default: int, minimum: Optional[int] = None,
                maximum: Optional[int] = None) -> int:
        """Get an integer parameter within optional bounds

        Raises:
            ParameterError: If the value is not an integer or out of range
        """
        value = self.parameters.get(name)
        if value is None or value == '':
            return default
        if isinstance(value, bool):
            raise ParameterError(f"Parameter '{name}' must be an integer", name)
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ParameterError(f"Parameter '{name}' must be an integer, got '{value}'", name)

        if minimum is not None and number < minimum:
            raise ParameterError(f"Parameter '{name}' must be at least {minimum}", name)
        if maximum is not None and number > maximum:
            raise ParameterError(f"Parameter '{name}' must be at most {maximum}", name)
        return number

    def get_count(self, default: int) -> int:
        """Page size for transaction operations; return_all selects the upstream maximum"""
        if parse_bool(self.parameters.get('return_all', False)):
            return MAX_TRANSACTION_COUNT
        return self.get_int('count', default, minimum=1, maximum=MAX_TRANSACTION_COUNT)

    def get_options(self) -> Dict[str, Any]:
        options = self.parameters.get('options') or {}
        if not isinstance(options, Mapping):
            raise ParameterError("Parameter 'options' must be a mapping", 'options')
        return dict(options)
