"""Abstract base class for Plaid operation adapters."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, TYPE_CHECKING

from ..models.core import NodeConfig, OperationDescription

if TYPE_CHECKING:
    from ..utils.validation import ParameterReader


class PlaidOperation(ABC):
    """One (resource, operation) pair mapped onto one Plaid endpoint

    Subclasses declare the selector and endpoint as class attributes, turn
    node parameters into a typed request, build the endpoint body and map
    the response into output records.
    """

    resource: str = ""
    operation: str = ""
    endpoint: str = ""
    source: str = ""
    requires_access_token: bool = True
    parameters: List[str] = []
    description: str = ""

    def __init__(self, config: NodeConfig):
        self.config = config

    @abstractmethod
    def parse_parameters(self, reader: 'ParameterReader') -> Any:
        """Validate parameters and return the typed request

        Raises:
            ParameterError: If a required parameter is missing or malformed
        """
        pass

    def build_body(self, request: Any) -> Dict[str, Any]:
        """Return the endpoint-specific request body (without credentials)"""
        return {}

    @abstractmethod
    def map_response(self, response: Dict[str, Any], request: Any) -> List[Dict[str, Any]]:
        """Map a decoded response into output records"""
        pass

    def process_response(self, response: Dict[str, Any], request: Any) -> List[Dict[str, Any]]:
        """Map a response and stamp every record with source and processed_at"""
        records = self.map_response(response, request)
        for record in records:
            record['source'] = self.source
            record['processed_at'] = datetime.now(timezone.utc).isoformat()
        return records

    @classmethod
    def describe(cls) -> OperationDescription:
        return OperationDescription(
            resource=cls.resource,
            operation=cls.operation,
            endpoint=cls.endpoint,
            requires_access_token=cls.requires_access_token,
            parameters=list(cls.parameters),
            description=cls.description,
        )


def pick_fields(data: Dict[str, Any], fields: List[str]) -> Dict[str, Any]:
    """Copy the named fields, using None for absent ones"""
    return {name: data.get(name) for name in fields}
