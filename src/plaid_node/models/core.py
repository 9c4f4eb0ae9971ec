"""Core data models for the Plaid workflow node."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional


@dataclass
class PlaidCredentials:
    """Credentials supplied by the host for one execution.

    Attributes:
        client_id: Plaid client id from the Plaid Dashboard
        secret: Plaid secret for the selected environment
        environment: "sandbox" or "production"
        access_token: Stored access token (legacy mode)
        public_token: Stored public token to exchange (recommended mode)
        auth_method: "accessToken", "publicToken" or "clientOnly"
    """
    client_id: str
    secret: str
    environment: str = "sandbox"
    access_token: Optional[str] = None
    public_token: Optional[str] = None
    auth_method: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlaidCredentials':
        """Build credentials from the host's credential mapping

        Accepts both the host's camelCase names (clientId, accessToken, ...)
        and snake_case names.

        Args:
            data: Credential mapping

        Returns:
            PlaidCredentials instance
        """
        def pick(*names: str) -> Optional[str]:
            for name in names:
                value = data.get(name)
                if value is not None and str(value).strip():
                    return str(value).strip()
            return None

        return cls(
            client_id=pick('clientId', 'client_id') or '',
            secret=pick('secret') or '',
            environment=pick('environment') or 'sandbox',
            access_token=pick('accessToken', 'access_token'),
            public_token=pick('publicToken', 'public_token'),
            auth_method=pick('authMethod', 'auth_method'),
        )


@dataclass
class NodeExecutionData:
    """One output record paired with the input item that produced it"""
    json: Dict[str, Any]
    paired_item: int


@dataclass
class NodeConfig:
    """Runtime configuration for the node"""
    request_timeout: float = 30.0
    plaid_version: str = "2020-09-14"
    continue_on_fail: bool = False
    default_count: int = 100
    default_country_codes: Optional[List[str]] = None
    plugin_directories: Optional[List[str]] = None
    log_directory: Optional[str] = None

    def __post_init__(self):
        if self.default_country_codes is None:
            self.default_country_codes = ["US"]
        if self.plugin_directories is None:
            self.plugin_directories = []


@dataclass
class OperationDescription:
    """Declarative description of one supported (resource, operation) pair"""
    resource: str
    operation: str
    endpoint: str
    requires_access_token: bool
    parameters: List[str] = field(default_factory=list)
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'resource': self.resource,
            'operation': self.operation,
            'endpoint': self.endpoint,
            'requires_access_token': self.requires_access_token,
            'parameters': list(self.parameters),
            'description': self.description,
        }
