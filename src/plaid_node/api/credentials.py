"""Environment resolution and access-token strategies."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional, TYPE_CHECKING

from ..models.core import PlaidCredentials
from ..utils.error_handler import AuthResolutionError

if TYPE_CHECKING:
    from .client import PlaidApiClient


logger = logging.getLogger(__name__)


SANDBOX_URL = "https://sandbox.plaid.com"
PRODUCTION_URL = "https://production.plaid.com"
DEFAULT_PLAID_VERSION = "2020-09-14"

AUTH_METHOD_ACCESS_TOKEN = "accessToken"
AUTH_METHOD_PUBLIC_TOKEN = "publicToken"
AUTH_METHOD_CLIENT_ONLY = "clientOnly"


def resolve_base_url(environment: Optional[str]) -> str:
    """Map an environment name to the Plaid base URL

    Anything other than "production" falls back to sandbox.
    """
    if environment and str(environment).strip().lower() == "production":
        return PRODUCTION_URL
    return SANDBOX_URL


def build_headers(credentials: PlaidCredentials, plaid_version: str = DEFAULT_PLAID_VERSION) -> Dict[str, str]:
    """Authentication headers sent with every Plaid request"""
    return {
        'PLAID-CLIENT-ID': credentials.client_id,
        'PLAID-SECRET': credentials.secret,
        'Plaid-Version': plaid_version,
        'Content-Type': 'application/json',
    }


class AccessTokenResolver(ABC):
    """Strategy for obtaining the access token of account-scoped operations"""

    name = ""

    @abstractmethod
    def resolve(self, credentials: PlaidCredentials, client: 'PlaidApiClient') -> str:
        """Return an access token or raise AuthResolutionError"""
        pass


class StoredAccessTokenResolver(AccessTokenResolver):
    """Legacy mode: the access token is stored with the credentials"""

    name = AUTH_METHOD_ACCESS_TOKEN

    def resolve(self, credentials: PlaidCredentials, client: 'PlaidApiClient') -> str:
        if not credentials.access_token:
            raise AuthResolutionError(
                "Access token is required for this operation but none is stored in the credentials"
            )
        return credentials.access_token


class PublicTokenExchangeResolver(AccessTokenResolver):
    """Recommended mode: exchange the stored public token once per execution

    Public tokens are single-use, so the exchanged access token is kept for
    the remaining items of the same execution.
    """

    name = AUTH_METHOD_PUBLIC_TOKEN

    def __init__(self):
        self._access_token: Optional[str] = None

    def resolve(self, credentials: PlaidCredentials, client: 'PlaidApiClient') -> str:
        if self._access_token:
            return self._access_token

        if not credentials.public_token:
            raise AuthResolutionError(
                "Public token is required to obtain an access token but none is stored in the credentials"
            )

        logger.info("Exchanging public token for an access token")
        response = client.post('/item/public_token/exchange', {'public_token': credentials.public_token})
        access_token = response.get('access_token')
        if not access_token:
            raise AuthResolutionError("Public token exchange did not return an access token")

        logger.debug(f"Public token exchanged for item {response.get('item_id')}")
        self._access_token = access_token
        return access_token


class ClientOnlyResolver(AccessTokenResolver):
    """Client-only credentials cannot be used for account-scoped operations"""

    name = AUTH_METHOD_CLIENT_ONLY

    def resolve(self, credentials: PlaidCredentials, client: 'PlaidApiClient') -> str:
        raise AuthResolutionError(
            "This operation requires an access token; the credentials are configured as client-only"
        )


def select_token_resolver(credentials: PlaidCredentials) -> AccessTokenResolver:
    """Pick the access-token strategy for one execution

    An explicit auth_method wins; otherwise a stored access token, then a
    stored public token, then client-only.
    """
    method = credentials.auth_method
    if method is None:
        if credentials.access_token:
            method = AUTH_METHOD_ACCESS_TOKEN
        elif credentials.public_token:
            method = AUTH_METHOD_PUBLIC_TOKEN
        else:
            method = AUTH_METHOD_CLIENT_ONLY

    if method == AUTH_METHOD_ACCESS_TOKEN:
        return StoredAccessTokenResolver()
    if method == AUTH_METHOD_PUBLIC_TOKEN:
        return PublicTokenExchangeResolver()
    if method == AUTH_METHOD_CLIENT_ONLY:
        return ClientOnlyResolver()

    logger.warning(f"Unknown auth method '{method}', treating credentials as client-only")
    return ClientOnlyResolver()
