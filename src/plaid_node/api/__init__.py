"""Plaid API transport and credential resolution"""

from .client import PlaidApiClient
from .credentials import (
    AccessTokenResolver,
    ClientOnlyResolver,
    PublicTokenExchangeResolver,
    StoredAccessTokenResolver,
    build_headers,
    resolve_base_url,
    select_token_resolver,
)

__all__ = [
    'PlaidApiClient',
    'AccessTokenResolver',
    'ClientOnlyResolver',
    'PublicTokenExchangeResolver',
    'StoredAccessTokenResolver',
    'build_headers',
    'resolve_base_url',
    'select_token_resolver',
]
