"""Data models and structures"""

from .core import (
    NodeConfig,
    NodeExecutionData,
    OperationDescription,
    PlaidCredentials,
)
from .requests import (
    AccountGetAllRequest,
    AccountGetBalancesRequest,
    AuthGetRequest,
    IdentityGetRequest,
    InstitutionGetByIdRequest,
    InstitutionSearchRequest,
    ItemGetRequest,
    ItemRemoveRequest,
    LinkTokenCreateRequest,
    PublicTokenExchangeRequest,
    TransactionGetRangeRequest,
    TransactionOptions,
    TransactionSyncRequest,
)

__all__ = [
    'NodeConfig',
    'NodeExecutionData',
    'OperationDescription',
    'PlaidCredentials',
    'AccountGetAllRequest',
    'AccountGetBalancesRequest',
    'AuthGetRequest',
    'IdentityGetRequest',
    'InstitutionGetByIdRequest',
    'InstitutionSearchRequest',
    'ItemGetRequest',
    'ItemRemoveRequest',
    'LinkTokenCreateRequest',
    'PublicTokenExchangeRequest',
    'TransactionGetRangeRequest',
    'TransactionOptions',
    'TransactionSyncRequest',
]
