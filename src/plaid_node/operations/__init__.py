"""Plaid operation adapters, one per (resource, operation) pair"""

from .base import PlaidOperation
from .transactions import TransactionSyncOperation, TransactionGetRangeOperation
from .accounts import AccountGetAllOperation, AccountGetBalancesOperation, AuthGetOperation, IdentityGetOperation
from .institutions import InstitutionSearchOperation, InstitutionGetByIdOperation
from .items import ItemGetOperation, ItemRemoveOperation
from .link import LinkTokenCreateOperation, PublicTokenExchangeOperation

BUILTIN_OPERATIONS = [
    TransactionSyncOperation,
    TransactionGetRangeOperation,
    AccountGetAllOperation,
    AccountGetBalancesOperation,
    AuthGetOperation,
    InstitutionSearchOperation,
    InstitutionGetByIdOperation,
    ItemGetOperation,
    ItemRemoveOperation,
    IdentityGetOperation,
    LinkTokenCreateOperation,
    PublicTokenExchangeOperation,
]

__all__ = [
    'PlaidOperation',
    'BUILTIN_OPERATIONS',
    'TransactionSyncOperation',
    'TransactionGetRangeOperation',
    'AccountGetAllOperation',
    'AccountGetBalancesOperation',
    'AuthGetOperation',
    'IdentityGetOperation',
    'InstitutionSearchOperation',
    'InstitutionGetByIdOperation',
    'ItemGetOperation',
    'ItemRemoveOperation',
    'LinkTokenCreateOperation',
    'PublicTokenExchangeOperation',
]
