"""Typed request variants, one per supported (resource, operation) pair."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class TransactionOptions:
    """Optional transaction flags"""
    include_original_description: bool = False
    include_personal_finance_category: bool = True
    enhance: bool = False


@dataclass(frozen=True)
class TransactionSyncRequest:
    count: int
    cursor: Optional[str] = None
    account_ids: Optional[List[str]] = None
    options: TransactionOptions = TransactionOptions()


@dataclass(frozen=True)
class TransactionGetRangeRequest:
    start_date: str
    end_date: str
    count: int
    offset: int = 0
    account_ids: Optional[List[str]] = None
    options: TransactionOptions = TransactionOptions()


@dataclass(frozen=True)
class AccountGetAllRequest:
    pass


@dataclass(frozen=True)
class AccountGetBalancesRequest:
    pass


@dataclass(frozen=True)
class AuthGetRequest:
    pass


@dataclass(frozen=True)
class InstitutionSearchRequest:
    query: str
    products: List[str]
    country_codes: List[str]


@dataclass(frozen=True)
class InstitutionGetByIdRequest:
    institution_id: str
    country_codes: List[str]


@dataclass(frozen=True)
class ItemGetRequest:
    pass


@dataclass(frozen=True)
class ItemRemoveRequest:
    pass


@dataclass(frozen=True)
class IdentityGetRequest:
    pass


@dataclass(frozen=True)
class LinkTokenCreateRequest:
    user_id: str
    client_name: str
    products: List[str]
    country_codes: List[str]
    language: str = "en"
    webhook: Optional[str] = None
    redirect_uri: Optional[str] = None


@dataclass(frozen=True)
class PublicTokenExchangeRequest:
    public_token: str
