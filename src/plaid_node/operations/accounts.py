"""Account-scoped read operations: accounts, balances, auth numbers and identity."""

import logging
from typing import Any, Dict, List

from ..models.requests import AccountGetAllRequest, AccountGetBalancesRequest, AuthGetRequest, IdentityGetRequest
from ..utils.validation import ParameterReader
from .base import PlaidOperation, pick_fields


logger = logging.getLogger(__name__)


ACCOUNT_FIELDS = [
    'account_id',
    'persistent_account_id',
    'name',
    'official_name',
    'type',
    'subtype',
    'mask',
    'balances',
    'verification_status',
    'class_type',
]

BALANCE_FIELDS = ['account_id', 'name', 'type', 'subtype', 'mask', 'balances']


class AccountGetAllOperation(PlaidOperation):
    resource = "account"
    operation = "getAll"
    endpoint = "/accounts/get"
    source = "plaid_accounts"
    description = "Get all connected accounts (cached balances)"

    def parse_parameters(self, reader: ParameterReader) -> AccountGetAllRequest:
        return AccountGetAllRequest()

    def map_response(self, response: Dict[str, Any], request: AccountGetAllRequest) -> List[Dict[str, Any]]:
        accounts = response.get('accounts') or []
        logger.info(f"Retrieved {len(accounts)} accounts")
        return [pick_fields(account, ACCOUNT_FIELDS) for account in accounts]


class AccountGetBalancesOperation(PlaidOperation):
    resource = "account"
    operation = "getBalances"
    endpoint = "/accounts/balance/get"
    source = "plaid_balances"
    description = "Get real-time account balances"

    def parse_parameters(self, reader: ParameterReader) -> AccountGetBalancesRequest:
        return AccountGetBalancesRequest()

    def map_response(self, response: Dict[str, Any], request: AccountGetBalancesRequest) -> List[Dict[str, Any]]:
        records = []
        for account in response.get('accounts') or []:
            record = pick_fields(account, BALANCE_FIELDS)
            record['realtime'] = True
            records.append(record)
        return records


class AuthGetOperation(PlaidOperation):
    """Accounts joined with their ACH routing and account numbers"""

    resource = "auth"
    operation = "get"
    endpoint = "/auth/get"
    source = "plaid_auth"
    description = "Get bank account and routing numbers"

    def parse_parameters(self, reader: ParameterReader) -> AuthGetRequest:
        return AuthGetRequest()

    def map_response(self, response: Dict[str, Any], request: AuthGetRequest) -> List[Dict[str, Any]]:
        numbers = response.get('numbers') or {}
        ach_by_account = {
            entry.get('account_id'): entry
            for entry in numbers.get('ach') or []
        }

        records = []
        for account in response.get('accounts') or []:
            ach = ach_by_account.get(account.get('account_id'), {})
            record = pick_fields(account, ['account_id', 'name', 'type', 'subtype', 'mask', 'balances'])
            record['routing_number'] = ach.get('routing')
            record['account_number'] = ach.get('account')
            record['wire_routing_number'] = ach.get('wire_routing')
            records.append(record)

        unmatched = sum(1 for record in records if record['routing_number'] is None)
        if unmatched:
            logger.debug(f"{unmatched} accounts have no ACH numbers")
        return records


class IdentityGetOperation(PlaidOperation):
    resource = "identity"
    operation = "get"
    endpoint = "/identity/get"
    source = "plaid_identity"
    description = "Get account owner identity information"

    def parse_parameters(self, reader: ParameterReader) -> IdentityGetRequest:
        return IdentityGetRequest()

    def map_response(self, response: Dict[str, Any], request: IdentityGetRequest) -> List[Dict[str, Any]]:
        records = []
        for account in response.get('accounts') or []:
            record = pick_fields(account, ['account_id', 'name', 'type', 'subtype', 'mask', 'balances'])
            record['owners'] = account.get('owners') or []
            records.append(record)
        return records
