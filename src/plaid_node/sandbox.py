"""Sandbox helpers for obtaining test tokens without the Plaid Link UI."""

import logging
import time
from typing import Any, Dict, List, Optional

from .api.client import PlaidApiClient
from .api.credentials import resolve_base_url, SANDBOX_URL
from .models.core import NodeConfig
from .models.requests import LinkTokenCreateRequest
from .operations.base import PlaidOperation
from .operations.link import LinkTokenCreateOperation
from .utils.error_handler import ParameterError
from .utils.validation import ParameterReader, parse_string_list


logger = logging.getLogger(__name__)


TEST_INSTITUTIONS = {
    'ins_3': 'Chase',
    'ins_4': 'Bank of America',
    'ins_5': 'Wells Fargo',
    'ins_6': 'Citibank',
    'ins_7': 'Capital One',
    'ins_109508': 'First Republic Bank',
    'ins_109509': 'Tartan Bank',
}

DEFAULT_TEST_INSTITUTION = 'ins_109509'
DEFAULT_TEST_PRODUCTS = ['transactions', 'auth']


class SandboxPublicTokenOperation(PlaidOperation):
    """Create a public token for a test institution (sandbox only)"""

    resource = "sandbox"
    operation = "createPublicToken"
    endpoint = "/sandbox/public_token/create"
    source = "plaid_sandbox_public_token"
    requires_access_token = False
    parameters = ['institution_id', 'initial_products']
    description = "Create a sandbox public token for a test institution"

    def parse_parameters(self, reader: ParameterReader) -> Dict[str, Any]:
        return {
            'institution_id': reader.optional_string('institution_id') or DEFAULT_TEST_INSTITUTION,
            'initial_products': parse_string_list(reader.get('initial_products'), DEFAULT_TEST_PRODUCTS),
        }

    def build_body(self, request: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'institution_id': request['institution_id'],
            'initial_products': list(request['initial_products']),
        }

    def map_response(self, response: Dict[str, Any], request: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [{
            'public_token': response.get('public_token'),
            'institution_id': request['institution_id'],
            'institution_name': TEST_INSTITUTIONS.get(request['institution_id']),
            'request_id': response.get('request_id'),
        }]


def create_test_access_token(client: PlaidApiClient,
                             institution_id: Optional[str] = None,
                             products: Optional[List[str]] = None) -> Dict[str, Any]:
    """Run link token, sandbox public token, exchange and account check

    Args:
        client: API client bound to sandbox credentials
        institution_id: Test institution id (defaults to Tartan Bank)
        products: Initial products for the test item

    Returns:
        Dictionary with link_token, public_token, access_token, item_id,
        institution_id, institution_name and accounts

    Raises:
        ParameterError: If the client is not bound to the sandbox
        UpstreamApiError: If any Plaid call fails
    """
    if client.base_url != SANDBOX_URL:
        raise ParameterError(
            f"Test tokens can only be created in sandbox, not {client.base_url}", 'environment'
        )

    institution_id = institution_id or DEFAULT_TEST_INSTITUTION
    products = products or list(DEFAULT_TEST_PRODUCTS)
    config = NodeConfig()

    logger.info(f"Creating link token for test institution {institution_id}")
    link_operation = LinkTokenCreateOperation(config)
    link_request = LinkTokenCreateRequest(
        user_id=f"test_user_{int(time.time() * 1000)}",
        client_name='Plaid Node Test',
        products=products,
        country_codes=['US'],
    )
    link_response = client.post(link_operation.endpoint, link_operation.build_body(link_request))

    public_operation = SandboxPublicTokenOperation(config)
    public_request = {'institution_id': institution_id, 'initial_products': products}
    public_response = client.post(public_operation.endpoint, public_operation.build_body(public_request))

    logger.info("Exchanging sandbox public token")
    exchange_response = client.post('/item/public_token/exchange', {
        'public_token': public_response.get('public_token'),
    })

    access_token = exchange_response.get('access_token')
    accounts_response = client.post('/accounts/get', {'access_token': access_token})
    accounts = accounts_response.get('accounts') or []
    logger.info(f"Test access token verified against {len(accounts)} accounts")

    return {
        'link_token': link_response.get('link_token'),
        'public_token': public_response.get('public_token'),
        'access_token': access_token,
        'item_id': exchange_response.get('item_id'),
        'institution_id': institution_id,
        'institution_name': TEST_INSTITUTIONS.get(institution_id, institution_id),
        'accounts': [
            {
                'account_id': account.get('account_id'),
                'name': account.get('name'),
                'type': account.get('type'),
                'subtype': account.get('subtype'),
                'mask': account.get('mask'),
            }
            for account in accounts
        ],
    }


def is_sandbox(environment: Optional[str]) -> bool:
    return resolve_base_url(environment) == SANDBOX_URL
