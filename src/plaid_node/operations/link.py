"""Link token issuance and public token exchange."""

import logging
from typing import Any, Dict, List

from ..models.requests import LinkTokenCreateRequest, PublicTokenExchangeRequest
from ..utils.validation import ParameterReader, parse_string_list
from .base import PlaidOperation


logger = logging.getLogger(__name__)


class LinkTokenCreateOperation(PlaidOperation):
    resource = "linkToken"
    operation = "create"
    endpoint = "/link/token/create"
    source = "plaid_link_token"
    requires_access_token = False
    parameters = ['user_id', 'client_name', 'products', 'country_codes', 'language', 'webhook', 'redirect_uri']
    description = "Create a link token to initialize Plaid Link"

    def parse_parameters(self, reader: ParameterReader) -> LinkTokenCreateRequest:
        return LinkTokenCreateRequest(
            user_id=reader.require_string('user_id'),
            client_name=reader.require_string('client_name'),
            products=parse_string_list(reader.get('products'), ['transactions']),
            country_codes=parse_string_list(reader.get('country_codes'), self.config.default_country_codes),
            language=reader.optional_string('language') or 'en',
            webhook=reader.optional_string('webhook'),
            redirect_uri=reader.optional_string('redirect_uri'),
        )

    def build_body(self, request: LinkTokenCreateRequest) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            'user': {'client_user_id': request.user_id},
            'client_name': request.client_name,
            'products': list(request.products),
            'country_codes': list(request.country_codes),
            'language': request.language,
        }
        if request.webhook:
            body['webhook'] = request.webhook
        if request.redirect_uri:
            body['redirect_uri'] = request.redirect_uri
        return body

    def map_response(self, response: Dict[str, Any], request: LinkTokenCreateRequest) -> List[Dict[str, Any]]:
        return [{
            'link_token': response.get('link_token'),
            'expiration': response.get('expiration'),
            'request_id': response.get('request_id'),
            'user_id': request.user_id,
            'expires_in': '4 hours',
            'next_step': (
                "Initialize Plaid Link with this link_token, then exchange the "
                "public_token it returns with linkToken/exchangeToken"
            ),
        }]


class PublicTokenExchangeOperation(PlaidOperation):
    resource = "linkToken"
    operation = "exchangeToken"
    endpoint = "/item/public_token/exchange"
    source = "plaid_token_exchange"
    requires_access_token = False
    parameters = ['public_token']
    description = "Exchange a public token for a permanent access token"

    def parse_parameters(self, reader: ParameterReader) -> PublicTokenExchangeRequest:
        return PublicTokenExchangeRequest(public_token=reader.require_string('public_token'))

    def build_body(self, request: PublicTokenExchangeRequest) -> Dict[str, Any]:
        return {'public_token': request.public_token}

    def map_response(self, response: Dict[str, Any], request: PublicTokenExchangeRequest) -> List[Dict[str, Any]]:
        logger.info(f"Public token exchanged for item {response.get('item_id')}")
        return [{
            'access_token': response.get('access_token'),
            'item_id': response.get('item_id'),
            'request_id': response.get('request_id'),
            'next_step': (
                "Store the access_token in the Plaid credentials; it stays valid "
                "until the item is removed"
            ),
        }]
