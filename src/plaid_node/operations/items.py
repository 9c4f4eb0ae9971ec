"""Item (bank connection) operations."""

import logging
from typing import Any, Dict, List

from ..models.requests import ItemGetRequest, ItemRemoveRequest
from ..utils.validation import ParameterReader
from .base import PlaidOperation, pick_fields


logger = logging.getLogger(__name__)


ITEM_FIELDS = [
    'item_id',
    'institution_id',
    'webhook',
    'error',
    'available_products',
    'billed_products',
    'products',
    'consented_products',
    'consent_expiration_time',
    'update_type',
]


class ItemGetOperation(PlaidOperation):
    resource = "item"
    operation = "get"
    endpoint = "/item/get"
    source = "plaid_item"
    description = "Get item connection information and status"

    def parse_parameters(self, reader: ParameterReader) -> ItemGetRequest:
        return ItemGetRequest()

    def map_response(self, response: Dict[str, Any], request: ItemGetRequest) -> List[Dict[str, Any]]:
        record = pick_fields(response.get('item') or {}, ITEM_FIELDS)
        record['item_status'] = response.get('status')
        return [record]


class ItemRemoveOperation(PlaidOperation):
    resource = "item"
    operation = "remove"
    endpoint = "/item/remove"
    source = "plaid_item_remove"
    description = "Remove the item (disconnect the bank)"

    def parse_parameters(self, reader: ParameterReader) -> ItemRemoveRequest:
        return ItemRemoveRequest()

    def map_response(self, response: Dict[str, Any], request: ItemRemoveRequest) -> List[Dict[str, Any]]:
        logger.info(f"Item removed (request_id: {response.get('request_id')})")
        return [{
            'removed': True,
            'request_id': response.get('request_id'),
        }]
