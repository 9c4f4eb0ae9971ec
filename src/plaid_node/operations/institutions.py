"""Institution lookup operations (no access token needed)."""

import logging
from typing import Any, Dict, List

from ..models.requests import InstitutionGetByIdRequest, InstitutionSearchRequest
from ..utils.validation import ParameterReader, parse_string_list
from .base import PlaidOperation, pick_fields


logger = logging.getLogger(__name__)


INSTITUTION_FIELDS = [
    'institution_id',
    'name',
    'products',
    'country_codes',
    'url',
    'primary_color',
    'logo',
    'routing_numbers',
    'oauth',
]


class InstitutionSearchOperation(PlaidOperation):
    resource = "institution"
    operation = "search"
    endpoint = "/institutions/search"
    source = "plaid_institutions"
    requires_access_token = False
    parameters = ['query', 'products', 'country_codes']
    description = "Search financial institutions by name"

    def parse_parameters(self, reader: ParameterReader) -> InstitutionSearchRequest:
        return InstitutionSearchRequest(
            query=reader.require_string('query'),
            products=parse_string_list(reader.get('products'), ['transactions']),
            country_codes=parse_string_list(reader.get('country_codes'), self.config.default_country_codes),
        )

    def build_body(self, request: InstitutionSearchRequest) -> Dict[str, Any]:
        return {
            'query': request.query,
            'products': list(request.products),
            'country_codes': list(request.country_codes),
        }

    def map_response(self, response: Dict[str, Any], request: InstitutionSearchRequest) -> List[Dict[str, Any]]:
        records = []
        for institution in response.get('institutions') or []:
            record = pick_fields(institution, INSTITUTION_FIELDS)
            record['search_query'] = request.query
            records.append(record)

        logger.info(f"Institution search '{request.query}' matched {len(records)} institutions")
        return records


class InstitutionGetByIdOperation(PlaidOperation):
    resource = "institution"
    operation = "getById"
    endpoint = "/institutions/get_by_id"
    source = "plaid_institution_details"
    requires_access_token = False
    parameters = ['institution_id', 'country_codes']
    description = "Get institution details, including status, by id"

    def parse_parameters(self, reader: ParameterReader) -> InstitutionGetByIdRequest:
        return InstitutionGetByIdRequest(
            institution_id=reader.require_string('institution_id'),
            country_codes=parse_string_list(reader.get('country_codes'), self.config.default_country_codes),
        )

    def build_body(self, request: InstitutionGetByIdRequest) -> Dict[str, Any]:
        return {
            'institution_id': request.institution_id,
            'country_codes': list(request.country_codes),
            'options': {
                'include_optional_metadata': True,
                'include_status': True,
            },
        }

    def map_response(self, response: Dict[str, Any], request: InstitutionGetByIdRequest) -> List[Dict[str, Any]]:
        institution = response.get('institution') or {}
        record = pick_fields(institution, INSTITUTION_FIELDS)
        record['status'] = institution.get('status')
        return [record]
