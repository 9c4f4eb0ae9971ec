"""Transaction operations: cursor sync and date-range listing."""

import logging
from numbers import Number
from typing import Any, Dict, List, Optional

from ..models.requests import TransactionGetRangeRequest, TransactionOptions, TransactionSyncRequest
from ..utils.enrichment import enrich_transaction, format_transaction_amount
from ..utils.error_handler import ParameterError
from ..utils.validation import ParameterReader, format_date, parse_account_ids, parse_bool
from .base import PlaidOperation, pick_fields


logger = logging.getLogger(__name__)


TRANSACTION_FIELDS = [
    'transaction_id',
    'account_id',
    'amount',
    'iso_currency_code',
    'unofficial_currency_code',
    'date',
    'authorized_date',
    'datetime',
    'authorized_datetime',
    'name',
    'merchant_name',
    'merchant_entity_id',
    'logo_url',
    'website',
    'category',
    'category_id',
    'personal_finance_category',
    'payment_channel',
    'pending',
    'pending_transaction_id',
    'location',
    'payment_meta',
    'counterparties',
    'account_owner',
    'original_description',
]


def read_transaction_options(reader: ParameterReader) -> TransactionOptions:
    options = reader.get_options()
    return TransactionOptions(
        include_original_description=parse_bool(options.get('include_original_description', False)),
        include_personal_finance_category=parse_bool(options.get('include_personal_finance_category', True)),
        enhance=parse_bool(options.get('enhance', False)),
    )


def build_upstream_options(options: TransactionOptions) -> Dict[str, Any]:
    upstream = {}
    if options.include_original_description:
        upstream['include_original_description'] = True
    if options.include_personal_finance_category:
        upstream['include_personal_finance_category'] = True
    return upstream


def map_transaction(transaction: Dict[str, Any], options: TransactionOptions) -> Dict[str, Any]:
    """Map a full-shape Plaid transaction, deriving amount and transaction_type

    Plaid reports outflows as negative amounts here; the record carries the
    absolute amount and the direction separately.
    """
    original_amount = transaction.get('amount')
    record = pick_fields(transaction, TRANSACTION_FIELDS)

    if isinstance(original_amount, Number) and not isinstance(original_amount, bool):
        record['amount'], record['transaction_type'] = format_transaction_amount(original_amount)
        if options.enhance:
            record = enrich_transaction(record, original_amount)

    return record


def _has_full_shape(transaction: Dict[str, Any]) -> bool:
    return 'amount' in transaction and 'account_id' in transaction


class TransactionSyncOperation(PlaidOperation):
    """Incremental sync via /transactions/sync

    The cursor is opaque: whatever the caller supplies is sent unmodified
    and the returned next_cursor is attached to every emitted record.
    """

    resource = "transaction"
    operation = "sync"
    endpoint = "/transactions/sync"
    source = "plaid_sync"
    parameters = ['cursor', 'count', 'return_all', 'account_ids', 'options']
    description = "Get new, modified and removed transactions using a cursor"

    def parse_parameters(self, reader: ParameterReader) -> TransactionSyncRequest:
        cursor = reader.get('cursor')
        if cursor is not None and not isinstance(cursor, str):
            raise ParameterError("Parameter 'cursor' must be a string", 'cursor')

        return TransactionSyncRequest(
            count=reader.get_count(self.config.default_count),
            cursor=cursor or None,
            account_ids=parse_account_ids(reader.get('account_ids')),
            options=read_transaction_options(reader),
        )

    def build_body(self, request: TransactionSyncRequest) -> Dict[str, Any]:
        body: Dict[str, Any] = {'count': request.count}
        if request.cursor:
            body['cursor'] = request.cursor
        if request.account_ids:
            body['account_ids'] = list(request.account_ids)
        upstream_options = build_upstream_options(request.options)
        if upstream_options:
            body['options'] = upstream_options
        return body

    def map_response(self, response: Dict[str, Any], request: TransactionSyncRequest) -> List[Dict[str, Any]]:
        next_cursor = response.get('next_cursor')
        has_more = bool(response.get('has_more', response.get('has_next', False)))
        added = response.get('added') or []
        modified = response.get('modified') or []
        removed = response.get('removed') or []

        records = []
        for transaction in added:
            if _has_full_shape(transaction):
                record = map_transaction(transaction, request.options)
            else:
                record = dict(transaction)
            record['sync_status'] = 'added'
            records.append(record)

        for transaction in modified:
            record = dict(transaction)
            record['sync_status'] = 'modified'
            records.append(record)

        for transaction in removed:
            records.append({
                'transaction_id': transaction.get('transaction_id'),
                'sync_status': 'removed',
            })

        for record in records:
            record['next_cursor'] = next_cursor
            record['has_more'] = has_more

        logger.info(
            f"Transaction sync: {len(added)} added, {len(modified)} modified, "
            f"{len(removed)} removed (has_more: {has_more})"
        )
        return records


class TransactionGetRangeOperation(PlaidOperation):
    """Date-range listing via /transactions/get"""

    resource = "transaction"
    operation = "getRange"
    endpoint = "/transactions/get"
    source = "plaid_get"
    parameters = ['start_date', 'end_date', 'count', 'return_all', 'offset', 'account_ids', 'options']
    description = "Get transactions within a date range"

    def parse_parameters(self, reader: ParameterReader) -> TransactionGetRangeRequest:
        start_date = format_date(reader.get('start_date'), 'start_date')
        end_date = format_date(reader.get('end_date'), 'end_date')
        if start_date > end_date:
            raise ParameterError(
                f"start_date ({start_date}) must not be after end_date ({end_date})",
                'start_date'
            )

        return TransactionGetRangeRequest(
            start_date=start_date,
            end_date=end_date,
            count=reader.get_count(self.config.default_count),
            offset=reader.get_int('offset', 0, minimum=0),
            account_ids=parse_account_ids(reader.get('account_ids')),
            options=read_transaction_options(reader),
        )

    def build_body(self, request: TransactionGetRangeRequest) -> Dict[str, Any]:
        options: Dict[str, Any] = {'count': request.count, 'offset': request.offset}
        if request.account_ids:
            options['account_ids'] = list(request.account_ids)
        options.update(build_upstream_options(request.options))
        return {
            'start_date': request.start_date,
            'end_date': request.end_date,
            'options': options,
        }

    def map_response(self, response: Dict[str, Any], request: TransactionGetRangeRequest) -> List[Dict[str, Any]]:
        total: Optional[int] = response.get('total_transactions')
        transactions = response.get('transactions') or []

        records = []
        for transaction in transactions:
            record = map_transaction(transaction, request.options)
            record['total_transactions'] = total
            records.append(record)

        logger.info(f"Retrieved {len(records)} of {total} transactions")
        return records
