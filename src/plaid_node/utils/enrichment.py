"""Stateless helpers that enrich Plaid transaction records."""

import logging
from typing import Any, Dict, List, Optional, Tuple


logger = logging.getLogger(__name__)


RECURRING_KEYWORDS = [
    'netflix', 'spotify', 'subscription', 'monthly', 'annual',
    'insurance', 'mortgage', 'rent', 'gym', 'membership',
    'utilities', 'phone', 'internet', 'recurring'
]

CATEGORY_MULTIPLIERS = {
    'Food and Drink': 1.0,
    'Shops': 1.2,
    'Recreation': 1.3,
    'Transportation': 0.8,
    'Healthcare': 0.7,
    'Bills': 0.5,
    'Transfer': 0.3,
}


def format_transaction_amount(amount: Any) -> Tuple[Any, str]:
    """Split a signed Plaid amount into magnitude and direction

    Args:
        amount: Signed amount as returned by Plaid

    Returns:
        Tuple of (absolute amount, "expense" if negative else "income")
    """
    if amount is None:
        return None, 'income'
    return abs(amount), 'expense' if amount < 0 else 'income'


def enhance_categories(transaction: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten legacy and personal finance categories into flat fields

    Args:
        transaction: Transaction record

    Returns:
        Copy of the transaction with category_* and enhanced_* fields added
    """
    categories = transaction.get('category') or []
    personal_finance_category = transaction.get('personal_finance_category') or {}

    enhanced = dict(transaction)
    enhanced.update({
        'category_primary': categories[0] if len(categories) > 0 else 'Other',
        'category_secondary': categories[1] if len(categories) > 1 else '',
        'category_detailed': categories[2] if len(categories) > 2 else '',
        'category_full': ' > '.join(categories) or 'Other',
        'enhanced_category': (personal_finance_category.get('primary')
                              or (categories[0] if categories else 'Other')),
        'enhanced_subcategory': (personal_finance_category.get('detailed')
                                 or (categories[1] if len(categories) > 1 else '')),
    })
    return enhanced


def detect_recurring(description: Optional[str]) -> bool:
    """Check a description for subscription-like keywords"""
    if not description:
        return False
    lower_desc = description.lower()
    return any(keyword in lower_desc for keyword in RECURRING_KEYWORDS)


def calculate_spending_score(amount: Any, categories: Optional[List[str]]) -> float:
    """Score a transaction from 0 to 13 by size, weighted by primary category"""
    score = min(abs(amount or 0) / 100, 10)
    primary_category = categories[0] if categories else None
    multiplier = CATEGORY_MULTIPLIERS.get(primary_category, 1.0)
    return round(score * multiplier * 10) / 10


def enrich_transaction(transaction: Dict[str, Any], original_amount: Any) -> Dict[str, Any]:
    """Apply category flattening, recurring detection and spending score

    Args:
        transaction: Mapped transaction record
        original_amount: Signed upstream amount

    Returns:
        New record with enrichment fields
    """
    enriched = enhance_categories(transaction)
    description = transaction.get('merchant_name') or transaction.get('name') or ''
    enriched['is_recurring'] = detect_recurring(description)
    enriched['spending_score'] = calculate_spending_score(original_amount, transaction.get('category'))
    logger.debug(f"Enriched transaction {transaction.get('transaction_id')}")
    return enriched
