# app/services/ledger/parsing.py
"""
Ledger row parsing.

Turns raw spreadsheet text into typed domain records. A transaction row
whose date, type, asset, quantity or price cannot be parsed raises
MalformedTransactionError; `parse_transactions` logs and skips such rows
so one bad cell never aborts a whole reconstruction.

Liability rows are lenient: unparseable amounts and rates read as 0.
"""

import logging
import math
from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Any

from app.models import (
    Currency,
    LiabilityStatus,
    LiabilityType,
    TransactionType,
)
from app.services.classification import CategoryClassifier, is_recognized_category
from app.services.exceptions import MalformedTransactionError
from app.services.ledger.types import Liability, Transaction
from app.utils.date_utils import to_date

logger = logging.getLogger(__name__)

# Spellings seen in older sheets
_CURRENCY_ALIASES: dict[str, Currency] = {
    "USD": Currency.USD,
    "NTD": Currency.NTD,
    "TWD": Currency.NTD,
}


# =============================================================================
# PRIMITIVES
# =============================================================================

def to_decimal(value: Any) -> Decimal | None:
    """
    Parse a spreadsheet cell into a finite Decimal.

    Thousands separators are accepted ("1,250.5").

    Returns:
        Decimal, or None for empty / non-numeric / NaN / infinite cells
    """
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return Decimal(str(value))

    text = str(value).strip().replace(",", "")
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        return None
    return number if number.is_finite() else None


def _get(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


# =============================================================================
# TRANSACTIONS
# =============================================================================

def parse_transaction(row: Any, classifier: CategoryClassifier) -> Transaction:
    """
    Parse one transaction row (ORM object or dict).

    Args:
        row: Object or mapping with the ledger's transaction columns
        classifier: Resolves the category when the row has none

    Returns:
        Transaction with its category resolved

    Raises:
        MalformedTransactionError: If a required cell cannot be parsed
    """
    row_id = _text(_get(row, "id"))

    raw_date = _get(row, "date")
    try:
        trade_date = to_date(raw_date)
    except (TypeError, ValueError):
        raise MalformedTransactionError(row_id, "date", raw_date) from None

    raw_type = _text(_get(row, "type"))
    try:
        txn_type = TransactionType(raw_type)
    except ValueError:
        raise MalformedTransactionError(row_id, "type", raw_type) from None

    asset = _text(_get(row, "asset"))
    if asset is None:
        raise MalformedTransactionError(row_id, "asset", _get(row, "asset"))

    quantity = to_decimal(_get(row, "quantity"))
    if quantity is None or quantity < 0:
        raise MalformedTransactionError(row_id, "quantity", _get(row, "quantity"))

    price = to_decimal(_get(row, "price"))
    if price is None or price < 0:
        raise MalformedTransactionError(row_id, "price", _get(row, "price"))

    raw_currency = _text(_get(row, "currency"))
    currency = _CURRENCY_ALIASES.get(raw_currency.upper()) if raw_currency else None
    raw_category = _text(_get(row, "category"))

    return Transaction(
        id=row_id or "",
        date=trade_date,
        type=txn_type,
        asset=asset,
        quantity=quantity,
        price=price,
        category=classifier.classify(asset, raw_category),
        currency=currency or Currency.USD,
        status=_text(_get(row, "status")),
        note=_text(_get(row, "note")),
        category_is_explicit=is_recognized_category(raw_category),
        currency_is_explicit=currency is not None,
    )


def parse_transactions(rows: Iterable[Any], classifier: CategoryClassifier) -> list[Transaction]:
    """
    Parse ledger rows, skipping (and logging) malformed ones.

    Returns:
        Transactions in ledger order, with per-symbol category and
        currency resolved by `resolve_asset_attributes`
    """
    transactions: list[Transaction] = []
    skipped = 0

    for row in rows:
        try:
            transactions.append(parse_transaction(row, classifier))
        except MalformedTransactionError as e:
            skipped += 1
            logger.warning(f"Skipping ledger row: {e}")

    if skipped:
        logger.warning(f"Skipped {skipped} malformed transaction row(s)")

    return resolve_asset_attributes(transactions)


def resolve_asset_attributes(transactions: Iterable[Transaction]) -> list[Transaction]:
    """
    Give every row of a symbol the same category and currency.

    Each attribute comes from the symbol's earliest row that states it
    explicitly; when no row does, the earliest row's inferred value is
    used. An inferred value never overrides an explicit one, so a Sell
    without a category stays in the sub-portfolio of its Buy.

    Returns:
        Transactions in their original order
    """
    transactions = list(transactions)
    categories: dict[str, Transaction] = {}
    currencies: dict[str, Transaction] = {}

    for txn in sorted(transactions, key=lambda t: t.date):
        seen = categories.get(txn.asset)
        if seen is None or (txn.category_is_explicit and not seen.category_is_explicit):
            categories[txn.asset] = txn
        seen = currencies.get(txn.asset)
        if seen is None or (txn.currency_is_explicit and not seen.currency_is_explicit):
            currencies[txn.asset] = txn

    resolved: list[Transaction] = []
    for txn in transactions:
        category = categories[txn.asset].category
        currency = currencies[txn.asset].currency
        if txn.category != category or txn.currency != currency:
            txn = replace(txn, category=category, currency=currency)
        resolved.append(txn)
    return resolved


# =============================================================================
# LIABILITIES
# =============================================================================

def parse_liability(row: Any) -> Liability:
    """Parse one liability row; never raises for bad numeric cells."""
    try:
        liability_date = to_date(_get(row, "date"))
    except (TypeError, ValueError):
        liability_date = None

    try:
        liability_type = LiabilityType(_text(_get(row, "type")))
    except ValueError:
        liability_type = LiabilityType.OTHER

    try:
        status = LiabilityStatus(_text(_get(row, "status")))
    except ValueError:
        status = None

    return Liability(
        id=_text(_get(row, "id")) or "",
        name=_text(_get(row, "name")) or "",
        amount=to_decimal(_get(row, "amount")) or Decimal("0"),
        type=liability_type,
        date=liability_date,
        category=_text(_get(row, "category")),
        interest_rate=to_decimal(_get(row, "interest_rate")) or Decimal("0"),
        status=status,
        note=_text(_get(row, "note")),
    )
