# app/services/ledger/types.py
"""
Domain records read from the ledger store.

These dataclasses are the typed form of the spreadsheet rows in
app/models.py. They are NOT Pydantic schemas.

Design Principles:
- Immutable (frozen=True): the engine never mutates the ledger
- Decimal for every monetary and quantity value
- date (not datetime): ledger dates have no time-of-day significance
"""

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal

from app.models import (
    AssetCategory,
    Currency,
    LiabilityStatus,
    LiabilityType,
    TransactionType,
)


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger entry.

    Attributes:
        id: Unique row identifier
        date: Trade date
        type: Buy / Sell / Deposit / Withdraw
        asset: Symbol as typed in the ledger (case-sensitive, may be numeric)
        quantity: Units traded (>= 0; Taiwan equities in lots)
        price: Price per unit in `currency` (>= 0)
        category: Explicit category, or the classifier's result when absent
        currency: Currency of `price`
        status: Free-text status column
        note: Free-text note
        category_is_explicit: False when `category` was inferred
        currency_is_explicit: False when `currency` is the USD default
    """

    id: str
    date: dt.date
    type: TransactionType
    asset: str
    quantity: Decimal
    price: Decimal
    category: AssetCategory
    currency: Currency = Currency.USD
    status: str | None = None
    note: str | None = None
    category_is_explicit: bool = True
    currency_is_explicit: bool = True

    @property
    def total(self) -> Decimal:
        """Derived trade value (never read from the ledger's own total column)."""
        return self.quantity * self.price

    @property
    def signed_quantity(self) -> Decimal:
        """Quantity with the sign of its effect on the holding."""
        return self.quantity if self.type.increases_quantity else -self.quantity


@dataclass(frozen=True)
class Liability:
    """
    A debt entry (loan, credit card balance, mortgage).

    Attributes:
        amount: Outstanding amount in USD
        interest_rate: Annual rate as typed (e.g. 2.5 for 2.5%)
        status: Only ACTIVE liabilities count toward net worth
    """

    id: str
    name: str
    amount: Decimal
    type: LiabilityType = LiabilityType.OTHER
    date: dt.date | None = None
    category: str | None = None
    interest_rate: Decimal = Decimal("0")
    status: LiabilityStatus | None = None
    note: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == LiabilityStatus.ACTIVE
