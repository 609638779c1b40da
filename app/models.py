# app/models.py
"""
Ledger tables and shared enums.

The ledger mirrors the spreadsheet the transactions are entered in: every
column is stored as raw text exactly as typed by the user. Parsing into
typed domain records (and skipping rows that cannot be parsed) happens in
app/services/ledger/parsing.py, never here.
"""
import enum

from sqlalchemy import String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, enum.Enum):
    BUY = "Buy"
    SELL = "Sell"
    DEPOSIT = "Deposit"
    WITHDRAW = "Withdraw"

    @property
    def increases_quantity(self) -> bool:
        return self in (TransactionType.BUY, TransactionType.DEPOSIT)


class AssetCategory(str, enum.Enum):
    STOCK_US = "Stock-US"
    STOCK_TW = "Stock-TW"
    CRYPTO = "Crypto"
    GOLD = "Gold"
    CASH = "Cash"


class Currency(str, enum.Enum):
    USD = "USD"
    NTD = "NTD"


class LiabilityType(str, enum.Enum):
    LOAN = "Loan"
    CREDIT_CARD = "Credit Card"
    MORTGAGE = "Mortgage"
    OTHER = "Other"


class LiabilityStatus(str, enum.Enum):
    ACTIVE = "Active"
    PAID_OFF = "Paid Off"
    PENDING = "Pending"


# =============================================================================
# LEDGER TABLES
# =============================================================================

class TransactionRow(Base):
    """
    One row of the "Transactions" sheet.

    Columns: id, date, type, category, asset, quantity, price, total,
    status, note, currency. `total` is informational only; the engine
    always derives quantity x price itself.
    """
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    date: Mapped[str | None] = mapped_column(String, index=True)
    type: Mapped[str | None] = mapped_column(String)
    category: Mapped[str | None] = mapped_column(String)
    asset: Mapped[str | None] = mapped_column(String, index=True)
    quantity: Mapped[str | None] = mapped_column(String)
    price: Mapped[str | None] = mapped_column(String)
    total: Mapped[str | None] = mapped_column(String)
    status: Mapped[str | None] = mapped_column(String)
    note: Mapped[str | None] = mapped_column(String)
    currency: Mapped[str | None] = mapped_column(String)


class LiabilityRow(Base):
    """
    One row of the "Liabilities" sheet.

    Columns: id, date, type, category, name, amount, interestRate, status, note.
    """
    __tablename__ = "liabilities"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    date: Mapped[str | None] = mapped_column(String)
    type: Mapped[str | None] = mapped_column(String)
    category: Mapped[str | None] = mapped_column(String)
    name: Mapped[str | None] = mapped_column(String)
    amount: Mapped[str | None] = mapped_column(String)
    interest_rate: Mapped[str | None] = mapped_column("interestRate", String)
    status: Mapped[str | None] = mapped_column(String)
    note: Mapped[str | None] = mapped_column(String)
