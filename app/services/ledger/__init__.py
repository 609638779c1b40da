# app/services/ledger/__init__.py
"""
Ledger Store Package.

Read-only access to the transaction and liability ledgers.

Usage:
    from app.services.ledger import SqlLedgerStore

    store = SqlLedgerStore(LedgerDatabase(url), CategoryClassifier.from_settings())
    transactions = store.list_transactions()

Architecture:
    ledger/
    ├── __init__.py      # This file - package exports
    ├── types.py         # Transaction / Liability domain records
    ├── parsing.py       # Raw row -> domain record (skips malformed rows)
    ├── base.py          # LedgerStore interface + InMemoryLedgerStore
    └── sql_store.py     # SQLAlchemy implementation
"""

from app.services.ledger.base import InMemoryLedgerStore, LedgerStore
from app.services.ledger.parsing import (
    parse_liability,
    parse_transaction,
    parse_transactions,
    resolve_asset_attributes,
    to_decimal,
)
from app.services.ledger.sql_store import SqlLedgerStore
from app.services.ledger.types import Liability, Transaction

__all__ = [
    "LedgerStore",
    "InMemoryLedgerStore",
    "SqlLedgerStore",
    "Transaction",
    "Liability",
    "parse_transaction",
    "parse_transactions",
    "parse_liability",
    "resolve_asset_attributes",
    "to_decimal",
]
