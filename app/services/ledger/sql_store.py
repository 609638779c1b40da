# app/services/ledger/sql_store.py
"""
SQLAlchemy-backed ledger store.

Reads the raw text rows of the `transactions` and `liabilities` tables
through a LedgerDatabase handle and parses them into domain records.
Each call opens its own session, so every request sees a fresh,
consistent snapshot of the ledger.
"""

import logging

from sqlalchemy import select

from app.database import LedgerDatabase
from app.models import LiabilityRow, TransactionRow
from app.services.classification import CategoryClassifier
from app.services.ledger.base import LedgerStore
from app.services.ledger.parsing import parse_liability, parse_transactions
from app.services.ledger.types import Liability, Transaction

logger = logging.getLogger(__name__)


class SqlLedgerStore(LedgerStore):
    """
    Ledger store over a SQL database.

    Attributes:
        _database: Lazily-connected ledger handle
        _classifier: Resolves categories for rows without one
    """

    def __init__(self, database: LedgerDatabase, classifier: CategoryClassifier) -> None:
        self._database = database
        self._classifier = classifier

    def list_transactions(self) -> list[Transaction]:
        with self._database.session() as session:
            rows = session.scalars(select(TransactionRow)).all()
            transactions = parse_transactions(rows, self._classifier)

        logger.debug(f"Loaded {len(transactions)} transaction(s) from ledger")
        return transactions

    def list_liabilities(self) -> list[Liability]:
        with self._database.session() as session:
            rows = session.scalars(select(LiabilityRow)).all()
            liabilities = [parse_liability(row) for row in rows]

        logger.debug(f"Loaded {len(liabilities)} liability row(s) from ledger")
        return liabilities
