# app/services/ledger/base.py
"""
Abstract interface for the ledger store.

The engine only ever READS the ledger: two listing operations cover
everything it needs. Writes (the CRUD forms) belong to another system.

Implementations:
- SqlLedgerStore (sql_store.py): SQLAlchemy over the ledger tables
- InMemoryLedgerStore (below): fixed records, for tests and demos
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from app.services.ledger.parsing import resolve_asset_attributes
from app.services.ledger.types import Liability, Transaction


class LedgerStore(ABC):
    """
    Read-only access to the transaction and liability ledgers.

    Implementations return a consistent snapshot per call and raise
    MissingCredentialsError when the store cannot be reached.
    """

    @abstractmethod
    def list_transactions(self) -> list[Transaction]:
        """
        Return every parseable transaction in ledger order.

        Raises:
            MissingCredentialsError: Ledger not configured or unreachable
        """
        pass

    @abstractmethod
    def list_liabilities(self) -> list[Liability]:
        """
        Return every liability in ledger order.

        Raises:
            MissingCredentialsError: Ledger not configured or unreachable
        """
        pass


class InMemoryLedgerStore(LedgerStore):
    """Ledger backed by in-process lists; per-symbol attributes resolved like SqlLedgerStore."""

    def __init__(
            self,
            transactions: Iterable[Transaction] = (),
            liabilities: Iterable[Liability] = (),
    ) -> None:
        self._transactions = resolve_asset_attributes(transactions)
        self._liabilities = list(liabilities)

    def list_transactions(self) -> list[Transaction]:
        return list(self._transactions)

    def list_liabilities(self) -> list[Liability]:
        return list(self._liabilities)
