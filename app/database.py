# app/database.py
"""
Ledger database connection and session management.

The ledger handle is an explicit object (LedgerDatabase) rather than a
module-level engine: it is constructed by the dependency layer, can be
replaced by tests, and only connects on first use. A missing connection
string surfaces as MissingCredentialsError at that point instead of
failing at import time.

Pool Configuration (configurable via environment variables):
- DB_POOL_SIZE: Persistent connections (default: 5)
- DB_POOL_MAX_OVERFLOW: Burst capacity (default: 10)
- DB_POOL_RECYCLE: Connection lifetime (default: 3600s)
- DB_POOL_PRE_PING: Health checks (default: True)

Usage:
    ledger_db = LedgerDatabase(settings.ledger_database_url)
    with ledger_db.session() as session:
        rows = session.scalars(select(TransactionRow)).all()
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from app.config import settings
from app.models import Base
from app.services.exceptions import MissingCredentialsError

logger = logging.getLogger(__name__)


def _create_engine(url: str) -> Engine:
    """
    Create SQLAlchemy engine with backend-appropriate configuration.

    - SQLite: StaticPool so an in-memory ledger is shared across sessions
    - Anything else: QueuePool with configurable connection pooling
    """
    if url.lower().startswith("sqlite://"):
        logger.info("Configuring SQLite ledger")
        return create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=settings.debug,
        )

    logger.info(
        f"Configuring ledger pool: "
        f"size={settings.db_pool_size}, "
        f"max_overflow={settings.db_pool_max_overflow}, "
        f"recycle={settings.db_pool_recycle}s, "
        f"pre_ping={settings.db_pool_pre_ping}"
    )

    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_pool_max_overflow,
        pool_recycle=settings.db_pool_recycle,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_timeout=30,
        echo=settings.debug,
    )


class LedgerDatabase:
    """
    Lazily-connected handle to the ledger database.

    Attributes:
        url: Connection string (None when not configured)
    """

    def __init__(self, url: str | None) -> None:
        self.url = url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        """
        Return the engine, creating it on first access.

        Raises:
            MissingCredentialsError: If no connection string is configured
        """
        if self.url is None:
            raise MissingCredentialsError("LEDGER_DATABASE_URL is not configured")

        with self._lock:
            if self._engine is None:
                self._engine = _create_engine(self.url)
                self._session_factory = sessionmaker(
                    autocommit=False, autoflush=False, bind=self._engine
                )
        return self._engine

    def _get_session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            _ = self.engine
        return self._session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        """
        Provide a read session; connection failures become MissingCredentialsError.

        Yields:
            Session: A SQLAlchemy session that is closed after use
        """
        session = self._get_session_factory()()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error(f"Ledger query failed: {e}")
            raise MissingCredentialsError(str(e)) from e
        finally:
            session.close()

    def create_schema(self) -> None:
        """Create the ledger tables if they do not exist."""
        Base.metadata.create_all(bind=self.engine)

    def check_health(self) -> dict:
        """
        Check ledger connectivity.

        Returns:
            dict: Health status, with the error message when unhealthy
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "healthy",
                "database": "sqlite" if self.url.lower().startswith("sqlite://") else "sql",
            }
        except (MissingCredentialsError, SQLAlchemyError) as e:
            logger.error(f"Ledger health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e),
            }

    def dispose(self) -> None:
        """Close pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._session_factory = None
