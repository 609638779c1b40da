#!/usr/bin/env python3
# scripts/seed_sample_ledger.py
"""
Create the ledger tables and fill them with a small demo ledger.

The API never writes to the ledger; this script exists so the app can be
run locally against a SQLite file:

    LEDGER_DATABASE_URL=sqlite:///./ledger.db python scripts/seed_sample_ledger.py

Rows are keyed by id, so running the script twice inserts nothing new.
"""
import logging
import sys
from pathlib import Path

# Setup path to import app modules
project_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_dir))

from app.config import settings
from app.database import LedgerDatabase
from app.models import LiabilityRow, TransactionRow

logger = logging.getLogger(__name__)

# Raw text rows, as a spreadsheet export would hold them
SAMPLE_TRANSACTIONS = [
    {"id": "demo-t1", "date": "2023-01-03", "type": "Deposit", "category": "Cash",
     "asset": "USD", "quantity": "5000", "price": "1", "currency": "USD"},
    {"id": "demo-t2", "date": "2023-01-15", "type": "Buy", "category": "Stock-US",
     "asset": "AAPL", "quantity": "10", "price": "135.94", "currency": "USD"},
    {"id": "demo-t3", "date": "2023-03-01", "type": "Buy", "category": "",
     "asset": "2330", "quantity": "2", "price": "505", "currency": "NTD"},
    {"id": "demo-t4", "date": "2023-06-12", "type": "Buy", "category": "Crypto",
     "asset": "BTC", "quantity": "0.15", "price": "25900", "currency": "USD"},
    {"id": "demo-t5", "date": "2023-09-20", "type": "Sell", "category": "Stock-US",
     "asset": "AAPL", "quantity": "4", "price": "175.49", "currency": "USD"},
    {"id": "demo-t6", "date": "2024-02-05", "type": "Buy", "category": "Gold",
     "asset": "GLD", "quantity": "5", "price": "188.2", "currency": "USD"},
]

SAMPLE_LIABILITIES = [
    {"id": "demo-l1", "date": "2022-08-01", "type": "Loan", "name": "Car loan",
     "amount": "8500", "interest_rate": "3.2", "status": "Active"},
    {"id": "demo-l2", "date": "2021-05-10", "type": "Credit Card", "name": "Old card",
     "amount": "1200", "interest_rate": "15", "status": "Paid Off"},
]


def seed(database: LedgerDatabase) -> int:
    """
    Create the schema and insert the sample rows that are missing.

    Returns:
        Number of rows inserted
    """
    database.create_schema()
    inserted = 0

    with database.session() as session:
        for data in SAMPLE_TRANSACTIONS:
            if session.get(TransactionRow, data["id"]) is None:
                session.add(TransactionRow(**data))
                inserted += 1

        for data in SAMPLE_LIABILITIES:
            if session.get(LiabilityRow, data["id"]) is None:
                session.add(LiabilityRow(**data))
                inserted += 1

        session.commit()

    logger.info(f"Seeded {inserted} ledger row(s)")
    return inserted


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    if not settings.ledger_database_url:
        logger.error("LEDGER_DATABASE_URL is not set")
        sys.exit(1)

    db = LedgerDatabase(settings.ledger_database_url)
    try:
        seed(db)
    finally:
        db.dispose()
