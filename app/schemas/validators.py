# app/schemas/validators.py
"""
Reusable validation functions and annotated types for Pydantic schemas.

This module provides:
- Symbol validation (ledger symbols and provider symbols)
- Decimal quantization for money, percentages and rates

These validators ensure consistent input handling and output precision
across all schemas. Numeric values are serialized as STRINGS to preserve
Decimal precision.
"""

import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated

from pydantic import AfterValidator

# =============================================================================
# CONSTANTS
# =============================================================================

# Symbol: 1-20 chars. Letters, digits, dots, hyphens; optional leading caret
# for indices (^GSPC) and trailing "=X" for forex pairs (USDTWD=X).
# Case is preserved: ledger symbols are case-sensitive.
SYMBOL_PATTERN = re.compile(r'^\^?[A-Za-z0-9][A-Za-z0-9.\-]{0,17}(=X)?$')
SYMBOL_MAX_LENGTH = 20

MONEY_QUANTUM = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")
PRICE_QUANTUM = Decimal("0.00000001")


# =============================================================================
# SYMBOL VALIDATION
# =============================================================================

def validate_symbol(value: str) -> str:
    """
    Validate a symbol.

    Valid formats:
    - US tickers: AAPL, BRK.B
    - Taiwan codes: 2330, 00878, 2330.TW
    - Crypto: BTC, BTC-USD
    - Indices with caret: ^GSPC
    - Forex pairs: USDTWD=X

    Args:
        value: Raw symbol input

    Returns:
        Trimmed symbol (case preserved)

    Raises:
        ValueError: If symbol format is invalid
    """
    if not value:
        raise ValueError("Symbol cannot be empty")

    value = value.strip()

    if len(value) > SYMBOL_MAX_LENGTH:
        raise ValueError(f"Symbol cannot exceed {SYMBOL_MAX_LENGTH} characters")

    if not SYMBOL_PATTERN.match(value):
        raise ValueError(
            f"Invalid symbol format: '{value}'. "
            "Must be letters/digits with optional dots or hyphens "
            "(e.g., AAPL, 2330, BTC-USD, ^GSPC)"
        )

    return value


def validate_symbols(values: list[str] | None) -> list[str]:
    """Validate a symbol list; duplicates are dropped, order is kept."""
    if not values:
        return []
    return list(dict.fromkeys(validate_symbol(v) for v in values))


# =============================================================================
# DECIMAL PRECISION
# =============================================================================

def _quantizer(quantum: Decimal):
    def quantize(value: Decimal) -> Decimal:
        return value.quantize(quantum, rounding=ROUND_HALF_UP)
    return quantize


Symbol = Annotated[str, AfterValidator(validate_symbol)]
Money = Annotated[Decimal, AfterValidator(_quantizer(MONEY_QUANTUM))]
Percent = Annotated[Decimal, AfterValidator(_quantizer(PERCENT_QUANTUM))]
Rate = Annotated[Decimal, AfterValidator(_quantizer(RATE_QUANTUM))]
Price = Annotated[Decimal, AfterValidator(_quantizer(PRICE_QUANTUM))]
