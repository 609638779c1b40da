# app/services/exceptions.py
"""
Service layer exceptions.

These exceptions represent domain-specific errors and contain NO HTTP knowledge.
The application layer (app/main.py) maps them to HTTP responses.

Exception Hierarchy:
    ServiceError (base)
    ├── ValidationError
    │   └── InvalidPeriodError
    ├── LedgerError
    │   ├── MissingCredentialsError
    │   └── MalformedTransactionError
    ├── MarketDataError                (a.k.a. "upstream unavailable")
    │   ├── ProviderUnavailableError
    │   ├── TickerNotFoundError
    │   └── RateLimitError
    └── FXConversionError

Recovery policy:
    - ValidationError / InvalidPeriodError: fatal for the single call
    - MissingCredentialsError: fatal for the whole request (no ledger)
    - MalformedTransactionError: logged by the ledger reader, row skipped
    - MarketDataError: retried by the provider, then recovered locally
      (empty price series, avg-cost price, fallback FX rate)
"""

from typing import Any


class ServiceError(Exception):
    """
    Base exception for all service layer errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ServiceError):
    """
    Raised when input validation fails.

    This is for programmatic validation errors (unknown period, unsupported
    display currency), NOT for request validation which is handled by Pydantic.

    Attributes:
        field: The field that failed validation (optional)
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class InvalidPeriodError(ValidationError):
    """
    Raised when a symbolic time period token is not recognized.

    Valid periods are: 1D, 5D, 1M, 6M, YTD, 1Y, 3Y, 5Y, 10Y, MAX
    """

    def __init__(self, period: str, valid_options: list[str]) -> None:
        self.period = period
        self.valid_options = valid_options
        super().__init__(
            f"Invalid period: '{period}'. Valid options: {', '.join(valid_options)}",
            field="period"
        )


# =============================================================================
# LEDGER ERRORS
# =============================================================================


class LedgerError(ServiceError):
    """Base exception for ledger store failures."""
    pass


class MissingCredentialsError(LedgerError):
    """
    Raised when the ledger store is not configured or cannot be reached.

    There is no valid ledger to compute from, so the whole request fails.

    Attributes:
        reason: Specific reason (missing URL, connection refused, ...)
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Ledger store unavailable: {reason}")


class MalformedTransactionError(LedgerError):
    """
    Raised when a ledger row cannot be parsed into a domain record.

    The ledger reader catches this, logs it and skips the row, so the row
    contributes nothing to holdings, valuation or performance.

    Attributes:
        row_id: Identifier of the offending row
        field: Column that failed to parse
        value: Raw value found in the column
    """

    def __init__(self, row_id: str | None, field: str, value: Any) -> None:
        self.row_id = row_id
        self.field = field
        self.value = value
        super().__init__(
            f"Malformed ledger row {row_id!r}: cannot parse {field}={value!r}"
        )


# =============================================================================
# MARKET DATA PROVIDER ERRORS
# =============================================================================


class MarketDataError(ServiceError):
    """
    Base exception for market data provider failures.

    Attributes:
        provider: Name of the provider that failed
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        self.provider = provider
        super().__init__(message)


class ProviderUnavailableError(MarketDataError):
    """
    Raised when a market data provider is temporarily unavailable.

    Examples:
    - Network timeout
    - Server errors (500, 502, 503)
    - Unexpected payloads

    This is a retryable error.
    """

    def __init__(self, provider: str, reason: str) -> None:
        message = f"Provider '{provider}' is unavailable: {reason}"
        super().__init__(message, provider=provider)
        self.reason = reason


class TickerNotFoundError(MarketDataError):
    """
    Raised when a symbol is not known to the provider (invalid or delisted).

    This is NOT a retryable error.
    """

    def __init__(self, symbol: str, provider: str) -> None:
        message = f"Symbol '{symbol}' not found by {provider}"
        super().__init__(message, provider=provider)
        self.symbol = symbol


class RateLimitError(MarketDataError):
    """
    Raised when the provider's rate limit has been exceeded.

    This is a retryable error (with backoff).

    Attributes:
        retry_after: Seconds to wait before retrying (if provided by API)
    """

    def __init__(self, provider: str, retry_after: int | None = None) -> None:
        message = f"Rate limit exceeded for provider '{provider}'"
        if retry_after:
            message += f" (retry after {retry_after}s)"
        super().__init__(message, provider=provider)
        self.retry_after = retry_after


# =============================================================================
# FX ERRORS
# =============================================================================


class FXConversionError(ServiceError):
    """
    Raised when a currency conversion cannot be performed.

    Examples:
    - Converting with a zero or negative rate
    - Unsupported currency code

    Attributes:
        reason: Specific reason for conversion failure
    """

    def __init__(self, reason: str, currency: str | None = None) -> None:
        self.reason = reason
        self.currency = currency
        super().__init__(f"FX conversion error: {reason}")


__all__ = [
    # Base
    "ServiceError",
    # Validation
    "ValidationError",
    "InvalidPeriodError",
    # Ledger
    "LedgerError",
    "MissingCredentialsError",
    "MalformedTransactionError",
    # Market Data
    "MarketDataError",
    "ProviderUnavailableError",
    "TickerNotFoundError",
    "RateLimitError",
    # FX
    "FXConversionError",
]
