# app/services/fx_rate_service.py
"""
FX Rate Service for the USD/NTD exchange rate.

=============================================================================
FX RATE CONVENTION
=============================================================================

This service uses the Yahoo Finance convention:

    rate = "1 base_currency = X quote_currency"

Example:
    base_currency = "USD"
    quote_currency = "NTD"
    rate = 32.5

    Meaning: 1 USD = 32.5 NTD

Conversion formula (see app/utils/fx_conversion.py):
    To convert USD → NTD:  NTD_amount = USD_amount × rate
    To convert NTD → USD:  USD_amount = NTD_amount ÷ rate

=============================================================================

Design Principles:
- Never raises: a provider failure or a non-positive rate yields the
  configured fallback rate (FX_FALLBACK_RATE, default 32.5)
- No HTTP Knowledge: the router decides how to present the result
- Financial Precision: Uses Decimal for all rates

Yahoo Finance FX Symbols:
- Format: {BASE}{QUOTE}=X; the ledger's NTD is Yahoo's TWD (USDTWD=X)

Usage:
    service = FXRateService(provider, fallback_rate=Decimal("32.5"))
    result = service.get_usd_to_ntd()
    ntd_amount = usd_amount * result.rate
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from app.models import Currency
from app.services.market_data.base import MarketDataProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FXRateResult:
    """
    An exchange rate and where it came from.

    Attributes:
        base_currency: "USD"
        quote_currency: "NTD"
        rate: 1 base = rate quote
        is_fallback: True when the configured fallback was used
        fetched_at: When the rate was obtained (UTC)
    """

    base_currency: str
    quote_currency: str
    rate: Decimal
    is_fallback: bool = False
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class FXRateService:
    """
    USD/NTD rate lookup with a configured fallback.

    Attributes:
        _provider: Market data provider used for the forex quote
        _fallback_rate: Rate used when the provider cannot deliver one
    """

    def __init__(
            self,
            provider: MarketDataProvider,
            fallback_rate: Decimal = Decimal("32.5"),
    ) -> None:
        if fallback_rate <= 0:
            raise ValueError(f"fallback_rate must be positive, got {fallback_rate}")
        self._provider = provider
        self._fallback_rate = fallback_rate

    def get_usd_to_ntd(self) -> FXRateResult:
        """
        Get the current USD → NTD rate.

        Returns:
            FXRateResult; `is_fallback` tells whether the live quote failed
        """
        base, quote = Currency.USD.value, Currency.NTD.value

        try:
            rate = self._provider.get_forex_rate(base, quote)
        except Exception as e:
            logger.warning(
                f"USD/NTD rate unavailable from {self._provider.name}, "
                f"using fallback {self._fallback_rate}: {e}"
            )
            return self._fallback(base, quote)

        if rate is None or not rate.is_finite() or rate <= 0:
            logger.warning(f"Ignoring invalid USD/NTD rate {rate}, using fallback")
            return self._fallback(base, quote)

        logger.debug(f"USD/NTD rate: {rate}")
        return FXRateResult(base_currency=base, quote_currency=quote, rate=rate)

    def _fallback(self, base: str, quote: str) -> FXRateResult:
        return FXRateResult(
            base_currency=base,
            quote_currency=quote,
            rate=self._fallback_rate,
            is_fallback=True,
        )
