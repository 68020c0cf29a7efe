"""
Spot price source client.

SpotPriceGateway makes one GET against the spot price API and turns the
JSON into a SpotQuote, raising SpotPriceError for anything unusable.
SpotPriceTracker holds the last good quote and never lets a failed or stale
fetch replace it.
"""

from __future__ import annotations

import asyncio
import http.client
import itertools
import json
import urllib.error
import urllib.request
from decimal import Decimal
from typing import Any

from loguru import logger

from stacktracker.core.config import DEFAULT_SPOT_API_BASE
from stacktracker.core.exceptions import SpotPriceError

from .models import DailyChange, Metal, SpotQuote, to_decimal

SPOT_PRICES_PATH = "/api/spot-prices"


class SpotPriceGateway:
    """Fetches the current silver and gold spot prices."""

    def __init__(self, api_base: str = DEFAULT_SPOT_API_BASE, timeout: float = 10):
        if not api_base:
            raise ValueError("api_base is required")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.api_base}{SPOT_PRICES_PATH}"

    async def fetch_quote(self) -> SpotQuote:
        """Fetch and parse one quote. Raises SpotPriceError on any failure."""
        payload = await asyncio.to_thread(self._request)
        return parse_quote(payload)

    def _request(self) -> Any:
        try:
            req = urllib.request.Request(url=self.url, method="GET", headers={"Accept": "application/json"})
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as e:
            raise SpotPriceError(f"Spot price API {e.code}: {e.reason}") from e
        except (urllib.error.URLError, http.client.HTTPException, TimeoutError, OSError) as e:
            raise SpotPriceError(f"Spot price request failed: {e}") from e
        except ValueError as e:
            raise SpotPriceError(f"Invalid spot price URL {self.url}: {e}") from e

        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SpotPriceError(f"Spot price response is not JSON: {e}") from e


def parse_quote(payload: Any) -> SpotQuote:
    """Validate a spot price response and build a SpotQuote.

    Both prices must be real, finite, positive numbers or the whole response
    is rejected. Missing change figures stay None.
    """
    if not isinstance(payload, dict):
        raise SpotPriceError(f"Spot price response must be an object, got {type(payload).__name__}")
    if payload.get("success") is not True:
        raise SpotPriceError("Spot price API reported failure")

    prices = {metal: _price(payload, metal) for metal in Metal}
    change = payload.get("change")
    change = change if isinstance(change, dict) else {}

    timestamp = payload.get("timestamp")
    source = payload.get("source")
    return SpotQuote(
        silver=prices[Metal.SILVER],
        gold=prices[Metal.GOLD],
        timestamp=timestamp if isinstance(timestamp, str) else None,
        source=source if isinstance(source, str) else None,
        silver_change=_daily_change(change.get(Metal.SILVER.value)),
        gold_change=_daily_change(change.get(Metal.GOLD.value)),
    )


def _price(payload: dict[str, Any], metal: Metal) -> Decimal:
    value = payload.get(metal.value)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SpotPriceError(f"Spot price for {metal.value} is missing or not a number: {value!r}")
    try:
        price = to_decimal(value)
    except ValueError as e:
        raise SpotPriceError(f"Spot price for {metal.value} is not finite: {value!r}") from e
    if price <= 0:
        raise SpotPriceError(f"Spot price for {metal.value} must be positive: {value!r}")
    return price


def _optional_number(value: Any) -> Decimal | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return to_decimal(value)
    except ValueError:
        return None


def _daily_change(data: Any) -> DailyChange:
    if not isinstance(data, dict):
        return DailyChange()
    return DailyChange(amount=_optional_number(data.get("amount")), percent=_optional_number(data.get("percent")))


class SpotPriceTracker:
    """Keeps the latest good SpotQuote.

    Each refresh is numbered when it starts. A result is applied only if no
    later-started refresh has already been applied, so a slow old response
    cannot overwrite a newer quote.
    """

    def __init__(self, gateway: SpotPriceGateway, initial: SpotQuote | None = None):
        self.gateway = gateway
        self.quote = initial or SpotQuote()
        self._sequence = itertools.count(1)
        self._applied_sequence = 0
        self.last_error: str | None = None

    async def refresh(self) -> bool:
        """Fetch a new quote. Returns False (keeping the old quote) on failure."""
        sequence = next(self._sequence)
        try:
            quote = await self.gateway.fetch_quote()
        except SpotPriceError as e:
            self.last_error = str(e)
            logger.warning(f"Spot price fetch failed, keeping previous quote: {e}")
            return False

        if sequence < self._applied_sequence:
            logger.debug(f"Discarding stale spot quote from request {sequence} (already at {self._applied_sequence})")
            return False

        self._applied_sequence = sequence
        self.quote = quote
        self.last_error = None
        logger.info(f"Spot prices updated: silver={quote.silver} gold={quote.gold} source={quote.source}")
        return True
