"""
Wires the engine together for one run of the app.

Startup restores holdings from storage and makes one spot price fetch. All
writes go through ``session.form``; valuations are recomputed on demand.
"""

from __future__ import annotations

from loguru import logger

from stacktracker.core.config import Config
from stacktracker.core.storage import KeyValueStore, LocalStorage

from .models import Holding, Portfolio, SpotQuote
from .spot import SpotPriceGateway, SpotPriceTracker
from .store import HoldingsStore
from .valuation import ValuationSummary, calculate_valuation, recent_holdings
from .workflow import HoldingForm


class TrackerSession:
    """Holdings store, spot tracker, and form for one user on one device."""

    def __init__(self, store: HoldingsStore, tracker: SpotPriceTracker, form: HoldingForm | None = None):
        self.store = store
        self.tracker = tracker
        self.form = form or HoldingForm(store)

    @classmethod
    def from_config(cls, config: Config, storage: KeyValueStore | None = None) -> TrackerSession:
        storage = storage or LocalStorage(base_path=config.get_storage_dir())
        silver_key, gold_key = config.storage_keys()
        store = HoldingsStore(storage, silver_key=silver_key, gold_key=gold_key)
        gateway = SpotPriceGateway(api_base=config.spot_api_base(), timeout=config.spot_timeout())
        return cls(store, SpotPriceTracker(gateway))

    async def start(self, fetch_prices: bool = True) -> Portfolio:
        portfolio = await self.store.load()
        if fetch_prices:
            await self.tracker.refresh()
        logger.debug(f"Session started with {len(portfolio)} holdings")
        return portfolio

    @property
    def portfolio(self) -> Portfolio:
        return self.store.portfolio

    @property
    def quote(self) -> SpotQuote:
        return self.tracker.quote

    def valuation(self) -> ValuationSummary:
        return calculate_valuation(self.store.portfolio, self.tracker.quote)

    def recent(self, limit: int = 5) -> list[Holding]:
        return recent_holdings(self.store.portfolio, limit)
