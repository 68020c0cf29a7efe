"""Tests for stacktracker.portfolio.session."""

import json
from decimal import Decimal

import pytest

from stacktracker.core.config import Config
from stacktracker.core.exceptions import SpotPriceError
from stacktracker.core.storage import LocalStorage, MemoryStorage
from stacktracker.portfolio.models import Metal, SpotQuote
from stacktracker.portfolio.session import TrackerSession
from stacktracker.portfolio.spot import SpotPriceTracker
from stacktracker.portfolio.store import HoldingsStore


class StaticGateway:
    def __init__(self, result):
        self.result = result
        self.calls = 0

    async def fetch_quote(self):
        self.calls += 1
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


def _session(storage, gateway):
    return TrackerSession(HoldingsStore(storage), SpotPriceTracker(gateway))


class TestTrackerSession:
    @pytest.mark.asyncio
    async def test_start_loads_and_fetches(self, quote):
        storage = MemoryStorage(
            {
                "stack_silver_holdings": json.dumps(
                    [{"id": "1", "metal": "silver", "product": "Eagle", "ozt": 1, "quantity": 10, "unitPrice": 32, "dealer": "", "date": "2024-01-01", "notes": ""}]
                )
            }
        )
        gateway = StaticGateway(quote)
        session = _session(storage, gateway)

        portfolio = await session.start()
        assert len(portfolio) == 1
        assert gateway.calls == 1

        summary = session.valuation()
        assert summary.silver_melt_value == Decimal("300")
        assert summary.profit_loss_percent == Decimal("-6.25")

    @pytest.mark.asyncio
    async def test_start_survives_fetch_failure(self):
        session = _session(MemoryStorage({"stack_silver_holdings": "not json"}), StaticGateway(SpotPriceError("down")))
        portfolio = await session.start()

        assert portfolio.is_empty()
        assert session.quote == SpotQuote()
        assert session.valuation().total_melt_value == 0

    @pytest.mark.asyncio
    async def test_start_without_fetch(self, quote):
        gateway = StaticGateway(quote)
        session = _session(MemoryStorage(), gateway)
        await session.start(fetch_prices=False)
        assert gateway.calls == 0

    @pytest.mark.asyncio
    async def test_valuation_tracks_form_commits(self, quote):
        session = _session(MemoryStorage(), StaticGateway(quote))
        await session.start()

        session.form.open_create()
        session.form.update_field("metal", "gold")
        session.form.update_field("product", "Buffalo")
        session.form.update_field("unit_price", "2500")
        await session.form.commit()

        summary = session.valuation()
        assert summary.total_ozt[Metal.GOLD] == Decimal("1")
        assert summary.profit_loss == Decimal("100")
        assert session.recent()[0].product == "Buffalo"

    def test_from_config(self, tmp_dir):
        config = Config(data_dir=tmp_dir, env_prefix="")
        config.set("spot.api_base", "https://spot.example.test")
        config.set("storage.silver_key", "ag")

        session = TrackerSession.from_config(config)
        assert isinstance(session.store.storage, LocalStorage)
        assert session.store.keys[Metal.SILVER] == "ag"
        assert session.store.keys[Metal.GOLD] == "stack_gold_holdings"
        assert session.tracker.gateway.url == "https://spot.example.test/api/spot-prices"
