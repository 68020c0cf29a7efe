"""Shared test fixtures for stacktracker."""

import datetime
import os
import tempfile
from decimal import Decimal

import pytest

from stacktracker.core.storage import MemoryStorage
from stacktracker.portfolio import Holding, HoldingsStore, Metal, SpotQuote


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {"data_dir": os.path.join(tmp_dir, "data")},
        "spot": {"api_base": "https://spot.example.test", "timeout": 3},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def store(memory_storage):
    return HoldingsStore(memory_storage)


@pytest.fixture
def eagle():
    return Holding(
        id="",
        metal=Metal.SILVER,
        product="Eagle",
        ozt_per_unit=1,
        quantity=10,
        unit_price=32,
        date="2024-01-01",
    )


@pytest.fixture
def maple():
    return Holding(
        id="",
        metal=Metal.GOLD,
        product="Gold Maple Leaf 1/10 oz",
        ozt_per_unit=Decimal("0.1"),
        quantity=4,
        unit_price=Decimal("290.50"),
        date=datetime.date(2024, 3, 15),
        dealer="APMEX",
    )


@pytest.fixture
def quote():
    return SpotQuote(silver=Decimal("30"), gold=Decimal("2600"))
