"""Precious metals holdings engine: models, store, spot prices, valuation, and form workflow."""

from .models import DailyChange, FormDraft, Holding, Metal, Portfolio, SpotQuote
from .session import TrackerSession
from .spot import SpotPriceGateway, SpotPriceTracker, parse_quote
from .store import HoldingsStore, MutationResult, PersistenceWarning
from .valuation import ValuationSummary, calculate_valuation, holding_melt_value, recent_holdings
from .workflow import CommitResult, FormMode, HoldingForm

__all__ = [
    "CommitResult",
    "DailyChange",
    "FormDraft",
    "FormMode",
    "Holding",
    "HoldingForm",
    "HoldingsStore",
    "Metal",
    "MutationResult",
    "PersistenceWarning",
    "Portfolio",
    "SpotPriceGateway",
    "SpotPriceTracker",
    "SpotQuote",
    "TrackerSession",
    "ValuationSummary",
    "calculate_valuation",
    "holding_melt_value",
    "parse_quote",
    "recent_holdings",
]
