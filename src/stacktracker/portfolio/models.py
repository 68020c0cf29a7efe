"""Precious metals portfolio data models.

Holdings are immutable lots of a single metal. A Portfolio is a snapshot of
the two metal collections; the HoldingsStore is the only thing that produces
new snapshots. Money and ounce amounts are Decimal throughout.
"""

from __future__ import annotations

import datetime
import math
from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any


class Metal(Enum):
    """Metal class of a holding. Also the partition key of a Portfolio."""

    SILVER = "silver"
    GOLD = "gold"

    @classmethod
    def parse(cls, value: Any) -> Metal:
        """Coerce ``value`` (enum or string, any case) to a Metal."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise ValueError(f"Unknown metal: {value!r}")


def to_decimal(value: Any) -> Decimal:
    """Convert ints, floats, numeric strings or Decimals to a finite Decimal.

    Booleans are rejected even though they are ints.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise ValueError(f"Not a finite number: {value!r}")
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {value!r}") from e
    else:
        raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def fits_float(value: Decimal) -> bool:
    """True if ``value`` survives the float conversion used when persisting.

    Overflow to infinity and non-zero values that underflow to 0.0 do not.
    """
    as_float = float(value)
    return math.isfinite(as_float) and (as_float != 0 or value == 0)


def _to_quantity(value: Any) -> int:
    amount = to_decimal(value)
    if amount != amount.to_integral_value():
        raise ValueError(f"Quantity must be a whole number: {value!r}")
    return int(amount)


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return datetime.date.fromisoformat(value.strip())
    raise ValueError(f"Not a date: {value!r}")


@dataclass(frozen=True)
class Holding:
    """A single purchased lot of silver or gold.

    Attributes:
        id: Opaque identifier. Empty until the store assigns one.
        metal: Metal class, fixed for the life of the holding.
        product: Display name, e.g. "American Silver Eagle".
        ozt_per_unit: Troy ounces of metal in one unit.
        quantity: Number of units in the lot.
        unit_price: Price paid per unit (cost basis).
        dealer: Where it was bought (optional).
        date: Purchase date.
        notes: Free text (optional).
    """

    id: str
    metal: Metal
    product: str
    ozt_per_unit: Decimal
    quantity: int
    unit_price: Decimal
    date: datetime.date
    dealer: str = ""
    notes: str = ""

    def __post_init__(self):
        object.__setattr__(self, "id", str(self.id or ""))
        object.__setattr__(self, "metal", Metal.parse(self.metal))
        object.__setattr__(self, "ozt_per_unit", to_decimal(self.ozt_per_unit))
        object.__setattr__(self, "quantity", _to_quantity(self.quantity))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "date", _to_date(self.date))
        object.__setattr__(self, "dealer", str(self.dealer or ""))
        object.__setattr__(self, "notes", str(self.notes or ""))

        if not isinstance(self.product, str) or not self.product.strip():
            raise ValueError("Holding product cannot be empty")
        if self.ozt_per_unit <= 0:
            raise ValueError(f"Troy ounces per unit must be positive for {self.product}: {self.ozt_per_unit}")
        if self.quantity <= 0:
            raise ValueError(f"Quantity must be positive for {self.product}: {self.quantity}")
        if self.unit_price < 0:
            raise ValueError(f"Negative unit price for {self.product}: {self.unit_price}")
        for name in ("ozt_per_unit", "unit_price"):
            if not fits_float(getattr(self, name)):
                raise ValueError(f"{name} out of range for {self.product}: {getattr(self, name)}")

    @property
    def total_ozt(self) -> Decimal:
        """Troy ounces in the whole lot."""
        return self.ozt_per_unit * self.quantity

    @property
    def cost(self) -> Decimal:
        """Total paid for the lot."""
        return self.unit_price * self.quantity

    def to_record(self) -> dict[str, Any]:
        """Serialize to the persisted JSON record layout."""
        return {
            "id": self.id,
            "metal": self.metal.value,
            "product": self.product,
            "ozt": float(self.ozt_per_unit),
            "quantity": self.quantity,
            "unitPrice": float(self.unit_price),
            "dealer": self.dealer,
            "date": self.date.isoformat(),
            "notes": self.notes,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Holding:
        """Build a Holding from a persisted record. Raises ValueError if malformed."""
        if not isinstance(record, dict):
            raise ValueError(f"Holding record must be an object, got {type(record).__name__}")
        if not record.get("id"):
            raise ValueError("Holding record has no id")
        try:
            ozt = record["ozt"] if "ozt" in record else record["oztPerUnit"]
            return cls(
                id=record["id"],
                metal=record["metal"],
                product=record["product"],
                ozt_per_unit=ozt,
                quantity=record["quantity"],
                unit_price=record["unitPrice"],
                date=record["date"],
                dealer=record.get("dealer") or "",
                notes=record.get("notes") or "",
            )
        except KeyError as e:
            raise ValueError(f"Holding record missing field {e}") from e


@dataclass(frozen=True)
class Portfolio:
    """Snapshot of silver and gold holdings, each in insertion order."""

    silver: tuple[Holding, ...] = ()
    gold: tuple[Holding, ...] = ()

    def holdings(self, metal: Metal) -> tuple[Holding, ...]:
        return self.silver if metal is Metal.SILVER else self.gold

    def all_holdings(self) -> list[Holding]:
        return [*self.silver, *self.gold]

    def get(self, holding_id: str, metal: Metal | None = None) -> Holding | None:
        """Find a holding by id, optionally restricted to one metal."""
        candidates = self.holdings(metal) if metal else self.all_holdings()
        return next((h for h in candidates if h.id == holding_id), None)

    def is_empty(self) -> bool:
        return not self.silver and not self.gold

    def __len__(self) -> int:
        return len(self.silver) + len(self.gold)


@dataclass(frozen=True)
class DailyChange:
    """Change since the previous close. None means no data, not zero."""

    amount: Decimal | None = None
    percent: Decimal | None = None

    @property
    def is_known(self) -> bool:
        return self.amount is not None and self.percent is not None


@dataclass(frozen=True)
class SpotQuote:
    """Spot prices per troy ounce for both metals."""

    silver: Decimal = Decimal("0")
    gold: Decimal = Decimal("0")
    timestamp: str | None = None
    source: str | None = None
    silver_change: DailyChange = field(default_factory=DailyChange)
    gold_change: DailyChange = field(default_factory=DailyChange)

    def price(self, metal: Metal) -> Decimal:
        return self.silver if metal is Metal.SILVER else self.gold

    def change(self, metal: Metal) -> DailyChange:
        return self.silver_change if metal is Metal.SILVER else self.gold_change

    @property
    def is_default(self) -> bool:
        """True until a fetch has succeeded."""
        return self.silver == 0 and self.gold == 0


@dataclass
class FormDraft:
    """Working copy of a holding's fields while the form is open.

    Nothing is validated here. Numeric fields may hold raw text straight from
    user input; commit converts and checks them.
    """

    metal: Metal | str | None = None
    product: str = ""
    ozt_per_unit: Decimal | float | int | str | None = None
    quantity: int | float | str | None = None
    unit_price: Decimal | float | int | str | None = None
    dealer: str = ""
    date: datetime.date | str | None = None
    notes: str = ""

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def from_holding(cls, holding: Holding) -> FormDraft:
        return cls(
            metal=holding.metal,
            product=holding.product,
            ozt_per_unit=holding.ozt_per_unit,
            quantity=holding.quantity,
            unit_price=holding.unit_price,
            dealer=holding.dealer,
            date=holding.date,
            notes=holding.notes,
        )
