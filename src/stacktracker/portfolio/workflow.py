"""
Add/edit holding form workflow.

A three-state machine (closed, creating, editing) and the only component
that writes to the HoldingsStore. Drafts are free-form until commit, where
they are validated and missing numbers fall back to safe defaults.
"""

from __future__ import annotations

import datetime
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from loguru import logger

from stacktracker.core.exceptions import FormStateError, ImmutableFieldError, ValidationError

from .models import FormDraft, Holding, Metal, fits_float, to_decimal
from .store import HoldingsStore, MutationResult, PersistenceWarning

DEFAULT_OZT_PER_UNIT = Decimal("1")
DEFAULT_QUANTITY = 1
DEFAULT_UNIT_PRICE = Decimal("0")


class FormMode(Enum):
    CLOSED = "closed"
    CREATING = "creating"
    EDITING = "editing"


@dataclass
class CommitResult:
    """Outcome of HoldingForm.commit()."""

    ok: bool
    errors: list[str] = field(default_factory=list)
    mutation: MutationResult | None = None

    @property
    def holding(self) -> Holding | None:
        return self.mutation.holding if self.mutation else None

    @property
    def warnings(self) -> list[PersistenceWarning]:
        return self.mutation.warnings if self.mutation else []


class HoldingForm:
    """Create/edit workflow for a single holding at a time."""

    def __init__(
        self,
        store: HoldingsStore,
        default_metal: Metal = Metal.SILVER,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.store = store
        self.default_metal = default_metal
        self._today = today
        self.mode = FormMode.CLOSED
        self.draft: FormDraft | None = None
        self.holding_id: str | None = None
        self._locked_metal: Metal | None = None

    @property
    def is_open(self) -> bool:
        return self.mode is not FormMode.CLOSED

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def open_create(self) -> FormDraft:
        self._require_closed()
        self.draft = FormDraft(
            metal=self.default_metal,
            product="",
            ozt_per_unit=DEFAULT_OZT_PER_UNIT,
            quantity=DEFAULT_QUANTITY,
            unit_price=None,
            date=self._today(),
        )
        self.mode = FormMode.CREATING
        return self.draft

    def open_edit(self, holding: Holding) -> FormDraft:
        self._require_closed()
        self.draft = FormDraft.from_holding(holding)
        self.holding_id = holding.id
        self._locked_metal = holding.metal
        self.mode = FormMode.EDITING
        return self.draft

    def update_field(self, name: str, value: Any) -> None:
        """Set one draft field. Values are checked at commit, not here."""
        draft = self._require_open()
        if name not in FormDraft.field_names():
            raise FormStateError(f"Unknown holding field: {name}")
        if name == "metal" and self.mode is FormMode.EDITING:
            raise ImmutableFieldError("Metal cannot be changed while editing a holding")
        setattr(draft, name, value)

    def cancel(self) -> None:
        if self.is_open:
            logger.debug(f"Discarded {self.mode.value} draft")
        self._close()

    async def commit(self) -> CommitResult:
        """Validate the draft and write it to the store.

        On validation failure the form stays open with the draft untouched.
        """
        self._require_open()
        holding, errors = self._build_holding()
        if errors:
            logger.debug(f"Holding form rejected: {'; '.join(errors)}")
            return CommitResult(ok=False, errors=errors)

        try:
            if self.mode is FormMode.CREATING:
                mutation = await self.store.create(holding)
            else:
                mutation = await self.store.update(holding)
        except ValidationError as e:
            return CommitResult(ok=False, errors=[str(e)])

        self._close()
        return CommitResult(ok=True, mutation=mutation)

    async def delete(self, holding_id: str, metal: Metal) -> MutationResult:
        """Delete through the workflow so every write has one entry point."""
        return await self.store.delete(holding_id, metal)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _build_holding(self) -> tuple[Holding | None, list[str]]:
        draft = self.draft
        errors: list[str] = []

        product = str(draft.product or "").strip()
        if not product:
            errors.append("Product name is required")

        metal = None
        try:
            metal = Metal.parse(draft.metal)
        except ValueError:
            errors.append("Metal must be silver or gold")
        if self._locked_metal is not None and metal is not None and metal is not self._locked_metal:
            errors.append("Metal cannot be changed while editing a holding")

        ozt_per_unit = _number_or_default(draft.ozt_per_unit, DEFAULT_OZT_PER_UNIT, "Troy ounces per unit", errors)
        quantity = _number_or_default(draft.quantity, Decimal(DEFAULT_QUANTITY), "Quantity", errors)
        if quantity != quantity.to_integral_value():
            errors.append("Quantity must be a whole number")
        unit_price = _number_or_default(
            draft.unit_price, DEFAULT_UNIT_PRICE, "Unit price", errors, zero_is_default=False
        )

        purchase_date = self._today()
        if draft.date not in (None, ""):
            try:
                purchase_date = _parse_date(draft.date)
            except ValueError:
                errors.append(f"Purchase date must be YYYY-MM-DD, got {draft.date!r}")

        if errors:
            return None, errors

        holding = Holding(
            id=self.holding_id or "",
            metal=metal,
            product=product,
            ozt_per_unit=ozt_per_unit,
            quantity=int(quantity),
            unit_price=unit_price,
            date=purchase_date,
            dealer=str(draft.dealer or "").strip(),
            notes=str(draft.notes or "").strip(),
        )
        return holding, []

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _require_closed(self) -> None:
        if self.is_open:
            raise FormStateError(f"Form is already open ({self.mode.value})")

    def _require_open(self) -> FormDraft:
        if not self.is_open or self.draft is None:
            raise FormStateError("Form is not open")
        return self.draft

    def _close(self) -> None:
        self.mode = FormMode.CLOSED
        self.draft = None
        self.holding_id = None
        self._locked_metal = None


def _number_or_default(
    value: Any,
    default: Decimal,
    label: str,
    errors: list[str],
    zero_is_default: bool = True,
) -> Decimal:
    """Blank, non-numeric (and optionally zero) input becomes ``default``.

    Negative values and values too large or too small to store are errors.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = to_decimal(value)
    except ValueError:
        return default
    if number == 0 and zero_is_default:
        return default
    if number < 0:
        errors.append(f"{label} cannot be negative")
        return default
    if not fits_float(number):
        errors.append(f"{label} is out of range: {value}")
        return default
    return number


def _parse_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.date.fromisoformat(str(value).strip())
