"""
Holdings store: the single owner of the silver and gold collections.

One repository partitioned by metal. Every mutation rewrites both metal
entries in the key-value store as independent values, so a failed write of
one never touches the other's stored data. Writes are best-effort: failures
come back as PersistenceWarning objects and the in-memory state stays
authoritative for the session.
"""

from __future__ import annotations

import asyncio
import json
import uuid
from dataclasses import dataclass, field, replace

from loguru import logger

from stacktracker.core.config import DEFAULT_GOLD_KEY, DEFAULT_SILVER_KEY
from stacktracker.core.exceptions import DuplicateHoldingError, MetalChangeError
from stacktracker.core.storage import KeyValueStore, StorageError

from .models import Holding, Metal, Portfolio


@dataclass(frozen=True)
class PersistenceWarning:
    """A failed write of one metal collection."""

    metal: Metal
    key: str
    message: str


@dataclass
class MutationResult:
    """Outcome of a create/update/delete call."""

    portfolio: Portfolio
    changed: bool
    holding: Holding | None = None
    warnings: list[PersistenceWarning] = field(default_factory=list)

    @property
    def persisted(self) -> bool:
        return not self.warnings


def new_holding_id() -> str:
    return uuid.uuid4().hex


class HoldingsStore:
    """Async CRUD over the two metal collections, backed by a KeyValueStore."""

    def __init__(
        self,
        storage: KeyValueStore,
        silver_key: str = DEFAULT_SILVER_KEY,
        gold_key: str = DEFAULT_GOLD_KEY,
    ):
        self.storage = storage
        self.keys: dict[Metal, str] = {Metal.SILVER: silver_key, Metal.GOLD: gold_key}
        self._holdings: dict[Metal, list[Holding]] = {Metal.SILVER: [], Metal.GOLD: []}
        self._lock = asyncio.Lock()

    @property
    def portfolio(self) -> Portfolio:
        return Portfolio(
            silver=tuple(self._holdings[Metal.SILVER]),
            gold=tuple(self._holdings[Metal.GOLD]),
        )

    def list(self, metal: Metal | None = None) -> list[Holding]:
        if metal is None:
            return self.portfolio.all_holdings()
        return list(self._holdings[metal])

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> Portfolio:
        """Restore both collections. Missing or corrupt entries load as empty."""
        async with self._lock:
            for metal in Metal:
                self._holdings[metal] = await self._load_collection(metal)
            portfolio = self.portfolio
        logger.info(f"Loaded {len(portfolio.silver)} silver and {len(portfolio.gold)} gold holdings")
        return portfolio

    async def _load_collection(self, metal: Metal) -> list[Holding]:
        key = self.keys[metal]
        try:
            raw = await self.storage.get(key)
        except StorageError as e:
            logger.warning(f"Cannot read '{key}', starting with no {metal.value} holdings: {e}")
            return []
        if raw is None:
            return []

        try:
            return parse_collection(raw, metal)
        except (ValueError, TypeError) as e:
            logger.warning(f"Corrupt {metal.value} holdings under '{key}', treating as empty: {e}")
            return []

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create(self, holding: Holding) -> MutationResult:
        """Append ``holding`` to its metal's collection, assigning an id if it has none."""
        async with self._lock:
            if not holding.id:
                holding = replace(holding, id=new_holding_id())
            elif self._find(holding.id) is not None:
                raise DuplicateHoldingError(f"Holding {holding.id} already exists")

            self._holdings[holding.metal].append(holding)
            logger.debug(f"Created {holding.metal.value} holding {holding.id} ({holding.product})")
            warnings = await self._persist()
            return MutationResult(self.portfolio, changed=True, holding=holding, warnings=warnings)

    async def update(self, holding: Holding) -> MutationResult:
        """Replace the holding with the same id in the same metal's collection.

        Unknown ids are a no-op. An id that lives under the other metal is
        rejected: metal is fixed once a holding exists.
        """
        async with self._lock:
            collection = self._holdings[holding.metal]
            for index, existing in enumerate(collection):
                if existing.id == holding.id:
                    collection[index] = holding
                    break
            else:
                other = self._find(holding.id)
                if other is not None:
                    raise MetalChangeError(
                        f"Holding {holding.id} is {other.metal.value}; cannot update it as {holding.metal.value}"
                    )
                logger.debug(f"Update of unknown holding {holding.id} ignored")
                return MutationResult(self.portfolio, changed=False)

            logger.debug(f"Updated {holding.metal.value} holding {holding.id}")
            warnings = await self._persist()
            return MutationResult(self.portfolio, changed=True, holding=holding, warnings=warnings)

    async def delete(self, holding_id: str, metal: Metal) -> MutationResult:
        """Remove a holding. Deleting something already gone changes nothing."""
        async with self._lock:
            collection = self._holdings[metal]
            removed = next((h for h in collection if h.id == holding_id), None)
            if removed is None:
                return MutationResult(self.portfolio, changed=False)

            self._holdings[metal] = [h for h in collection if h.id != holding_id]
            logger.debug(f"Deleted {metal.value} holding {holding_id}")
            warnings = await self._persist()
            return MutationResult(self.portfolio, changed=True, holding=removed, warnings=warnings)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _find(self, holding_id: str) -> Holding | None:
        for collection in self._holdings.values():
            for holding in collection:
                if holding.id == holding_id:
                    return holding
        return None

    async def _persist(self) -> list[PersistenceWarning]:
        """Write each metal's collection under its own key."""
        warnings: list[PersistenceWarning] = []
        for metal in Metal:
            key = self.keys[metal]
            try:
                await self.storage.set(key, serialize_collection(self._holdings[metal]))
            except StorageError as e:
                logger.warning(f"Failed to save {metal.value} holdings to '{key}': {e}")
                warnings.append(PersistenceWarning(metal=metal, key=key, message=str(e)))
        return warnings


def serialize_collection(holdings: list[Holding]) -> str:
    return json.dumps([h.to_record() for h in holdings])


def parse_collection(raw: str, metal: Metal) -> list[Holding]:
    """Parse one persisted collection. Raises ValueError if any part is malformed."""
    try:
        records = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"not valid JSON ({e.msg})") from e
    if not isinstance(records, list):
        raise ValueError(f"expected a list, got {type(records).__name__}")

    holdings = []
    seen: set[str] = set()
    for record in records:
        holding = Holding.from_record(record)
        if holding.metal is not metal:
            raise ValueError(f"holding {holding.id} is {holding.metal.value}, expected {metal.value}")
        if holding.id in seen:
            raise ValueError(f"duplicate holding id {holding.id}")
        seen.add(holding.id)
        holdings.append(holding)
    return holdings
