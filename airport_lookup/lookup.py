"""On-demand airport lookup over generated units."""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

from .airports import Airport, normalize_code
from .store import DirectoryUnitStore, LoadedUnit, UnitStore
from .units import format_address

logger = logging.getLogger(__name__)


def resolve_address(code) -> Optional[str]:
    """Address of the unit holding ``code``: its canonical characters, root first."""
    return normalize_code(code)


class UnitCache:
    """Load outcomes by address, in flight or finished. Entries are never evicted."""

    def __init__(self):
        self._entries: Dict[str, asyncio.Future] = {}

    def __contains__(self, address: str) -> bool:
        return address in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, address: str) -> Optional[asyncio.Future]:
        return self._entries.get(address)

    def put(self, address: str, outcome: asyncio.Future) -> None:
        self._entries[address] = outcome


class UnitLoader:
    def __init__(self, store: UnitStore, cache: Optional[UnitCache] = None):
        self.store = store
        self.cache = cache if cache is not None else UnitCache()

    async def load(self, address: str) -> Optional[LoadedUnit]:
        """Return the unit at ``address`` or None; at most one store load per address."""
        outcome = self.cache.get(address)
        if outcome is None:
            outcome = asyncio.ensure_future(self._load(address))
            self.cache.put(address, outcome)
        return await asyncio.shield(outcome)

    async def _load(self, address: str) -> Optional[LoadedUnit]:
        try:
            return await asyncio.to_thread(self.store.load, address)
        except Exception as exc:
            logger.debug("Unit %s unavailable: %s", format_address(address), exc)
            return None


class AirportLookup:
    """Look up airports by code from units written by ``generate``.

    Each instance owns its cache; build one per process (or per test).
    """

    def __init__(self, store: UnitStore, cache: Optional[UnitCache] = None):
        self.loader = UnitLoader(store, cache)

    @classmethod
    def from_directory(cls, path: Path) -> "AirportLookup":
        return cls(DirectoryUnitStore(path))

    async def lookup_record(self, code) -> Optional[Airport]:
        address = resolve_address(code)
        if address is None:
            return None

        unit = await self.loader.load(address)
        if unit is None:
            return None
        try:
            return unit.get(address)
        except Exception as exc:
            logger.debug("Airport %s unavailable: %s", address, exc)
            return None
