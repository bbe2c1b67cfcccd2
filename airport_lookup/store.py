"""Unit stores: where units are written at generation time and read at lookup time."""
from __future__ import annotations

import logging
import shutil
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Dict, Iterator, List

from .airports import Airport
from .units import Unit, UnitFormatError, UnitNotFoundError, UnitStoreError, format_address

UNIT_FILENAME = "index.json"

logger = logging.getLogger(__name__)


class UnitStore(ABC):
    """Addressed storage for serialized units."""

    @abstractmethod
    def write(self, address: str, text: str) -> None:
        pass

    @abstractmethod
    def read(self, address: str) -> str:
        """Return the stored text for ``address``; raise UnitNotFoundError if absent."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every unit so a new generation run starts from nothing."""
        pass

    def create(self, unit: Unit) -> None:
        self.write(unit.address, unit.to_json())

    def load(self, address: str) -> "LoadedUnit":
        return LoadedUnit(Unit.from_json(address, self.read(address)), self)


class LoadedUnit(Mapping):
    """Read-only view of a unit and, through its exports, every unit below it.

    Child units are loaded from the store the first time a lookup or
    iteration reaches them, so a leaf lookup touches only the leaf.
    Those loads are synchronous store reads; iterating inside a coroutine
    blocks the event loop for each child it reaches.
    """

    def __init__(self, unit: Unit, store: UnitStore):
        self.unit = unit
        self._store = store
        self._children: Dict[str, LoadedUnit] = {}

    @property
    def address(self) -> str:
        return self.unit.address

    def child(self, letter: str) -> "LoadedUnit":
        loaded = self._children.get(letter)
        if loaded is None:
            loaded = self._children[letter] = self._store.load(self.unit.child_address(letter))
        return loaded

    def __getitem__(self, code: str) -> Airport:
        airport = self.unit.airport
        if airport is not None and airport.iata_code == code:
            return airport
        depth = len(self.address)
        if isinstance(code, str) and len(code) > depth and code.startswith(self.address):
            letter = code[depth]
            if letter in self.unit.exports:
                return self.child(letter)[code]
        raise KeyError(code)

    def __iter__(self) -> Iterator[str]:
        if self.unit.airport is not None:
            yield self.unit.airport.iata_code
        for letter in self.unit.exports:
            yield from self.child(letter)

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __repr__(self) -> str:
        return f"LoadedUnit({format_address(self.address)!r})"


class DirectoryUnitStore(UnitStore):
    """One directory per address character: ``JFK`` lives at ``<root>/J/F/K/index.json``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryUnitStore({str(self.root)!r})"

    def path_for(self, address: str) -> Path:
        for letter in address:
            if not (letter.isascii() and letter.isalnum()):
                raise UnitStoreError(f"Address {address!r} cannot be mapped to a directory")
        return self.root.joinpath(*address, UNIT_FILENAME)

    def write(self, address: str, text: str) -> None:
        path = self.path_for(address)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(text.encode('utf-8'))
        except OSError as exc:
            raise UnitStoreError(f"Could not write unit {format_address(address)} to {path}: {exc}") from exc
        logger.debug("Wrote unit %s", format_address(address))

    def read(self, address: str) -> str:
        path = self.path_for(address)
        try:
            return path.read_bytes().decode('utf-8')
        except FileNotFoundError as exc:
            raise UnitNotFoundError(f"No unit at {format_address(address)}") from exc
        except UnicodeDecodeError as exc:
            raise UnitFormatError(f"Unit {format_address(address)} is not UTF-8") from exc
        except OSError as exc:
            raise UnitStoreError(f"Could not read unit {format_address(address)}: {exc}") from exc

    def clear(self) -> None:
        if self.root.exists():
            if any(self.root.iterdir()) and not (self.root / UNIT_FILENAME).exists():
                raise UnitStoreError(
                    f"Refusing to clear {self.root}: it is not empty and holds no generated units"
                )
            logger.info("Removing previous units under %s", self.root)
            shutil.rmtree(self.root)
        self.root.mkdir(parents=True, exist_ok=True)


class MemoryUnitStore(UnitStore):
    """Key-value store holding serialized units by address."""

    def __init__(self):
        self._units: Dict[str, str] = {}

    def __contains__(self, address: str) -> bool:
        return address in self._units

    def addresses(self) -> List[str]:
        return sorted(self._units)

    def write(self, address: str, text: str) -> None:
        self._units[address] = text

    def read(self, address: str) -> str:
        try:
            return self._units[address]
        except KeyError:
            raise UnitNotFoundError(f"No unit at {format_address(address)}") from None

    def clear(self) -> None:
        self._units.clear()
