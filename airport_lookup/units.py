"""Unit content: one serialized prefix-tree node."""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Optional, Tuple

from jsonschema import ValidationError, validate

from .airports import Airport

UNIT_SCHEMA = {
    "type": "object",
    "properties": {
        "exports": {
            "type": "array",
            "items": {"type": "string", "minLength": 1, "maxLength": 1},
            "uniqueItems": True,
        },
        "airport": {
            "type": "object",
            "properties": {
                "iata_code": {"type": "string", "minLength": 1},
                "latitude_deg": {"type": ["number", "null"]},
                "longitude_deg": {"type": ["number", "null"]},
                "iso_country": {"type": ["string", "null"]},
                "iso_region": {"type": ["string", "null"]},
                "municipality": {"type": ["string", "null"]},
            },
            "required": ["iata_code"],
        },
    },
    "required": ["exports"],
    "additionalProperties": False,
}


class UnitStoreError(Exception):
    """Raised when a unit cannot be written or read."""
    pass


class UnitNotFoundError(UnitStoreError):
    pass


class UnitFormatError(UnitStoreError):
    """Raised when stored unit content is not a valid unit."""
    pass


def format_address(address: str) -> str:
    """Human readable address, ``J/F/K`` for ``JFK`` and ``/`` for the root."""
    return "/".join(address) or "/"


@dataclass(frozen=True)
class Unit:
    address: str
    airport: Optional[Airport] = None
    exports: Tuple[str, ...] = ()

    def child_address(self, letter: str) -> str:
        return self.address + letter

    def to_json(self) -> str:
        content = {"exports": list(self.exports)}
        if self.airport is not None:
            content["airport"] = self.airport.to_dict()
        return json.dumps(content, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    @classmethod
    def from_json(cls, address: str, text: str) -> "Unit":
        try:
            content = json.loads(text)
            validate(instance=content, schema=UNIT_SCHEMA)
        except json.JSONDecodeError as exc:
            raise UnitFormatError(f"Unit {format_address(address)} is not valid JSON: {exc}") from exc
        except ValidationError as exc:
            raise UnitFormatError(f"Unit {format_address(address)} is invalid: {exc.message}") from exc
        except RecursionError as exc:
            raise UnitFormatError(f"Unit {format_address(address)} is nested too deeply") from exc

        airport = None
        if "airport" in content:
            airport = Airport.from_dict(content["airport"])
            if airport.iata_code != address:
                raise UnitFormatError(
                    f"Unit {format_address(address)} holds airport {airport.iata_code}"
                )
        return cls(address=address, airport=airport, exports=tuple(content["exports"]))
