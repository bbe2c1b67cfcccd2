"""Unit emission: one stored unit per prefix-tree node."""
from __future__ import annotations

import logging

from .store import UnitStore
from .tree import PrefixNode
from .units import Unit, format_address

logger = logging.getLogger(__name__)


def node_unit(node: PrefixNode, address: str) -> Unit:
    return Unit(address=address, airport=node.airport, exports=tuple(sorted(node.children)))


def emit_units(node: PrefixNode, store: UnitStore, address: str = "") -> int:
    """Write the unit for ``node`` and everything below it; return the unit count.

    Children are emitted before their parent, in sorted letter order, so
    repeated runs write identical units in an identical sequence. Store
    errors propagate and leave whatever was already written in place.
    """
    count = 0
    for letter in sorted(node.children):
        count += emit_units(node.children[letter], store, address + letter)

    unit = node_unit(node, address)
    store.create(unit)
    logger.debug(
        "Emitted unit %s (%s, %s export(s))",
        format_address(address),
        unit.airport.iata_code if unit.airport else "no airport",
        len(unit.exports),
    )
    return count + 1
