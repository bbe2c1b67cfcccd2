"""Prefix tree over airport codes, built once per generation run."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from .airports import Airport

logger = logging.getLogger(__name__)


class PrefixNode:
    __slots__ = ("children", "airport")

    def __init__(self):
        self.children: Dict[str, "PrefixNode"] = {}
        self.airport: Optional[Airport] = None


def build_tree(airports: Iterable[Airport]) -> PrefixNode:
    """Insert every airport under its code; a repeated code replaces the earlier record."""
    root = PrefixNode()
    inserted = 0
    duplicates = 0
    for airport in airports:
        node = root
        for letter in airport.iata_code:
            child = node.children.get(letter)
            if child is None:
                child = node.children[letter] = PrefixNode()
            node = child
        if node.airport is not None:
            duplicates += 1
            logger.warning("Duplicate code %s: replacing %s with %s", airport.iata_code, node.airport, airport)
        node.airport = airport
        inserted += 1

    if duplicates:
        logger.warning("%s duplicate code(s) overwritten; %s distinct airports kept", duplicates, inserted - duplicates)
    logger.info("Built prefix tree from %s airport records", inserted)
    return root
