import asyncio
import tempfile
import threading
import time
import unittest
from collections import Counter
from pathlib import Path

from airport_lookup.airports import Airport
from airport_lookup.emitter import emit_units
from airport_lookup.lookup import AirportLookup, UnitCache, UnitLoader, resolve_address
from airport_lookup.store import DirectoryUnitStore, MemoryUnitStore, UNIT_FILENAME
from airport_lookup.tree import build_tree

AIRPORTS = [
    Airport("JFK", 40.639801, -73.7789, "US", "US-NY", "New York"),
    Airport("LGA", 40.777199, -73.872597, "US", "US-NY", "New York"),
    Airport("LHR", 51.4706, -0.461941, "GB", "GB-ENG", "London"),
    Airport("JF"),
]


class CountingStore(MemoryUnitStore):
    """Memory store that counts loads and can stall them."""

    def __init__(self, delay=0.0):
        super().__init__()
        self.delay = delay
        self.loads = Counter()
        self._lock = threading.Lock()

    def load(self, address):
        with self._lock:
            self.loads[address] += 1
        if self.delay:
            time.sleep(self.delay)
        return super().load(address)


class UnreachableStore(MemoryUnitStore):
    """Memory store whose reads fail like a dropped connection."""

    def __init__(self):
        super().__init__()
        self.reads = []

    def read(self, address):
        self.reads.append(address)
        raise OSError("connection reset")


def populated(store):
    emit_units(build_tree(AIRPORTS), store)
    return store


class TestResolveAddress(unittest.TestCase):
    def test_address_is_canonical_code(self):
        self.assertEqual(resolve_address("jfk"), "JFK")
        self.assertEqual(resolve_address("JFK"), "JFK")

    def test_empty_code_has_no_address(self):
        self.assertIsNone(resolve_address(""))
        self.assertIsNone(resolve_address(None))


class TestLookupRecord(unittest.IsolatedAsyncioTestCase):
    async def test_every_airport_round_trips(self):
        lookup = AirportLookup(populated(MemoryUnitStore()))
        for airport in AIRPORTS:
            self.assertEqual(await lookup.lookup_record(airport.iata_code), airport)
            self.assertEqual(await lookup.lookup_record(airport.iata_code.lower()), airport)

    async def test_case_insensitive(self):
        lookup = AirportLookup(populated(MemoryUnitStore()))
        self.assertEqual(await lookup.lookup_record("jfk"), await lookup.lookup_record("JFK"))

    async def test_unknown_codes_are_not_found(self):
        lookup = AirportLookup(populated(MemoryUnitStore()))
        for code in ["ORD", "J", "JFKX", "", "   ", "../etc", None, 42]:
            self.assertIsNone(await lookup.lookup_record(code))

    async def test_repeat_lookup_hits_cache(self):
        store = populated(CountingStore())
        lookup = AirportLookup(store)
        first = await lookup.lookup_record("LHR")
        second = await lookup.lookup_record("lhr")
        self.assertEqual(first, second)
        self.assertEqual(store.loads["LHR"], 1)

    async def test_not_found_outcome_is_cached(self):
        store = populated(CountingStore())
        lookup = AirportLookup(store)
        self.assertIsNone(await lookup.lookup_record("ORD"))
        self.assertIsNone(await lookup.lookup_record("ORD"))
        self.assertEqual(store.loads["ORD"], 1)

    async def test_concurrent_lookups_share_one_load(self):
        store = populated(CountingStore(delay=0.05))
        lookup = AirportLookup(store)
        results = await asyncio.gather(*(lookup.lookup_record(code) for code in ["JFK", "jfk", "JFK", "Jfk", "LGA"]))
        self.assertEqual(results[:4], [AIRPORTS[0]] * 4)
        self.assertEqual(results[4], AIRPORTS[1])
        self.assertEqual(store.loads["JFK"], 1)
        self.assertEqual(store.loads["LGA"], 1)

    async def test_lookup_loads_only_the_leaf(self):
        store = populated(CountingStore())
        await AirportLookup(store).lookup_record("JFK")
        self.assertEqual(dict(store.loads), {"JFK": 1})

    async def test_instances_keep_separate_caches(self):
        store = populated(CountingStore())
        await AirportLookup(store).lookup_record("JFK")
        await AirportLookup(store).lookup_record("JFK")
        self.assertEqual(store.loads["JFK"], 2)

    async def test_shared_cache(self):
        store = populated(CountingStore())
        cache = UnitCache()
        await AirportLookup(store, cache).lookup_record("JFK")
        await AirportLookup(store, cache).lookup_record("JFK")
        self.assertEqual(store.loads["JFK"], 1)
        self.assertIn("JFK", cache)

    async def test_malformed_unit_is_not_found(self):
        with tempfile.TemporaryDirectory() as tmp:
            populated(DirectoryUnitStore(Path(tmp)))
            (Path(tmp) / "L" / "H" / "R" / UNIT_FILENAME).write_text("{broken", encoding="utf-8")
            lookup = AirportLookup.from_directory(Path(tmp))
            self.assertIsNone(await lookup.lookup_record("LHR"))
            self.assertEqual(await lookup.lookup_record("LGA"), AIRPORTS[1])

    async def test_deeply_nested_unit_is_not_found(self):
        with tempfile.TemporaryDirectory() as tmp:
            populated(DirectoryUnitStore(Path(tmp)))
            (Path(tmp) / "J" / "F" / "K" / UNIT_FILENAME).write_text("[" * 100000, encoding="utf-8")
            lookup = AirportLookup.from_directory(Path(tmp))
            self.assertIsNone(await lookup.lookup_record("JFK"))
            self.assertIsNone(await lookup.lookup_record("jfk"))
            self.assertEqual(await lookup.lookup_record("JF"), AIRPORTS[3])

    async def test_store_read_error_is_not_found_and_cached(self):
        store = populated(UnreachableStore())
        lookup = AirportLookup(store)
        self.assertIsNone(await lookup.lookup_record("LGA"))
        self.assertIsNone(await lookup.lookup_record("LGA"))
        self.assertEqual(store.reads, ["LGA"])


class TestUnitLoader(unittest.IsolatedAsyncioTestCase):
    async def test_cache_records_failures(self):
        loader = UnitLoader(MemoryUnitStore())
        self.assertIsNone(await loader.load("ORD"))
        self.assertIn("ORD", loader.cache)
        self.assertEqual(len(loader.cache), 1)

    async def test_cache_entry_exists_before_load_finishes(self):
        store = populated(CountingStore(delay=0.05))
        loader = UnitLoader(store)
        pending = asyncio.ensure_future(loader.load("JFK"))
        await asyncio.sleep(0)
        self.assertIn("JFK", loader.cache)
        unit = await pending
        self.assertEqual(unit["JFK"], AIRPORTS[0])


if __name__ == "__main__":
    unittest.main()
