"""Generation run: airport records in, one stored unit per code prefix out."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from .airports import Airport, load_records
from .config import Config
from .emitter import emit_units
from .security import SecurityError, validate_folder_path
from .store import DirectoryUnitStore, UnitStore
from .tree import build_tree

logger = logging.getLogger(__name__)


def generate(
    config: Config,
    airports: Optional[Iterable[Airport]] = None,
    store: Optional[UnitStore] = None,
) -> int:
    """Replace every unit in the store with units built from ``airports``.

    Records come from the configured provider when ``airports`` is None and
    units go to ``config.output_path`` when ``store`` is None. Returns the
    number of units written. Any failure aborts the run; rerun to recover.
    """
    try:
        logger.info("=== Starting airport unit generation ===")
        if store is None:
            validate_folder_path(config.output_path)
            store = DirectoryUnitStore(config.output_path)
        if airports is None:
            airports = load_records(config)

        root = build_tree(airports)
        store.clear()
        unit_count = emit_units(root, store)
        logger.info("Emitted %s units to %s", unit_count, store)
        return unit_count
    except SecurityError as exc:
        logger.critical("Security validation failed: %s", exc)
        raise
    except Exception as exc:
        logger.error("Generation failed: %s", exc, exc_info=True)
        raise
    finally:
        logger.info("=== Generation finished ===")
