"""Logging setup utilities."""
from __future__ import annotations

import logging
import os
from typing import Optional


def debug_enabled() -> bool:
    return os.getenv('AIRPORT_LOOKUP_DEBUG', 'false').lower() == 'true'


def configure_logging(debug: Optional[bool] = None) -> logging.Logger:
    """Configure root logging; ``debug`` overrides AIRPORT_LOOKUP_DEBUG when given."""
    if debug is None:
        debug = debug_enabled()
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    return logging.getLogger('airport_lookup')
