"""Airport records and the upstream providers that produce them."""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import airportsdata
import pandas as pd

from .config import Config

CODE_PATTERN = re.compile(r'^[A-Z0-9]+$')

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Airport:
    iata_code: str
    latitude_deg: Optional[float] = None
    longitude_deg: Optional[float] = None
    iso_country: Optional[str] = None
    iso_region: Optional[str] = None
    municipality: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Airport":
        return cls(**{name: data.get(name) for name in AIRPORT_FIELDS})


AIRPORT_FIELDS = tuple(f.name for f in fields(Airport))


def normalize_code(code) -> Optional[str]:
    """Canonical form of an airport code, or None when there is nothing to key on."""
    if not code or not isinstance(code, str):
        return None
    code = code.strip().upper()
    return code or None


def _clean_text(val) -> Optional[str]:
    if val is None or pd.isna(val):
        return None
    text = str(val).strip()
    return text or None


def _clean_float(val) -> Optional[float]:
    if val is None or pd.isna(val):
        return None
    return float(val)


def filter_valid(airports: Iterable[Airport], country: Optional[str] = None) -> List[Airport]:
    """Drop records the prefix tree cannot key, optionally keeping one country."""
    valid = []
    for airport in airports:
        if not CODE_PATTERN.match(airport.iata_code):
            logger.warning("Skipping airport with unusable code %r", airport.iata_code)
            continue
        if country and airport.iso_country != country:
            continue
        valid.append(airport)
    return valid


def load_airports_csv(
    csv_path: Path,
    max_file_size_bytes: Optional[int] = None,
    country: Optional[str] = None,
) -> List[Airport]:
    """Read an OurAirports-style CSV into Airport records.

    Rows without an IATA code are skipped. Coordinates are coerced to floats
    and blank text columns become None.
    """
    file_size = csv_path.stat().st_size
    if max_file_size_bytes is not None and file_size > max_file_size_bytes:
        raise ValueError(
            f"File {csv_path.name} exceeds size limit "
            f"({file_size / 1024 / 1024:.1f}MB > {max_file_size_bytes / 1024 / 1024:.0f}MB)"
        )

    logger.info("Loading: %s (%.1fMB)", csv_path.name, file_size / 1024 / 1024)
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, encoding='utf-8')
    if 'iata_code' not in df.columns:
        raise ValueError(f"{csv_path.name} has no 'iata_code' column")

    for col in AIRPORT_FIELDS:
        if col not in df.columns:
            df[col] = None
    for col in ('latitude_deg', 'longitude_deg'):
        df[col] = pd.to_numeric(df[col], errors='coerce')

    df['iata_code'] = df['iata_code'].fillna('').str.strip().str.upper()
    with_code = df[df['iata_code'] != '']
    logger.info("  %s of %s rows carry an IATA code", len(with_code), len(df))

    airports = [
        Airport(
            iata_code=row['iata_code'],
            latitude_deg=_clean_float(row['latitude_deg']),
            longitude_deg=_clean_float(row['longitude_deg']),
            iso_country=_clean_text(row['iso_country']),
            iso_region=_clean_text(row['iso_region']),
            municipality=_clean_text(row['municipality']),
        )
        for row in with_code.to_dict('records')
    ]
    return filter_valid(airports, country)


def load_airportsdata_records(country: Optional[str] = None) -> List[Airport]:
    """Build records from the bundled airportsdata IATA table.

    airportsdata carries no ISO region code, so ``iso_region`` stays empty.
    """
    all_airports = airportsdata.load('IATA')
    airports = [
        Airport(
            iata_code=code.upper(),
            latitude_deg=_clean_float(data.get('lat')),
            longitude_deg=_clean_float(data.get('lon')),
            iso_country=_clean_text(data.get('country')),
            municipality=_clean_text(data.get('city')),
        )
        for code, data in all_airports.items()
        if code
    ]
    logger.info("Loaded %s airports from airportsdata", len(airports))
    return filter_valid(airports, country)


def load_records(config: Config) -> List[Airport]:
    if config.source == 'airportsdata':
        return load_airportsdata_records(config.country)
    return load_airports_csv(config.csv_path, config.max_file_size_bytes, config.country)
