"""Configuration models and defaults."""
from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

SOURCES = ("csv", "airportsdata")


@dataclass(frozen=True)
class Config:
    csv_path: Path
    output_path: Path
    source: str = "csv"
    country: Optional[str] = None
    max_file_size_mb: int = 100

    def __post_init__(self) -> None:
        if self.source not in SOURCES:
            raise ValueError(f"Unknown record source '{self.source}', expected one of {SOURCES}")

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @staticmethod
    def default_csv_path() -> Path:
        return Path("data/airports.csv")

    @staticmethod
    def default_output_path() -> Path:
        return Path("data/units")

    @classmethod
    def from_env(cls) -> "Config":
        csv_path = Path(os.getenv("AIRPORT_LOOKUP_CSV") or cls.default_csv_path())
        output_path = Path(os.getenv("AIRPORT_LOOKUP_DATA_DIR") or cls.default_output_path())
        country = os.getenv("AIRPORT_LOOKUP_COUNTRY") or None
        return cls(
            csv_path=csv_path,
            output_path=output_path,
            source=os.getenv("AIRPORT_LOOKUP_SOURCE") or "csv",
            country=country.upper() if country else None,
        )
