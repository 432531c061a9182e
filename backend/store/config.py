from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class StoreConfig:
    seed_path: Path = Path(__file__).resolve().parent.parent / "data" / "restaurants.csv"
    seed_on_open: bool = True


DEFAULT_STORE_CONFIG = StoreConfig()
