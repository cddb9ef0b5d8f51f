from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LookupConfig:
    timeout: float = float(os.getenv("FOODMAP_LOOKUP_TIMEOUT", "10.0"))
    single_flight: bool = os.getenv("FOODMAP_SINGLE_FLIGHT", "1") not in ("0", "false", "False")
    max_batch_entities: int = 50
    refresh_batch_size: int = 10
    refresh_delay: float = 2.0


DEFAULT_LOOKUP_CONFIG = LookupConfig()
