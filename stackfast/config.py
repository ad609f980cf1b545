from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .catalog.store import DEFAULT_CATALOG_CSV

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "stackfast-secret-change-in-production")
    catalog_backend: str = os.getenv("STACKFAST_CATALOG_BACKEND", "csv")
    catalog_path: Path = Path(os.getenv("STACKFAST_CATALOG_PATH", str(DEFAULT_CATALOG_CSV)))
    firebase_service_account_key: str = os.getenv("FIREBASE_SERVICE_ACCOUNT_KEY", "")
    catalog_cache_ttl: float = float(os.getenv("STACKFAST_CATALOG_TTL", "300"))


DEFAULT_APP_CONFIG = AppConfig()
