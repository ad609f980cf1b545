from __future__ import annotations

from .catalog.firestore_store import decode_service_account
from .config import AppConfig
from .errors import ConfigurationError
from .llm.config import LLMConfig


def _present(value: str | None) -> bool:
    return bool(value) and len(value) > 1


def check_environment(config: AppConfig, llm_config: LLMConfig) -> dict:
    """Report which settings are present and usable without revealing their values."""
    firebase_key_exists = bool(config.firebase_service_account_key)
    try:
        decode_service_account(config.firebase_service_account_key)
        firebase_key_parsable = True
    except ConfigurationError:
        firebase_key_parsable = False

    checks = {
        "session_secret": _present(config.session_secret),
        "groq_api_key": _present(llm_config.api_key),
        "firebase_key_exists": firebase_key_exists,
        "firebase_key_parsable": firebase_key_parsable,
        "catalog_path_exists": config.catalog_path.exists(),
    }

    backend = config.catalog_backend.lower()
    problems: list[str] = []
    if not checks["groq_api_key"]:
        problems.append("GROQ_API_KEY is missing; project analysis will use the neutral fallback.")
    if backend == "firestore" and not firebase_key_parsable:
        problems.append("FIREBASE_SERVICE_ACCOUNT_KEY is missing or not valid base64 JSON.")
    if backend == "csv" and not checks["catalog_path_exists"]:
        problems.append(f"Catalog file {config.catalog_path} does not exist.")

    return {
        "catalog_backend": backend,
        "checks": checks,
        "problems": problems,
        "healthy": not problems,
    }
