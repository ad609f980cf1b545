from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .analytics.store import EventStore
from .blueprints.store import BlueprintStore
from .catalog.cache import CachedCatalogStore
from .catalog.firestore_store import FirestoreCatalogStore, firestore_client_from_key
from .catalog.store import CatalogStore, CsvCatalogStore
from .config import DEFAULT_APP_CONFIG, AppConfig
from .errors import ConfigurationError
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .llm.groq_client import GroqProjectAnalyzer
from .recommendations.pipeline import ProjectAnalyzer

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Collaborators shared by every request of one application instance."""

    analyzer: ProjectAnalyzer
    catalog: CatalogStore
    blueprints: BlueprintStore = field(default_factory=BlueprintStore)
    events: EventStore = field(default_factory=EventStore)
    weights: dict[str, float] | None = None


def build_catalog(config: AppConfig) -> CatalogStore:
    backend = config.catalog_backend.lower()
    if backend == "csv":
        inner: CatalogStore = CsvCatalogStore(config.catalog_path)
    elif backend == "firestore":
        inner = FirestoreCatalogStore(firestore_client_from_key(config.firebase_service_account_key))
    else:
        raise ConfigurationError(f"Unknown catalog backend {config.catalog_backend!r}")

    if config.catalog_cache_ttl > 0:
        return CachedCatalogStore(inner, ttl=config.catalog_cache_ttl)
    return inner


def build_services(
    config: AppConfig = DEFAULT_APP_CONFIG,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> Services:
    """Construct the default collaborators once, at application start."""
    analyzer = GroqProjectAnalyzer(llm_config)
    catalog = build_catalog(config)
    logger.info(
        "Services ready: catalog=%s, llm=%s",
        config.catalog_backend, "enabled" if analyzer.available else "disabled",
    )
    return Services(analyzer=analyzer, catalog=catalog)
