from __future__ import annotations

import base64
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from stackfast.catalog.cache import CachedCatalogStore
from stackfast.catalog.firestore_store import FirestoreCatalogStore
from stackfast.catalog.store import CsvCatalogStore
from stackfast.config import AppConfig
from stackfast.diagnostics import check_environment
from stackfast.errors import ConfigurationError
from stackfast.llm.config import LLMConfig
from stackfast.llm.groq_client import GroqProjectAnalyzer
from stackfast.services import build_catalog, build_services

SERVICE_ACCOUNT = base64.b64encode(json.dumps({"project_id": "stackfast-dev"}).encode()).decode()


def test_csv_catalog_is_cached_by_default():
    catalog = build_catalog(AppConfig(catalog_backend="csv", catalog_cache_ttl=300))
    assert isinstance(catalog, CachedCatalogStore)
    assert isinstance(catalog.inner, CsvCatalogStore)


def test_zero_ttl_disables_cache():
    catalog = build_catalog(AppConfig(catalog_backend="CSV", catalog_cache_ttl=0))
    assert isinstance(catalog, CsvCatalogStore)


def test_unknown_backend():
    with pytest.raises(ConfigurationError):
        build_catalog(AppConfig(catalog_backend="mysql"))


def test_firestore_backend_requires_key():
    with pytest.raises(ConfigurationError):
        build_catalog(AppConfig(catalog_backend="firestore", firebase_service_account_key=""))


@patch("stackfast.services.firestore_client_from_key")
def test_firestore_backend(mock_client_factory):
    config = AppConfig(
        catalog_backend="firestore",
        firebase_service_account_key=SERVICE_ACCOUNT,
        catalog_cache_ttl=0,
    )
    catalog = build_catalog(config)
    assert isinstance(catalog, FirestoreCatalogStore)
    mock_client_factory.assert_called_once_with(SERVICE_ACCOUNT)
    assert catalog.client is mock_client_factory.return_value


def test_build_services_uses_groq_analyzer():
    services = build_services(AppConfig(), LLMConfig(api_key="", enabled=True))
    assert isinstance(services.analyzer, GroqProjectAnalyzer)
    assert services.analyzer.available is False
    assert services.blueprints.list_for("user") == []


# ── Diagnostics ──────────────────────────────────────────────────────────


def test_diagnostics_healthy_csv_setup():
    report = check_environment(AppConfig(catalog_backend="csv"), LLMConfig(api_key="gsk_test"))
    assert report["healthy"] is True
    assert report["checks"]["groq_api_key"] is True
    assert "gsk_test" not in json.dumps(report)


def test_diagnostics_flags_missing_pieces():
    config = AppConfig(
        catalog_backend="firestore",
        firebase_service_account_key="garbage",
        catalog_path=Path("/nonexistent/catalog.csv"),
    )
    report = check_environment(config, LLMConfig(api_key=""))
    assert report["healthy"] is False
    assert report["checks"]["firebase_key_exists"] is True
    assert report["checks"]["firebase_key_parsable"] is False
    assert len(report["problems"]) == 2


def test_diagnostics_parsable_firebase_key():
    config = AppConfig(catalog_backend="firestore", firebase_service_account_key=SERVICE_ACCOUNT)
    report = check_environment(config, LLMConfig(api_key="gsk_test"))
    assert report["checks"]["firebase_key_parsable"] is True
    assert report["healthy"] is True
