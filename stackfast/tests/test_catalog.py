from __future__ import annotations

import base64
import json
import threading
import time
from unittest.mock import MagicMock

import pytest

from stackfast.catalog.cache import CachedCatalogStore
from stackfast.catalog.firestore_store import FirestoreCatalogStore, decode_service_account
from stackfast.catalog.models import CATALOG_COLLECTIONS, ToolProfile
from stackfast.catalog.store import CsvCatalogStore, InMemoryCatalogStore, parse_records, summarize
from stackfast.errors import CatalogError, ConfigurationError

HEADER = "id,name,category,setup,daily,notable_strengths,integrations,popularity_score\n"


# ── ToolProfile ──────────────────────────────────────────────────────────


def test_unknown_fields_move_to_extensions():
    tool = ToolProfile.from_record({
        "id": "supabase",
        "name": "Supabase",
        "category": "Database",
        "skills": {"setup": 2, "daily": 2},
        "notableStrengths": ["postgres"],
        "pricing": "free tier",
        "website": "https://supabase.com",
    })
    assert tool.notable_strengths == ["postgres"]
    assert tool.extensions == {"pricing": "free tier", "website": "https://supabase.com"}


def test_skill_levels_are_bounded():
    with pytest.raises(ValueError):
        ToolProfile(id="x", name="X", category="Database", skills={"setup": 9, "daily": 1})


def test_fractional_skill_levels_are_kept():
    tools = parse_records(
        [
            {"id": "a", "name": "A", "category": "Database", "skills": {"setup": 2, "daily": 2}},
            {"id": "b", "name": "B", "category": "Database", "skills": {"setup": 2.5, "daily": 1}},
        ],
        "firestore",
    )
    assert tools[1].skills.setup == 2.5
    assert tools[1].skills.mean == 1.75


def test_nan_popularity_is_treated_as_missing():
    tool = ToolProfile(
        id="x", name="X", category="Database",
        skills={"setup": 1, "daily": 1}, popularity_score=float("nan"),
    )
    assert tool.popularity_score is None


# ── CSV store ────────────────────────────────────────────────────────────


def test_bundled_catalog_loads():
    tools = CsvCatalogStore().load_tools()
    ids = [t.id for t in tools]
    assert len(ids) == len(set(ids))
    categories = {t.category for t in tools}
    assert {"Language Model", "Code Generation", "Database", "Deployment Platform"} <= categories

    supabase = next(t for t in tools if t.id == "supabase")
    assert "vercel" in supabase.integrations
    assert supabase.skills.setup == 2


def test_csv_optional_columns_may_be_empty(tmp_path):
    path = tmp_path / "tools.csv"
    path.write_text(HEADER + "sqlite,SQLite,Database,1,1,,,\n")
    tool = CsvCatalogStore(path).load_tools()[0]
    assert tool.notable_strengths == []
    assert tool.integrations == []
    assert tool.popularity_score is None


def test_csv_fractional_skill_levels_match_document_stores(tmp_path):
    path = tmp_path / "tools.csv"
    path.write_text(HEADER + "sqlite,SQLite,Database,2.5,1,,,\n")
    assert CsvCatalogStore(path).load_tools()[0].skills.setup == 2.5


def test_csv_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        CsvCatalogStore(tmp_path / "absent.csv").load_tools()


def test_csv_missing_columns(tmp_path):
    path = tmp_path / "tools.csv"
    path.write_text("id,name\nx,X\n")
    with pytest.raises(CatalogError, match="missing columns"):
        CsvCatalogStore(path).load_tools()


def test_csv_bad_skill_levels(tmp_path):
    path = tmp_path / "tools.csv"
    path.write_text(HEADER + "x,X,Database,,2,,,10\n")
    with pytest.raises(CatalogError):
        CsvCatalogStore(path).load_tools()


def test_summarize_counts_categories():
    tools = CsvCatalogStore().load_tools()
    meta = summarize(tools)
    assert meta.total_tools == len(tools)
    assert sum(c.count for c in meta.categories) == len(tools)


# ── Firestore store ──────────────────────────────────────────────────────


def _doc(doc_id, data):
    doc = MagicMock()
    doc.id = doc_id
    doc.to_dict.return_value = data
    return doc


def test_firestore_reads_every_collection():
    client = MagicMock()
    client.collection.return_value.stream.side_effect = [
        [_doc("gpt-4o", {"name": "GPT-4o", "category": "Language Model", "skills": {"setup": 2, "daily": 2}})],
        [],
        [_doc("supabase", {"id": "supabase", "name": "Supabase", "category": "Database",
                           "skills": {"setup": 2, "daily": 2}, "region": "eu"})],
        [],
    ]

    tools = FirestoreCatalogStore(client).load_tools()

    assert [c.args[0] for c in client.collection.call_args_list] == CATALOG_COLLECTIONS
    assert [t.id for t in tools] == ["gpt-4o", "supabase"]
    assert tools[1].extensions == {"region": "eu"}


def test_firestore_errors_become_catalog_errors():
    client = MagicMock()
    client.collection.return_value.stream.side_effect = RuntimeError("permission denied")
    with pytest.raises(CatalogError):
        FirestoreCatalogStore(client).load_tools()


def test_firestore_invalid_document():
    client = MagicMock()
    client.collection.return_value.stream.return_value = [_doc("broken", {"name": "No category"})]
    with pytest.raises(CatalogError):
        FirestoreCatalogStore(client, collections=["databases"]).load_tools()


def test_decode_service_account():
    info = {"project_id": "stackfast-dev", "type": "service_account"}
    encoded = base64.b64encode(json.dumps(info).encode()).decode()
    assert decode_service_account(encoded) == info


@pytest.mark.parametrize("value", [
    "",
    None,
    "not base64!",
    base64.b64encode(b"not json").decode(),
    base64.b64encode(json.dumps({"type": "service_account"}).encode()).decode(),
])
def test_decode_service_account_rejects_bad_keys(value):
    with pytest.raises(ConfigurationError):
        decode_service_account(value)


# ── Cache ────────────────────────────────────────────────────────────────


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _counting_store(tools):
    store = MagicMock()
    store.load_tools.side_effect = lambda: list(tools)
    return store


def test_cache_miss_then_hit():
    tools = CsvCatalogStore().load_tools()
    inner = _counting_store(tools)
    cache = CachedCatalogStore(inner, ttl=60, clock=_Clock())

    assert cache.load_tools() == tools
    assert cache.load_tools() == tools
    assert inner.load_tools.call_count == 1
    stats = cache.stats()
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0


def test_cache_expires_after_ttl():
    clock = _Clock()
    inner = _counting_store(InMemoryCatalogStore([]).load_tools())
    cache = CachedCatalogStore(inner, ttl=60, clock=clock)

    cache.load_tools()
    clock.now += 61
    cache.load_tools()
    assert inner.load_tools.call_count == 2


def test_cache_does_not_keep_failures():
    inner = MagicMock()
    inner.load_tools.side_effect = [CatalogError("down"), []]
    cache = CachedCatalogStore(inner, ttl=60, clock=_Clock())

    with pytest.raises(CatalogError):
        cache.load_tools()
    assert cache.load_tools() == []
    assert cache.stats()["misses"] == 2


def test_cache_clear_resets_stats():
    cache = CachedCatalogStore(_counting_store([]), ttl=60, clock=_Clock())
    cache.load_tools()
    cache.clear()
    assert cache.stats() == {"cached": False, "size": 0, "hits": 0, "misses": 0, "hit_rate": 0.0}


def test_concurrent_misses_load_once():
    barrier = threading.Barrier(4, timeout=5)
    inner = MagicMock()

    def slow_load():
        time.sleep(0.05)
        return []

    inner.load_tools.side_effect = slow_load
    cache = CachedCatalogStore(inner, ttl=60)

    def worker():
        barrier.wait()
        cache.load_tools()

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert inner.load_tools.call_count == 1
    stats = cache.stats()
    assert stats["misses"] == 1
    assert stats["hits"] == 3
