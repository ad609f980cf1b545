from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Protocol

import pandas as pd
from pydantic import ValidationError

from ..errors import CatalogError
from .models import CatalogMetadata, CategoryCount, ToolProfile

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_CSV = Path(__file__).resolve().parent.parent / "data" / "catalog.csv"

_CSV_COLUMNS = [
    "id",
    "name",
    "category",
    "setup",
    "daily",
    "notable_strengths",
    "integrations",
    "popularity_score",
]


class CatalogStore(Protocol):
    def load_tools(self) -> list[ToolProfile]:
        ...


def parse_records(records: Iterable[dict[str, Any]], source: str) -> list[ToolProfile]:
    """Validate raw records into profiles, failing the whole load on any bad record."""
    tools: list[ToolProfile] = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise CatalogError(f"{source}: record {index} is not a mapping")
        try:
            tools.append(ToolProfile.from_record(record))
        except ValidationError as exc:
            raise CatalogError(f"{source}: record {index} is not a valid tool profile") from exc
    return tools


def summarize(tools: list[ToolProfile]) -> CatalogMetadata:
    counts: dict[str, int] = {}
    for tool in tools:
        counts[tool.category] = counts.get(tool.category, 0) + 1
    return CatalogMetadata(
        total_tools=len(tools),
        categories=[CategoryCount(category=c, count=n) for c, n in sorted(counts.items())],
    )


class InMemoryCatalogStore:
    """Catalog backed by a fixed list of profiles."""

    def __init__(self, tools: Iterable[ToolProfile]) -> None:
        self._tools = list(tools)

    def load_tools(self) -> list[ToolProfile]:
        return list(self._tools)


def _split_list(value: Any) -> list[str]:
    if pd.isna(value):
        return []
    return [part.strip() for part in str(value).split(",") if part.strip()]


class CsvCatalogStore:
    """Catalog read from a CSV file with comma-joined list columns."""

    def __init__(self, path: Path = DEFAULT_CATALOG_CSV) -> None:
        self.path = Path(path)

    def _read(self) -> pd.DataFrame:
        try:
            df = pd.read_csv(self.path, dtype={"id": str})
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
            raise CatalogError(f"could not read catalog CSV {self.path}") from exc

        missing = [c for c in _CSV_COLUMNS if c not in df.columns]
        if missing:
            raise CatalogError(f"catalog CSV {self.path} is missing columns: {', '.join(missing)}")
        return df

    def load_tools(self) -> list[ToolProfile]:
        df = self._read()

        records: list[dict[str, Any]] = []
        for index, row in df.iterrows():
            popularity = row["popularity_score"]
            try:
                skills = {"setup": float(row["setup"]), "daily": float(row["daily"])}
            except (TypeError, ValueError) as exc:
                raise CatalogError(f"{self.path}: row {index} has non-numeric skill levels") from exc
            if any(pd.isna(v) for v in skills.values()):
                raise CatalogError(f"{self.path}: row {index} is missing skill levels")
            records.append({
                "id": str(row["id"]).strip(),
                "name": str(row["name"]).strip(),
                "category": str(row["category"]).strip(),
                "skills": skills,
                "notableStrengths": _split_list(row["notable_strengths"]),
                "integrations": _split_list(row["integrations"]),
                "popularity_score": float(popularity) if pd.notna(popularity) else None,
            })

        tools = parse_records(records, str(self.path))
        logger.info("Loaded %d tools from %s", len(tools), self.path)
        return tools
