from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ToolCategory(str, Enum):
    language_model = "Language Model"
    code_generation = "Code Generation"
    database = "Database"
    deployment_platform = "Deployment Platform"


# Firestore collection names, one per category family.
CATALOG_COLLECTIONS: list[str] = [
    "ai_models_and_apis",
    "coding_tools",
    "databases",
    "deployment_platforms",
]


class SkillCost(BaseModel):
    model_config = ConfigDict(frozen=True)

    setup: float = Field(..., ge=1, le=5, allow_inf_nan=False)
    daily: float = Field(..., ge=1, le=5, allow_inf_nan=False)

    @property
    def mean(self) -> float:
        return (self.setup + self.daily) / 2


class ToolProfile(BaseModel):
    """A catalog entry. Read-only to the selection pipeline."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    id: str = Field(..., min_length=1)
    name: str
    category: str
    skills: SkillCost
    notable_strengths: list[str] = Field(default_factory=list, alias="notableStrengths")
    integrations: list[str] = Field(default_factory=list)
    popularity_score: float | None = None
    extensions: dict[str, Any] = Field(default_factory=dict)

    @field_validator("popularity_score", mode="before")
    @classmethod
    def _nan_popularity_is_missing(cls, value: Any) -> Any:
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> ToolProfile:
        """Build a profile from a raw store record.

        Keys outside the closed shape are moved into ``extensions`` so they
        never reach scoring.
        """
        known: dict[str, Any] = {}
        extensions: dict[str, Any] = dict(record.get("extensions") or {})
        for key, value in record.items():
            if key == "extensions":
                continue
            if key in _KNOWN_KEYS:
                known[key] = value
            else:
                extensions[key] = value
        return cls(**known, extensions=extensions)


_KNOWN_KEYS = {
    "id",
    "name",
    "category",
    "skills",
    "notableStrengths",
    "notable_strengths",
    "integrations",
    "popularity_score",
}


class CategoryCount(BaseModel):
    category: str
    count: int


class CatalogMetadata(BaseModel):
    total_tools: int
    categories: list[CategoryCount]
