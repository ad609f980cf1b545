from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from ..recommendations.models import BlueprintResult

_PROJECT_NAME_LIMIT = 80


class SavedBlueprint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    project_name: str = Field(..., alias="projectName")
    created_at: str = Field(..., alias="createdAt")
    owner: str
    blueprint_data: BlueprintResult = Field(..., alias="blueprintData")


def project_name_from_idea(project_idea: str) -> str:
    lines = project_idea.strip().splitlines()
    first_line = lines[0].strip() if lines else ""
    if len(first_line) <= _PROJECT_NAME_LIMIT:
        return first_line
    return first_line[: _PROJECT_NAME_LIMIT - 1].rstrip() + "…"


class BlueprintStore:
    """In-memory blueprint history keyed by owner."""

    def __init__(self) -> None:
        self._items: list[SavedBlueprint] = []

    def save(self, owner: str, project_idea: str, blueprint: BlueprintResult) -> SavedBlueprint:
        saved = SavedBlueprint(
            id=uuid.uuid4().hex,
            project_name=project_name_from_idea(project_idea),
            created_at=datetime.now(timezone.utc).isoformat(),
            owner=owner,
            blueprint_data=blueprint,
        )
        self._items.append(saved)
        return saved

    def list_for(self, owner: str) -> list[SavedBlueprint]:
        return [b for b in reversed(self._items) if b.owner == owner]

    def clear(self) -> None:
        self._items.clear()
