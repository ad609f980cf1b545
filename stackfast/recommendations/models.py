from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..catalog.models import ToolProfile


class SkillProfile(IntEnum):
    beginner = 1
    moderate = 2
    expert = 3


class Complexity(str, Enum):
    low = "Low"
    moderate = "Moderate"
    high = "High"


class ProjectAnalysis(BaseModel):
    features: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    complexity: Complexity = Complexity.moderate

    @classmethod
    def neutral(cls) -> ProjectAnalysis:
        return cls()


class BlueprintRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    project_idea: str = Field(..., alias="projectIdea", min_length=1)
    skill_profile: SkillProfile = Field(default=SkillProfile.moderate, alias="skillProfile")
    preferred_tool_ids: list[str] = Field(default_factory=list, alias="preferredToolIds")

    @field_validator("project_idea")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("projectIdea is required.")
        return value


class BlueprintWarning(BaseModel):
    type: str
    message: str


class BlueprintResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    summary: str
    recommended_stack: list[ToolProfile] = Field(default_factory=list, alias="recommendedStack")
    warnings: list[BlueprintWarning] = Field(default_factory=list)


class ScoredTool(BaseModel):
    """A tool paired with its score for the duration of one request."""

    model_config = ConfigDict(frozen=True)

    tool: ToolProfile
    score: float = 0.0

    @property
    def id(self) -> str:
        return self.tool.id

    @property
    def category(self) -> str:
        return self.tool.category
