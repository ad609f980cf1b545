from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Sequence

from ..catalog.models import ToolCategory, ToolProfile
from .models import ProjectAnalysis, ScoredTool, SkillProfile

ESSENTIAL_CATEGORIES: list[str] = [
    ToolCategory.language_model.value,
    ToolCategory.database.value,
    ToolCategory.deployment_platform.value,
]
SECONDARY_CATEGORIES: list[str] = [ToolCategory.code_generation.value]

DEFAULT_WEIGHTS: dict[str, float] = {
    "popularity": 0.4,
    "skill": 0.3,
    "integration": 0.2,
    "technology": 0.1,
}

# Highest mean effort (setup + daily, 1-5 scale) each profile takes on comfortably.
_EFFORT_CEILING: dict[SkillProfile, float] = {
    SkillProfile.beginner: 2.0,
    SkillProfile.moderate: 3.5,
    SkillProfile.expert: 5.0,
}


@dataclass
class ScoringContext:
    skill_profile: SkillProfile = SkillProfile.moderate
    analysis: ProjectAnalysis = field(default_factory=ProjectAnalysis.neutral)
    selected: list[ToolProfile] = field(default_factory=list)


# ── Preference splitting ─────────────────────────────────────────────────


def split_preferences(
    tools: Sequence[ToolProfile],
    preferred_ids: Iterable[str],
) -> tuple[list[ToolProfile], list[ToolProfile]]:
    """Partition the catalog into preferred and remaining tools, keeping catalog order."""
    wanted = set(preferred_ids)
    preferred = [t for t in tools if t.id in wanted]
    remaining = [t for t in tools if t.id not in wanted]
    return preferred, remaining


def unknown_preferences(tools: Sequence[ToolProfile], preferred_ids: Iterable[str]) -> list[str]:
    known = {t.id for t in tools}
    missing: list[str] = []
    for tool_id in preferred_ids:
        if tool_id not in known and tool_id not in missing:
            missing.append(tool_id)
    return missing


# ── Scoring ──────────────────────────────────────────────────────────────


def _popularity_score(tool: ToolProfile) -> float:
    if tool.popularity_score is None:
        return 0.0
    return max(0.0, min(1.0, tool.popularity_score / 100.0))


def _skill_score(tool: ToolProfile, skill_profile: SkillProfile) -> float:
    excess = max(0.0, tool.skills.mean - _EFFORT_CEILING[skill_profile])
    return max(0.0, 1.0 - excess / 2.0)


def _integration_score(tool: ToolProfile, selected: Sequence[ToolProfile]) -> float:
    if not selected:
        return 0.0
    integrations = {i.lower() for i in tool.integrations}
    matches = sum(
        1 for s in selected
        if s.id.lower() in integrations or s.name.lower() in integrations
    )
    return matches / len(selected)


def _technology_score(tool: ToolProfile, technologies: Sequence[str]) -> float:
    names = {tool.id.lower(), tool.name.lower()}
    for tech in technologies:
        tech_lower = tech.strip().lower()
        if not tech_lower:
            continue
        if any(re.search(rf"(?<!\w){re.escape(n)}(?!\w)", tech_lower) for n in names):
            return 1.0
    return 0.0


def score_tool(
    tool: ToolProfile,
    context: ScoringContext,
    weights: dict[str, float] | None = None,
) -> float:
    """Compute a weighted suitability score for a single tool."""
    w = weights or DEFAULT_WEIGHTS
    score = (
        w.get("popularity", 0.0) * _popularity_score(tool)
        + w.get("skill", 0.0) * _skill_score(tool, context.skill_profile)
        + w.get("integration", 0.0) * _integration_score(tool, context.selected)
        + w.get("technology", 0.0) * _technology_score(tool, context.analysis.technologies)
    )
    return round(score, 4)


def score_tools(
    tools: Sequence[ToolProfile],
    context: ScoringContext,
    weights: dict[str, float] | None = None,
) -> list[ScoredTool]:
    """Score and rank tools, best first. Equal scores keep catalog order."""
    scored = [ScoredTool(tool=t, score=score_tool(t, context, weights)) for t in tools]
    return sorted(scored, key=lambda s: s.score, reverse=True)


# ── Category completion ──────────────────────────────────────────────────


def _profile(item: ToolProfile | ScoredTool) -> ToolProfile:
    return item.tool if isinstance(item, ScoredTool) else item


def complete_categories(
    selected: list[ToolProfile | ScoredTool],
    scored: Sequence[ScoredTool],
    categories: Sequence[str],
) -> list[str]:
    """Backfill ``selected`` in place with the best candidate for each missing category.

    Returns the categories that had no candidate left to fill them.
    """
    unfilled: list[str] = []
    for category in categories:
        if any(_profile(s).category == category for s in selected):
            continue
        taken = {_profile(s).id for s in selected}
        best = next(
            (c for c in scored if c.category == category and c.id not in taken),
            None,
        )
        if best is not None:
            selected.append(best)
        else:
            unfilled.append(category)
    return unfilled


# ── De-duplication ───────────────────────────────────────────────────────


def deduplicate(items: Iterable[ToolProfile | ScoredTool]) -> list[ToolProfile]:
    """Keep the first occurrence of each tool id and drop transient scores."""
    seen: set[str] = set()
    unique: list[ToolProfile] = []
    for item in items:
        tool = _profile(item)
        if tool.id in seen:
            continue
        seen.add(tool.id)
        unique.append(tool)
    return unique


@dataclass
class Selection:
    stack: list[ToolProfile]
    unfilled_categories: list[str]
    unknown_preferences: list[str]


def select_stack(
    tools: Sequence[ToolProfile],
    preferred_ids: Sequence[str],
    skill_profile: SkillProfile = SkillProfile.moderate,
    analysis: ProjectAnalysis | None = None,
    weights: dict[str, float] | None = None,
    on_stage: Callable[[str], None] | None = None,
) -> Selection:
    """Split, score, complete and de-duplicate the catalog into a stack.

    ``on_stage`` is called with ``"Scoring"``, ``"Completing"`` and
    ``"Deduplicating"`` as each stage begins.
    """
    notify = on_stage or (lambda stage: None)

    notify("Scoring")
    preferred, remaining = split_preferences(tools, preferred_ids)
    context = ScoringContext(
        skill_profile=skill_profile,
        analysis=analysis or ProjectAnalysis.neutral(),
        selected=list(preferred),
    )
    scored = score_tools(remaining, context, weights)

    notify("Completing")
    accumulator: list[ToolProfile | ScoredTool] = list(preferred)
    unfilled = complete_categories(accumulator, scored, ESSENTIAL_CATEGORIES)
    unfilled += complete_categories(accumulator, scored, SECONDARY_CATEGORIES)

    notify("Deduplicating")
    return Selection(
        stack=deduplicate(accumulator),
        unfilled_categories=unfilled,
        unknown_preferences=unknown_preferences(tools, preferred_ids),
    )
