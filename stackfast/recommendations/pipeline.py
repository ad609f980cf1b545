"""
Blueprint generation pipeline.

A run moves strictly forward through::

    Idle -> AnalyzingProject -> LoadingCatalog -> Scoring -> Completing
         -> Deduplicating -> Done

and lands in ``Failed`` from any step when the catalog is unusable or an
unexpected error occurs. Project analysis and catalog loading are issued as
two independent tasks and joined before scoring begins. An analysis failure
never fails the run: the neutral analysis is used instead.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from ..catalog.models import ToolProfile
from ..catalog.store import CatalogStore
from ..errors import CatalogError
from .models import (
    BlueprintRequest,
    BlueprintResult,
    BlueprintWarning,
    Complexity,
    ProjectAnalysis,
    SkillProfile,
)
from .selection import select_stack

logger = logging.getLogger(__name__)

ProjectAnalyzer = Callable[[str], ProjectAnalysis]


class PipelineState(str, Enum):
    idle = "Idle"
    analyzing_project = "AnalyzingProject"
    loading_catalog = "LoadingCatalog"
    scoring = "Scoring"
    completing = "Completing"
    deduplicating = "Deduplicating"
    done = "Done"
    failed = "Failed"


class PipelineRun:
    """State tracker for a single blueprint request."""

    def __init__(self) -> None:
        self.state = PipelineState.idle
        self.history: list[PipelineState] = [PipelineState.idle]
        self.error: BaseException | None = None

    def advance(self, state: PipelineState) -> None:
        if self.state in (PipelineState.done, PipelineState.failed):
            raise RuntimeError(f"cannot leave terminal state {self.state.value}")
        logger.debug("Pipeline %s -> %s", self.state.value, state.value)
        self.state = state
        self.history.append(state)

    def fail(self, error: BaseException) -> None:
        self.error = error
        self.advance(PipelineState.failed)


@dataclass
class BlueprintOutcome:
    """The result plus the diagnostics the application layer records."""

    result: BlueprintResult
    analysis: ProjectAnalysis
    analysis_fallback: bool
    unfilled_categories: list[str] = field(default_factory=list)
    unknown_preferences: list[str] = field(default_factory=list)


async def _analyze(analyzer: ProjectAnalyzer, project_idea: str) -> tuple[ProjectAnalysis, bool]:
    try:
        result = await asyncio.to_thread(analyzer, project_idea)
        if not isinstance(result, ProjectAnalysis):
            result = ProjectAnalysis.model_validate(result)
    except Exception:
        logger.warning("Project analysis failed, using neutral analysis", exc_info=True)
        return ProjectAnalysis.neutral(), True
    return result, False


async def _load_catalog(catalog: CatalogStore) -> list[ToolProfile]:
    try:
        tools = await asyncio.to_thread(catalog.load_tools)
    except CatalogError:
        raise
    except Exception as exc:
        raise CatalogError("catalog store failed") from exc

    if not isinstance(tools, list) or not all(isinstance(t, ToolProfile) for t in tools):
        raise CatalogError("catalog store returned records that are not tool profiles")
    return tools


def build_warnings(
    analysis: ProjectAnalysis,
    analysis_fallback: bool,
    skill_profile: SkillProfile,
    unfilled: list[str],
    unknown: list[str],
) -> list[BlueprintWarning]:
    warnings: list[BlueprintWarning] = []
    if analysis_fallback:
        warnings.append(BlueprintWarning(
            type="AI Analysis",
            message="Project analysis was unavailable; the stack was selected without it.",
        ))
    if analysis.features:
        warnings.append(BlueprintWarning(
            type="AI Analysis",
            message=f"Identified key features: {', '.join(analysis.features)}.",
        ))
    if analysis.technologies:
        warnings.append(BlueprintWarning(
            type="AI Analysis",
            message=f"Required technologies: {', '.join(analysis.technologies)}.",
        ))
    if analysis.complexity == Complexity.high and skill_profile == SkillProfile.beginner:
        warnings.append(BlueprintWarning(
            type="Skill",
            message="This project looks highly complex for a beginner; consider a smaller first milestone.",
        ))
    for category in unfilled:
        warnings.append(BlueprintWarning(
            type="Coverage",
            message=f"No {category} candidate was available in the catalog.",
        ))
    if unknown:
        warnings.append(BlueprintWarning(
            type="Preferences",
            message=f"Preferred tools not found in the catalog: {', '.join(unknown)}.",
        ))
    return warnings


async def generate_blueprint(
    request: BlueprintRequest,
    analyzer: ProjectAnalyzer,
    catalog: CatalogStore,
    weights: dict[str, float] | None = None,
    run: PipelineRun | None = None,
) -> BlueprintOutcome:
    """Run the full pipeline for one request.

    Raises ``CatalogError`` when the catalog cannot be used; any other
    exception is re-raised after the run is marked failed.
    """
    run = run or PipelineRun()
    try:
        run.advance(PipelineState.analyzing_project)
        analysis_task = asyncio.ensure_future(_analyze(analyzer, request.project_idea))
        run.advance(PipelineState.loading_catalog)
        catalog_task = asyncio.ensure_future(_load_catalog(catalog))
        try:
            (analysis, fallback), tools = await asyncio.gather(analysis_task, catalog_task)
        except BaseException:
            analysis_task.cancel()
            raise

        selection = select_stack(
            tools,
            request.preferred_tool_ids,
            skill_profile=request.skill_profile,
            analysis=analysis,
            weights=weights,
            on_stage=lambda stage: run.advance(PipelineState(stage)),
        )
        stack = selection.stack
        unfilled = selection.unfilled_categories
        unknown = selection.unknown_preferences

        result = BlueprintResult(
            summary=(
                f'AI-powered blueprint for "{request.project_idea}". '
                f"Detected complexity: {analysis.complexity.value}."
            ),
            recommended_stack=stack,
            warnings=build_warnings(analysis, fallback, request.skill_profile, unfilled, unknown),
        )
        run.advance(PipelineState.done)
    except BaseException as exc:
        if run.state not in (PipelineState.done, PipelineState.failed):
            run.fail(exc)
        raise

    logger.info(
        "Generated blueprint with %d tools (complexity=%s, fallback=%s)",
        len(stack), analysis.complexity.value, fallback,
    )
    return BlueprintOutcome(
        result=result,
        analysis=analysis,
        analysis_fallback=fallback,
        unfilled_categories=unfilled,
        unknown_preferences=unknown,
    )
