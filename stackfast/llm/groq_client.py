from __future__ import annotations

import json
import logging

from groq import Groq
from pydantic import ValidationError

from ..errors import AnalysisError
from ..recommendations.models import ProjectAnalysis
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a senior software architect. "
    "Given a short project idea, identify the key product features, "
    "the technologies the project will need, and its overall complexity.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"features": ["<feature>"], "technologies": ["<technology>"], '
    '"complexity": "Low" | "Moderate" | "High"}\n'
    "Use short noun phrases. Name concrete technologies (e.g. PostgreSQL, "
    "Next.js, GPT-4o) when the idea implies them."
)


def _strip_code_fences(text: str) -> str:
    return text.replace("```json", "").replace("```", "").strip()


class GroqProjectAnalyzer:
    """Callable project-analysis collaborator backed by the Groq chat API."""

    def __init__(self, config: LLMConfig = DEFAULT_LLM_CONFIG) -> None:
        self.config = config

    @property
    def available(self) -> bool:
        return self.config.enabled and bool(self.config.api_key)

    def __call__(self, project_idea: str) -> ProjectAnalysis:
        if not self.available:
            raise AnalysisError("Groq analysis is disabled or GROQ_API_KEY is not set")

        try:
            client = Groq(api_key=self.config.api_key, timeout=self.config.timeout)
            response = client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": f"Project idea: {project_idea}"},
                ],
                max_tokens=self.config.max_tokens,
                temperature=0.2,
                response_format={"type": "json_object"},
            )
        except Exception as exc:
            raise AnalysisError("Groq request failed") from exc

        content = response.choices[0].message.content or ""
        try:
            parsed = json.loads(_strip_code_fences(content))
            analysis = ProjectAnalysis.model_validate(parsed)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise AnalysisError("Groq returned an unusable analysis") from exc

        logger.debug(
            "Analysis: %d features, %d technologies, complexity %s",
            len(analysis.features), len(analysis.technologies), analysis.complexity.value,
        )
        return analysis
