from __future__ import annotations

import time
from typing import Any


class EventStore:
    """In-memory event log owned by one application instance."""

    def __init__(self) -> None:
        self._events: list[dict[str, Any]] = []

    def record_event(self, event_type: str, data: dict[str, Any]) -> None:
        self._events.append({
            "type": event_type,
            "timestamp": time.time(),
            **data,
        })

    def record_generation(
        self,
        *,
        outcome: str,
        response_time_ms: float,
        preferred_ids: list[str],
        complexity: str | None = None,
        analysis_fallback: bool | None = None,
        recommended_ids: list[str] | None = None,
        unfilled_categories: list[str] | None = None,
    ) -> None:
        """Record one blueprint request, successful or not."""
        self.record_event("blueprint", {
            "outcome": outcome,
            "response_time_ms": response_time_ms,
            "preferred_ids": list(preferred_ids),
            "complexity": complexity,
            "analysis_fallback": analysis_fallback,
            "recommended_ids": list(recommended_ids or []),
            "unfilled_categories": list(unfilled_categories or []),
        })

    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def clear(self) -> None:
        self._events.clear()
