from __future__ import annotations

from collections import Counter
from typing import Any


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    generations = [e for e in events if e["type"] == "blueprint"]
    total = len(generations)
    succeeded = [g for g in generations if g.get("outcome") == "ok"]
    failed = total - len(succeeded)

    # Average response time
    times = [g["response_time_ms"] for g in generations if "response_time_ms" in g]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Complexity distribution
    complexity_counter: Counter[str] = Counter()
    for g in succeeded:
        complexity_counter[g.get("complexity") or "unknown"] += 1

    # Analysis fallback rate
    fallbacks = sum(1 for g in succeeded if g.get("analysis_fallback"))
    fallback_rate = round(fallbacks / len(succeeded) * 100, 1) if succeeded else 0.0

    # Top recommended / preferred tools
    recommended_counter: Counter[str] = Counter()
    preferred_counter: Counter[str] = Counter()
    gap_counter: Counter[str] = Counter()
    for g in generations:
        for tool_id in g.get("recommended_ids", []) or []:
            recommended_counter[tool_id] += 1
        for tool_id in g.get("preferred_ids", []) or []:
            preferred_counter[tool_id] += 1
        for category in g.get("unfilled_categories", []) or []:
            gap_counter[category] += 1

    return {
        "total_generations": total,
        "failed_generations": failed,
        "avg_response_time_ms": avg_time,
        "complexity_distribution": dict(complexity_counter),
        "analysis_fallback_rate": fallback_rate,
        "top_recommended_tools": [
            {"id": n, "count": c} for n, c in recommended_counter.most_common(10)
        ],
        "top_preferred_tools": [
            {"id": n, "count": c} for n, c in preferred_counter.most_common(10)
        ],
        "unfilled_categories": dict(gap_counter),
    }
