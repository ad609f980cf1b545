"""
Stack recommendation engine.

Responsibilities:
- Split the catalog into user-preferred and remaining tools.
- Score remaining tools with deterministic heuristics.
- Backfill essential categories and de-duplicate the stack.
- Orchestrate analysis and catalog loading into a single blueprint run.
"""
