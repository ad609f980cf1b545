"""
Generation analytics.

Responsibilities:
- Record one event per blueprint request.
- Aggregate events into operator-facing statistics.
"""
