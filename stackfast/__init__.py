"""
StackFast: AI-assisted technology stack blueprints.

Responsibilities:
- Accept a free-text project idea, a skill profile and preferred tools.
- Analyse the idea with an LLM and load the tool catalog.
- Select a de-duplicated stack covering the essential categories.
- Serve the result over a session-authenticated FastAPI application.
"""
