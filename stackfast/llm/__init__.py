"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Build the project-analysis prompt from a free-text project idea.
- Call Groq in JSON mode and validate the returned analysis.
- Raise AnalysisError on any failure so callers can fall back to a neutral analysis.
"""
