"""
Tool catalog layer.

Responsibilities:
- Define the closed ToolProfile record shared by every catalog backend.
- Load tools from the bundled CSV seed or from Firestore collections.
- Cache catalog snapshots between requests with a TTL.
"""
