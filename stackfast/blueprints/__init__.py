"""
Saved blueprint history.

Responsibilities:
- Persist generated blueprints per user after a successful request.
- List a user's blueprints, newest first.
"""
