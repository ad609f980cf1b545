"""
Session authentication.

Responsibilities:
- Verify demo credentials with bcrypt.
- Guard endpoints with user and admin dependencies.
"""
