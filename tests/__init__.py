"""
Tide-Data Gateway Test Suite.

This package contains:
- unit/: Unit tests (no app, no network)
- integration/: FastAPI app tests against a simulated CHS API
"""
