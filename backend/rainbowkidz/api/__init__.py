"""API Layer — FastAPI routes, request dependencies and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return {"ok": ...} JSON envelopes

Design Decisions:
    - Thin routes: gates from core/, shared queries from services/
"""
