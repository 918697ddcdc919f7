"""Core Layer — request gates and domain rules, no network IO.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - Validation and access checks are pure; the rate limiter and board cache are the
      only stateful objects, and they are owned by the app instance (app.state)

Design Decisions:
    - Functional core separated from the HTTP/data-store shell
"""
