"""Route Modules — one file per resource/concern.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Gate order inside a handler: path → rate limit → access → validation → data store
"""
