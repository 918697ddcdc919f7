"""RainbowKidz Application Package — bulletin-board API gateway for the RainbowKidz site.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
