"""Infrastructure Layer — data store, text generation and logging.

Invariants:
    - Infrastructure never imports core/ domain rules, only core.errors and core.domain_types
    - All external calls carry an explicit timeout and map failures to typed errors
"""
