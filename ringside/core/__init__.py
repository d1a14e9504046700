"""Core Layer - pure status logic, no IO, no DB.

Invariants:
    - No module in core/ imports from services/, infrastructure/, models/ or db/
    - All functions are pure and deterministic for a given snapshot and instant

Design Decisions:
    - Functional core separated from the persistent shell: the shell loads
      snapshots and compiles predicates, the core decides
"""
