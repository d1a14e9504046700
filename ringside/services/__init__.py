"""Services Layer - store-backed ledgers, readers, queries and action handlers.

Invariants:
    - Services take a caller-owned Session; only RosterActions commits
    - Business rules come from core/; services add IO, locking and logging
"""
