"""Pydantic Schemas - validation for listing-view queries.

Invariants:
    - Schemas validate at the system boundary (filter input from listing views)
    - Domain enums from core/ used for kind and status fields
"""
