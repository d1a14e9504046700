"""Infrastructure Layer - database session management and cross-cutting concerns.

Invariants:
    - Infrastructure never imports from core/ domain logic except the error types
    - Raw driver errors are mapped to DatabaseError before they reach callers
"""
