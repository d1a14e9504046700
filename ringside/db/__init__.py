"""Database Infrastructure - session factory and SQLAlchemy Base.

Invariants:
    - Single engine per process (initialized via init_db)
    - Sessions are synchronous; the engine has no coroutine paths

Design Decisions:
    - psycopg driver for PostgreSQL, builtin sqlite3 for tests
"""
