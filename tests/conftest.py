"""Root conftest - shared test configuration."""

import os

# Ensure tests never pick up a real database from the environment
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_FORMAT", "text")
