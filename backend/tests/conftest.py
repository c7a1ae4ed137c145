"""Root conftest — shared test configuration."""

import os

# Tests never reach a real database server
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///:memory:",
)
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_FORMAT", "text")
