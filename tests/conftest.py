"""Root conftest — shared test configuration."""

import os

# Deterministic, fast settings; must be set before app.config is imported
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-entropy-0123456789")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
