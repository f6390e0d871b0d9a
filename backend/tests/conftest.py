"""Root conftest — shared test configuration."""

import os

# Keep tests on the in-memory backend regardless of the developer's .env
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_FORMAT", "text")
