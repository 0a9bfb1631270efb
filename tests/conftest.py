import os
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

# Ensure we default to memory backend for tests to avoid external dependencies
os.environ.setdefault("PERSISTENCE_BACKEND", "memory")

from todo_api.auth import Principal  # noqa: E402
from todo_api.main import app  # noqa: E402
from todo_api.repositories import InMemoryRepository, get_repository  # noqa: E402

ALICE = Principal(id="user-alice", email="alice@example.com")
BOB = Principal(id="user-bob", email="bob@example.com")


def auth_headers(principal: Principal) -> dict:
    return {"X-User-Id": principal.id, "X-User-Email": principal.email}


def parse_ts(value: str) -> datetime:
    """Parse an ISO8601 timestamp as serialized by the API (trailing 'Z' allowed)."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


@pytest.fixture()
def repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture()
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_repository, None)


@pytest.fixture()
def alice_headers() -> dict:
    return auth_headers(ALICE)


@pytest.fixture()
def bob_headers() -> dict:
    return auth_headers(BOB)
