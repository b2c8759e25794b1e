"""
tests/conftest.py — Shared Test Fixtures
=========================================
"""

from __future__ import annotations

import os

# ---------------------------------------------------------------------------
# Ensure a valid JWT_SECRET is always set for test runs.
# This must happen before any import of enqoy.api.deps which validates
# the secret at module-load time.
# ---------------------------------------------------------------------------
_TEST_JWT_SECRET = "test-secret-for-pytest-only-" + "x" * 40  # > 32 chars
os.environ.setdefault("JWT_SECRET", _TEST_JWT_SECRET)

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy import Engine, create_engine  # noqa: E402

# ---------------------------------------------------------------------------
# Make JSONB columns work in SQLite for testing.
# SQLite doesn't support JSONB natively, but SQLAlchemy's JSON type works.
# We register a custom type compiler so SQLite renders JSONB as TEXT.
# ---------------------------------------------------------------------------
from sqlalchemy.dialects.postgresql import JSONB as PG_JSONB  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from enqoy.database.models import Base  # noqa: E402

_jsonb_sqlite_registered = False


def _register_jsonb_sqlite_compat():
    """Register SQLite compilation for PG JSONB type (idempotent)."""
    global _jsonb_sqlite_registered
    if _jsonb_sqlite_registered:
        return
    from sqlalchemy.ext.compiler import compiles

    @compiles(PG_JSONB, "sqlite")
    def _compile_jsonb_as_text(type_, compiler, **kw):
        return "TEXT"

    _jsonb_sqlite_registered = True


_register_jsonb_sqlite_compat()


@pytest.fixture
def db_engine() -> Engine:
    """Create an in-memory SQLite engine with all pairing tables.

    JSONB columns are transparently mapped to TEXT for SQLite compatibility.
    Uses StaticPool so all threads share the same in-memory database
    (required by ``asyncio.to_thread`` used in ``run_db``).
    """
    from sqlalchemy.pool import StaticPool

    engine = create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def db_session(db_engine: Engine):
    """Provide a transactional session that rolls back after each test."""
    with Session(db_engine) as session:
        yield session
        session.rollback()


@pytest.fixture
def admin_token():
    """Generate a valid admin JWT for use in API integration tests."""
    return make_token()


@pytest.fixture
def member_token():
    return make_token(sub="member-1", roles=["member"])


def make_token(sub: str = "admin-1", roles: list | None = None, **claims) -> str:
    """Create a JWT shaped like the platform backend's.  Admin by default."""
    import jwt

    from enqoy.api.deps import JWT_ALGORITHM, JWT_SECRET

    payload = {"sub": sub, "roles": roles if roles is not None else [{"role": "admin"}], **claims}
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


@pytest.fixture
def client(db_engine):
    """FastAPI TestClient bound to the in-memory database."""
    from fastapi.testclient import TestClient

    from enqoy.api.deps import get_engine
    from enqoy.api.main import app

    app.dependency_overrides[get_engine] = lambda: db_engine
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Client-side helpers: an EnqoyApi wired to an httpx.MockTransport
# ---------------------------------------------------------------------------
class FakeBackend:
    """Route table for :class:`httpx.MockTransport`.

    ``on("GET", "/events/e1", json=...)`` registers a canned response; every
    request is recorded in ``calls`` as ``(method, path, json_body)``.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], object] = {}
        self.calls: list[tuple[str, str, object]] = []

    def on(self, method: str, path: str, *, json=None, status: int = 200, handler=None) -> None:
        self.routes[(method, path)] = handler or (status, json)

    def called(self, method: str, path: str) -> list:
        return [body for m, p, body in self.calls if m == method and p == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        import json as _json

        path = request.url.path.removeprefix("/api")
        body = _json.loads(request.content) if request.content else None
        self.calls.append((request.method, path, body))
        route = self.routes.get((request.method, path))
        if route is None:
            return httpx.Response(404, json={"message": f"No route for {request.method} {path}"})
        if callable(route):
            return route(request)
        status, payload = route
        if payload is None:
            return httpx.Response(status)
        return httpx.Response(status, json=payload)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def api(backend):
    from enqoy.client.http import ApiClient
    from enqoy.client.sdk import EnqoyApi
    from enqoy.client.storage import LocalStorage

    return EnqoyApi(
        ApiClient(
            "http://test/api",
            storage=LocalStorage(),
            transport=httpx.MockTransport(backend),
        )
    )
