"""
tests/conftest.py -- Shared test fixtures for the PermaHub account service.

This module provides:
  - hasher / store / token_issuer / user_service / authenticator: unit-level
    collaborators wired exactly as the application wires them
  - api: TestClient against the real FastAPI app with a patched lifespan

Design: Named shared-memory SQLite URIs (not plain :memory:) are used for the
API fixture because TestClient runs sync route handlers in a thread pool.
Plain :memory: DBs are per-connection and would present a blank schema to
each worker thread.

The DEBUG env var must be set before any api/ import so get_settings()
auto-generates the JWT secrets in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set DEBUG before any api/core import so get_settings() can
# auto-generate the JWT secrets instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")

import pytest
from fastapi.testclient import TestClient

from accounts.authentication import Authenticator
from accounts.service import UserService
from accounts.store import UserStore
from api.main import app
from auth.passwords import BcryptHasher
from auth.tokens import TokenIssuer
from tests.helpers import ACCESS_SECRET, FRONTEND_URL, REFRESH_SECRET, ApiContext, RecordingMailSender

# ---------------------------------------------------------------------------
# Unit-level fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def hasher() -> BcryptHasher:
    """Minimum bcrypt cost keeps the suite fast; the algorithm is unchanged."""
    return BcryptHasher(rounds=4)


@pytest.fixture
def store() -> Generator[UserStore, None, None]:
    s = UserStore("sqlite:///:memory:")
    yield s
    s.close()


@pytest.fixture
def mailer() -> RecordingMailSender:
    return RecordingMailSender()


@pytest.fixture
def token_issuer() -> TokenIssuer:
    return TokenIssuer(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture
def user_service(store: UserStore, hasher: BcryptHasher, mailer: RecordingMailSender) -> UserService:
    return UserService(store=store, hasher=hasher, mailer=mailer, frontend_url=FRONTEND_URL)


@pytest.fixture
def authenticator(store: UserStore, hasher: BcryptHasher, token_issuer: TokenIssuer) -> Authenticator:
    return Authenticator(store=store, hasher=hasher, token_issuer=token_issuer)


# ---------------------------------------------------------------------------
# API fixture -- one TestClient per test module
# ---------------------------------------------------------------------------


def _patch_lifespan(store: UserStore, hasher: BcryptHasher, mailer: RecordingMailSender, token_issuer: TokenIssuer):
    """Return an async context manager that replaces the real lifespan.

    Wires test collaborators into app.state so routes hit real handlers but
    an isolated database and a recording mailer.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = store
        app.state.token_issuer = token_issuer
        app.state.user_service = UserService(store=store, hasher=hasher, mailer=mailer, frontend_url=FRONTEND_URL)
        app.state.authenticator = Authenticator(store=store, hasher=hasher, token_issuer=token_issuer)
        yield

    return test_lifespan


@pytest.fixture(scope="module")
def api(request, hasher: BcryptHasher) -> Generator[ApiContext, None, None]:
    """Yield an ApiContext whose database is private to the requesting test module."""
    db_name = f"test_accounts_{request.module.__name__.replace('.', '_')}_{uuid.uuid4().hex[:8]}"
    store = UserStore(f"sqlite:///file:{db_name}?mode=memory&cache=shared&uri=true")
    mailer = RecordingMailSender()
    token_issuer = TokenIssuer(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)

    app.router.lifespan_context = _patch_lifespan(store, hasher, mailer, token_issuer)

    with TestClient(app, raise_server_exceptions=True) as client:
        yield ApiContext(client=client, store=store, mailer=mailer, token_issuer=token_issuer, hasher=hasher)

    store.close()
