"""Shared constants and test doubles for the account service tests."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from fastapi.testclient import TestClient

from accounts.models import User
from accounts.store import UserStore
from auth.passwords import BcryptHasher
from auth.tokens import TokenIssuer

ACCESS_SECRET = "a" * 16 + "access-secret-for-tests-only"
REFRESH_SECRET = "r" * 16 + "refresh-secret-for-tests-only"
FRONTEND_URL = "http://frontend.test"
PASSWORD = "the_password"


@dataclass
class SentMail:
    to: str
    subject: str
    html_body: str


@dataclass
class RecordingMailSender:
    """Captures outgoing mail instead of sending it."""

    sent: list[SentMail] = field(default_factory=list)

    def send(self, to: str, subject: str, html_body: str) -> None:
        self.sent.append(SentMail(to, subject, html_body))


def make_user(
    store: UserStore,
    hasher: BcryptHasher,
    email: str,
    password: str = PASSWORD,
    verified: bool = False,
) -> User:
    """Insert a user straight into the store, bypassing registration (no mail)."""
    return store.create_user(
        User(
            email=email,
            password_hash=hasher.hash(password),
            verification_code=str(uuid.uuid4()),
            verified=verified,
        )
    )


@dataclass
class ApiContext:
    """Everything an API test needs: the client plus the collaborators behind it."""

    client: TestClient
    store: UserStore
    mailer: RecordingMailSender
    token_issuer: TokenIssuer
    hasher: BcryptHasher

    def bearer(self, email: str) -> dict[str, str]:
        token, _ = self.token_issuer.issue_access_token(email)
        return {"Authorization": f"Bearer {token}"}
