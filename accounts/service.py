"""
accounts/service.py -- Registration, profile update, and email verification.

UserService orchestrates the store, the password hasher and the mail sender.
All three are supplied through the constructor as implementations of the
Protocols below, together with the public front-end URL used to build
verification links. Nothing here reads Settings.

Failures are raised as core.errors kinds (InvalidInput, NotFound). Store and
mail failures are not caught: they propagate and fail the request.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Protocol

from accounts.models import ProfileUpdate, User
from accounts.regions import normalize_area
from core.errors import InvalidInput, NotFound

logger = logging.getLogger("permahub.accounts")

EMAIL_PATTERN = re.compile(
    r"[a-zA-Z0-9+._%\-]{1,256}"
    r"@"
    r"[a-zA-Z0-9][a-zA-Z0-9\-]{0,64}"
    r"(\.[a-zA-Z0-9][a-zA-Z0-9\-]{0,25})+"
)
PASSWORD_MIN_LENGTH = 8
# bcrypt only reads the first 72 bytes and bcrypt>=5 refuses longer input.
PASSWORD_MAX_BYTES = 72

VERIFICATION_EMAIL_SUBJECT = "PermaHub sign up verification"
# Hyphenated 8-4-4-4-12 form only.
VERIFICATION_CODE_PATTERN = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class UserRepository(Protocol):
    def create_user(self, user: User) -> User: ...

    def update_profile(self, email: str, **fields: str) -> bool: ...

    def mark_verified(self, user_id: int) -> None: ...

    def get_by_email(self, email: str) -> User | None: ...

    def get_by_verification_code(self, code: str) -> User | None: ...


class PasswordHasher(Protocol):
    def hash(self, plain: str) -> str: ...

    def verify(self, plain: str, hashed: str) -> bool: ...


class MailSender(Protocol):
    def send(self, to: str, subject: str, html_body: str) -> None: ...


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class UserService:
    def __init__(
        self,
        store: UserRepository,
        hasher: PasswordHasher,
        mailer: MailSender,
        frontend_url: str,
    ) -> None:
        self._store = store
        self._hasher = hasher
        self._mailer = mailer
        self._frontend_url = frontend_url.rstrip("/")

    def create_user(self, email: str, password: str) -> User:
        """Register a new, unverified user and mail them a verification link."""
        _validate_credentials(email, password)
        if self._store.get_by_email(email) is not None:
            raise InvalidInput("Email is already registered")

        user = self._store.create_user(
            User(
                email=email,
                password_hash=self._hasher.hash(password),
                verification_code=str(uuid.uuid4()),
            )
        )
        logger.info("Registered user id=%s", user.id)
        self._send_verification_email(user)
        return user

    def get_user(self, identity: str) -> User:
        """Resolve an authenticated identity (token subject) to its user."""
        user = self._store.get_by_email(identity)
        if user is None:
            raise NotFound("User not found")
        return user

    def update_profile(self, identity: str, profile: ProfileUpdate) -> User:
        """Apply the supplied profile fields; fields left as None are untouched.

        Validation happens before the single store write, so a rejected area
        code leaves the stored profile exactly as it was.
        """
        user = self.get_user(identity)
        changes = profile.supplied()
        if "area" in changes:
            changes["area"] = normalize_area(changes["area"])

        if changes and not self._store.update_profile(user.email, **changes):
            raise NotFound("User not found")
        for field_name, value in changes.items():
            setattr(user, field_name, value)
        logger.info("Updated profile for user id=%s fields=%s", user.id, sorted(changes))
        return user

    def verify(self, code: str) -> User:
        """Confirm email ownership for the user holding this verification code.

        Calling this again with an already-used code succeeds and changes nothing.
        """
        if not isinstance(code, str) or not VERIFICATION_CODE_PATTERN.fullmatch(code):
            raise InvalidInput("Code should be UUID")
        canonical = str(uuid.UUID(code))

        user = self._store.get_by_verification_code(canonical)
        if user is None:
            raise NotFound("User has not found")
        if not user.verified:
            self._store.mark_verified(user.id)
            user.verified = True
            logger.info("Verified user id=%s", user.id)
        return user

    def _send_verification_email(self, user: User) -> None:
        link = f"{self._frontend_url}/users/verify/?code={user.verification_code}"
        self._mailer.send(
            user.email,
            VERIFICATION_EMAIL_SUBJECT,
            "Thank you for joining PermaHub!<br>"
            f"Please click this <a href='{link}' target='_blank'>link</a> to verify your email.",
        )


def _validate_credentials(email: str, password: str) -> None:
    if not EMAIL_PATTERN.fullmatch(email):
        raise InvalidInput("Email should be _@_._")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise InvalidInput(f"Password should be {PASSWORD_MIN_LENGTH} characters at least")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise InvalidInput(f"Password should be {PASSWORD_MAX_BYTES} bytes at most")
