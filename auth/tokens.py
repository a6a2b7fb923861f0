"""
auth/tokens.py -- Signed, time-bounded access and refresh tokens.

Security design decisions:
  JWT: python-jose with HS256. Every token carries the subject (the user's
       email), issued-at, expiry, and a "typ" claim naming its kind.

  Two secrets: access tokens are signed with the access secret and refresh
       tokens with the refresh secret. Possession of one kind never allows
       forging the other, and a refresh token presented where an access token
       is expected fails signature verification before the "typ" check runs.

  Clock: TokenIssuer takes a clock callable so issue and validation agree on
       "now". jose's own exp check always uses the wall clock, so exp is
       verified here against the injected clock instead.

  Timestamps are truncated to whole seconds because JWT NumericDate has
  second resolution. The expiry returned to callers therefore equals the
  exp claim exactly.

Layer rule: no imports from api/ or accounts/. Import from core/ is allowed.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from core.errors import InvalidToken

logger = logging.getLogger("permahub.auth")

_ALGORITHM = "HS256"
_INVALID_MESSAGE = "Invalid or expired token"


class TokenKind(str, enum.Enum):
    access = "access"
    refresh = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    subject: str
    kind: TokenKind
    issued_at: datetime
    expires_at: datetime


@dataclass
class TokenPair:
    """Result of a successful authentication."""

    access_token: str
    refresh_token: str
    expired_at: datetime  # access token expiry, UTC


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Creates and validates access and refresh tokens.

    Usage:
        issuer = TokenIssuer(access_secret, refresh_secret)
        token, expires_at = issuer.issue_access_token("someone@mail.co")
        claims = issuer.parse_and_validate(token, TokenKind.access)
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl_seconds: int = 2 * 60 * 60,
        refresh_ttl_seconds: int = 24 * 60 * 60,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use distinct secrets.")
        self._secrets = {TokenKind.access: access_secret, TokenKind.refresh: refresh_secret}
        self._ttls = {
            TokenKind.access: timedelta(seconds=access_ttl_seconds),
            TokenKind.refresh: timedelta(seconds=refresh_ttl_seconds),
        }
        self._clock = clock

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return self._clock().astimezone(timezone.utc).replace(microsecond=0)

    def _issue(self, subject: str, kind: TokenKind) -> tuple[str, datetime]:
        issued_at = self._now()
        expires_at = issued_at + self._ttls[kind]
        payload = {
            "sub": subject,
            "iat": issued_at,
            "exp": expires_at,
            "typ": kind.value,
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=_ALGORITHM), expires_at

    def issue_access_token(self, subject: str) -> tuple[str, datetime]:
        """Return (token, expires_at) for a 2-hour (by default) access token."""
        return self._issue(subject, TokenKind.access)

    def issue_refresh_token(self, subject: str) -> tuple[str, datetime]:
        """Return (token, expires_at) for a 24-hour (by default) refresh token."""
        return self._issue(subject, TokenKind.refresh)

    def issue_pair(self, subject: str) -> TokenPair:
        access_token, expired_at = self.issue_access_token(subject)
        refresh_token, _ = self.issue_refresh_token(subject)
        return TokenPair(access_token=access_token, refresh_token=refresh_token, expired_at=expired_at)

    # ------------------------------------------------------------------
    # Validate
    # ------------------------------------------------------------------

    def parse_and_validate(self, token: str, expected_kind: TokenKind) -> TokenClaims:
        """Verify signature, kind and expiry; return the token's claims.

        Raises InvalidToken on any failure. The reason is logged at debug
        level only; callers and clients all see the same message.
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_kind],
                algorithms=[_ALGORITHM],
                options={"verify_exp": False},
            )
        except JWTError as exc:
            logger.debug("Rejected %s token: %s", expected_kind.value, exc)
            raise InvalidToken(_INVALID_MESSAGE) from exc

        subject = payload.get("sub")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if payload.get("typ") != expected_kind.value:
            logger.debug("Rejected token: expected typ=%s, got %r", expected_kind.value, payload.get("typ"))
            raise InvalidToken(_INVALID_MESSAGE)
        if not isinstance(subject, str) or not subject:
            raise InvalidToken(_INVALID_MESSAGE)
        if not isinstance(issued_at, int) or not isinstance(expires_at, int):
            raise InvalidToken(_INVALID_MESSAGE)
        if expires_at <= int(self._now().timestamp()):
            logger.debug("Rejected expired %s token for %s", expected_kind.value, subject)
            raise InvalidToken(_INVALID_MESSAGE)

        return TokenClaims(
            subject=subject,
            kind=expected_kind,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )
