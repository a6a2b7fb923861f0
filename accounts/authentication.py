"""
accounts/authentication.py -- Credential check, verification gate, token issuance.

Authenticator.authenticate() resolves one login attempt:

  1. Lookup by email     -- unknown email   -> BadCredentials
  2. Password check      -- wrong password  -> BadCredentials (same message)
  3. Verification gate   -- not verified    -> Unverified
  4. Token issuance      -- access + refresh token pair

Steps 1 and 2 report the identical error so a caller cannot learn whether an
email is registered. The hasher also runs for unknown emails (against a dummy
hash), so response time does not leak it either.
"""

from __future__ import annotations

import logging
from typing import Protocol

from accounts.service import UserRepository
from auth.tokens import TokenIssuer, TokenPair
from core.errors import BadCredentials, Unverified

logger = logging.getLogger("permahub.accounts")

BAD_CREDENTIALS_MESSAGE = "Invalid email or password"
UNVERIFIED_MESSAGE = "Please verify your email"


class TimingSafeHasher(Protocol):
    def verify(self, plain: str, hashed: str) -> bool: ...

    def burn(self, plain: str) -> None: ...


class Authenticator:
    def __init__(self, store: UserRepository, hasher: TimingSafeHasher, token_issuer: TokenIssuer) -> None:
        self._store = store
        self._hasher = hasher
        self._token_issuer = token_issuer

    def authenticate(self, email: str, password: str) -> TokenPair:
        user = self._store.get_by_email(email)
        if user is None:
            self._hasher.burn(password)
            logger.info("Login rejected: unknown email")
            raise BadCredentials(BAD_CREDENTIALS_MESSAGE)
        if not self._hasher.verify(password, user.password_hash):
            logger.info("Login rejected: wrong password for user id=%s", user.id)
            raise BadCredentials(BAD_CREDENTIALS_MESSAGE)
        if not user.verified:
            logger.info("Login rejected: user id=%s not verified", user.id)
            raise Unverified(UNVERIFIED_MESSAGE)

        pair = self._token_issuer.issue_pair(user.email)
        logger.info("Login succeeded for user id=%s", user.id)
        return pair
