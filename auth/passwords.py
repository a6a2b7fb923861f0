"""
auth/passwords.py -- Password hashing (bcrypt, direct usage, no passlib wrapper).

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error.

BcryptHasher takes its cost factor in the constructor so tests can run at the
minimum cost (4) while production keeps the default (12).

The dummy hash enables timing equalization in the authentication flow: the
verifier is always run, even when no account matches the submitted email, so
response time does not reveal whether an email is registered.

Layer rule: no imports from api/ or accounts/.
"""

from __future__ import annotations

import bcrypt


class BcryptHasher:
    """One-way salted password hash with constant-time verification."""

    def __init__(self, rounds: int = 12) -> None:
        self._rounds = rounds
        # Computed once so the first unknown-email login is not measurably
        # slower than later ones.
        self._dummy_hash = self.hash("permahub_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password.

        Passwords longer than 72 bytes are truncated by bcrypt. The API layer
        caps password length at 72 characters of input for that reason.
        """
        return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        A malformed stored hash is treated as a mismatch.
        """
        try:
            return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, plain: str) -> None:
        """Run one verification against the dummy hash and discard the result."""
        self.verify(plain, self._dummy_hash)
