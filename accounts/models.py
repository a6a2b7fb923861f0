"""
accounts/models.py -- Domain dataclasses for user accounts.

Pattern: Data class (pure data container, zero logic). Stores, services and
routes do the work; these classes only own the domain shape.

Layer rule: no imports from api/.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class User:
    """A registered PermaHub account.

    email is the identity: it is unique across all users and is the subject
    of every token issued for this account.

    verification_code is a UUID4 string generated at registration. It is
    unique and never changes afterwards; the verification link mailed to the
    user embeds it.

    verified starts False and is flipped to True exactly by a successful
    verify() call. Nothing ever sets it back to False.

    The profile attributes (name .. contact) are all optional and updated
    independently of each other.
    """

    email: str
    password_hash: str
    verification_code: str
    verified: bool = False
    name: str | None = None
    headline: str | None = None
    about: str | None = None
    type: str | None = None
    area: str | None = None
    contact: str | None = None
    id: int | None = None
    created_at: str | None = None


@dataclass
class ProfileUpdate:
    """Partial profile data. None means "not supplied, leave unchanged"."""

    name: str | None = None
    headline: str | None = None
    about: str | None = None
    type: str | None = None
    area: str | None = None
    contact: str | None = None

    def supplied(self) -> dict[str, str]:
        """Return only the fields that carry a value."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}
