"""
API request and response models for the PermaHub account endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in accounts/models.py, which own
the internal domain representation. Route handlers map between the two.

JSON field names are camelCase for the front end; Python attribute names stay
snake_case through aliases.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from accounts.models import ProfileUpdate, User

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /users and POST /users/authenticate.

    Format rules (email shape, password length) are enforced by the service
    so they surface as InvalidInput (400), not as a 422 schema error.
    """

    email: str
    password: str


class VerifyRequest(BaseModel):
    code: str


class ProfileUpdateRequest(BaseModel):
    """Request body for PATCH /users/me. Omitted or null fields are left unchanged."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=255)
    headline: Optional[str] = Field(default=None, max_length=255)
    about: Optional[str] = Field(default=None, max_length=5000)
    type: Optional[str] = Field(default=None, max_length=64)
    area: Optional[str] = Field(default=None, max_length=16)
    contact: Optional[str] = Field(default=None, max_length=1000)

    def to_domain(self) -> ProfileUpdate:
        return ProfileUpdate(**self.model_dump())


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public view of a user. password_hash and verification_code are never included."""

    model_config = ConfigDict(populate_by_name=True)

    email: str
    verified: bool
    name: Optional[str] = None
    headline: Optional[str] = None
    about: Optional[str] = None
    type: Optional[str] = None
    area: Optional[str] = None
    contact: Optional[str] = None
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            email=user.email,
            verified=user.verified,
            name=user.name,
            headline=user.headline,
            about=user.about,
            type=user.type,
            area=user.area,
            contact=user.contact,
            created_at=user.created_at,
        )


class TokenResponse(BaseModel):
    """Successful authentication. expiredAt is the access token's expiry (UTC)."""

    model_config = ConfigDict(populate_by_name=True)

    access_token: str = Field(alias="accessToken")
    refresh_token: str = Field(alias="refreshToken")
    expired_at: datetime = Field(alias="expiredAt")


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    components: dict[str, str]


class ErrorDetail(BaseModel):
    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Uniform error envelope returned by every exception handler."""

    error: ErrorDetail
