"""
api/routes/v1/users.py -- Account REST endpoints.

Routes:
  POST  /api/v1/users                -- register; mails a verification link
  POST  /api/v1/users/authenticate   -- email/password login; returns token pair
  POST  /api/v1/users/verify         -- confirm email with the mailed code
  GET   /api/v1/users/me             -- current user (requires access token)
  PATCH /api/v1/users/me             -- partial profile update (requires access token)

Errors raised by the service layer (core.errors.AccountError subclasses) are
not caught here; the handler in api/main.py renders them.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from accounts.authentication import Authenticator
from accounts.service import UserService
from api.models import CredentialsRequest, ProfileUpdateRequest, TokenResponse, UserResponse, VerifyRequest
from auth.dependencies import get_current_identity

# Auth policy:
# - POST  /users, /users/authenticate, /users/verify: public
# - GET   /users/me, PATCH /users/me:                 access token (get_current_identity)
router = APIRouter()


def _user_service(request: Request) -> UserService:
    return request.app.state.user_service


def _authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/users", response_model=UserResponse, status_code=201)
def register(body: CredentialsRequest, service: UserService = Depends(_user_service)) -> UserResponse:
    """Create an unverified account and send the verification email."""
    return UserResponse.from_user(service.create_user(body.email, body.password))


@router.post("/users/authenticate", response_model=TokenResponse, status_code=201)
def authenticate(
    body: CredentialsRequest,
    response: Response,
    authenticator: Authenticator = Depends(_authenticator),
) -> TokenResponse:
    """Exchange email and password for an access token and a refresh token.

    Unknown email and wrong password both return 401 BadCredentials with the
    same message. Correct credentials on an unverified account return 401
    Unverified.
    """
    pair = authenticator.authenticate(body.email, body.password)
    response.headers["Cache-Control"] = "no-store"
    return TokenResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expired_at=pair.expired_at,
    )


@router.post("/users/verify", response_model=UserResponse)
def verify(body: VerifyRequest, service: UserService = Depends(_user_service)) -> UserResponse:
    return UserResponse.from_user(service.verify(body.code))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/users/me", response_model=UserResponse)
def me(
    identity: str = Depends(get_current_identity),
    service: UserService = Depends(_user_service),
) -> UserResponse:
    return UserResponse.from_user(service.get_user(identity))


@router.patch("/users/me", response_model=UserResponse)
def update_profile(
    body: ProfileUpdateRequest,
    identity: str = Depends(get_current_identity),
    service: UserService = Depends(_user_service),
) -> UserResponse:
    """Update only the profile fields present in the body."""
    return UserResponse.from_user(service.update_profile(identity, body.to_domain()))
