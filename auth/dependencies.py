"""
auth/dependencies.py -- FastAPI Depends() helpers for bearer authentication.

The front end sends the access token as "Authorization: Bearer <token>".
get_current_identity() validates it with the TokenIssuer stored on app.state
and returns the token subject (the user's email). Resolving that identity to
a stored user is the service layer's job, so an unknown subject surfaces as
NotFound (404) rather than 401.

Only access tokens are accepted here. A refresh token fails validation.

Layer rule: no imports from api/ or accounts/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.tokens import TokenIssuer, TokenKind
from core.errors import InvalidToken


def get_bearer_token(request: Request) -> str:
    """Extract the raw bearer token. Raises InvalidToken if the header is missing or malformed."""
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise InvalidToken("Authentication required")
    return token.strip()


def get_current_identity(request: Request) -> str:
    """Require a valid access token and return its subject.

    Use as a FastAPI dependency:
        @router.get("/users/me")
        async def route(identity: str = Depends(get_current_identity)): ...
    """
    token_issuer: TokenIssuer = request.app.state.token_issuer
    claims = token_issuer.parse_and_validate(get_bearer_token(request), TokenKind.access)
    return claims.subject
