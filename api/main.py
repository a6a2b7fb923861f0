"""
api/main.py -- FastAPI application entry point for the PermaHub account service.

Run with:      python main.py serve
               uvicorn api.main:app --reload

Middleware stack:
  1. CORSMiddleware  -- allows the configured front-end origin
  2. log_requests    -- one log line per request with status and latency

Lifespan builds every collaborator from Settings exactly once and stores it
on app.state; routes and dependencies read from there. This is the only
module that calls get_settings().
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from accounts.authentication import Authenticator
from accounts.mailer import build_mail_sender
from accounts.service import UserService
from accounts.store import UserStore
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.users import router as users_router
from auth.passwords import BcryptHasher
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.errors import AccountError, InvalidToken

__version__ = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("permahub.api")

_settings = get_settings()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the store, hasher, mailer, token issuer and services; dispose on shutdown."""
    logger.info("PermaHub accounts API starting up")
    store = UserStore(_settings.database_url)
    hasher = BcryptHasher(rounds=_settings.bcrypt_rounds)
    token_issuer = TokenIssuer(
        access_secret=_settings.jwt_access_secret,
        refresh_secret=_settings.jwt_refresh_secret,
        access_ttl_seconds=_settings.access_token_expire_seconds,
        refresh_ttl_seconds=_settings.refresh_token_expire_seconds,
    )
    app.state.user_store = store
    app.state.token_issuer = token_issuer
    app.state.user_service = UserService(
        store=store,
        hasher=hasher,
        mailer=build_mail_sender(_settings),
        frontend_url=_settings.normalized_frontend_url,
    )
    app.state.authenticator = Authenticator(store=store, hasher=hasher, token_issuer=token_issuer)
    logger.info("Accounts initialized (mail_backend=%s)", _settings.mail_backend)

    yield

    store.close()
    logger.info("PermaHub accounts API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="PermaHub Accounts API",
    description="Registration, email verification, profile update, and token authentication.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[_settings.normalized_frontend_url],
    allow_methods=["GET", "POST", "PATCH"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


app.include_router(users_router, prefix="/api/v1", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(AccountError)
async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    """Render a service-level error kind with its own status code."""
    response = JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=ErrorDetail(**exc.to_dict())).model_dump(),
    )
    if isinstance(exc, InvalidToken):
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when the request body fails schema validation."""
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                detail=str(exc.errors()),
            )
        ).model_dump(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wrap routing errors (unknown path, wrong method) in the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"http_{exc.status_code}",
                message=str(exc.detail),
            )
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is logged only, never written to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(
                code="internal_error",
                message="An unexpected error occurred.",
            )
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability."""
    database = "ok" if request.app.state.user_store.ping() else "error"
    return HealthResponse(version=__version__, components={"app": "ok", "database": database})
