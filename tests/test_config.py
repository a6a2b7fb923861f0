"""Unit tests for core/config.py -- signing secret policy and defaults.

Settings is constructed directly with _env_file=None so a developer's local
.env cannot leak into the assertions.
"""

import pytest
from pydantic import ValidationError

from core.config import Settings

GOOD_ACCESS = "A" * 40
GOOD_REFRESH = "R" * 40


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET", "FRONTEND_URL", "MAIL_BACKEND"):
        monkeypatch.delenv(name, raising=False)


def test_debug_generates_distinct_secrets() -> None:
    settings = Settings(_env_file=None, debug=True)
    assert len(settings.jwt_access_secret) >= 32
    assert len(settings.jwt_refresh_secret) >= 32
    assert settings.jwt_access_secret != settings.jwt_refresh_secret


def test_production_requires_secrets() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, debug=False)


def test_production_requires_both_secrets() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, debug=False, jwt_access_secret=GOOD_ACCESS)


def test_short_secret_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jwt_access_secret="short", jwt_refresh_secret=GOOD_REFRESH)


def test_identical_secrets_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, jwt_access_secret=GOOD_ACCESS, jwt_refresh_secret=GOOD_ACCESS)


def test_defaults() -> None:
    settings = Settings(_env_file=None, jwt_access_secret=GOOD_ACCESS, jwt_refresh_secret=GOOD_REFRESH)
    assert settings.access_token_expire_seconds == 7200
    assert settings.refresh_token_expire_seconds == 86400
    assert settings.bcrypt_rounds == 12
    assert settings.mail_backend == "smtp"


def test_env_vars_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("JWT_ACCESS_SECRET", GOOD_ACCESS)
    monkeypatch.setenv("JWT_REFRESH_SECRET", GOOD_REFRESH)
    monkeypatch.setenv("FRONTEND_URL", "https://permahub.example/")
    monkeypatch.setenv("MAIL_BACKEND", "console")
    settings = Settings(_env_file=None, debug=False)
    assert settings.jwt_access_secret == GOOD_ACCESS
    assert settings.normalized_frontend_url == "https://permahub.example"
    assert settings.mail_backend == "console"


def test_unknown_mail_backend_rejected() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, debug=True, mail_backend="carrier-pigeon")
