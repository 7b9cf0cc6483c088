from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

STRIPE_CONNECT_URL = "https://connect.stripe.com"


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: bool) -> bool:
    raw = _getenv(name, "true" if default else "false").lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


@dataclass(frozen=True)
class StripeSettings:
    """Stripe Connect OAuth credentials and endpoints."""

    client_id: str
    secret: str
    connect_url: str = STRIPE_CONNECT_URL
    redirect_uri: str | None = None
    scope: str = "read_write"
    timeout_sec: float = 10.0

    @property
    def authorize_url(self) -> str:
        return f"{self.connect_url}/oauth/authorize"

    @property
    def token_url(self) -> str:
        return f"{self.connect_url}/oauth/token"


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    jwt_private_key: str | None
    stripe: StripeSettings

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def _load_stripe_settings(app_env: str) -> StripeSettings:
    client_id = _getenv("STRIPE_CLIENT_ID", "")
    secret = _getenv("STRIPE_SECRET", "")
    if app_env == "prod" and not (client_id and secret):
        raise ValueError("STRIPE_CLIENT_ID and STRIPE_SECRET are required in prod")

    connect_url = _getenv("STRIPE_CONNECT_URL", STRIPE_CONNECT_URL).rstrip("/")
    if not connect_url.startswith(("https://", "http://")):
        raise ValueError(f"STRIPE_CONNECT_URL must be an http(s) URL (got {connect_url!r})")

    timeout_raw = _getenv("STRIPE_TIMEOUT_SEC", "10")
    try:
        timeout_sec = float(timeout_raw)
    except ValueError:
        raise ValueError(
            f"STRIPE_TIMEOUT_SEC must be a number (got {timeout_raw!r})"
        ) from None
    if timeout_sec <= 0:
        raise ValueError(f"STRIPE_TIMEOUT_SEC must be positive (got {timeout_raw!r})")

    return StripeSettings(
        client_id=client_id,
        secret=secret,
        connect_url=connect_url,
        redirect_uri=_getenv("STRIPE_REDIRECT_URI", "") or None,
        scope=_getenv("STRIPE_SCOPE", "read_write") or "read_write",
        timeout_sec=timeout_sec,
    )


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()
    port_raw = _getenv("PORT", "8000")

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    try:
        port = int(port_raw)
    except ValueError:
        raise ValueError(f"PORT must be an integer (got {port_raw!r})") from None

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON", False),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        jwt_private_key=os.environ.get("JWT_PRIVATE_KEY") or None,
        stripe=_load_stripe_settings(app_env_raw),
    )


SETTINGS = load_settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the process settings.

    Handlers take settings through this dependency so tests can swap
    them with ``app.dependency_overrides``.
    """
    return SETTINGS
