"""Application settings and environment helpers."""

from __future__ import annotations

import os
from typing import Iterable, List

from dotenv import load_dotenv

load_dotenv(override=False)


def _require_env(name: str) -> str:
    """Return a required environment variable or raise an error."""

    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _split_csv(raw: str | None) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _unique(values: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


# Identity provider ----------------------------------------------------------
IDP_DOMAIN = _require_env("IDP_DOMAIN").rstrip("/")
IDP_CLIENT_ID = _require_env("IDP_CLIENT_ID")
IDP_CLIENT_SECRET = _require_env("IDP_CLIENT_SECRET")
IDP_ACCESS_TOKEN = os.getenv("IDP_ACCESS_TOKEN", "")
IDP_TIMEOUT_SECONDS = _env_int("IDP_TIMEOUT_SECONDS", 20)


# Image moderation -----------------------------------------------------------
# Holds the service-account JSON itself, not a path.
GOOGLE_APPLICATION_CREDENTIALS = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or None
MAX_PROFILE_IMAGE_BYTES = _env_int("MAX_PROFILE_IMAGE_BYTES", 5 * 1024 * 1024)


# Storage --------------------------------------------------------------------
DATABASE_URL = os.getenv("DATABASE_URL", "")


# CORS -----------------------------------------------------------------------
# FRONTEND_ORIGIN can contain a comma-separated list for multi-domain deploys.
_frontend_origins = _split_csv(os.getenv("FRONTEND_ORIGIN"))
_additional_origins = _split_csv(os.getenv("ADDITIONAL_ALLOWED_ORIGINS"))

_local_dev_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

ALLOWED_CORS_ORIGINS = _unique(
    [
        *_frontend_origins,
        *_additional_origins,
        *_local_dev_origins,
    ]
)


# Runtime behaviour ----------------------------------------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


__all__ = [
    "ALLOWED_CORS_ORIGINS",
    "DATABASE_URL",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "IDP_ACCESS_TOKEN",
    "IDP_CLIENT_ID",
    "IDP_CLIENT_SECRET",
    "IDP_DOMAIN",
    "IDP_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "MAX_PROFILE_IMAGE_BYTES",
]
