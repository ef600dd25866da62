"""Core configuration and infrastructure helpers."""

from .config import (
    ALLOWED_CORS_ORIGINS,
    DATABASE_URL,
    GOOGLE_APPLICATION_CREDENTIALS,
    IDP_ACCESS_TOKEN,
    IDP_CLIENT_ID,
    IDP_CLIENT_SECRET,
    IDP_DOMAIN,
    IDP_TIMEOUT_SECONDS,
    LOG_LEVEL,
    MAX_PROFILE_IMAGE_BYTES,
)
from .database import engine, get_session
from .logging import configure_logging
from .time import utcnow

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
    "configure_logging",
    "engine",
    "get_session",
    "utcnow",
]
