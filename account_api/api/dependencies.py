"""Request dependencies shared by the account routes."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from email_validator import EmailNotValidError, validate_email
from fastapi import Depends
from sqlmodel import Session

from ..core import (
    GOOGLE_APPLICATION_CREDENTIALS,
    IDP_ACCESS_TOKEN,
    IDP_CLIENT_ID,
    IDP_CLIENT_SECRET,
    IDP_DOMAIN,
    IDP_TIMEOUT_SECONDS,
    get_session,
)
from ..core.errors import InvalidEmail
from ..services import AccountService, IdentityProviderClient, ImageModerator, UserStore


def require_email(value: Any) -> str:
    """Return ``value`` unchanged if it is a bare, syntactically valid address.

    Display-name forms such as ``Ada <ada@example.com>`` are rejected.
    """

    if not isinstance(value, str) or value != value.strip():
        raise InvalidEmail()
    try:
        validate_email(value, check_deliverability=False, allow_display_name=False)
    except EmailNotValidError as exc:
        raise InvalidEmail(detail=str(exc)) from exc
    return value


@lru_cache(maxsize=1)
def get_identity_provider() -> IdentityProviderClient:
    """Process-wide client so the cached bearer token is shared."""

    return IdentityProviderClient(
        IDP_DOMAIN,
        IDP_CLIENT_ID,
        IDP_CLIENT_SECRET,
        access_token=IDP_ACCESS_TOKEN,
        timeout=IDP_TIMEOUT_SECONDS,
    )


@lru_cache(maxsize=1)
def get_image_moderator() -> ImageModerator:
    return ImageModerator(GOOGLE_APPLICATION_CREDENTIALS)


def get_account_service(
    session: Session = Depends(get_session),
    identity: IdentityProviderClient = Depends(get_identity_provider),
    moderator: ImageModerator = Depends(get_image_moderator),
) -> AccountService:
    return AccountService(UserStore(session), identity, moderator)


__all__ = [
    "get_account_service",
    "get_identity_provider",
    "get_image_moderator",
    "require_email",
]
