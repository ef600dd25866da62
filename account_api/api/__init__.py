"""HTTP surface of the account API."""

from __future__ import annotations

from fastapi import FastAPI

from .dependencies import get_account_service, get_identity_provider, get_image_moderator
from .routers import ALL_ROUTERS


def register_routes(app: FastAPI) -> None:
    """Attach the account and system routers to ``app``."""

    for router in ALL_ROUTERS:
        app.include_router(router)


__all__ = [
    "get_account_service",
    "get_identity_provider",
    "get_image_moderator",
    "register_routes",
]
