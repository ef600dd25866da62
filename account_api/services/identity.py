"""Identity provider management API client.

Looks up, creates and deletes provider-side identities using a
client-credentials bearer token. A request rejected with ``TOKEN_INVALID``
refreshes the token and is retried exactly once; every other failure raises
``IdentityProviderError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from ..core.errors import IdentityProviderError

logger = logging.getLogger(__name__)

TOKEN_INVALID = "TOKEN_INVALID"


class TokenHolder:
    """Bearer token shared by all requests, refreshed one caller at a time."""

    def __init__(self, token: str = ""):
        self._token = token
        self._lock = asyncio.Lock()
        self.refresh_count = 0

    @property
    def token(self) -> str:
        return self._token

    async def refresh(self, stale: str, fetch) -> str:
        """Replace ``stale`` with a token from ``fetch()``.

        Callers that waited on the lock while another caller refreshed get
        the already-refreshed token without a second fetch.
        """

        async with self._lock:
            if self._token != stale:
                return self._token
            self._token = await fetch()
            self.refresh_count += 1
            return self._token


def _error_codes(response: httpx.Response) -> set[str]:
    try:
        payload = response.json()
    except ValueError:
        return set()
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(errors, list):
        return set()
    return {str(item.get("code")) for item in errors if isinstance(item, dict)}


class IdentityProviderClient:
    """Async client for the provider's token and user endpoints."""

    def __init__(
        self,
        domain: str,
        client_id: str,
        client_secret: str,
        *,
        access_token: str = "",
        timeout: float = 20,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.domain = domain.rstrip("/")
        self.client_id = client_id
        self.client_secret = client_secret
        self.timeout = timeout
        self.tokens = TokenHolder(access_token)
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.domain, timeout=self.timeout, transport=self._transport
        )

    async def get_access_token(self) -> str:
        """Exchange client credentials for a bearer token."""

        async with self._client() as client:
            try:
                response = await client.post(
                    "/oauth2/token",
                    data={
                        "grant_type": "client_credentials",
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "audience": f"{self.domain}/api",
                    },
                    headers={"Accept": "application/json"},
                )
            except httpx.HTTPError as exc:
                logger.error(f"Token request failed: {type(exc).__name__}: {exc}")
                raise IdentityProviderError(detail=str(exc)) from exc

        if response.is_error:
            logger.error(f"Token request rejected with {response.status_code}")
            raise IdentityProviderError(
                detail=f"couldn't get access token ({response.status_code})"
            )
        token = response.json().get("access_token")
        if not token:
            raise IdentityProviderError(detail="token response had no access_token")
        return token

    async def _authorized(
        self, method: str, path: str, **kwargs: Any
    ) -> httpx.Response:
        """Send a request, refreshing the token and retrying once on TOKEN_INVALID."""

        token = self.tokens.token
        response = await self._send(method, path, token, **kwargs)
        if not response.is_error:
            return response

        if TOKEN_INVALID not in _error_codes(response):
            logger.error(
                f"{method} {path} rejected with {response.status_code}: {response.text}"
            )
            raise IdentityProviderError(
                detail=f"{method} {path} failed ({response.status_code})"
            )

        logger.info("Identity provider token invalid; refreshing")
        token = await self.tokens.refresh(token, self.get_access_token)
        response = await self._send(method, path, token, **kwargs)
        if response.is_error:
            logger.error(
                f"{method} {path} failed after token refresh with {response.status_code}"
            )
            raise IdentityProviderError(
                detail=f"{method} {path} failed after refresh ({response.status_code})"
            )
        return response

    async def _send(
        self, method: str, path: str, token: str, **kwargs: Any
    ) -> httpx.Response:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }
        async with self._client() as client:
            try:
                return await client.request(method, path, headers=headers, **kwargs)
            except httpx.HTTPError as exc:
                logger.error(f"{method} {path} failed: {type(exc).__name__}: {exc}")
                raise IdentityProviderError(detail=str(exc)) from exc

    async def get_user(self, email: str) -> Dict[str, Any]:
        """Return the provider's raw user list payload for ``email``."""

        response = await self._authorized(
            "GET", "/api/v1/users", params={"email": email}
        )
        return response.json()

    async def find_user_id(self, email: str) -> Optional[str]:
        users = (await self.get_user(email)).get("users") or []
        return users[0].get("id") if users else None

    async def create_user(self, email: str) -> Dict[str, Any]:
        body = {"identities": [{"type": "email", "details": {"email": email}}]}
        response = await self._authorized("POST", "/api/v1/user", json=body)
        logger.info(f"Created identity provider user for {email}")
        return response.json()

    async def delete_user(self, provider_id: str) -> None:
        """Delete a provider identity. Not retried."""

        response = await self._send(
            "DELETE", "/api/v1/user", self.tokens.token, params={"id": provider_id}
        )
        if response.is_error:
            logger.error(
                f"Deleting identity provider user {provider_id} failed "
                f"with {response.status_code}: {response.text}"
            )
            raise IdentityProviderError(
                detail=f"delete user failed ({response.status_code})"
            )
        logger.info(f"Deleted identity provider user {provider_id}")


__all__ = ["IdentityProviderClient", "TOKEN_INVALID", "TokenHolder"]
