"""Account lifecycle orchestration across the local store and external services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..core.errors import (
    AccountConflict,
    IdentityProviderError,
    ModerationUnavailable,
    UnsafeImage,
    UserNotFound,
)
from ..models import UserProfile
from .identity import IdentityProviderClient
from .moderation import ImageModerator
from .profiles import apply_profile_patch, image_data_uri
from .store import UserStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadedImage:
    content: bytes
    content_type: Optional[str]


class AccountService:
    def __init__(
        self,
        store: UserStore,
        identity: IdentityProviderClient,
        moderator: ImageModerator,
    ):
        self.store = store
        self.identity = identity
        self.moderator = moderator

    def _require_user(self, email: str) -> UserProfile:
        user = self.store.find_one(email)
        if not user:
            raise UserNotFound()
        return user

    async def login(self, email: str, user_id: Optional[str] = None) -> str:
        """Return the account id for ``email``, provisioning it on first login."""

        existing = self.store.find_one(email)
        if existing:
            if user_id:
                raise AccountConflict(
                    detail=f"id supplied for existing account {existing.id}"
                )
            return existing.id

        if not user_id:
            return self.store.create(email).id
        return (await self._create_with_provider(email, user_id)).id

    async def _create_with_provider(self, email: str, user_id: str) -> UserProfile:
        created_provider_id: Optional[str] = None
        if await self.identity.find_user_id(email) is None:
            created = await self.identity.create_user(email)
            created_provider_id = created.get("id")

        try:
            return self.store.create(email, user_id)
        except Exception:
            if created_provider_id:
                logger.warning(
                    f"Local create failed for {email}; removing provider user "
                    f"{created_provider_id}"
                )
                await self._compensate(created_provider_id)
            raise

    async def _compensate(self, provider_id: str) -> None:
        try:
            await self.identity.delete_user(provider_id)
        except IdentityProviderError:
            logger.exception(
                f"Compensating delete of provider user {provider_id} failed"
            )

    def get_profile(self, email: str) -> UserProfile:
        return self._require_user(email)

    async def update_profile(
        self,
        email: str,
        patch: Dict[str, Any],
        image: Optional[UploadedImage] = None,
    ) -> UserProfile:
        user = self._require_user(email)

        if image is not None:
            result = await self.moderator.check_image(image.content)
            if result.unsafe:
                raise UnsafeImage()
            if result.error:
                raise ModerationUnavailable(result.error)

        apply_profile_patch(user, patch)
        if image is not None:
            user.profile_image = image_data_uri(image.content, image.content_type)
        return self.store.save(user)

    async def delete_account(self, email: str) -> None:
        """Delete the provider identity, then the local profile."""

        user = self._require_user(email)
        provider_id = await self.identity.find_user_id(email)
        if provider_id:
            await self.identity.delete_user(provider_id)
        else:
            logger.warning(f"No identity provider user for {email}; deleting locally")
        self.store.delete_one(user)


__all__ = ["AccountService", "UploadedImage"]
