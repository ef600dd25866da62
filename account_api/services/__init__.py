"""Service layer helpers."""

from .accounts import AccountService, UploadedImage
from .identity import IdentityProviderClient, TokenHolder
from .moderation import ImageModerator, ModerationResult, is_unsafe
from .profiles import (
    PROFILE_FIELDS,
    apply_profile_patch,
    image_data_uri,
    merge_profile,
    profile_to_dict,
)
from .store import UserStore

__all__ = [
    "AccountService",
    "IdentityProviderClient",
    "ImageModerator",
    "ModerationResult",
    "PROFILE_FIELDS",
    "TokenHolder",
    "UploadedImage",
    "UserStore",
    "apply_profile_patch",
    "image_data_uri",
    "is_unsafe",
    "merge_profile",
    "profile_to_dict",
]
