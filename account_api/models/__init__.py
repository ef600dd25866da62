"""Database model exports."""

from .user import DEFAULT_GENDER, DEFAULT_USERNAME, UserProfile, new_user_id

__all__ = [
    "DEFAULT_GENDER",
    "DEFAULT_USERNAME",
    "UserProfile",
    "new_user_id",
]
