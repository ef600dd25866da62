"""Profile field merging and serialisation."""

from __future__ import annotations

import base64
from typing import Any, Dict, NamedTuple, Optional

from ..models import DEFAULT_GENDER, DEFAULT_USERNAME, UserProfile


class FieldRule(NamedTuple):
    """How one profile field is merged: the patch wins, then the stored value, then ``default``."""

    name: str
    default: Any = None


PROFILE_FIELDS: tuple[FieldRule, ...] = (
    FieldRule("username", DEFAULT_USERNAME),
    FieldRule("about_me", None),
    FieldRule("gender", DEFAULT_GENDER),
    FieldRule("age", None),
    FieldRule("settings", {}),
)


def _is_omitted(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def merge_profile(current: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Return merged values for every field in ``PROFILE_FIELDS``.

    ``None`` and blank strings in either mapping count as absent.
    """

    merged: Dict[str, Any] = {}
    for rule in PROFILE_FIELDS:
        candidate = patch.get(rule.name)
        if _is_omitted(candidate):
            candidate = current.get(rule.name)
        if _is_omitted(candidate):
            candidate = rule.default
        if isinstance(candidate, dict):
            candidate = dict(candidate)
        merged[rule.name] = candidate
    return merged


def apply_profile_patch(user: UserProfile, patch: Dict[str, Any]) -> UserProfile:
    current = {rule.name: getattr(user, rule.name) for rule in PROFILE_FIELDS}
    for name, value in merge_profile(current, patch).items():
        setattr(user, name, value)
    return user


def image_data_uri(content: bytes, content_type: Optional[str]) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


def profile_to_dict(user: UserProfile) -> Dict[str, Any]:
    """Serialise a profile to the API's camelCase document."""

    return {
        "id": user.id,
        "email": user.email,
        "username": user.username,
        "aboutMe": user.about_me,
        "gender": user.gender,
        "age": user.age,
        "settings": user.settings,
        "profileImage": user.profile_image,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
        "updatedAt": user.updated_at.isoformat() if user.updated_at else None,
    }


__all__ = [
    "FieldRule",
    "PROFILE_FIELDS",
    "apply_profile_patch",
    "image_data_uri",
    "merge_profile",
    "profile_to_dict",
]
