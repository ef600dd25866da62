"""Account login, profile and deletion endpoints."""

from __future__ import annotations

import json
import math
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, File, Form, UploadFile

from ...core import MAX_PROFILE_IMAGE_BYTES
from ...core.errors import InvalidProfileData
from ...services import AccountService, UploadedImage, profile_to_dict
from ..dependencies import get_account_service, require_email

router = APIRouter(tags=["accounts"])


def _parse_age(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        age = float(raw)
    except ValueError as exc:
        raise InvalidProfileData("Age must be a number") from exc
    if not math.isfinite(age):
        raise InvalidProfileData("Age must be a number")
    return int(age) if age.is_integer() else age


def _parse_settings(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None or not raw.strip():
        return None
    try:
        settings = json.loads(raw)
    except ValueError as exc:
        raise InvalidProfileData("Settings must be a JSON object") from exc
    if not isinstance(settings, dict):
        raise InvalidProfileData("Settings must be a JSON object")
    return settings


async def _read_image(upload: Optional[UploadFile]) -> Optional[UploadedImage]:
    if upload is None:
        return None
    content = await upload.read()
    if not content:
        return None
    if len(content) > MAX_PROFILE_IMAGE_BYTES:
        raise InvalidProfileData("Profile image is too large")
    content_type = upload.content_type or ""
    if not content_type.startswith("image/"):
        raise InvalidProfileData("Profile image must be an image file")
    return UploadedImage(content=content, content_type=content_type)


@router.post("/login")
async def login(
    body: Any = Body(None),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, str]:
    """Log in by email, provisioning the account on first use."""

    body = body if isinstance(body, dict) else {}
    email = require_email(body.get("email"))
    user_id = body.get("id")
    if user_id is not None and not isinstance(user_id, str):
        user_id = str(user_id)
    return {"id": await accounts.login(email, user_id or None)}


@router.post("/profile")
async def update_profile(
    email: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    about_me: Optional[str] = Form(None, alias="aboutMe"),
    gender: Optional[str] = Form(None),
    age: Optional[str] = Form(None),
    settings: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None, alias="profileImage"),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, str]:
    """Update profile fields and, optionally, the moderated profile image."""

    email = require_email(email)
    patch = {
        "username": username,
        "about_me": about_me,
        "gender": gender,
        "age": _parse_age(age),
        "settings": _parse_settings(settings),
    }
    image = await _read_image(profile_image)
    await accounts.update_profile(email, patch, image)
    return {"message": "Profile updated successfully"}


@router.get("/profile/{email}")
def get_profile(
    email: str, accounts: AccountService = Depends(get_account_service)
) -> Dict[str, Any]:
    return profile_to_dict(accounts.get_profile(email))


@router.delete("/deleteUser")
async def delete_user(
    body: Any = Body(None),
    accounts: AccountService = Depends(get_account_service),
) -> Dict[str, str]:
    """Delete the account from the identity provider and the local store."""

    email = require_email(body.get("email") if isinstance(body, dict) else None)
    await accounts.delete_account(email)
    return {"message": "User deleted successfully"}


__all__ = ["router"]
