"""Database model for account profiles."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field as ORMField, SQLModel

from ..core.time import utcnow

DEFAULT_USERNAME = "Anonymous"
DEFAULT_GENDER = "Unknown"


def new_user_id() -> str:
    return str(uuid.uuid4())


class UserProfile(SQLModel, table=True):
    """Locally stored profile keyed by email."""

    __tablename__ = "user_profile"

    id: str = ORMField(default_factory=new_user_id, primary_key=True)
    email: str = ORMField(index=True, unique=True)
    username: str = ORMField(default=DEFAULT_USERNAME)
    about_me: Optional[str] = None
    gender: str = ORMField(default=DEFAULT_GENDER)
    age: Optional[float] = None
    settings: Dict[str, Any] = ORMField(default_factory=dict, sa_column=Column(JSON))
    # data:<mime>;base64,<payload>
    profile_image: Optional[str] = ORMField(default=None, sa_column=Column(Text))
    created_at: datetime = ORMField(default_factory=utcnow)
    updated_at: datetime = ORMField(default_factory=utcnow)


__all__ = ["DEFAULT_GENDER", "DEFAULT_USERNAME", "UserProfile", "new_user_id"]
