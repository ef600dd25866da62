"""Persistence helpers for account profiles."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from ..core.errors import AccountConflict
from ..core.time import utcnow
from ..models import UserProfile, new_user_id

logger = logging.getLogger(__name__)


class UserStore:
    """Document-style access to ``UserProfile`` rows."""

    def __init__(self, session: Session):
        self.session = session

    def find_one(self, email: str) -> Optional[UserProfile]:
        return self.session.exec(
            select(UserProfile).where(UserProfile.email == email)
        ).first()

    def create(self, email: str, user_id: Optional[str] = None) -> UserProfile:
        """Insert a new profile; a duplicate email or id is a conflict."""

        user = UserProfile(id=user_id or new_user_id(), email=email)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.warning(f"Duplicate profile for {email}: {exc.orig}")
            raise AccountConflict(detail=str(exc.orig)) from exc
        self.session.refresh(user)
        logger.debug(f"Created profile {user.id}: {user.email}")
        return user

    def save(self, user: UserProfile) -> UserProfile:
        user.updated_at = utcnow()
        self.session.add(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(user)
        return user

    def delete_one(self, user: UserProfile) -> None:
        self.session.delete(user)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        logger.debug(f"Deleted profile {user.id}: {user.email}")


__all__ = ["UserStore"]
