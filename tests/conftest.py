"""Pytest fixtures for the account API tests."""

import os

# Configuration is read at import time.
os.environ.setdefault("IDP_DOMAIN", "https://idp.test")
os.environ.setdefault("IDP_CLIENT_ID", "test-client-id")
os.environ.setdefault("IDP_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("IDP_ACCESS_TOKEN", "initial-token")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from account_api.core.errors import IdentityProviderError
from account_api.services import AccountService, ModerationResult, UserStore


class FakeIdentityProvider:
    """In-memory stand-in for IdentityProviderClient that records calls."""

    def __init__(self):
        self.users: Dict[str, str] = {}
        self.calls: List[tuple] = []
        self.fail_create = False
        self.fail_delete = False
        self._next_id = 1

    async def get_user(self, email: str) -> Dict[str, Any]:
        self.calls.append(("get_user", email))
        if email in self.users:
            return {"users": [{"id": self.users[email], "email": email}]}
        return {"code": "OK"}

    async def find_user_id(self, email: str) -> Optional[str]:
        users = (await self.get_user(email)).get("users") or []
        return users[0]["id"] if users else None

    async def create_user(self, email: str) -> Dict[str, Any]:
        self.calls.append(("create_user", email))
        if self.fail_create:
            raise IdentityProviderError(detail="create failed")
        provider_id = f"kp_{self._next_id}"
        self._next_id += 1
        self.users[email] = provider_id
        return {"id": provider_id, "created": True}

    async def delete_user(self, provider_id: str) -> None:
        self.calls.append(("delete_user", provider_id))
        if self.fail_delete:
            raise IdentityProviderError(detail="delete failed")
        self.users = {k: v for k, v in self.users.items() if v != provider_id}

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]


class FakeModerator:
    def __init__(self, result: ModerationResult = ModerationResult(unsafe=False)):
        self.result = result
        self.checked: List[bytes] = []

    async def check_image(self, content: bytes) -> ModerationResult:
        self.checked.append(content)
        return self.result


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def store(db_session):
    return UserStore(db_session)


@pytest.fixture
def identity():
    return FakeIdentityProvider()


@pytest.fixture
def moderator():
    return FakeModerator()


@pytest.fixture
def accounts(store, identity, moderator):
    return AccountService(store, identity, moderator)


@pytest.fixture
def test_client(db_session, identity, moderator):
    """TestClient with the store, identity provider and classifier overridden."""
    from account_api.api.dependencies import get_identity_provider, get_image_moderator
    from account_api.app import app
    from account_api.core.database import get_session

    def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_identity_provider] = lambda: identity
    app.dependency_overrides[get_image_moderator] = lambda: moderator

    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

    app.dependency_overrides.clear()
