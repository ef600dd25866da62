"""Integration tests for the account HTTP endpoints."""

import json
from unittest.mock import patch

import pytest

from account_api.services import ModerationResult
from account_api.services.moderation import MODERATION_ERROR_MESSAGE

INVALID_EMAILS = [
    None,
    "",
    "not-an-email",
    "a@",
    "@example.com",
    "Ada <ada@example.com>",
    " a@example.com",
    42,
    ["a@example.com"],
]


def _seed(test_client, email="a@example.com"):
    response = test_client.post("/login", json={"email": email})
    assert response.status_code == 200
    return response.json()["id"]


class TestHealth:
    def test_health(self, test_client):
        assert test_client.get("/health").json() == {"ok": True}
        assert test_client.get("/healthz").status_code == 200


class TestEmailValidation:
    @pytest.mark.parametrize("email", INVALID_EMAILS)
    def test_login_rejects_invalid_email(self, test_client, identity, email):
        response = test_client.post("/login", json={"email": email, "id": "x"})

        assert response.status_code == 406
        assert response.json() == {"message": "Email is invalid"}
        assert identity.calls == []

    def test_login_without_body(self, test_client):
        assert test_client.post("/login").status_code == 406

    def test_display_name_address_creates_no_record(self, test_client, store):
        response = test_client.post("/login", json={"email": "Ada <ada@example.com>"})

        assert response.status_code == 406
        assert store.find_one("Ada <ada@example.com>") is None
        assert store.find_one("ada@example.com") is None

    @pytest.mark.parametrize("body", ["a@example.com", ["a@example.com"], 7])
    def test_non_object_body_is_invalid_email(self, test_client, identity, body):
        login = test_client.post("/login", json=body)
        delete = test_client.request("DELETE", "/deleteUser", json=body)

        assert login.status_code == 406
        assert login.json() == {"message": "Email is invalid"}
        assert delete.status_code == 406
        assert identity.calls == []

    @pytest.mark.parametrize("email", ["", "not-an-email", "a@", "Ada <ada@example.com>"])
    def test_profile_update_rejects_invalid_email(self, test_client, moderator, email):
        response = test_client.post(
            "/profile",
            data={"email": email},
            files={"profileImage": ("me.png", b"img", "image/png")},
        )

        assert response.status_code == 406
        assert moderator.checked == []

    @pytest.mark.parametrize("email", INVALID_EMAILS)
    def test_delete_rejects_invalid_email(self, test_client, identity, email):
        response = test_client.request("DELETE", "/deleteUser", json={"email": email})

        assert response.status_code == 406
        assert identity.calls == []


class TestLogin:
    def test_first_login_generates_id(self, test_client, store):
        response = test_client.post("/login", json={"email": "new@example.com"})

        assert response.status_code == 200
        assert store.find_one("new@example.com").id == response.json()["id"]

    def test_first_login_with_id_registers_with_provider(self, test_client, identity):
        response = test_client.post("/login", json={"email": "new@example.com", "id": "kinde-1"})

        assert response.status_code == 200
        assert response.json() == {"id": "kinde-1"}
        assert identity.call_names() == ["get_user", "create_user"]

    def test_repeat_login_returns_same_id(self, test_client):
        user_id = _seed(test_client)

        response = test_client.post("/login", json={"email": "a@example.com"})

        assert response.json() == {"id": user_id}

    def test_claiming_id_on_existing_account_conflicts(self, test_client, store, identity):
        user_id = _seed(test_client)

        response = test_client.post("/login", json={"email": "a@example.com", "id": "other"})

        assert response.status_code == 409
        assert response.content == b""
        assert store.find_one("a@example.com").id == user_id
        assert identity.calls == []

    def test_provider_failure_is_bad_gateway(self, test_client, identity, store):
        identity.fail_create = True

        response = test_client.post("/login", json={"email": "new@example.com", "id": "x"})

        assert response.status_code == 502
        assert "error" in response.json()
        assert store.find_one("new@example.com") is None

    def test_unexpected_error_is_generic_500(self, test_client, store):
        with patch.object(type(store), "find_one", side_effect=RuntimeError("db exploded")):
            response = test_client.post("/login", json={"email": "a@example.com"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        assert "exploded" not in response.text


class TestGetProfile:
    def test_get_profile(self, test_client):
        user_id = _seed(test_client)

        response = test_client.get("/profile/a@example.com")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == user_id
        assert data["email"] == "a@example.com"
        assert data["username"] == "Anonymous"
        assert data["gender"] == "Unknown"
        assert data["aboutMe"] is None
        assert data["age"] is None

    def test_get_unknown_profile(self, test_client):
        response = test_client.get("/profile/ghost@example.com")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found"}


class TestUpdateProfile:
    def test_update_fields(self, test_client):
        _seed(test_client)

        response = test_client.post(
            "/profile",
            data={
                "email": "a@example.com",
                "username": "ada",
                "aboutMe": "analyst",
                "age": "36",
                "settings": json.dumps({"theme": "dark"}),
            },
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Profile updated successfully"}
        profile = test_client.get("/profile/a@example.com").json()
        assert profile["username"] == "ada"
        assert profile["aboutMe"] == "analyst"
        assert profile["age"] == 36
        assert profile["gender"] == "Unknown"
        assert profile["settings"] == {"theme": "dark"}

    def test_omitted_fields_are_preserved(self, test_client):
        _seed(test_client)
        test_client.post("/profile", data={"email": "a@example.com", "username": "ada", "gender": "f"})

        test_client.post("/profile", data={"email": "a@example.com", "aboutMe": "hi"})

        profile = test_client.get("/profile/a@example.com").json()
        assert profile["username"] == "ada"
        assert profile["gender"] == "f"
        assert profile["aboutMe"] == "hi"

    def test_safe_image_is_stored(self, test_client, moderator):
        _seed(test_client)

        response = test_client.post(
            "/profile",
            data={"email": "a@example.com"},
            files={"profileImage": ("me.png", b"abc", "image/png")},
        )

        assert response.status_code == 200
        assert moderator.checked == [b"abc"]
        profile = test_client.get("/profile/a@example.com").json()
        assert profile["profileImage"] == "data:image/png;base64,YWJj"

    def test_unsafe_image_is_rejected(self, test_client, moderator):
        _seed(test_client)
        moderator.result = ModerationResult(unsafe=True)

        response = test_client.post(
            "/profile",
            data={"email": "a@example.com", "username": "mallory"},
            files={"profileImage": ("me.png", b"bad", "image/png")},
        )

        assert response.status_code == 406
        assert response.json() == {"error": "Unsafe content detected in the profile image"}
        profile = test_client.get("/profile/a@example.com").json()
        assert profile["username"] == "Anonymous"
        assert profile["profileImage"] is None

    def test_classifier_failure_is_service_unavailable(self, test_client, moderator):
        _seed(test_client)
        moderator.result = ModerationResult(unsafe=False, error=MODERATION_ERROR_MESSAGE)

        response = test_client.post(
            "/profile",
            data={"email": "a@example.com"},
            files={"profileImage": ("me.png", b"img", "image/png")},
        )

        assert response.status_code == 503
        assert response.json() == {"error": MODERATION_ERROR_MESSAGE}

    def test_non_image_upload_rejected(self, test_client, moderator):
        _seed(test_client)

        response = test_client.post(
            "/profile",
            data={"email": "a@example.com"},
            files={"profileImage": ("notes.txt", b"text", "text/plain")},
        )

        assert response.status_code == 406
        assert moderator.checked == []

    def test_oversized_image_rejected_before_moderation(self, test_client, moderator):
        _seed(test_client)

        with patch("account_api.api.routers.accounts.MAX_PROFILE_IMAGE_BYTES", 4):
            response = test_client.post(
                "/profile",
                data={"email": "a@example.com"},
                files={"profileImage": ("me.png", b"12345", "image/png")},
            )

        assert response.status_code == 406
        assert response.json() == {"error": "Profile image is too large"}
        assert moderator.checked == []

    def test_non_numeric_age_rejected(self, test_client):
        _seed(test_client)

        response = test_client.post("/profile", data={"email": "a@example.com", "age": "abc"})

        assert response.status_code == 406
        assert response.json() == {"error": "Age must be a number"}

    @pytest.mark.parametrize("age", ["inf", "-inf", "nan"])
    def test_non_finite_age_keeps_stored_age(self, test_client, age):
        _seed(test_client)
        test_client.post("/profile", data={"email": "a@example.com", "age": "30"})

        response = test_client.post("/profile", data={"email": "a@example.com", "age": age})

        assert response.status_code == 406
        assert test_client.get("/profile/a@example.com").json()["age"] == 30

    def test_invalid_settings_rejected(self, test_client):
        _seed(test_client)

        response = test_client.post(
            "/profile", data={"email": "a@example.com", "settings": "{not json"}
        )

        assert response.status_code == 406

    def test_unknown_user(self, test_client, moderator):
        response = test_client.post(
            "/profile",
            data={"email": "ghost@example.com"},
            files={"profileImage": ("me.png", b"img", "image/png")},
        )

        assert response.status_code == 404
        assert moderator.checked == []


class TestDeleteUser:
    def test_delete_removes_both_records(self, test_client, identity, store):
        test_client.post("/login", json={"email": "a@example.com", "id": "u1"})
        provider_id = identity.users["a@example.com"]

        response = test_client.request("DELETE", "/deleteUser", json={"email": "a@example.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "User deleted successfully"}
        assert ("delete_user", provider_id) in identity.calls
        assert store.find_one("a@example.com") is None
        assert test_client.get("/profile/a@example.com").status_code == 404

    def test_provider_delete_failure_keeps_local_record(self, test_client, identity, store):
        test_client.post("/login", json={"email": "a@example.com", "id": "u1"})
        identity.fail_delete = True

        response = test_client.request("DELETE", "/deleteUser", json={"email": "a@example.com"})

        assert response.status_code == 502
        assert store.find_one("a@example.com") is not None

    def test_delete_unknown_user(self, test_client):
        response = test_client.request("DELETE", "/deleteUser", json={"email": "ghost@example.com"})

        assert response.status_code == 404
