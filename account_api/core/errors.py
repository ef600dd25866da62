"""Account error taxonomy and its HTTP mapping.

Every error carries a client-safe ``message``; internal detail stays in the
server log. Upstream failures get their own status codes so that a broken
identity provider or classifier is not reported as a generic server error.
"""

from __future__ import annotations

from typing import Optional


class AccountError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code = 500
    message = "Internal server error"
    body_key = "error"

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None):
        if message is not None:
            self.message = message
        # Logged, never sent to the client.
        self.detail = detail
        super().__init__(detail or self.message)

    def to_body(self) -> Optional[dict]:
        return {self.body_key: self.message}


class InvalidEmail(AccountError):
    status_code = 406
    message = "Email is invalid"
    body_key = "message"


class InvalidProfileData(AccountError):
    status_code = 406
    message = "Profile data is invalid"


class UnsafeImage(AccountError):
    status_code = 406
    message = "Unsafe content detected in the profile image"


class UserNotFound(AccountError):
    status_code = 404
    message = "User not found"


class AccountConflict(AccountError):
    """An id was supplied for an email that already has an account."""

    status_code = 409
    message = "Account already exists"

    def to_body(self) -> Optional[dict]:
        return None


class UpstreamError(AccountError):
    status_code = 502
    message = "An upstream service is unavailable. Please try again later."


class IdentityProviderError(UpstreamError):
    message = "The identity provider could not complete the request."


class ModerationUnavailable(UpstreamError):
    status_code = 503


__all__ = [
    "AccountConflict",
    "AccountError",
    "IdentityProviderError",
    "InvalidEmail",
    "InvalidProfileData",
    "ModerationUnavailable",
    "UnsafeImage",
    "UpstreamError",
    "UserNotFound",
]
