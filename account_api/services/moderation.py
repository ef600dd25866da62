"""Profile image moderation backed by Cloud Vision safe-search detection."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from google.api_core.exceptions import GoogleAPIError
from google.auth.exceptions import GoogleAuthError
from google.cloud import vision
from google.oauth2 import service_account

logger = logging.getLogger(__name__)

LIKELIHOOD_PERCENT: Mapping[str, int] = {
    "UNKNOWN": 0,
    "VERY_UNLIKELY": 0,
    "UNLIKELY": 25,
    "POSSIBLE": 50,
    "LIKELY": 75,
    "VERY_LIKELY": 100,
}
UNSAFE_THRESHOLD = 50
SAFE_SEARCH_CATEGORIES = ("adult", "medical", "spoof", "violence", "racy")

MODERATION_ERROR_MESSAGE = (
    "Currently, there is some error while uploading the profile image. "
    "Please try again later."
)


@dataclass(frozen=True)
class ModerationResult:
    unsafe: bool
    error: Optional[str] = None


def _likelihood_name(value: Any) -> str:
    if isinstance(value, str):
        return value.upper()
    return vision.Likelihood(value).name


def likelihood_percent(value: Any) -> int:
    return LIKELIHOOD_PERCENT.get(_likelihood_name(value), 0)


def is_unsafe(annotation: Any) -> bool:
    """True when any safe-search category is rated POSSIBLE or worse."""

    for category in SAFE_SEARCH_CATEGORIES:
        value = (
            annotation.get(category)
            if isinstance(annotation, Mapping)
            else getattr(annotation, category, None)
        )
        if value is None:
            continue
        if likelihood_percent(value) >= UNSAFE_THRESHOLD:
            return True
    return False


def _credentials_from_json(raw: Optional[str]):
    if not raw:
        return None
    info = json.loads(raw)
    return service_account.Credentials.from_service_account_info(info)


class ImageModerator:
    """Runs uploaded images through safe-search detection.

    Classifier failures never raise: they come back as a ``ModerationResult``
    with ``error`` set so the caller decides whether to block.
    """

    def __init__(
        self,
        credentials_json: Optional[str] = None,
        *,
        client: Any = None,
    ):
        self._credentials_json = credentials_json
        self._client = client

    def _get_client(self):
        if self._client is None:
            credentials = _credentials_from_json(self._credentials_json)
            self._client = vision.ImageAnnotatorAsyncClient(credentials=credentials)
        return self._client

    async def check_image(self, content: bytes) -> ModerationResult:
        request = vision.AnnotateImageRequest(
            image=vision.Image(content=content),
            features=[vision.Feature(type_=vision.Feature.Type.SAFE_SEARCH_DETECTION)],
        )
        try:
            client = self._get_client()
            response = await client.batch_annotate_images(requests=[request])
        except (GoogleAPIError, GoogleAuthError, ValueError) as exc:
            logger.error(f"Cloud Vision request failed: {type(exc).__name__}: {exc}")
            return ModerationResult(unsafe=False, error=MODERATION_ERROR_MESSAGE)

        if not response.responses:
            logger.error("Cloud Vision returned no annotation")
            return ModerationResult(unsafe=False, error=MODERATION_ERROR_MESSAGE)

        result = response.responses[0]
        if result.error.message:
            logger.error(f"Cloud Vision annotation error: {result.error.message}")
            return ModerationResult(unsafe=False, error=MODERATION_ERROR_MESSAGE)

        unsafe = is_unsafe(result.safe_search_annotation)
        if unsafe:
            logger.info("Profile image rejected by safe-search moderation")
        return ModerationResult(unsafe=unsafe)


__all__ = [
    "ImageModerator",
    "LIKELIHOOD_PERCENT",
    "MODERATION_ERROR_MESSAGE",
    "ModerationResult",
    "SAFE_SEARCH_CATEGORIES",
    "UNSAFE_THRESHOLD",
    "is_unsafe",
    "likelihood_percent",
]
