"""
Acceptance rules for uploaded files.

Every rule is evaluated (no short-circuit) so the caller can report all
failures at once, joined into a single message.
"""

from loguru import logger
from pydantic import BaseModel
from ..core.config import settings

ALLOWED_CONTENT_TYPES = ("image/jpeg", "image/png", "application/pdf")

SIZE_MESSAGE = "File size should be less than 5MB"
TYPE_MESSAGE = "File type should be JPEG, PNG or PDF"


class UploadCheck(BaseModel):
    accepted: bool
    checks: dict[str, bool]
    messages: list[str]


def check_upload(size: int, content_type: str | None, max_bytes: int | None = None) -> UploadCheck:
    max_bytes = settings.max_upload_bytes if max_bytes is None else max_bytes

    checks = {
        "size_within_limit": size <= max_bytes,
        "content_type_allowed": (content_type or "").lower() in ALLOWED_CONTENT_TYPES,
    }

    messages = []
    if not checks["size_within_limit"]:
        messages.append(SIZE_MESSAGE)
    if not checks["content_type_allowed"]:
        messages.append(TYPE_MESSAGE)

    accepted = not messages
    if not accepted:
        logger.info("Upload rejected by validation", size=size, content_type=content_type, checks=checks)

    return UploadCheck(accepted=accepted, checks=checks, messages=messages)
