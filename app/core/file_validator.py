"""
Upload validation and log sanitization utilities.

Only the declared media type and size are checked; the bytes are passed to
the vision API untouched.
"""

import re
import logging
from typing import Any, Optional

from fastapi import HTTPException

from app.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset([
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
])


def normalize_media_type(content_type: Optional[str]) -> str:
    """'Image/PNG; charset=binary' -> 'image/png'."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def is_allowed_media_type(content_type: Optional[str]) -> bool:
    return normalize_media_type(content_type) in ALLOWED_IMAGE_TYPES


def validate_upload(upload: Any, content_type: Optional[str], filesize: int, max_bytes: int = None) -> str:
    """Check presence, media type and size. Returns the normalized media type."""
    if max_bytes is None:
        max_bytes = settings.max_image_upload_bytes

    if upload is None:
        raise HTTPException(status_code=400, detail="No image file provided")

    media_type = normalize_media_type(content_type)
    if media_type not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {media_type or 'unknown'}. Allowed: jpeg, png, gif, webp."
        )

    if filesize > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Image too large. Max {max_bytes // 1024 // 1024}MB allowed."
        )

    return media_type


def sanitize_log_message(message: str) -> str:
    """Strip sensitive file paths from log messages."""
    msg = re.sub(r'\/[^\s]+\/tmp[a-zA-Z0-9_]+', '[TEMP_FILE]', message)
    msg = re.sub(r'\/[^\s]+\/([^\/\s]+)', r'.../\1', msg)
    return msg
