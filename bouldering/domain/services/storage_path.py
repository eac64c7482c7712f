"""
Storage Path Service

Architectural Intent:
- Owns the knowledge of how media URLs map onto Cloud Storage prefixes
- Pure functions, shared by the repository and the use cases

URL layout:
    https://storage.googleapis.com/{bucket}/{prefix...}/{filename}

    https://storage.googleapis.com/bucket/v1/public/users/u1/posts/2025/09/p1/a1/original.jpeg
    -> v1/public/users/u1/posts/2025/09/p1/a1
"""

import logging
from typing import Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

GCS_HOST = "storage.googleapis.com"


def derive_storage_prefix(media_url: Optional[str]) -> Optional[str]:
    """Return the object prefix for a GCS media URL, or None."""
    if not media_url or GCS_HOST not in media_url:
        return None

    try:
        parsed = urlparse(media_url)
    except ValueError as e:
        logger.warning("Failed to derive storage prefix from %s: %s", media_url, e)
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 3:
        return None

    # Drop the bucket (first) and the file name (last).
    return "/".join(parts[1:-1])


def is_valid_prefix(prefix: Optional[str]) -> bool:
    """Check the v1/public/users/{uid}/... layout."""
    if not prefix or not isinstance(prefix, str):
        return False
    parts = prefix.split("/")
    return len(parts) >= 4 and parts[0] == "v1" and parts[1] == "public"
