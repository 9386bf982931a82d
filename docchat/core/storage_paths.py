"""
Storage path derivation.

Object store keys are derived deterministically from owner, creation
instant and display name: {owner_id}/{epoch_microseconds}_{safe_name}.

Dependencies: None
System role: Collision-resistant object key generation
"""

import re
from datetime import datetime, timezone

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")
MAX_NAME_LENGTH = 200


def sanitize_display_name(display_name: str) -> str:
    """
    Reduce a user supplied file name to a safe single path segment.

    Path separators and other unsafe characters become underscores, leading
    dots are stripped so the segment cannot be "." or "..".
    """
    base = display_name.replace("\\", "/").rsplit("/", 1)[-1]
    safe = _UNSAFE_CHARS.sub("_", base).lstrip(".")
    if not safe.strip("_"):
        safe = "document"
    if len(safe) > MAX_NAME_LENGTH:
        stem, dot, ext = safe.rpartition(".")
        if dot and len(ext) < 16:
            safe = stem[: MAX_NAME_LENGTH - len(ext) - 1] + "." + ext
        else:
            safe = safe[:MAX_NAME_LENGTH]
    return safe


def derive_storage_path(owner_id: str, created_at: datetime, display_name: str) -> str:
    """
    Build the object key for a new document.

    Args:
        owner_id: Authenticated user identity
        created_at: Creation instant (naive values are treated as UTC)
        display_name: Original file name

    Returns:
        str: Object store key, unique per (owner, microsecond, name)
    """
    if not owner_id or "/" in owner_id:
        raise ValueError("owner_id must be a non-empty single path segment")
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    delta = created_at - datetime(1970, 1, 1, tzinfo=timezone.utc)
    stamp = (delta.days * 86_400 + delta.seconds) * 1_000_000 + delta.microseconds
    return f"{owner_id}/{stamp}_{sanitize_display_name(display_name)}"
