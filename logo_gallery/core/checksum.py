"""Content hash computation for uploaded files."""

from __future__ import annotations

import hashlib


def compute_content_hash(data: bytes) -> str:
    """Compute SHA-256 hex digest of raw file bytes.

    Returns lowercase 64-character hex string.
    """
    return hashlib.sha256(data).hexdigest()
