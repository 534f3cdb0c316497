"""SHA-256 content hashing for post change detection"""

import hashlib
import json
from typing import Any


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content (64 chars, matches String(64) column)."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def post_hash(markdown: str, frontmatter: dict[str, Any]) -> str:
    """Hash body and front matter together so a metadata-only edit counts as a change."""
    fm = json.dumps(frontmatter or {}, sort_keys=True, default=str)
    return sha256(f"{fm}\n{markdown}")
