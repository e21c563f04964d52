from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode


def linkedin_key(url: Optional[str]) -> str:
    """Comparison key for uniqueness checks (case-insensitive)."""
    return (url or "").strip().lower()


def placeholder_avatar_url(name: str, base_url: str = "https://ui-avatars.com/api/") -> str:
    query = urlencode({"name": name, "background": "0b8de5", "color": "fff"})
    return f"{base_url}?{query}"
