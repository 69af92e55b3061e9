"""
Utilities for recognising Steam URLs and extracting App IDs from them.
"""

import re
from typing import Optional

STORE_HOSTS = ("store.steampowered.com", "steamcommunity.com")

# Tried in order; the first pattern that matches wins. Only ASCII digits count.
_APP_ID_PATTERNS = (
    re.compile(r"/app/([0-9]+)"),
    re.compile(r"app/([0-9]+)"),
    re.compile(r"AppId=([0-9]+)"),
    re.compile(r"id=([0-9]+)"),
)


def is_store_url(query: str) -> bool:
    """Returns True if the query mentions a Steam store or community host."""
    return any(host in query for host in STORE_HOSTS)


def extract_app_id(url: str) -> Optional[int]:
    """
    Extracts a numeric App ID from any Steam URL.
    Handles store pages, community hubs and query-string forms.
    """
    for pattern in _APP_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return int(match.group(1))
    return None


def is_numeric_id(query: str) -> bool:
    """True for input that is made only of ASCII digits once trimmed."""
    stripped = query.strip()
    return bool(stripped) and stripped.isascii() and stripped.isdigit()
