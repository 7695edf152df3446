"""
Input validators. Framework-agnostic pure functions.
"""

from __future__ import annotations

from urllib.parse import urlsplit

import validators as _validators

ALLOWED_SCHEMES = ("http", "https")


def validate_url(url: str) -> bool:
    """Return True if *url* is a well-formed absolute HTTP/S URL.

    Single-label hosts (``localhost``, intranet names) are accepted.
    """
    if not url:
        return False
    if urlsplit(url).scheme.lower() not in ALLOWED_SCHEMES:
        return False
    return bool(_validators.url(url, simple_host=True))
