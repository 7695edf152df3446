"""
Identifier generators for links and clicks.
"""

from __future__ import annotations

import random
import string
import time
import uuid

_BASE36 = string.digits + string.ascii_lowercase

LINK_ID_PREFIX = "link_"


def generate_link_id() -> str:
    """Generate a tracking link identifier.

    Format: ``link_<epoch milliseconds>_<9 base36 characters>``. The time
    component orders ids by creation; the random suffix separates links
    created within the same millisecond.
    """
    millis = int(time.time() * 1000)
    suffix = "".join(random.choice(_BASE36) for _ in range(9))
    return f"{LINK_ID_PREFIX}{millis}_{suffix}"


def generate_click_id() -> str:
    """Generate the correlation token tying a click to its deferred enrichment."""
    return uuid.uuid4().hex
