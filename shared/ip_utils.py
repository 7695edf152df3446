"""
Client address resolution for FastAPI requests.

Takes an explicit ``Request`` parameter so the functions are testable
without a running server.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

UNKNOWN_IP = "Unknown"
DIRECT_REFERRER = "Direct"

_IPV4_MAPPED_PREFIX = "::ffff:"


def get_client_ip(request: Request) -> str:
    """Extract the client IP from a FastAPI ``Request``.

    Checks proxy headers in priority order before falling back to the
    direct connection address:

    1. ``X-Forwarded-For``: standard proxy header (first IP in list)
    2. ``X-Real-IP``: nginx / other reverse proxies

    Returns:
        The resolved client IP string, or ``"Unknown"`` if none can be found.
    """
    forwarded: Optional[str] = request.headers.get("X-Forwarded-For")
    if forwarded:
        client_ip = forwarded.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip: Optional[str] = request.headers.get("X-Real-IP")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host
    return UNKNOWN_IP


def get_client_port(request: Request) -> Optional[int]:
    """Remote port of the originating connection, when the server exposes it."""
    if request.client and request.client.port:
        return request.client.port
    return None


def get_referrer(request: Request) -> str:
    referrer = request.headers.get("Referer") or request.headers.get("Referrer")
    return referrer or DIRECT_REFERRER


def normalize_ip(ip_address: Optional[str]) -> str:
    """Strip the IPv4-mapped IPv6 prefix (``::ffff:1.2.3.4`` → ``1.2.3.4``)."""
    if not ip_address:
        return UNKNOWN_IP
    ip_address = ip_address.strip()
    if ip_address.lower().startswith(_IPV4_MAPPED_PREFIX):
        return ip_address[len(_IPV4_MAPPED_PREFIX):]
    return ip_address
