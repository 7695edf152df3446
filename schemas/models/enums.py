"""
Enumerations stored on click records.

All are ``str`` enums so they serialise to the plain labels kept in MongoDB
and returned by the API (``"Chrome"``, ``"granted"``, ...).
"""

from __future__ import annotations

from enum import Enum


class PermissionState(str, Enum):
    """Outcome of a client-side permission request.

    NOT_REQUESTED is the value every click record starts with, before any
    deferred enrichment arrives.
    """

    NOT_REQUESTED = "not_requested"
    GRANTED = "granted"
    DENIED = "denied"
    NO_CAMERA = "no_camera"
    UNAVAILABLE = "unavailable"
    TIMEOUT = "timeout"
    NOT_SUPPORTED = "not_supported"
    ERROR = "error"


class Browser(str, Enum):
    CHROME = "Chrome"
    SAFARI = "Safari"
    FIREFOX = "Firefox"
    EDGE = "Edge"
    OPERA = "Opera"
    UNKNOWN = "Unknown"


class OperatingSystem(str, Enum):
    WINDOWS = "Windows"
    MACOS = "macOS"
    LINUX = "Linux"
    ANDROID = "Android"
    IOS = "iOS"
    UNKNOWN = "Unknown"


class DeviceType(str, Enum):
    DESKTOP = "Desktop"
    MOBILE = "Mobile"
    TABLET = "Tablet"


UNKNOWN = "Unknown"
