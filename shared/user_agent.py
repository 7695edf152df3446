"""
User-Agent classification.

Maps a raw ``User-Agent`` header to coarse browser / OS / device labels by
case-insensitive substring matching. Vendor tokens overlap (every Chromium UA
also says "Safari", every Edge UA also says "Chrome"), so each check below is
ordered and guarded against the tokens of the browsers ahead of it.
"""

from __future__ import annotations

from typing import Optional

from schemas.models.enums import Browser, DeviceType, OperatingSystem
from schemas.models.link import UserAgentInfo


def detect_browser(ua: str) -> Browser:
    if "chrome" in ua and "edg" not in ua:
        return Browser.CHROME
    if "safari" in ua and "chrome" not in ua:
        return Browser.SAFARI
    if "firefox" in ua:
        return Browser.FIREFOX
    if "edg" in ua:
        return Browser.EDGE
    if "opera" in ua or "opr" in ua:
        return Browser.OPERA
    return Browser.UNKNOWN


def detect_os(ua: str) -> OperatingSystem:
    if "windows" in ua:
        return OperatingSystem.WINDOWS
    if "mac" in ua:
        return OperatingSystem.MACOS
    if "linux" in ua:
        return OperatingSystem.LINUX
    if "android" in ua:
        return OperatingSystem.ANDROID
    if "iphone" in ua or "ipad" in ua:
        return OperatingSystem.IOS
    return OperatingSystem.UNKNOWN


def detect_device(ua: str) -> DeviceType:
    if "mobile" in ua:
        return DeviceType.MOBILE
    if "tablet" in ua or "ipad" in ua:
        return DeviceType.TABLET
    return DeviceType.DESKTOP


def classify_user_agent(user_agent: Optional[str]) -> UserAgentInfo:
    """Classify *user_agent* into browser, OS and device.

    Never fails: a missing or unrecognised header yields
    ``Unknown`` / ``Unknown`` / ``Desktop``.

    Note the precedence quirks this inherits from plain substring matching:
    "mac" is tested before "iphone"/"ipad", and "linux" before "android", so
    iOS and Android UAs (which embed "Mac OS X" and "Linux") land on macOS and
    Linux respectively. The stored labels keep that behaviour for
    comparability with existing click histories.
    """
    ua = (user_agent or "").lower()
    return UserAgentInfo(
        browser=detect_browser(ua),
        os=detect_os(ua),
        device=detect_device(ua),
    )
