"""
Shared test configuration.

Patches dotenv so pydantic-settings never reads the project's real .env file
during tests. Tests control config exclusively through monkeypatch.setenv().
"""

from datetime import datetime, timezone

import pytest

from schemas.models.link import ClickRecord, LinkDoc


@pytest.fixture(autouse=True)
def disable_dotenv_loading(monkeypatch):
    """Prevent pydantic-settings from loading .env files in all tests."""
    import pydantic_settings.sources.providers.dotenv as ps_dotenv

    monkeypatch.setattr(ps_dotenv, "dotenv_values", lambda *a, **kw: {})


CHROME_WINDOWS_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)


@pytest.fixture
def make_link():
    def _make(link_id="link_1700000000000_abc123xyz", records=(), **overrides):
        data = dict(
            link_id=link_id,
            name="Spring campaign",
            destination_url="https://example.com/landing",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            clicks=len(records),
            click_records=list(records),
        )
        data.update(overrides)
        return LinkDoc(**data)

    return _make


@pytest.fixture
def make_record():
    def _make(**overrides):
        data = dict(
            click_id="c" * 32,
            timestamp=datetime(2024, 1, 2, tzinfo=timezone.utc),
            ip_address="8.8.8.8",
            user_agent=CHROME_WINDOWS_UA,
        )
        data.update(overrides)
        return ClickRecord(**data)

    return _make
