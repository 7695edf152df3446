"""
Unit tests for the shared/ utility modules.

Covers:
- shared.ip_utils     (get_client_ip, get_client_port, get_referrer, normalize_ip)
- shared.generators   (generate_link_id, generate_click_id)
- shared.validators   (validate_url)
- shared.logging      (hash_ip, should_sample)
"""

from __future__ import annotations

import re
import time
from unittest.mock import MagicMock

import pytest

from shared import logging as shared_logging
from shared.generators import generate_click_id, generate_link_id
from shared.ip_utils import get_client_ip, get_client_port, get_referrer, normalize_ip
from shared.validators import validate_url


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_request(headers: dict, client_host="10.0.0.1", client_port=40000) -> MagicMock:
    """Minimal mock of a FastAPI Request."""
    req = MagicMock()
    req.headers = headers
    if client_host is None:
        req.client = None
    else:
        req.client = MagicMock()
        req.client.host = client_host
        req.client.port = client_port
    return req


# ---------------------------------------------------------------------------
# shared.ip_utils
# ---------------------------------------------------------------------------


class TestGetClientIp:
    def test_forwarded_for_first_entry(self):
        req = _make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})
        assert get_client_ip(req) == "203.0.113.7"

    def test_forwarded_for_beats_real_ip(self):
        req = _make_request({"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "198.51.100.1"})
        assert get_client_ip(req) == "203.0.113.7"

    def test_real_ip_fallback(self):
        req = _make_request({"X-Real-IP": "198.51.100.1"})
        assert get_client_ip(req) == "198.51.100.1"

    def test_blank_forwarded_for_falls_through(self):
        req = _make_request({"X-Forwarded-For": " , 1.2.3.4", "X-Real-IP": "198.51.100.1"})
        assert get_client_ip(req) == "198.51.100.1"

    def test_connection_address_fallback(self):
        assert get_client_ip(_make_request({})) == "10.0.0.1"

    def test_unknown_when_nothing_available(self):
        assert get_client_ip(_make_request({}, client_host=None)) == "Unknown"


class TestClientPortAndReferrer:
    def test_port(self):
        assert get_client_port(_make_request({}, client_port=51515)) == 51515

    def test_port_missing(self):
        assert get_client_port(_make_request({}, client_host=None)) is None

    def test_referrer(self):
        assert get_referrer(_make_request({"Referer": "https://a.example/"})) == "https://a.example/"

    def test_referrer_alternate_spelling(self):
        assert get_referrer(_make_request({"Referrer": "https://b.example/"})) == "https://b.example/"

    def test_referrer_defaults_to_direct(self):
        assert get_referrer(_make_request({})) == "Direct"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("::ffff:203.0.113.7", "203.0.113.7"),
        ("::FFFF:203.0.113.7", "203.0.113.7"),
        ("203.0.113.7", "203.0.113.7"),
        ("::1", "::1"),
        ("", "Unknown"),
        (None, "Unknown"),
    ],
)
def test_normalize_ip(raw, expected):
    assert normalize_ip(raw) == expected


# ---------------------------------------------------------------------------
# shared.generators
# ---------------------------------------------------------------------------


class TestGenerators:
    def test_link_id_format(self):
        link_id = generate_link_id()
        assert re.fullmatch(r"link_\d{13}_[0-9a-z]{9}", link_id)

    def test_link_id_embeds_current_time(self):
        before = int(time.time() * 1000)
        millis = int(generate_link_id().split("_")[1])
        after = int(time.time() * 1000)
        assert before <= millis <= after

    def test_link_ids_unique(self):
        assert len({generate_link_id() for _ in range(200)}) == 200

    def test_click_id(self):
        click_id = generate_click_id()
        assert re.fullmatch(r"[0-9a-f]{32}", click_id)
        assert click_id != generate_click_id()


# ---------------------------------------------------------------------------
# shared.validators
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://example.com", True),
        ("http://example.com/path?q=1", True),
        ("http://localhost:3000/page", True),
        ("http://intranet/page", True),
        ("http://10.0.0.5/page", True),
        ("ftp://example.com/file", False),
        ("javascript:alert(1)", False),
        ("example.com", False),
        ("", False),
    ],
)
def test_validate_url(url, expected):
    assert validate_url(url) is expected


# ---------------------------------------------------------------------------
# shared.logging
# ---------------------------------------------------------------------------


class TestLoggingHelpers:
    def test_hash_ip_passthrough_in_development(self, monkeypatch):
        monkeypatch.setitem(shared_logging._state, "production", False)
        assert shared_logging.hash_ip("8.8.8.8") == "8.8.8.8"

    def test_hash_ip_hashes_in_production(self, monkeypatch):
        monkeypatch.setitem(shared_logging._state, "production", True)
        hashed = shared_logging.hash_ip("8.8.8.8")
        assert hashed != "8.8.8.8"
        assert len(hashed) == 16

    def test_hash_ip_none(self):
        assert shared_logging.hash_ip(None) is None

    @pytest.mark.parametrize("rate, expected", [(1.0, True), (0.0, False)])
    def test_should_sample_bounds(self, monkeypatch, rate, expected):
        monkeypatch.setitem(shared_logging.SAMPLING_RATES, "click_recorded", rate)
        assert shared_logging.should_sample("click_recorded") is expected

    def test_unconfigured_event_always_sampled(self):
        assert shared_logging.should_sample("something_else") is True

    def test_redacts_secret_keys(self):
        out = shared_logging.redact_sensitive_fields(
            None, "info", {"event": "x", "api_token": "abc", "link_id": "l"}
        )
        assert out["api_token"] == "***REDACTED***"
        assert out["link_id"] == "l"
