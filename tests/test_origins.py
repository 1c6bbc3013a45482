"""Tests for origins module."""

import pytest

from grading_relay.config import Settings
from grading_relay.origins import MATCH_ALL, OriginPolicy, cors_headers

SITE = "https://learn.example.org"


class TestOriginPolicy:
    def test_exact_match(self):
        """Configured origins should be echoed back."""
        policy = OriginPolicy.build(origins=[SITE])
        assert policy.resolve(SITE) == SITE

    def test_exact_match_is_exact(self):
        """Prefixes, suffixes and case variants should not match."""
        policy = OriginPolicy.build(origins=[SITE], allow_localhost=False)
        assert policy.resolve(SITE + ".evil.com") is None
        assert policy.resolve("https://LEARN.example.org") is None
        assert policy.resolve("http://learn.example.org") is None

    @pytest.mark.parametrize("origin", [
        "http://localhost:3000",
        "http://localhost:8080",
        "http://localhost:1",
    ])
    def test_localhost_any_port(self, origin):
        """http://localhost:<port> should be allowed by default."""
        assert OriginPolicy.build().resolve(origin) == origin

    @pytest.mark.parametrize("origin", [
        "http://localhost",
        "https://localhost:3000",
        "http://localhost:3000.evil.com",
        "http://localhost:abc",
        "http://127.0.0.1:3000",
    ])
    def test_localhost_lookalikes(self, origin):
        """Only the exact loopback pattern should match."""
        assert OriginPolicy.build().resolve(origin) is None

    def test_localhost_disabled(self):
        """Localhost should be rejected when turned off."""
        policy = OriginPolicy.build(allow_localhost=False)
        assert policy.resolve("http://localhost:3000") is None

    def test_pattern_full_match(self):
        """Patterns must match the whole origin."""
        policy = OriginPolicy.build(patterns=[r"https://[a-z-]+\.github\.io"])
        assert policy.resolve("https://someone.github.io") == "https://someone.github.io"
        assert policy.resolve("https://someone.github.io.evil.com") is None

    @pytest.mark.parametrize("origin", [None, "", "null"])
    def test_missing_origin_rejected_by_default(self, origin):
        """No origin should be rejected unless match-all is opted into."""
        assert OriginPolicy.build(origins=[SITE]).resolve(origin) is None

    @pytest.mark.parametrize("origin", [None, "", "null"])
    def test_missing_origin_match_all(self, origin):
        """Under the match-all policy a missing origin resolves to '*'."""
        policy = OriginPolicy.build(allow_missing=True)
        assert policy.resolve(origin) == MATCH_ALL

    def test_match_all_does_not_open_other_origins(self):
        """Match-all only covers missing origins, not unknown ones."""
        policy = OriginPolicy.build(origins=[SITE], allow_missing=True)
        assert policy.resolve("https://evil.example") is None

    def test_from_settings(self):
        """Policy should mirror the settings."""
        settings = Settings(
            allowed_origins=(SITE,),
            origin_patterns=(r"https://.*\.school\.edu",),
            allow_localhost=False,
            allow_missing_origin=True,
        )
        policy = OriginPolicy.from_settings(settings)
        assert policy.is_allowed(SITE)
        assert policy.is_allowed("https://cs.school.edu")
        assert not policy.is_allowed("http://localhost:3000")
        assert policy.resolve(None) == MATCH_ALL


class TestCorsHeaders:
    def test_allowed_origin(self):
        """Allowed origin should get the full header set."""
        headers = cors_headers(SITE)
        assert headers["Access-Control-Allow-Origin"] == SITE
        assert headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
        assert headers["Access-Control-Allow-Headers"] == "Content-Type"
        assert headers["Vary"] == "Origin"

    def test_match_all(self):
        """'*' should not vary by origin."""
        headers = cors_headers(MATCH_ALL)
        assert headers["Access-Control-Allow-Origin"] == "*"
        assert "Vary" not in headers

    def test_rejected(self):
        """Rejected origin should get no CORS headers."""
        assert cors_headers(None) == {}
