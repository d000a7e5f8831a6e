"""Tests for configuration loading and log redaction."""

from __future__ import annotations

from onair.infra.logging import redact_secrets
from onair.infra.settings import Settings
from onair.runtime.station import CycleTiming


class TestSettings:
    def test_defaults_match_station_timing(self, monkeypatch):
        for name in ("TALK_WINDOW_SECONDS", "NOT_FOUND_RETRY_SECONDS", "RECOVERY_SECONDS", "FALLBACK_TRACK_MS"):
            monkeypatch.delenv(name, raising=False)
        cfg = Settings(_env_file=None)
        timing = CycleTiming.from_settings(cfg)
        assert timing == CycleTiming(
            talk_window_seconds=60.0,
            not_found_retry_ms=5000,
            recovery_ms=10000,
            fallback_track_ms=30000,
        )
        assert cfg.port == 5000

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TALK_WINDOW_SECONDS", "2.5")
        monkeypatch.setenv("RECOVERY_SECONDS", "1")
        monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.test, http://b.test")
        cfg = Settings(_env_file=None)
        assert cfg.talk_window_seconds == 2.5
        assert CycleTiming.from_settings(cfg).recovery_ms == 1000
        assert cfg.origins == ["http://a.test", "http://b.test"]


class TestRedaction:
    def test_secret_keys_are_redacted(self):
        event = redact_secrets(None, None, {"event": "x", "api_key": "sk-abc", "client_secret": "s"})
        assert event["api_key"] == "***REDACTED***"
        assert event["client_secret"] == "***REDACTED***"
        assert event["event"] == "x"

    def test_secret_patterns_in_values(self):
        event = redact_secrets(
            None,
            None,
            {"event": "request", "error": "401 for Bearer abc.def-123 with key=zzz"},
        )
        assert "abc.def-123" not in event["error"]
        assert "zzz" not in event["error"]

    def test_nested_values(self):
        event = redact_secrets(None, None, {"event": "e", "detail": {"headers": ["Bearer tok123"]}})
        assert event["detail"]["headers"] == ["Bearer ***"]
