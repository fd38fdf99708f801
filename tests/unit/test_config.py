"""Tests for configuration loading and secret redaction."""

from __future__ import annotations

from pathlib import Path

import pytest

from content_scanner.config import CacheSettings, ContentScannerConfig, ScanSettings
from content_scanner.errors import ConfigurationError
from content_scanner.redaction import redact_secret
from content_scanner.reporting.cache import MaxEntries, NeverEvict, TimeToLive

CONFIG_YAML = """
web:
  host: 0.0.0.0
  port: 9100
scan:
  base_url: https://matrix.example.org
  temp_directory: /tmp/scanner
  script: ./example.sh
  fetch_timeout: 5
cache:
  max_entries: 1000
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "CONTENT_SCANNER_BASE_URL",
        "CONTENT_SCANNER_TEMP_DIRECTORY",
        "CONTENT_SCANNER_SCRIPT",
        "CONTENT_SCANNER_WEB_PORT",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


def test_load_yaml(config_path):
    config = ContentScannerConfig.load(config_path)
    assert config.web_host == "0.0.0.0"
    assert config.web_port == 9100
    assert config.scan.base_url == "https://matrix.example.org"
    assert config.scan.temp_directory == "/tmp/scanner"
    assert config.scan.script == "./example.sh"
    assert config.scan.fetch_timeout == 5.0
    assert config.scan.scan_timeout == 120.0
    assert isinstance(config.cache.build_policy(), MaxEntries)


def test_env_overrides(config_path, monkeypatch):
    monkeypatch.setenv("CONTENT_SCANNER_SCRIPT", "clamdscan --fdpass")
    monkeypatch.setenv("CONTENT_SCANNER_WEB_PORT", "9200")
    config = ContentScannerConfig.load(config_path)
    assert config.scan.script == "clamdscan --fdpass"
    assert config.web_port == 9200


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationError):
        ContentScannerConfig.load(tmp_path / "missing.yaml")


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        ContentScannerConfig.load(path)


def test_default_location_without_file(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    config = ContentScannerConfig.load()
    assert config.scan.base_url is None
    assert config.web_port == 9000


def test_require_lists_missing_fields():
    settings = ScanSettings(base_url="https://matrix.example.org")
    with pytest.raises(ConfigurationError, match="temp_directory, script"):
        settings.require()


class TestCachePolicy:
    def test_default_never_evicts(self):
        assert isinstance(CacheSettings().build_policy(), NeverEvict)

    def test_ttl(self):
        policy = CacheSettings(ttl=300).build_policy()
        assert isinstance(policy, TimeToLive)
        assert policy.seconds == 300

    def test_both_bounds_rejected(self):
        with pytest.raises(ConfigurationError):
            CacheSettings(max_entries=10, ttl=60).build_policy()


class TestRedaction:
    def test_keeps_prefix_and_suffix(self):
        secret = "abcdEFGHIJKLMNOPwxyz"
        redacted = redact_secret(secret)
        assert redacted == "abcd...wxyz"
        assert "EFGH" not in redacted

    def test_short_secret_fully_masked(self):
        assert redact_secret("abcdefgh") == "********"
