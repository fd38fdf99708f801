"""Global configuration: YAML file, env vars, defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from content_scanner.errors import ConfigurationError
from content_scanner.reporting.cache import (
    EvictionPolicy,
    MaxEntries,
    NeverEvict,
    TimeToLive,
)


def _default_config_path() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "content-scanner" / "config.yaml"
    return Path.home() / ".config" / "content-scanner" / "config.yaml"


@dataclass
class ScanSettings:
    """Settings consumed by the report generator."""

    base_url: str | None = None
    temp_directory: str | None = None
    script: str | None = None
    fetch_timeout: float = 30.0
    scan_timeout: float = 120.0

    def require(self) -> None:
        """Raise ConfigurationError unless every pipeline field is set."""
        missing = [
            name
            for name in ("base_url", "temp_directory", "script")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Missing scan configuration: {', '.join(missing)}"
            )


@dataclass
class CacheSettings:
    """Eviction bounds for the result cache. Unset means never evict."""

    max_entries: int | None = None
    ttl: float | None = None

    def build_policy(self) -> EvictionPolicy:
        if self.max_entries is not None and self.ttl is not None:
            raise ConfigurationError(
                "cache.max_entries and cache.ttl are mutually exclusive"
            )
        if self.max_entries is not None:
            return MaxEntries(self.max_entries)
        if self.ttl is not None:
            return TimeToLive(self.ttl)
        return NeverEvict()


@dataclass
class ContentScannerConfig:
    """Application-wide configuration."""

    scan: ScanSettings = field(default_factory=ScanSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    web_host: str = "127.0.0.1"
    web_port: int = 9000

    @classmethod
    def load(cls, path: str | Path | None = None) -> ContentScannerConfig:
        """Load config from a YAML file, then apply environment overrides."""
        config_path = Path(path) if path else _default_config_path()
        data: dict = {}
        if config_path.is_file():
            data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
            if not isinstance(data, dict):
                raise ConfigurationError("Config YAML must be a mapping")
        elif path:
            raise ConfigurationError(f"Config file not found: {config_path}")

        config = cls.from_dict(data)

        env_base_url = os.environ.get("CONTENT_SCANNER_BASE_URL")
        if env_base_url:
            config.scan.base_url = env_base_url

        env_temp = os.environ.get("CONTENT_SCANNER_TEMP_DIRECTORY")
        if env_temp:
            config.scan.temp_directory = env_temp

        env_script = os.environ.get("CONTENT_SCANNER_SCRIPT")
        if env_script:
            config.scan.script = env_script

        env_port = os.environ.get("CONTENT_SCANNER_WEB_PORT")
        if env_port:
            config.web_port = int(env_port)

        return config

    @classmethod
    def from_dict(cls, data: dict) -> ContentScannerConfig:
        web = data.get("web") or {}
        scan = data.get("scan") or {}
        cache = data.get("cache") or {}

        config = cls()
        config.web_host = web.get("host", config.web_host)
        config.web_port = int(web.get("port", config.web_port))

        config.scan = ScanSettings(
            base_url=scan.get("base_url"),
            temp_directory=scan.get("temp_directory"),
            script=scan.get("script"),
            fetch_timeout=float(scan.get("fetch_timeout", 30.0)),
            scan_timeout=float(scan.get("scan_timeout", 120.0)),
        )

        max_entries = cache.get("max_entries")
        ttl = cache.get("ttl")
        config.cache = CacheSettings(
            max_entries=int(max_entries) if max_entries is not None else None,
            ttl=float(ttl) if ttl is not None else None,
        )
        return config
