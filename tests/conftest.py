"""Shared test fixtures."""

from __future__ import annotations

import base64
import hashlib
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from Crypto.Cipher import AES

from content_scanner.config import ScanSettings
from content_scanner.reporting.cache import ResultCache
from content_scanner.scanner.invoker import ScanOutcome

PLAINTEXT = b"Hello, this is a perfectly innocent attachment.\n"

# Fixed key material so fingerprints are stable across runs
_KEY = bytes(range(32))
_IV = bytes(range(8)) + b"\x00" * 8


def _unpadded(data: bytes, urlsafe: bool = False) -> str:
    encode = base64.urlsafe_b64encode if urlsafe else base64.b64encode
    return encode(data).decode("ascii").rstrip("=")


def _encrypt(plaintext: bytes, key: bytes = _KEY, iv: bytes = _IV) -> tuple[bytes, dict]:
    """Encrypt *plaintext* the way Matrix clients do; return (ciphertext, file)."""
    cipher = AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv)
    ciphertext = cipher.encrypt(plaintext)
    file = {
        "v": "v2",
        "key": {
            "alg": "A256CTR",
            "ext": True,
            "k": _unpadded(key, urlsafe=True),
            "key_ops": ["encrypt", "decrypt"],
            "kty": "oct",
        },
        "iv": _unpadded(iv),
        "hashes": {"sha256": _unpadded(hashlib.sha256(ciphertext).digest())},
        "url": "mxc://example.org/encryptedMediaId",
        "mimetype": "text/plain",
    }
    return ciphertext, file


@pytest.fixture
def plaintext() -> bytes:
    return PLAINTEXT


@pytest.fixture
def plain_file() -> dict:
    return {"url": "mxc://example.org/plainMediaId", "mimetype": "text/plain"}


@pytest.fixture
def make_encrypted():
    return _encrypt


@pytest.fixture
def encrypted() -> tuple[bytes, dict]:
    return _encrypt(PLAINTEXT)


@pytest.fixture
def temp_root(tmp_path: Path) -> Path:
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def settings(temp_root: Path) -> ScanSettings:
    return ScanSettings(
        base_url="https://media.example.org",
        temp_directory=str(temp_root),
        script="/usr/bin/clamdscan --no-summary",
    )


@pytest.fixture
def cache() -> ResultCache:
    return ResultCache()


@pytest.fixture
def fetcher() -> MagicMock:
    mock = MagicMock()
    mock.fetch = AsyncMock(return_value=PLAINTEXT)
    return mock


@pytest.fixture
def invoker() -> MagicMock:
    mock = MagicMock()
    mock.run = AsyncMock(
        return_value=ScanOutcome(clean=True, info="File clean at now", exit_code=0)
    )
    return mock
