"""Decryption of Matrix encrypted attachments (AES-256-CTR + SHA-256)."""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import logging
from pathlib import Path

from Crypto.Cipher import AES

from content_scanner.errors import DecryptError
from content_scanner.reporting.models import AttachmentDescriptor

logger = logging.getLogger(__name__)

_SUPPORTED_ALG = "A256CTR"
_KEY_SIZE = 32
_IV_SIZE = 16


def _unpadded_b64decode(value: str, urlsafe: bool = False) -> bytes:
    """Decode base64 that may have had its ``=`` padding stripped."""
    padded = value + "=" * (-len(value) % 4)
    try:
        if urlsafe:
            return base64.urlsafe_b64decode(padded)
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptError("Malformed base64 in key material") from exc


def decrypt_bytes(ciphertext: bytes, descriptor: AttachmentDescriptor) -> bytes:
    """Verify and decrypt an attachment body using the descriptor's key."""
    key_info, iv_b64, hashes = descriptor.key, descriptor.iv, descriptor.hashes
    if key_info is None or iv_b64 is None or hashes is None:
        raise DecryptError("Descriptor carries no key material")

    if key_info.alg != _SUPPORTED_ALG or key_info.kty != "oct":
        raise DecryptError(f"Unsupported key algorithm: {key_info.alg}")

    key = _unpadded_b64decode(key_info.k, urlsafe=True)
    iv = _unpadded_b64decode(iv_b64)
    expected = _unpadded_b64decode(hashes.sha256)

    if len(key) != _KEY_SIZE:
        raise DecryptError("Key must be 256 bits")
    if len(iv) != _IV_SIZE:
        raise DecryptError("IV must be 128 bits")

    # The hash covers the ciphertext as stored on the media repository
    actual = hashlib.sha256(ciphertext).digest()
    if not hmac.compare_digest(actual, expected):
        raise DecryptError("Mismatched SHA-256 digest")

    cipher = AES.new(key, AES.MODE_CTR, nonce=b"", initial_value=iv)
    return cipher.decrypt(ciphertext)


def decrypt_file(
    input_path: str | Path,
    output_path: str | Path,
    descriptor: AttachmentDescriptor,
) -> None:
    """Decrypt *input_path* into *output_path*."""
    ciphertext = Path(input_path).read_bytes()
    plaintext = decrypt_bytes(ciphertext, descriptor)
    Path(output_path).write_bytes(plaintext)
    logger.debug("Decrypted %d bytes into %s", len(plaintext), output_path)
