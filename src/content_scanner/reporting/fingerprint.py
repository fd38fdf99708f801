"""Deterministic fingerprints of attachment descriptors.

The fingerprint is computed over the encrypted descriptor rather than the
decrypted content, so knowing an mxc URL is not enough to obtain (or forge)
the verdict for someone else's file. It doubles as the result secret.
"""

from __future__ import annotations

import base64
import hashlib
import json

from content_scanner.reporting.models import AttachmentDescriptor


def canonicalize(descriptor: AttachmentDescriptor | dict) -> str:
    """Serialize a descriptor to canonical JSON (sorted keys, no whitespace)."""
    if not isinstance(descriptor, AttachmentDescriptor):
        descriptor = AttachmentDescriptor.parse(descriptor)
    return json.dumps(
        descriptor.model_dump(exclude_none=True),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def fingerprint(descriptor: AttachmentDescriptor | dict) -> str:
    """Base64-encoded SHA-256 of the canonical descriptor."""
    digest = hashlib.sha256(canonicalize(descriptor).encode("utf-8")).digest()
    return base64.b64encode(digest).decode("ascii")
