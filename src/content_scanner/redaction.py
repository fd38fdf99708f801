"""Log-safe rendering of result secrets."""

from __future__ import annotations

_VISIBLE = 4


def redact_secret(secret: str) -> str:
    """Show only the first and last four characters of a secret."""
    if len(secret) <= _VISIBLE * 2:
        return "*" * len(secret)
    return f"{secret[:_VISIBLE]}...{secret[-_VISIBLE:]}"
