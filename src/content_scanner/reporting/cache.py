"""Volatile result cache: fingerprint to verdict, with pluggable eviction."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from content_scanner.redaction import redact_secret
from content_scanner.reporting.models import ScanVerdict

logger = logging.getLogger(__name__)


class EvictionPolicy(Protocol):
    """Decides when cached verdicts are dropped."""

    def is_expired(self, stored_at: float, now: float) -> bool:
        """Whether an entry stored at *stored_at* is stale at *now*."""
        ...

    def excess(self, size: int) -> int:
        """How many of the oldest entries to drop at the given size."""
        ...


class NeverEvict:
    """Keep every verdict for the lifetime of the process."""

    def is_expired(self, stored_at: float, now: float) -> bool:
        return False

    def excess(self, size: int) -> int:
        return 0


class MaxEntries:
    """Bound the cache size, dropping the oldest insertions first."""

    def __init__(self, limit: int) -> None:
        if limit < 1:
            raise ValueError("MaxEntries limit must be at least 1")
        self.limit = limit

    def is_expired(self, stored_at: float, now: float) -> bool:
        return False

    def excess(self, size: int) -> int:
        return max(0, size - self.limit)


class TimeToLive:
    """Drop verdicts older than a fixed number of seconds."""

    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("TimeToLive seconds must be positive")
        self.seconds = seconds

    def is_expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at >= self.seconds

    def excess(self, size: int) -> int:
        return 0


@dataclass(frozen=True)
class _Entry:
    verdict: ScanVerdict
    stored_at: float


class ResultCache:
    """In-process mapping from fingerprint to verdict.

    Entries are write-once: a second ``put`` for a live key is ignored.
    Nothing is persisted; ``clear()`` resets the whole cache at once.
    """

    def __init__(
        self,
        policy: EvictionPolicy | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._policy = policy or NeverEvict()
        self._clock = clock
        self._entries: dict[str, _Entry] = {}

    def get(self, fingerprint: str) -> ScanVerdict | None:
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        if self._policy.is_expired(entry.stored_at, self._clock()):
            logger.debug("Expired cached verdict %s", redact_secret(fingerprint))
            self._entries.pop(fingerprint, None)
            return None
        return entry.verdict

    def put(self, fingerprint: str, verdict: ScanVerdict) -> None:
        if self.get(fingerprint) is not None:
            return
        self._entries[fingerprint] = _Entry(verdict, self._clock())

        # dicts keep insertion order, so the head is the oldest entry
        for _ in range(self._policy.excess(len(self._entries))):
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("Evicted cached verdict %s", redact_secret(oldest))

    def clear(self) -> None:
        self._entries = {}
        logger.info("Result cache cleared")

    def __contains__(self, fingerprint: str) -> bool:
        return self.get(fingerprint) is not None

    def __len__(self) -> int:
        now = self._clock()
        expired = [
            key
            for key, entry in self._entries.items()
            if self._policy.is_expired(entry.stored_at, now)
        ]
        for key in expired:
            del self._entries[key]
        return len(self._entries)
