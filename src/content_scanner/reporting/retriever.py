"""Report retriever: redeem a result secret for a cached verdict."""

from __future__ import annotations

import logging

from content_scanner.redaction import redact_secret
from content_scanner.reporting.cache import ResultCache
from content_scanner.reporting.models import ScanReport

logger = logging.getLogger(__name__)

UNKNOWN_SECRET_INFO = "Secret not recognised, file not scanned."


class ReportRetriever:
    """Looks up verdicts by secret. Never triggers a scan."""

    def __init__(self, cache: ResultCache) -> None:
        self._cache = cache

    def retrieve(self, secret: str) -> ScanReport:
        verdict = self._cache.get(secret)
        if verdict is None:
            logger.debug("No verdict for secret %s", redact_secret(secret))
            return ScanReport(clean=False, scanned=False, info=UNKNOWN_SECRET_INFO)
        return ScanReport(clean=verdict.clean, scanned=True, info=verdict.info)
