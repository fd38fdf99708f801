"""Error taxonomy for the report pipeline.

Every error carries the HTTP status and machine-readable reason the web
layer renders. None of them are cached and none are retried by the core.
"""

from __future__ import annotations


class ContentScannerError(Exception):
    """Base class for pipeline failures surfaced to the caller."""

    status_code = 500
    reason = "MCS_UNKNOWN"

    def __init__(self, info: str) -> None:
        super().__init__(info)
        self.info = info


class ConfigurationError(ContentScannerError):
    """Required pipeline configuration is missing."""

    status_code = 500
    reason = "MCS_CONFIGURATION_ERROR"


class MalformedDescriptorError(ContentScannerError):
    """The attachment descriptor failed schema validation."""

    status_code = 400
    reason = "MCS_MALFORMED_JSON"


class UpstreamFetchError(ContentScannerError):
    """The media repository returned an error or could not be reached."""

    status_code = 502
    reason = "MCS_MEDIA_REQUEST_FAILED"


class UpstreamUnavailableError(ContentScannerError):
    """A fetch or scan exceeded its timeout."""

    status_code = 504
    reason = "MCS_MEDIA_UNAVAILABLE"


class DecryptError(ContentScannerError):
    """Ciphertext did not match the supplied key material."""

    status_code = 400
    reason = "MCS_MEDIA_FAILED_TO_DECRYPT"


class ScanInvocationError(ContentScannerError):
    """The scan command could not be executed."""

    status_code = 500
    reason = "MCS_SCAN_FAILED"
