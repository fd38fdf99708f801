"""Fetcher: download attachment bytes from the Matrix media repository."""

from __future__ import annotations

import logging

import httpx

from content_scanner.errors import UpstreamFetchError, UpstreamUnavailableError
from content_scanner.reporting.models import AttachmentDescriptor

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/_matrix/media/v1/download/"


def download_url(base_url: str, descriptor: AttachmentDescriptor) -> str:
    """HTTP URL of the media repository download for a descriptor."""
    return base_url.rstrip("/") + DOWNLOAD_PATH + descriptor.media_path


class MediaFetcher:
    """Retrieves raw (possibly encrypted) media bytes over HTTP."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._transport = transport

    async def fetch(self, descriptor: AttachmentDescriptor) -> bytes:
        url = download_url(self._base_url, descriptor)
        logger.info("Downloading %s", url)

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.content
        except httpx.TimeoutException as exc:
            logger.error("Timed out downloading %s: %s", url, exc)
            raise UpstreamUnavailableError("Timed out fetching requested URL") from exc
        except httpx.HTTPError as exc:
            logger.error("Failed to download %s: %s", url, exc)
            raise UpstreamFetchError("Failed to get requested URL") from exc
