"""Report generator: orchestrates fetch, decrypt, scan and caching."""

from __future__ import annotations

import asyncio
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from content_scanner.config import ScanSettings
from content_scanner.errors import ConfigurationError, DecryptError
from content_scanner.media.decrypt import decrypt_file
from content_scanner.media.fetcher import MediaFetcher
from content_scanner.redaction import redact_secret
from content_scanner.reporting.cache import ResultCache
from content_scanner.reporting.fingerprint import fingerprint
from content_scanner.reporting.models import AttachmentDescriptor, ScanVerdict
from content_scanner.scanner.invoker import ScannerInvoker

logger = logging.getLogger(__name__)

Decryptor = Callable[[Path, Path, AttachmentDescriptor], None]

_ENCRYPTED_NAME = "unsafeEncryptedFile"
_DECRYPTED_NAME = "unsafeFile"


class ReportGenerator:
    """The only component that produces new verdicts.

    Concurrent calls for the same uncached fingerprint share one in-flight
    pipeline. Failures are never cached, and the temporary working
    directory is removed on every exit path.
    """

    def __init__(
        self,
        settings: ScanSettings,
        cache: ResultCache,
        fetcher: MediaFetcher | None = None,
        invoker: ScannerInvoker | None = None,
        decryptor: Decryptor = decrypt_file,
    ) -> None:
        self._settings = settings
        self._cache = cache
        self._fetcher = fetcher
        self._invoker = invoker
        self._decryptor = decryptor
        self._in_flight: dict[str, asyncio.Task[ScanVerdict]] = {}

    @property
    def cache(self) -> ResultCache:
        return self._cache

    async def generate(self, descriptor: AttachmentDescriptor | dict) -> ScanVerdict:
        if not isinstance(descriptor, AttachmentDescriptor):
            descriptor = AttachmentDescriptor.parse(descriptor)
        self._settings.require()

        secret = fingerprint(descriptor)

        cached = self._cache.get(secret)
        if cached is not None:
            logger.info(
                "Returning cached result: url = %s, clean = %s",
                descriptor.url,
                cached.clean,
            )
            return cached

        # No suspension point between the cache miss and registration below
        task = self._in_flight.get(secret)
        if task is None:
            task = asyncio.ensure_future(self._run_pipeline(descriptor, secret))
            self._in_flight[secret] = task
            task.add_done_callback(lambda t: self._forget(secret, t))
        else:
            logger.info(
                "Joining in-flight scan: url = %s, secret = %s",
                descriptor.url,
                redact_secret(secret),
            )

        return await asyncio.shield(task)

    def _forget(self, secret: str, task: asyncio.Task[ScanVerdict]) -> None:
        if self._in_flight.get(secret) is task:
            del self._in_flight[secret]
        # Mark the exception retrieved even when every waiter was cancelled
        if not task.cancelled():
            task.exception()

    async def _run_pipeline(
        self, descriptor: AttachmentDescriptor, secret: str
    ) -> ScanVerdict:
        fetcher = self._fetcher or MediaFetcher(
            self._settings.base_url, timeout=self._settings.fetch_timeout
        )
        invoker = self._invoker or ScannerInvoker(
            self._settings.script, timeout=self._settings.scan_timeout
        )

        try:
            workdir = tempfile.TemporaryDirectory(
                prefix="av-", dir=self._settings.temp_directory
            )
        except OSError as exc:
            raise ConfigurationError(
                f"Temporary directory is not writable: {self._settings.temp_directory}"
            ) from exc

        with workdir as temp_dir:
            file_path = Path(temp_dir) / _ENCRYPTED_NAME
            data = await fetcher.fetch(descriptor)
            logger.info("Writing %d bytes to %s", len(data), file_path)
            await asyncio.to_thread(file_path.write_bytes, data)

            if descriptor.encrypted:
                plain_path = Path(temp_dir) / _DECRYPTED_NAME
                logger.info("Decrypting %s, writing to %s", file_path, plain_path)
                try:
                    await asyncio.to_thread(
                        self._decryptor, file_path, plain_path, descriptor
                    )
                except DecryptError:
                    logger.warning("Failed to decrypt %s", descriptor.url)
                    raise
                except ValueError as exc:
                    logger.warning("Failed to decrypt %s: %s", descriptor.url, exc)
                    raise DecryptError("Failed to decrypt file") from exc
            else:
                # File is already plaintext
                plain_path = file_path

            outcome = await invoker.run(plain_path)

        logger.info(
            "Result: url = %s, clean = %s, exit code = %d",
            descriptor.url,
            outcome.clean,
            outcome.exit_code,
        )

        verdict = ScanVerdict(
            clean=outcome.clean,
            info=outcome.info,
            exit_code=outcome.exit_code,
            fingerprint=secret,
        )
        self._cache.put(secret, verdict)
        return verdict
