"""FastAPI application factory for the content scanner."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from content_scanner import __version__
from content_scanner.config import ContentScannerConfig
from content_scanner.errors import ContentScannerError, MalformedDescriptorError
from content_scanner.reporting.cache import ResultCache
from content_scanner.reporting.generator import ReportGenerator
from content_scanner.reporting.retriever import ReportRetriever

logger = logging.getLogger(__name__)


def create_app(
    config: ContentScannerConfig | None = None,
    generator: ReportGenerator | None = None,
) -> FastAPI:
    """Build and return the FastAPI application."""
    config = config or ContentScannerConfig.load()

    app = FastAPI(
        title="Content Scanner",
        version=__version__,
        docs_url="/api/docs",
    )

    # One cache per app, shared by the generator and the retriever
    if generator is None:
        cache = ResultCache(config.cache.build_policy())
        generator = ReportGenerator(config.scan, cache)
    else:
        cache = generator.cache

    app.state.config = config
    app.state.cache = cache
    app.state.generator = generator
    app.state.retriever = ReportRetriever(cache)

    from content_scanner.web.api.scan import router as scan_router

    app.include_router(scan_router)

    @app.exception_handler(ContentScannerError)
    async def scanner_error(request: Request, exc: ContentScannerError) -> JSONResponse:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.info)
        return JSONResponse(
            status_code=exc.status_code,
            content={"info": exc.info, "reason": exc.reason},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=MalformedDescriptorError.status_code,
            content={
                "info": "Malformed JSON",
                "reason": MalformedDescriptorError.reason,
            },
        )

    return app
