"""REST API for submitting attachments and redeeming result secrets."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from pydantic import BaseModel

from content_scanner.redaction import redact_secret
from content_scanner.reporting.models import AttachmentDescriptor

logger = logging.getLogger(__name__)

router = APIRouter(tags=["scan"])


class ScanRequest(BaseModel):
    file: AttachmentDescriptor


class ScanReportRequest(BaseModel):
    # The secret returned previously by /scan
    secret: str


@router.post("/scan")
async def scan(body: ScanRequest, request: Request):
    verdict = await request.app.state.generator.generate(body.file)
    return {
        "clean": verdict.clean,
        "info": verdict.info,
        "secret": verdict.fingerprint,
    }


@router.post("/scan_report")
async def scan_report(body: ScanReportRequest, request: Request):
    report = request.app.state.retriever.retrieve(body.secret)
    logger.info(
        "Returning scan report: secret = %s, scanned = %s, clean = %s",
        redact_secret(body.secret),
        report.scanned,
        report.clean,
    )
    return {"clean": report.clean, "scanned": report.scanned, "info": report.info}
