"""CLI command: content-scanner scan <descriptor.json>: one-off scan."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from content_scanner.config import ContentScannerConfig
from content_scanner.errors import ContentScannerError
from content_scanner.redaction import redact_secret
from content_scanner.reporting.cache import ResultCache
from content_scanner.reporting.generator import ReportGenerator

console = Console(stderr=True)


@click.command()
@click.argument("descriptor", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def scan(ctx: click.Context, descriptor: str) -> None:
    """Fetch, decrypt and scan the attachment described by a JSON file."""
    try:
        data = json.loads(Path(descriptor).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON in {descriptor}: {exc}[/red]")
        sys.exit(2)

    # Accept either a bare descriptor or a /scan request body
    if isinstance(data, dict) and "file" in data:
        data = data["file"]

    try:
        config = ContentScannerConfig.load(ctx.obj.get("config_path"))
        generator = ReportGenerator(
            config.scan, ResultCache(config.cache.build_policy())
        )
        verdict = asyncio.run(generator.generate(data))
    except ContentScannerError as exc:
        console.print(f"[red]{exc.reason}[/red]: {exc.info}")
        sys.exit(2)

    color = "green" if verdict.clean else "red"
    table = Table(title="Scan verdict", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Clean", f"[{color}]{verdict.clean}[/{color}]")
    table.add_row("Exit code", str(verdict.exit_code))
    table.add_row("Info", verdict.info)
    table.add_row("Secret", redact_secret(verdict.fingerprint))
    console.print(table)

    if not verdict.clean:
        sys.exit(1)
