"""CLI command: content-scanner serve: start the HTTP gateway."""

from __future__ import annotations

import click
import uvicorn
from rich.console import Console

from content_scanner.config import ContentScannerConfig
from content_scanner.errors import ConfigurationError

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 9000).",
)
@click.pass_context
def serve(ctx: click.Context, port: int | None) -> None:
    """Start the content scanner HTTP API."""
    try:
        config = ContentScannerConfig.load(ctx.obj.get("config_path"))
        config.scan.require()
    except ConfigurationError as exc:
        console.print(f"[red]{exc.info}[/red]")
        raise SystemExit(1)

    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]Content Scanner[/bold] listening on "
        f"[cyan]http://{config.web_host}:{config.web_port}[/cyan]"
    )
    console.print(f"  [dim]Media repository: {config.scan.base_url}[/dim]\n")

    from content_scanner.web.app import create_app

    app = create_app(config)
    uvicorn.run(
        app,
        host=config.web_host,
        port=config.web_port,
        log_level="debug" if ctx.obj.get("verbose") else "info",
    )
