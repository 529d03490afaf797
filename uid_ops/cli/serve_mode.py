"""Serve mode: run the FastAPI backend under uvicorn."""

import sys

import typer
import uvicorn

from uid_ops.config import ALLOWED_ORIGINS, DATABASE_URL, PORT
from uid_ops.db import init_db
from uid_ops.api.server import create_app

from .shared import console, logger


def serve(
    port: int = typer.Option(PORT, "--port", "-p", help="Port for the HTTP server"),
    host: str = typer.Option("0.0.0.0", "--host", help="Bind host"),
) -> None:
    """Start the records/plan/bins API and the scan pulse stream."""
    init_db()
    log = logger.bind(command="serve", port=port)
    log.info("serve.start", database_url=DATABASE_URL)

    app = create_app()

    console.print(f"[green]UID Ops backend listening on http://{host}:{port}[/green]")
    console.print(f"[dim]DB: {DATABASE_URL}[/dim]")
    console.print(f"[dim]CORS origin(s): {', '.join(ALLOWED_ORIGINS)}[/dim]")
    try:
        uvicorn.run(
            app,
            host=host,
            port=port,
            log_level="info",
            timeout_graceful_shutdown=15,
        )
    except KeyboardInterrupt:
        console.print("\n[dim]Shutting down...[/dim]")
        sys.exit(0)
