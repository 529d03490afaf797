"""CLI commands: one module per mode (serve, offline data commands)."""

from typer import Typer

from uid_ops.cli import data_mode, serve_mode

app = Typer(help="UID Ops warehouse intake backend")


def register_commands() -> None:
    """Register all CLI commands on the global app."""
    app.command()(serve_mode.serve)
    app.command(name="init-db")(data_mode.init_database)
    app.command(name="import-records")(data_mode.import_records)
    app.command(name="export-day")(data_mode.export_day)


register_commands()
