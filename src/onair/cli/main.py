"""
Main CLI application using Typer with router-based command dispatch.

All command groups are registered through the centralized CliRouter.
"""

from __future__ import annotations

import typer

from .commands import content, station
from .router import CliRouter

app = typer.Typer(help="OnAir operator CLI")

router = CliRouter(app)

router.register(
    "station",
    station.app,
    help_text="On-air station operations",
)

router.register(
    "content",
    content.app,
    help_text="One-shot content, announcement and catalog checks",
)


@app.command("serve")
def serve_alias(
    port: int = typer.Option(None, help="Override HTTP port"),
):
    """Start the station server (alias for `station serve`)."""
    station.serve(host=None, port=port, talk_window=None, static_dir=None)


@app.callback()
def main(
    ctx: typer.Context,
    json: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """OnAir - unattended AI DJ radio."""
    ctx.ensure_object(dict)
    ctx.obj["json"] = json


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()
