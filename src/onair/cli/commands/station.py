"""
Station CLI commands.

Runs the listener-facing web server that hosts the on-air session.
"""

import typer

from onair.infra.logging import configure_logging
from onair.infra.settings import settings

app = typer.Typer(help="On-air station commands")


@app.command("serve")
def serve(
    host: str = typer.Option(None, help="Bind address (default: HOST setting)"),
    port: int = typer.Option(None, help="HTTP port (default: PORT setting, 5000)"),
    talk_window: float = typer.Option(None, help="Seconds to wait for the spoken segment before the hand-off"),
    static_dir: str = typer.Option(None, help="Directory holding the built listener client"),
):
    """
    Start the station server.

    Exposes:
    - WebSocket /ws (start_radio, stop_radio, song_ended in; status, dj_segment, play_song, radio_stopped, error out)
    - GET /api/health
    - the built client from --static-dir, if present
    """
    from onair.web.server import run_server

    overrides = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if talk_window is not None:
        if talk_window < 0:
            typer.echo("Error: --talk-window must not be negative", err=True)
            raise typer.Exit(1)
        overrides["talk_window_seconds"] = talk_window
    if static_dir is not None:
        overrides["static_dir"] = static_dir

    cfg = settings.model_copy(update=overrides)
    configure_logging(cfg.log_level)
    typer.echo(f"OnAir listening on {cfg.host}:{cfg.port}")
    run_server(cfg)
