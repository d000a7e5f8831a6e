"""
Content CLI commands.

One-shot calls against each collaborator, useful for checking credentials
without putting the station on air.
"""

from __future__ import annotations

import json

import typer

from onair.adapters import (
    build_content_provider,
    build_spotify_client,
    build_track_resolver,
)
from onair.infra.exceptions import CatalogUnavailableError
from onair.infra.settings import settings
from onair.runtime.announcement import extract_song, match_announcement

app = typer.Typer(help="Content checks: monologue, announcement parsing, track search")


def _output(ctx: typer.Context, payload: dict, human: str) -> None:
    if ctx.obj and ctx.obj.get("json"):
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(human)


@app.command("monologue")
def monologue(
    ctx: typer.Context,
    announce: bool = typer.Option(True, "--announce/--no-announce", help="Ask the DJ to announce the next song"),
):
    """Generate one DJ monologue and show the song it announces."""
    script = build_content_provider(settings).generate_monologue(announce)
    announced = match_announcement(script)
    song = announced or extract_song(script)
    payload = {
        "script": script,
        "song": {"title": song.title, "artist": song.artist},
        "announced": announced is not None,
    }
    source = "announced" if announced else "fallback"
    _output(ctx, payload, f"{script}\n\nNext: {song.title} by {song.artist} ({source})")


@app.command("extract")
def extract(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="Monologue text to parse"),
):
    """Parse a monologue for its 'next is <title> by <artist>' announcement."""
    announced = match_announcement(text)
    song = announced or extract_song(text)
    payload = {"title": song.title, "artist": song.artist, "announced": announced is not None}
    source = "announced" if announced else "fallback"
    _output(ctx, payload, f"{song.title} by {song.artist} ({source})")


@app.command("search")
def search(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Song title"),
    artist: str = typer.Argument(..., help="Artist name"),
):
    """Resolve a song against the track catalog."""
    resolver = build_track_resolver(build_spotify_client(settings), settings)
    try:
        track = resolver.resolve(title, artist)
    except CatalogUnavailableError as e:
        typer.echo(f"Error: catalog unavailable: {e}", err=True)
        raise typer.Exit(1)

    if track is None:
        _output(ctx, {"found": False}, f"No track found for {title} by {artist}")
        raise typer.Exit(2)

    payload = {
        "found": True,
        "uri": track.uri,
        "name": track.display_name,
        "artist": track.artist_name,
        "albumCover": track.album_art_url,
        "previewUrl": track.preview_locator,
        "duration": track.duration_ms,
    }
    _output(ctx, payload, f"{track.display_name} by {track.artist_name} [{track.uri}] {track.duration_ms} ms")
