"""
Global test configuration for OnAir.

Provides collaborator doubles for the station orchestrator and shared fixtures.
"""

from __future__ import annotations

import asyncio
import random
import sys
import threading
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from onair.domain.entities import Track
from onair.runtime.station import CycleTiming, StationOrchestrator
from onair.shared.events import StationEvent

ANNOUNCING_SCRIPT = (
    "What a week in the news, folks! Anyway, enough from me. "
    'Coming up next is "Blinding Lights" by "The Weeknd"!'
)
SAMPLE_AUDIO = "data:audio/mpeg;base64,SUQzBA=="


class RecordingPublisher:
    """Records every published event in order."""

    def __init__(self):
        self.events: list[StationEvent] = []

    async def publish(self, event: StationEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]

    def messages(self) -> list[dict]:
        return [e.to_message() for e in self.events]

    def of_kind(self, kind: str) -> list[dict]:
        return [m["data"] for m in self.messages() if m["event"] == kind]

    def statuses(self) -> list[str]:
        return [d["message"] for d in self.of_kind("status")]


class ScriptedContent:
    """Content provider double; optionally raises or blocks until released."""

    def __init__(self, script: str = ANNOUNCING_SCRIPT, error: Exception | None = None, gate: threading.Event | None = None):
        self.script = script
        self.error = error
        self.gate = gate
        self.calls: list[bool] = []

    def generate_monologue(self, announce_next: bool) -> str:
        self.calls.append(announce_next)
        if self.gate is not None:
            self.gate.wait(timeout=5)
        if self.error is not None:
            raise self.error
        return self.script


class ScriptedSynthesizer:
    def __init__(self, audio: str | None = SAMPLE_AUDIO):
        self.audio = audio
        self.calls: list[str] = []

    def synthesize(self, text: str) -> str | None:
        self.calls.append(text)
        return self.audio


class ScriptedResolver:
    def __init__(self, track: Track | None = None, error: Exception | None = None):
        self.track = track
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def resolve(self, title: str, artist: str) -> Track | None:
        self.calls.append((title, artist))
        if self.error is not None:
            raise self.error
        return self.track


def make_track(duration_ms: int = 200040) -> Track:
    return Track(
        uri="spotify:track:0VjIjW4GlUZAMYd2vXMi3b",
        display_name="Blinding Lights",
        artist_name="The Weeknd",
        album_art_url="https://i.scdn.co/image/ab67616d0000b273",
        preview_locator="https://p.scdn.co/mp3-preview/abc",
        duration_ms=duration_ms,
    )


def make_response(json_body=None, content: bytes = b"", status_error: Exception | None = None) -> MagicMock:
    """Build a requests.Response stand-in."""
    response = MagicMock()
    response.json.return_value = json_body
    response.content = content
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    else:
        response.raise_for_status.return_value = None
    return response


async def wait_until(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.005) -> bool:
    """Poll predicate on the running loop until it holds or timeout elapses."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            return False
        await asyncio.sleep(interval)
    return True


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def fast_timing() -> CycleTiming:
    """Production delays, except no talk window."""
    return CycleTiming(talk_window_seconds=0.0)


@pytest.fixture
def make_orchestrator(publisher, fast_timing):
    """Factory for an orchestrator wired to doubles."""

    def _make(content=None, synthesizer=None, resolver=None, timing=None, pub=None) -> StationOrchestrator:
        return StationOrchestrator(
            content=content or ScriptedContent(),
            synthesizer=synthesizer or ScriptedSynthesizer(),
            resolver=resolver or ScriptedResolver(track=make_track()),
            publisher=pub or publisher,
            timing=timing or fast_timing,
            rng=random.Random(7),
        )

    return _make
