"""Collaborator interfaces for the station orchestrator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .entities import Track

if TYPE_CHECKING:
    from ..shared.events import StationEvent


@runtime_checkable
class ContentProvider(Protocol):
    """Produces the DJ monologue for a cycle."""

    def generate_monologue(self, announce_next: bool) -> str:
        """
        Return a monologue script.

        Must not raise on remote failure: a fixed placeholder script is
        returned instead and is valid content.
        """
        ...


@runtime_checkable
class SpeechSynthesizer(Protocol):
    """Turns a script into a playable audio payload."""

    def synthesize(self, text: str) -> str | None:
        """Return an audio payload, or None when no audio is available."""
        ...


@runtime_checkable
class TrackResolver(Protocol):
    """Looks up a playable track for an announced song."""

    def resolve(self, title: str, artist: str) -> Track | None:
        """
        Return the best matching Track, or None when the catalog has nothing.

        Raises CatalogUnavailableError only on transport failure.
        """
        ...


@runtime_checkable
class EventPublisher(Protocol):
    """Subscriber set the orchestrator publishes station events to."""

    async def publish(self, event: "StationEvent") -> None:
        """Deliver event to every currently connected listener."""
        ...
