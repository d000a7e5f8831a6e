"""
On-air value objects.

Everything here is immutable and ephemeral: a cycle produces a Segment and
maybe a Track, hands them to the event channel, and drops them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

DEFAULT_TRACK_DURATION_MS = 30000


@dataclass(frozen=True)
class SongRef:
    """A song announced (or picked) for the next hand-off."""

    title: str
    artist: str


@dataclass(frozen=True)
class Segment:
    """The spoken DJ content for one cycle."""

    script: str
    audio: str | None
    announced_song: SongRef

    @property
    def has_audio(self) -> bool:
        return self.audio is not None


@dataclass(frozen=True)
class Track:
    """A playable catalog track."""

    uri: str
    display_name: str
    artist_name: str
    album_art_url: str | None = None
    preview_locator: str | None = None
    duration_ms: int = DEFAULT_TRACK_DURATION_MS


@dataclass(frozen=True)
class TrackReady:
    segment: Segment
    track: Track


@dataclass(frozen=True)
class TrackMissing:
    segment: Segment


@dataclass(frozen=True)
class CycleFailure:
    reason: str


CycleOutcome = Union[TrackReady, TrackMissing, CycleFailure]
