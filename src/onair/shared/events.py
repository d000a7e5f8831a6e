"""
Outbound station events.

A StationEvent is a named kind plus a validated payload. Listeners receive
it as a JSON envelope ``{"event": <kind>, "data": {...}}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ..domain.entities import Segment, Track
from .schemas import (
    DjSegmentPayload,
    ErrorPayload,
    PlaySongPayload,
    SongDetails,
    StatusPayload,
    StoppedPayload,
)


class EventKind(str, Enum):
    STATUS = "status"
    DJ_SEGMENT = "dj_segment"
    PLAY_SONG = "play_song"
    RADIO_STOPPED = "radio_stopped"
    ERROR = "error"


@dataclass(frozen=True)
class StationEvent:
    kind: EventKind
    payload: BaseModel

    def to_message(self) -> dict[str, Any]:
        return {"event": self.kind.value, "data": self.payload.model_dump(by_alias=True)}

    def to_json(self) -> str:
        return json.dumps(self.to_message())

    @classmethod
    def status(cls, message: str) -> "StationEvent":
        return cls(EventKind.STATUS, StatusPayload(message=message))

    @classmethod
    def error(cls, message: str) -> "StationEvent":
        return cls(EventKind.ERROR, ErrorPayload(message=message))

    @classmethod
    def stopped(cls) -> "StationEvent":
        return cls(EventKind.RADIO_STOPPED, StoppedPayload())

    @classmethod
    def segment(cls, segment: Segment) -> "StationEvent":
        song = segment.announced_song
        return cls(
            EventKind.DJ_SEGMENT,
            DjSegmentPayload(
                script=segment.script,
                audio=segment.audio,
                song_details=SongDetails(title=song.title, artist=song.artist),
            ),
        )

    @classmethod
    def playback(cls, track: Track) -> "StationEvent":
        return cls(
            EventKind.PLAY_SONG,
            PlaySongPayload(
                uri=track.uri,
                name=track.display_name,
                artist=track.artist_name,
                album_cover=track.album_art_url,
                preview_url=track.preview_locator,
                duration=track.duration_ms,
            ),
        )
