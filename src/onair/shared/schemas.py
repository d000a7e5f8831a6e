"""
Pydantic schemas for the listener wire protocol.

Field names and aliases here are what existing clients read; keep them
stable.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SongDetails(BaseModel):
    """Announced song carried inside a dj_segment event."""

    title: str = Field(..., description="Song title")
    artist: str = Field(..., description="Artist name")


class StatusPayload(BaseModel):
    message: str = Field(..., description="Human readable progress message")


class ErrorPayload(BaseModel):
    message: str = Field(..., description="Human readable error message")


class DjSegmentPayload(BaseModel):
    """Spoken segment: script text plus optional audio data URI."""

    script: str
    audio: str | None = Field(None, description="data: URI of the spoken audio, null when unavailable")
    song_details: SongDetails = Field(..., alias="songDetails")

    model_config = ConfigDict(populate_by_name=True)


class PlaySongPayload(BaseModel):
    """Track hand-off for the client player."""

    uri: str
    name: str
    artist: str
    album_cover: str | None = Field(None, alias="albumCover")
    preview_url: str | None = Field(None, alias="previewUrl")
    duration: int = Field(..., ge=0, description="Track duration in milliseconds")

    model_config = ConfigDict(populate_by_name=True)


class StoppedPayload(BaseModel):
    pass


class ControlMessage(BaseModel):
    """Inbound control signal from a listener."""

    event: Literal["start_radio", "stop_radio", "song_ended"]
    data: dict[str, Any] = Field(default_factory=dict)
