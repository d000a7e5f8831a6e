"""
Adapters module for OnAir.

This module contains the remote collaborators the station talks to:
text generation, speech synthesis and the track catalog.
"""

from __future__ import annotations

from ..infra.settings import Settings
from .deepseek import DeepSeekContentProvider
from .elevenlabs import ElevenLabsSynthesizer
from .spotify import SpotifyClient, SpotifyTrackResolver


def build_content_provider(cfg: Settings) -> DeepSeekContentProvider:
    return DeepSeekContentProvider(
        api_key=cfg.deepseek_api_key,
        base_url=cfg.deepseek_base_url,
        model=cfg.deepseek_model,
        timeout=cfg.http_timeout_seconds,
    )


def build_synthesizer(cfg: Settings) -> ElevenLabsSynthesizer:
    return ElevenLabsSynthesizer(
        api_key=cfg.elevenlabs_api_key,
        voice_id=cfg.elevenlabs_voice_id,
        model_id=cfg.elevenlabs_model_id,
        stability=cfg.voice_stability,
        similarity=cfg.voice_similarity,
        base_url=cfg.elevenlabs_base_url,
        timeout=cfg.http_timeout_seconds,
    )


def build_spotify_client(cfg: Settings) -> SpotifyClient:
    return SpotifyClient(
        client_id=cfg.spotify_client_id,
        client_secret=cfg.spotify_client_secret,
        api_url=cfg.spotify_api_url,
        accounts_url=cfg.spotify_accounts_url,
        timeout=cfg.http_timeout_seconds,
    )


def build_track_resolver(client: SpotifyClient, cfg: Settings) -> SpotifyTrackResolver:
    return SpotifyTrackResolver(client, fallback_duration_ms=cfg.fallback_track_ms)


__all__ = [
    "DeepSeekContentProvider",
    "ElevenLabsSynthesizer",
    "SpotifyClient",
    "SpotifyTrackResolver",
    "build_content_provider",
    "build_spotify_client",
    "build_synthesizer",
    "build_track_resolver",
]
