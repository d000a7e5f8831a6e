"""Wire the station runtime from settings."""

from __future__ import annotations

from dataclasses import dataclass

from ..adapters import (
    build_content_provider,
    build_spotify_client,
    build_synthesizer,
    build_track_resolver,
)
from ..infra.settings import Settings
from .credentials import TokenRefresher
from .listeners import ListenerRegistry
from .station import CycleTiming, StationOrchestrator


@dataclass
class StationRuntime:
    """Everything one process needs to run the station."""

    registry: ListenerRegistry
    orchestrator: StationOrchestrator
    refresher: TokenRefresher | None = None

    def start_background(self) -> None:
        if self.refresher is not None:
            self.refresher.start()

    def shutdown(self) -> None:
        self.orchestrator.close()
        if self.refresher is not None:
            self.refresher.stop()


def build_runtime(cfg: Settings) -> StationRuntime:
    registry = ListenerRegistry()
    spotify = build_spotify_client(cfg)
    orchestrator = StationOrchestrator(
        content=build_content_provider(cfg),
        synthesizer=build_synthesizer(cfg),
        resolver=build_track_resolver(spotify, cfg),
        publisher=registry,
        timing=CycleTiming.from_settings(cfg),
    )
    refresher = TokenRefresher(spotify, retry_seconds=cfg.token_retry_seconds)
    return StationRuntime(registry=registry, orchestrator=orchestrator, refresher=refresher)
