"""
Station orchestrator.

Drives the on-air cycle for one session:

    status -> monologue -> announcement -> speech -> dj_segment
           -> track search -> talk window -> play_song | retry

Each remote call runs in a worker thread and is awaited, so the event loop
keeps serving listeners while a cycle is suspended. Every transition goes
through ``_reschedule`` which cancels the previous TimerHandle before
creating the next one: a session never holds more than one pending wake-up.

Failures inside an iteration are caught at the iteration boundary, reported
to listeners as an ``error`` event and followed by a recovery reschedule.
Only ``stop`` takes the session off air.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass

from ..domain.entities import (
    CycleFailure,
    CycleOutcome,
    Segment,
    SongRef,
    Track,
    TrackMissing,
    TrackReady,
)
from ..domain.interfaces import ContentProvider, EventPublisher, SpeechSynthesizer, TrackResolver
from ..infra.exceptions import CatalogUnavailableError
from ..infra.logging import get_logger
from ..infra.settings import Settings
from ..shared.events import StationEvent
from .announcement import extract_song
from .session import SessionState

logger = get_logger(__name__)

STATUS_GENERATING = "Generating DJ script..."
STATUS_CONVERTING = "Converting to speech..."
STATUS_SEARCHING = "Searching for song..."
STATUS_NOT_FOUND = "Song not found, trying next DJ segment..."
ERROR_RESTARTING = "Technical difficulties. Restarting soon..."

CONTROL_START = "start_radio"
CONTROL_STOP = "stop_radio"
CONTROL_SONG_ENDED = "song_ended"


@dataclass(frozen=True)
class CycleTiming:
    """Fixed delays of the on-air cycle."""

    talk_window_seconds: float = 60.0
    not_found_retry_ms: int = 5000
    recovery_ms: int = 10000
    fallback_track_ms: int = 30000

    @classmethod
    def from_settings(cls, cfg: Settings) -> "CycleTiming":
        return cls(
            talk_window_seconds=cfg.talk_window_seconds,
            not_found_retry_ms=int(cfg.not_found_retry_seconds * 1000),
            recovery_ms=int(cfg.recovery_seconds * 1000),
            fallback_track_ms=cfg.fallback_track_ms,
        )


class StationOrchestrator:
    """
    Owns one SessionState and sequences the collaborators into the on-air cycle.

    Control entry points: ``start``, ``stop``, ``handle_control``. Nothing else
    mutates the session.
    """

    def __init__(
        self,
        content: ContentProvider,
        synthesizer: SpeechSynthesizer,
        resolver: TrackResolver,
        publisher: EventPublisher,
        timing: CycleTiming | None = None,
        rng: random.Random | None = None,
        event_loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.content = content
        self.synthesizer = synthesizer
        self.resolver = resolver
        self.publisher = publisher
        self.timing = timing or CycleTiming()
        self._rng = rng or random.Random()
        self._loop = event_loop
        self.state = SessionState()
        self.last_outcome: CycleOutcome | None = None
        self.song_ended_count = 0

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    # Control ---------------------------------------------------------------
    async def start(self) -> None:
        """Go on air. While already cycling this restarts the cycle (never runs two)."""
        self._cancel_pending()
        self.state.is_playing = True
        self.state.epoch += 1
        logger.info("station_started", epoch=self.state.epoch)
        self._reschedule(0)

    async def stop(self) -> bool:
        """
        Take the session off air.

        Pending timers and in-flight work are cancelled before anything is
        awaited. Returns False (and publishes nothing) when already idle.
        """
        if not self.state.is_playing:
            self._cancel_pending()
            return False
        self._cancel_pending()
        self.state.is_playing = False
        self.state.epoch += 1
        logger.info("station_stopped", epoch=self.state.epoch, iterations=self.state.iteration)
        await self.publisher.publish(StationEvent.stopped())
        return True

    async def handle_control(self, signal: str) -> None:
        """Dispatch a listener control signal."""
        if signal == CONTROL_START:
            await self.start()
        elif signal == CONTROL_STOP:
            await self.stop()
        elif signal == CONTROL_SONG_ENDED:
            # Progression is timer driven; the signal is informational.
            self.song_ended_count += 1
            logger.info("song_ended_reported", iteration=self.state.iteration)
        else:
            logger.warning("unknown_control_signal", signal=signal)

    def close(self) -> None:
        """Cancel everything without notifying listeners (process shutdown)."""
        self._cancel_pending()
        self.state.is_playing = False
        self.state.epoch += 1

    # Scheduling ------------------------------------------------------------
    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _is_live(self, epoch: int) -> bool:
        return self.state.is_playing and self.state.epoch == epoch

    def _cancel_pending(self) -> None:
        if self.state.pending_timer is not None:
            self.state.pending_timer.cancel()
            self.state.pending_timer = None
            self.state.pending_delay_ms = None
        task = self.state.current_task
        if task is not None:
            if not task.done() and task is not asyncio.current_task():
                task.cancel()
            self.state.current_task = None

    def _reschedule(self, delay_ms: int) -> None:
        """Cancel any pending wake-up and schedule the next iteration."""
        loop = self._get_loop()
        if self.state.pending_timer is not None:
            self.state.pending_timer.cancel()
        epoch = self.state.epoch
        self.state.pending_delay_ms = delay_ms
        self.state.pending_timer = loop.call_later(delay_ms / 1000.0, self._begin_iteration, epoch)
        logger.debug("iteration_scheduled", delay_ms=delay_ms, epoch=epoch)

    def _begin_iteration(self, epoch: int) -> None:
        self.state.pending_timer = None
        self.state.pending_delay_ms = None
        if not self._is_live(epoch):
            return
        self.state.iteration += 1
        self.state.current_task = self._get_loop().create_task(
            self._run_iteration(epoch, self.state.iteration)
        )

    # Cycle -----------------------------------------------------------------
    async def _emit(self, epoch: int, event: StationEvent) -> bool:
        """Publish event if the iteration is still live; return liveness."""
        if not self._is_live(epoch):
            return False
        await self.publisher.publish(event)
        return True

    async def _run_iteration(self, epoch: int, number: int) -> None:
        logger.info("iteration_started", iteration=number)
        try:
            outcome = await self._produce(epoch)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("iteration_failed", iteration=number)
            outcome = CycleFailure(reason=f"{type(e).__name__}: {e}")

        if outcome is None:
            logger.info("iteration_abandoned", iteration=number)
            return
        self.last_outcome = outcome

        try:
            await self._conclude(epoch, outcome)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("iteration_conclusion_failed", iteration=number)
            if self._is_live(epoch):
                self._reschedule(self.timing.recovery_ms)

    async def _produce(self, epoch: int) -> CycleOutcome | None:
        """Run steps 1-7 of an iteration. Returns None once the iteration went stale."""
        if not await self._emit(epoch, StationEvent.status(STATUS_GENERATING)):
            return None
        script = await asyncio.to_thread(self.content.generate_monologue, True)
        song = extract_song(script, self._rng)

        if not await self._emit(epoch, StationEvent.status(STATUS_CONVERTING)):
            return None
        audio = await asyncio.to_thread(self.synthesizer.synthesize, script)
        segment = Segment(script=script, audio=audio, announced_song=song)
        if not await self._emit(epoch, StationEvent.segment(segment)):
            return None

        if not await self._emit(epoch, StationEvent.status(STATUS_SEARCHING)):
            return None
        track = await self._resolve_track(song)

        # Listeners are hearing the spoken segment now.
        await asyncio.sleep(self.timing.talk_window_seconds)
        if not self._is_live(epoch):
            return None

        if track is None:
            return TrackMissing(segment=segment)
        return TrackReady(segment=segment, track=track)

    async def _resolve_track(self, song: SongRef) -> Track | None:
        try:
            return await asyncio.to_thread(self.resolver.resolve, song.title, song.artist)
        except CatalogUnavailableError as e:
            logger.warning("catalog_unavailable", error=str(e), title=song.title, artist=song.artist)
            return None

    async def _conclude(self, epoch: int, outcome: CycleOutcome) -> None:
        """Step 8: publish the hand-off (or retry notice) and schedule the next iteration."""
        if not self._is_live(epoch):
            return
        if isinstance(outcome, TrackReady):
            await self.publisher.publish(StationEvent.playback(outcome.track))
            delay_ms = outcome.track.duration_ms or self.timing.fallback_track_ms
            logger.info("track_handed_off", uri=outcome.track.uri, next_in_ms=delay_ms)
        elif isinstance(outcome, TrackMissing):
            await self.publisher.publish(StationEvent.status(STATUS_NOT_FOUND))
            delay_ms = self.timing.not_found_retry_ms
            logger.info("track_missing", title=outcome.segment.announced_song.title, next_in_ms=delay_ms)
        else:
            await self.publisher.publish(StationEvent.error(ERROR_RESTARTING))
            delay_ms = self.timing.recovery_ms
            logger.warning("iteration_recovering", reason=outcome.reason, next_in_ms=delay_ms)

        if self._is_live(epoch):
            self._reschedule(delay_ms)
