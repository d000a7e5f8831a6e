"""
Tests for the station orchestrator state machine.

Verifies the hard requirements:
1. One iteration publishes status, status, dj_segment, status, then play_song or a retry notice
2. Next iteration is scheduled after the track duration, 5000 ms (no track) or 10000 ms (failure)
3. Failures never take the session off air
4. stop cancels the talk window; nothing observable happens afterwards
5. stop while idle is a no-op; start twice never yields two cycles
"""

from __future__ import annotations

import asyncio
import threading
from unittest.mock import MagicMock

import pytest
import requests
from conftest import (
    ANNOUNCING_SCRIPT,
    RecordingPublisher,
    ScriptedContent,
    ScriptedResolver,
    make_track,
    wait_until,
)

from onair.adapters.deepseek import FALLBACK_SCRIPT
from onair.adapters.elevenlabs import ElevenLabsSynthesizer
from onair.domain.entities import CycleFailure, SongRef, TrackMissing, TrackReady
from onair.infra.exceptions import CatalogUnavailableError
from onair.runtime.announcement import FALLBACK_SONGS
from onair.runtime.session import SessionPhase
from onair.runtime.station import (
    ERROR_RESTARTING,
    STATUS_CONVERTING,
    STATUS_GENERATING,
    STATUS_NOT_FOUND,
    STATUS_SEARCHING,
    CycleTiming,
)


class TestStationCycle:
    @pytest.mark.asyncio
    async def test_full_iteration_with_track(self, make_orchestrator, publisher):
        """Track found: events in order, next iteration after the track duration."""
        content = ScriptedContent()
        resolver = ScriptedResolver(track=make_track(duration_ms=200040))
        orch = make_orchestrator(content=content, resolver=resolver)

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 200040)

        assert publisher.kinds() == ["status", "status", "dj_segment", "status", "play_song"]
        assert publisher.statuses() == [STATUS_GENERATING, STATUS_CONVERTING, STATUS_SEARCHING]
        segment = publisher.of_kind("dj_segment")[0]
        assert segment["script"] == ANNOUNCING_SCRIPT
        assert segment["songDetails"] == {"title": "Blinding Lights", "artist": "The Weeknd"}
        play = publisher.of_kind("play_song")[0]
        assert play["uri"] == "spotify:track:0VjIjW4GlUZAMYd2vXMi3b"
        assert play["duration"] == 200040
        assert content.calls == [True]
        assert resolver.calls == [("Blinding Lights", "The Weeknd")]
        assert isinstance(orch.last_outcome, TrackReady)
        assert orch.state.phase is SessionPhase.CYCLING
        assert orch.state.pending_timer_count == 1
        await orch.stop()

    @pytest.mark.asyncio
    async def test_zero_duration_track_uses_fallback_delay(self, make_orchestrator):
        orch = make_orchestrator(resolver=ScriptedResolver(track=make_track(duration_ms=0)))

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 30000)
        await orch.stop()

    @pytest.mark.asyncio
    async def test_synthesis_failure_still_publishes_segment(self, make_orchestrator, publisher):
        """Scenario B: the synthesizer call fails; the segment goes out with audio null."""
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("tts down")
        synth = ElevenLabsSynthesizer(api_key="k", session=session)
        orch = make_orchestrator(synthesizer=synth)

        await orch.start()
        assert await wait_until(lambda: "play_song" in publisher.kinds())

        segment = publisher.of_kind("dj_segment")[0]
        assert segment["audio"] is None
        assert segment["script"]
        await orch.stop()

    @pytest.mark.asyncio
    async def test_track_not_found_retries_after_5000ms(self, make_orchestrator, publisher):
        """Scenario C: resolver empty -> 'song not found' status, then 5000 ms."""
        orch = make_orchestrator(resolver=ScriptedResolver(track=None))

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 5000)

        assert publisher.statuses()[-1] == STATUS_NOT_FOUND
        assert "play_song" not in publisher.kinds()
        assert isinstance(orch.last_outcome, TrackMissing)
        await orch.stop()

    @pytest.mark.asyncio
    async def test_catalog_failure_is_treated_as_not_found(self, make_orchestrator, publisher):
        orch = make_orchestrator(resolver=ScriptedResolver(error=CatalogUnavailableError("503")))

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 5000)

        assert "error" not in publisher.kinds()
        assert publisher.statuses()[-1] == STATUS_NOT_FOUND
        await orch.stop()

    @pytest.mark.asyncio
    async def test_iteration_failure_recovers_after_10000ms(self, make_orchestrator, publisher):
        """Scenario D: content call raises -> error event, 10000 ms, still cycling."""
        orch = make_orchestrator(content=ScriptedContent(error=RuntimeError("kaboom")))

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 10000)

        assert publisher.kinds() == ["status", "error"]
        assert publisher.of_kind("error")[0]["message"] == ERROR_RESTARTING
        assert orch.is_playing
        assert orch.state.phase is SessionPhase.CYCLING
        assert isinstance(orch.last_outcome, CycleFailure)
        assert "kaboom" in orch.last_outcome.reason
        await orch.stop()

    @pytest.mark.asyncio
    async def test_degraded_content_is_valid_content(self, make_orchestrator, publisher):
        """The apology placeholder flows through as a normal segment with a fallback song."""
        orch = make_orchestrator(content=ScriptedContent(script=FALLBACK_SCRIPT))

        await orch.start()
        assert await wait_until(lambda: "play_song" in publisher.kinds())

        segment = publisher.of_kind("dj_segment")[0]
        assert segment["script"] == FALLBACK_SCRIPT
        assert "error" not in publisher.kinds()
        await orch.stop()

    @pytest.mark.asyncio
    async def test_publisher_failure_does_not_halt_session(self, make_orchestrator):
        class FlakyPublisher(RecordingPublisher):
            async def publish(self, event):
                if event.kind.value == "play_song":
                    raise ConnectionResetError("listener went away")
                await super().publish(event)

        orch = make_orchestrator(pub=FlakyPublisher())

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 10000)
        assert orch.is_playing
        await orch.stop()

    @pytest.mark.asyncio
    async def test_next_iteration_runs_after_delay(self, make_orchestrator, publisher):
        timing = CycleTiming(talk_window_seconds=0.0, not_found_retry_ms=10)
        content = ScriptedContent()
        orch = make_orchestrator(content=content, resolver=ScriptedResolver(track=None), timing=timing)

        await orch.start()
        assert await wait_until(lambda: len(content.calls) >= 3)

        assert orch.state.iteration >= 3
        assert publisher.kinds()[:6] == ["status", "status", "dj_segment", "status", "status", "status"]
        await orch.stop()


class TestStationControl:
    @pytest.mark.asyncio
    async def test_stop_during_talk_window(self, make_orchestrator, publisher):
        """Scenario E: stop while the talk window is pending -> no play_song afterwards."""
        timing = CycleTiming(talk_window_seconds=60.0)
        orch = make_orchestrator(timing=timing)

        await orch.start()
        assert await wait_until(lambda: STATUS_SEARCHING in publisher.statuses())
        await asyncio.sleep(0.02)

        assert await orch.stop() is True
        await asyncio.sleep(0.05)

        assert "play_song" not in publisher.kinds()
        assert publisher.kinds()[-1] == "radio_stopped"
        assert orch.state.is_playing is False
        assert orch.state.phase is SessionPhase.IDLE
        assert orch.state.pending_timer_count == 0
        assert not orch.state.iteration_in_flight

    @pytest.mark.asyncio
    async def test_stop_when_idle_is_noop(self, make_orchestrator, publisher):
        orch = make_orchestrator()

        assert await orch.stop() is False
        assert publisher.events == []
        assert orch.state.pending_timer_count == 0

    @pytest.mark.asyncio
    async def test_double_stop_publishes_once(self, make_orchestrator, publisher):
        orch = make_orchestrator(timing=CycleTiming(talk_window_seconds=60.0))

        await orch.start()
        await orch.stop()
        await orch.stop()

        assert publisher.kinds().count("radio_stopped") == 1
        assert orch.state.pending_timer_count == 0

    @pytest.mark.asyncio
    async def test_double_start_is_single_flight(self, make_orchestrator, publisher):
        content = ScriptedContent()
        orch = make_orchestrator(content=content, resolver=ScriptedResolver(track=None))

        await orch.start()
        await orch.start()
        assert orch.state.pending_timer_count == 1

        assert await wait_until(lambda: orch.state.pending_delay_ms == 5000)
        assert content.calls == [True]
        assert publisher.kinds().count("dj_segment") == 1
        await orch.stop()

    @pytest.mark.asyncio
    async def test_restart_during_talk_window_cancels_old_iteration(self, make_orchestrator, publisher):
        orch = make_orchestrator(timing=CycleTiming(talk_window_seconds=60.0))

        await orch.start()
        assert await wait_until(lambda: STATUS_SEARCHING in publisher.statuses())
        await orch.start()
        assert await wait_until(lambda: publisher.kinds().count("dj_segment") == 2)
        await asyncio.sleep(0.02)

        assert orch.state.iteration == 2
        assert orch.state.iteration_in_flight
        assert "play_song" not in publisher.kinds()
        await orch.stop()

    @pytest.mark.asyncio
    async def test_stale_iteration_does_not_revive_session(self, make_orchestrator, publisher):
        gate = threading.Event()
        content = ScriptedContent(gate=gate)
        orch = make_orchestrator(content=content)

        await orch.start()
        assert await wait_until(lambda: content.calls == [True])
        await orch.stop()

        gate.set()
        await asyncio.sleep(0.05)

        assert publisher.kinds() == ["status", "radio_stopped"]
        assert orch.state.pending_timer_count == 0
        assert not orch.is_playing

    @pytest.mark.asyncio
    async def test_control_signals(self, make_orchestrator, publisher):
        orch = make_orchestrator(timing=CycleTiming(talk_window_seconds=60.0))

        await orch.handle_control("start_radio")
        assert orch.is_playing

        await orch.handle_control("song_ended")
        assert orch.song_ended_count == 1
        assert orch.is_playing

        await orch.handle_control("rewind")
        await orch.handle_control("stop_radio")
        assert not orch.is_playing
        assert publisher.kinds()[-1] == "radio_stopped"

    @pytest.mark.asyncio
    async def test_close_cancels_without_event(self, make_orchestrator, publisher):
        orch = make_orchestrator(timing=CycleTiming(talk_window_seconds=60.0))

        await orch.start()
        orch.close()
        await asyncio.sleep(0.02)

        assert "radio_stopped" not in publisher.kinds()
        assert orch.state.pending_timer_count == 0
        assert not orch.is_playing

    @pytest.mark.asyncio
    async def test_fallback_song_when_script_has_no_announcement(self, make_orchestrator, publisher):
        resolver = ScriptedResolver(track=None)
        orch = make_orchestrator(content=ScriptedContent(script="Just jokes today."), resolver=resolver)

        await orch.start()
        assert await wait_until(lambda: orch.state.pending_delay_ms == 5000)

        title, artist = resolver.calls[0]
        assert SongRef(title, artist) in FALLBACK_SONGS
        await orch.stop()
