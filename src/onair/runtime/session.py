"""On-air session state owned by a single StationOrchestrator."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum


class SessionPhase(str, Enum):
    IDLE = "idle"
    CYCLING = "cycling"


@dataclass
class SessionState:
    """
    Mutable state of one on-air session.

    Only the orchestrator's control entry points (start, stop and the
    internal reschedule) write to it. ``epoch`` changes on every start/stop so
    work belonging to an earlier run can tell it is stale.
    """

    is_playing: bool = False
    pending_timer: asyncio.TimerHandle | None = None
    pending_delay_ms: int | None = None
    current_task: asyncio.Task | None = None
    epoch: int = 0
    iteration: int = 0

    @property
    def phase(self) -> SessionPhase:
        return SessionPhase.CYCLING if self.is_playing else SessionPhase.IDLE

    @property
    def pending_timer_count(self) -> int:
        return 0 if self.pending_timer is None else 1

    @property
    def iteration_in_flight(self) -> bool:
        return self.current_task is not None and not self.current_task.done()

    def snapshot(self) -> dict[str, object]:
        return {
            "phase": self.phase.value,
            "is_playing": self.is_playing,
            "pending_delay_ms": self.pending_delay_ms,
            "iteration": self.iteration,
            "iteration_in_flight": self.iteration_in_flight,
        }
