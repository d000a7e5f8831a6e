"""
Proactive bearer-token refresh.

The refresher owns one asyncio TimerHandle. Each successful refresh
schedules the next one at ``lifetime - safety_margin``; a failed refresh is
retried after a fixed delay. It runs independently of the station cycle so a
cycle never waits on a token round trip.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from ..infra.exceptions import CredentialError
from ..infra.logging import get_logger

logger = get_logger(__name__)


class RefreshableCredential(Protocol):
    def refresh_token(self) -> float:
        """Fetch a new token; return its lifetime in seconds. Raises CredentialError."""
        ...


class TokenRefresher:
    """Keeps a time-limited credential fresh on the event loop."""

    def __init__(
        self,
        credential: RefreshableCredential,
        safety_margin_seconds: float = 60.0,
        retry_seconds: float = 30.0,
        min_delay_seconds: float = 1.0,
        event_loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.credential = credential
        self.safety_margin_seconds = safety_margin_seconds
        self.retry_seconds = retry_seconds
        self.min_delay_seconds = min_delay_seconds
        self._loop = event_loop
        self._handle: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None
        self._running = False
        self.next_refresh_delay: float | None = None
        self.refresh_count = 0
        self.failure_count = 0

    @property
    def running(self) -> bool:
        return self._running

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def delay_for(self, lifetime_seconds: float) -> float:
        """Seconds until the next refresh for a token of the given lifetime."""
        return max(lifetime_seconds - self.safety_margin_seconds, self.min_delay_seconds)

    def start(self) -> None:
        """Refresh immediately, then keep refreshing ahead of expiry."""
        if self._running:
            return
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._running = True
        self._schedule(0.0)

    def stop(self) -> None:
        self._running = False
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self.next_refresh_delay = None

    def _schedule(self, delay: float) -> None:
        assert self._loop is not None
        if self._handle is not None:
            self._handle.cancel()
        self.next_refresh_delay = delay
        self._handle = self._loop.call_later(delay, self._fire)

    def _fire(self) -> None:
        self._handle = None
        if not self._running:
            return
        assert self._loop is not None
        self._task = self._loop.create_task(self.refresh_once())

    async def refresh_once(self) -> float | None:
        """Run one refresh and schedule the next. Returns the token lifetime, or None on failure."""
        lifetime: float | None = None
        try:
            lifetime = await asyncio.to_thread(self.credential.refresh_token)
        except CredentialError as e:
            self.failure_count += 1
            logger.warning("token_refresh_failed", error=str(e), retry_in=self.retry_seconds)
        except Exception:
            self.failure_count += 1
            logger.exception("token_refresh_crashed", retry_in=self.retry_seconds)

        if lifetime is not None:
            self.refresh_count += 1
            delay = self.delay_for(lifetime)
        else:
            delay = self.retry_seconds

        if self._running:
            self._schedule(delay)
        return lifetime
