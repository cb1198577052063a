"""
Interview timers for PrimoBoost

- SessionClock: interview countdown that only runs while listening
- ListeningMonitor: per-session asyncio task that ends the interview when
  time runs out and auto-submits after sustained silence
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from primoboost.core.speech_activity import SpeechActivityDetector

logger = logging.getLogger(__name__)


class SessionClock:
    """Countdown of the interview's time budget."""

    def __init__(self, total_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.total_seconds = total_seconds
        self._clock = clock
        self._elapsed = 0.0
        self._running_since: float | None = None

    @property
    def running(self) -> bool:
        return self._running_since is not None

    def start(self) -> None:
        if self._running_since is None:
            self._running_since = self._clock()

    def stop(self) -> None:
        if self._running_since is not None:
            self._elapsed += self._clock() - self._running_since
            self._running_since = None

    @property
    def elapsed(self) -> float:
        if self._running_since is None:
            return self._elapsed
        return self._elapsed + (self._clock() - self._running_since)

    @property
    def time_remaining(self) -> float:
        return max(0.0, self.total_seconds - self.elapsed)

    @property
    def expired(self) -> bool:
        return self.time_remaining <= 0


class ListeningMonitor:
    """
    Polls the clock and speech detector while an answer is being captured.

    Fires exactly one of ``on_expire`` / ``on_silence`` and then stops.
    """

    def __init__(
        self,
        clock: SessionClock,
        detector: SpeechActivityDetector,
        on_expire: Callable[[], Awaitable[None]],
        on_silence: Callable[[], Awaitable[None]],
        poll_interval: float = 0.1,
    ):
        self.clock = clock
        self.detector = detector
        self.on_expire = on_expire
        self.on_silence = on_silence
        self.poll_interval = poll_interval
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    def cancel(self) -> None:
        """Stop polling. Safe to call from inside a callback."""
        if self._task is None or self._task.done():
            return
        if self._task is asyncio.current_task():
            return
        self._task.cancel()

    async def _run(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.poll_interval)
                if self.clock.expired:
                    logger.info("Interview time is up")
                    await self.on_expire()
                    return
                if self.detector.should_auto_submit():
                    self.detector.mark_auto_submitted()
                    logger.info(
                        f"Silence for {self.detector.silence_duration:.1f}s after "
                        f"{self.detector.speech_duration:.1f}s of speech, auto-submitting"
                    )
                    await self.on_silence()
                    return
        except Exception as e:
            logger.error(f"Listening monitor error: {e}")
