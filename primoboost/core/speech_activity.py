"""
Speech Activity Detection for PrimoBoost

The browser samples microphone volume while the candidate answers and
streams the levels (dBFS) to the server. This detector turns those samples
into speech/silence state and decides when an answer should be
auto-submitted.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


class SpeechActivityDetector:
    """
    Tracks speech and silence for one answer.

    A frame is speech when its volume is above ``volume_threshold_db``.
    Every speech frame adds ``frame_seconds`` to the speech duration and
    restarts the silence window. Auto-submit fires once, when the silence
    window reaches ``silence_threshold_seconds`` after the candidate has
    spoken for at least ``min_speech_seconds``.
    """

    def __init__(
        self,
        volume_threshold_db: float = -50.0,
        silence_threshold_seconds: float = 10.0,
        min_speech_seconds: float = 3.0,
        frame_seconds: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.volume_threshold_db = volume_threshold_db
        self.silence_threshold_seconds = silence_threshold_seconds
        self.min_speech_seconds = min_speech_seconds
        self.frame_seconds = frame_seconds
        self._clock = clock

        self.active = False
        self.has_started_speaking = False
        self.auto_submit_triggered = False
        self._speech_frames = 0
        self._silence_started: float = 0.0

    def start(self) -> None:
        """Begin a new answer."""
        self.active = True
        self.has_started_speaking = False
        self.auto_submit_triggered = False
        self._speech_frames = 0
        self._silence_started = self._clock()

    def stop(self) -> None:
        self.active = False

    def resume(self) -> None:
        """Continue after a pause without counting the paused time as silence."""
        self.active = True
        self._silence_started = self._clock()

    @property
    def speech_duration(self) -> float:
        return round(self._speech_frames * self.frame_seconds, 3)

    @property
    def silence_duration(self) -> float:
        if not self.active:
            return 0.0
        return max(0.0, self._clock() - self._silence_started)

    @property
    def silence_countdown(self) -> float:
        return max(0.0, self.silence_threshold_seconds - self.silence_duration)

    def process_level(self, volume_db: float) -> bool:
        """Feed one volume sample. Returns True when it counts as speech."""
        if not self.active:
            return False

        if volume_db > self.volume_threshold_db:
            if not self.has_started_speaking:
                logger.debug("Speech started")
            self.has_started_speaking = True
            self._speech_frames += 1
            self._silence_started = self._clock()
            return True
        return False

    def should_auto_submit(self) -> bool:
        return (
            self.active
            and not self.auto_submit_triggered
            and self.has_started_speaking
            and self.speech_duration >= self.min_speech_seconds
            and self.silence_countdown == 0
        )

    def mark_auto_submitted(self) -> None:
        self.auto_submit_triggered = True
