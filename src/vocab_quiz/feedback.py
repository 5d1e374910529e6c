"""Audio and haptic collaborators driven by the quiz engine.

Both services wrap injectable callables so a front end can plug in its own
media player, speech synthesizer or vibration motor. Without them the
services only log what they would have done.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

# Pulse lengths in milliseconds
CORRECT_PULSE_MS = 50
INCORRECT_PULSE_MS = 200


class AudioService:
    """Plays pronunciation audio, falling back to speech synthesis."""

    def __init__(
        self,
        player: Callable[[str], None] | None = None,
        speaker: Callable[[str], None] | None = None,
        online: bool = True,
    ) -> None:
        self.player = player
        self.speaker = speaker
        self.online = online

    def play(self, url: str, fallback_text: str | None = None) -> None:
        """Play ``url``; speak ``fallback_text`` when offline or playback fails."""
        if not self.online or not url.strip() or self.player is None:
            self.speak(fallback_text)
            return
        try:
            self.player(url)
        except Exception as e:
            logger.warning("Audio playback failed for %s: %s", url, e)
            self.speak(fallback_text)

    def speak(self, text: str | None) -> None:
        if not text or not text.strip():
            return
        if self.speaker is None:
            logger.debug("Speech synthesis unavailable, skipping %r", text)
            return
        try:
            self.speaker(text)
        except Exception as e:
            logger.warning("Speech synthesis failed for %r: %s", text, e)


class Haptics:
    """Vibration feedback for answers."""

    def __init__(self, vibrate: Callable[[int], None] | None = None) -> None:
        self.vibrate = vibrate

    def feedback(self, correct: bool) -> None:
        duration = CORRECT_PULSE_MS if correct else INCORRECT_PULSE_MS
        if self.vibrate is None:
            logger.debug("Haptic pulse %d ms", duration)
            return
        self.vibrate(duration)
