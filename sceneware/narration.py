"""
Narration Dispatcher

Sends descriptions to a narration sink. Any utterance still playing is
cancelled first, then the dispatcher waits a short debounce so the sink can
settle before the new utterance is submitted.
"""

import asyncio
import logging
from typing import Callable, Optional

from .config import UtteranceSettings
from .providers.base import NarrationSink

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.1


class NarrationDispatcher:
    """
    Cancel-then-speak dispatch of scene descriptions.

    Args:
        sink: Narration sink, or None to skip speaking
        settings: Utterance parameters applied to every description
        debounce: Seconds to wait between cancel and speak
        should_speak: Checked after the debounce; the utterance is dropped
            when it returns False (e.g. the engine was stopped meanwhile)
    """

    def __init__(
        self,
        sink: Optional[NarrationSink] = None,
        settings: Optional[UtteranceSettings] = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        should_speak: Optional[Callable[[], bool]] = None,
    ):
        self.sink = sink
        self.settings = settings or UtteranceSettings()
        self.debounce = debounce
        self.should_speak = should_speak or (lambda: True)

    async def dispatch(self, text: str) -> bool:
        """
        Narrate ``text``.

        Returns:
            True if the utterance was submitted to the sink
        """
        if not text:
            return False
        if self.sink is None:
            logger.debug(f"No narration sink, skipping: {text}")
            return False

        self.cancel()

        if self.debounce > 0:
            await asyncio.sleep(self.debounce)

        if not self.should_speak():
            logger.debug(f"Narration suppressed after stop: {text}")
            return False

        try:
            self.sink.speak(text, self.settings)
        except Exception as e:
            logger.warning(f"Narration sink failed to speak: {e}")
            return False

        logger.info(f"🔊 {text}")
        return True

    def cancel(self):
        """Cancel narration in progress, never raising."""
        if self.sink is None:
            return
        try:
            self.sink.cancel()
        except Exception as e:
            logger.warning(f"Narration sink failed to cancel: {e}")
