from __future__ import annotations

import asyncio
import logging
import random
from typing import Callable, Optional

from ..settings import Settings, get_settings

logger = logging.getLogger(__name__)

ASSISTANT_MESSAGES = (
    "Remember to take breaks from screen time! Your eyes need rest too.",
    "Did you remember to drink water today? Staying hydrated helps your mood!",
    "How are you feeling today? Writing in your diary might help.",
    "Don't forget to check your budget before making big purchases.",
    "Need help organizing your tasks? I can help prioritize them!",
    "You're doing great! Keep tracking those expenses.",
    "Remember that not every day has to be productive. Rest is important too.",
    "Have you checked your calendar for upcoming tasks?",
    "Writing down your thoughts can be very therapeutic.",
    "It might be a good time to review your spending habits.",
    "Would you like me to remind you about any tasks today?",
    "Sometimes the smallest tasks are the most important ones to finish.",
)


def random_message(rng: Optional[random.Random] = None) -> str:
    return (rng or random).choice(ASSISTANT_MESSAGES)


class MessageRotator:
    """
    Periodically offers a new assistant message.

    Every `interval` seconds the rotator picks a fresh message with probability
    `chance` and hands it to `on_change`. The rotation runs as an asyncio task
    owned by whoever started it; stop() (or leaving the ``async with`` block)
    cancels it.
    """

    def __init__(
        self,
        on_change: Callable[[str], None],
        *,
        interval: float = 300.0,
        chance: float = 0.3,
        rng: Optional[random.Random] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        if not 0.0 <= chance <= 1.0:
            raise ValueError("chance must be between 0 and 1")
        self._on_change = on_change
        self._interval = interval
        self._chance = chance
        self._rng = rng or random.Random()
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(
        cls,
        on_change: Callable[[str], None],
        settings: Optional[Settings] = None,
        **kwargs,
    ) -> "MessageRotator":
        """Build a rotator whose interval comes from ASSISTANT_INTERVAL_SECONDS."""
        settings = settings or get_settings()
        return cls(on_change, interval=settings.assistant_interval_seconds, **kwargs)

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            if self._rng.random() < self._chance:
                message = random_message(self._rng)
                logger.debug("Rotating assistant message")
                self._on_change(message)

    def start(self) -> asyncio.Task:
        """Schedule the rotation on the running loop; returns the task handle."""
        if not self.running:
            self._task = asyncio.get_running_loop().create_task(self._run())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        # a task that already died re-raises its error here
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self) -> "MessageRotator":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
