"""Keyed one-shot reminder timers."""

import asyncio
from typing import Awaitable, Callable, Hashable, Optional

from loguru import logger

# Called on expiry; returns True to re-arm at the same interval
TimerCallback = Callable[[], Awaitable[bool]]


class ReminderTimers:
    """Independent reminder timers keyed by entity.

    Each timer sleeps for its interval, then awaits its callback. When the
    callback returns True the timer re-arms itself with the same interval,
    otherwise it ends. Scheduling a key that already has a timer replaces
    it. Reminders missed while the process was not running are not replayed.
    """

    def __init__(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        """Initialize timers.

        Args:
            sleep: Coroutine function used to wait, replaceable in tests
        """
        self._sleep = sleep
        self._tasks: dict[Hashable, asyncio.Task] = {}

    def schedule(
        self,
        key: Hashable,
        interval_seconds: float,
        callback: TimerCallback,
        repeat: bool = True,
    ) -> None:
        """Arm a timer for ``key``.

        Args:
            key: Entity key, e.g. ("medication", 3)
            interval_seconds: Delay before each expiry
            callback: Coroutine run on expiry
            repeat: Whether the callback may re-arm the timer
        """
        self.cancel(key)
        task = asyncio.create_task(self._run(key, interval_seconds, callback, repeat))
        self._tasks[key] = task
        logger.debug(f"Timer {key} armed for {interval_seconds:.0f}s (repeat={repeat})")

    def schedule_once(self, key: Hashable, delay_seconds: float, callback: Callable[[], Awaitable[object]]) -> None:
        """Arm a timer that fires a single time."""

        async def fire_once() -> bool:
            await callback()
            return False

        self.schedule(key, delay_seconds, fire_once, repeat=False)

    def cancel(self, key: Hashable) -> bool:
        """Cancel the timer for ``key``.

        Returns:
            True if a running timer was cancelled
        """
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False

        task.cancel()
        logger.debug(f"Timer {key} cancelled")
        return True

    async def cancel_all(self) -> None:
        """Cancel every timer and wait for them to finish."""
        tasks = list(self._tasks.values())
        self._tasks.clear()

        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug(f"Cancelled {len(tasks)} timer(s)")

    def is_scheduled(self, key: Hashable) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()

    @property
    def active_keys(self) -> list[Hashable]:
        return [key for key, task in self._tasks.items() if not task.done()]

    async def _run(
        self,
        key: Hashable,
        interval_seconds: float,
        callback: TimerCallback,
        repeat: bool,
    ) -> None:
        try:
            while True:
                await self._sleep(interval_seconds)

                try:
                    keep_running = await callback()
                except Exception as e:
                    logger.exception(f"Error in timer {key} callback: {e}")
                    keep_running = True

                if not (repeat and keep_running):
                    logger.debug(f"Timer {key} finished")
                    break
        finally:
            if self._tasks.get(key) is asyncio.current_task():
                del self._tasks[key]
