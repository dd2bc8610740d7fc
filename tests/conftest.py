"""Shared fixtures for tests."""

import asyncio
import tempfile
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from farmedic.config import settings
from farmedic.data.storage import DataManager
from farmedic.services.notification_manager import NotificationManager
from farmedic.services.reminder_timer import ReminderTimers
from farmedic.services.schedule_manager import ScheduleManager


class FakeClock:
    """Callable returning a controllable "now"."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class ManualSleep:
    """Replacement for asyncio.sleep that waits until the test releases it."""

    def __init__(self):
        self.waiters: list[tuple[float, asyncio.Future]] = []

    async def __call__(self, delay: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self.waiters.append((delay, future))
        await future

    @property
    def pending_delays(self) -> list[float]:
        return [delay for delay, future in self.waiters if not future.done()]

    async def settle(self) -> None:
        """Let scheduled tasks run until they block again."""
        for _ in range(10):
            await asyncio.sleep(0)

    async def fire_all(self) -> None:
        """Expire every pending sleep and let the timers react."""
        await self.settle()
        waiters, self.waiters = self.waiters, []
        for _, future in waiters:
            if not future.done():
                future.set_result(None)
        await self.settle()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data.

    Yields:
        Path: Path to temporary directory
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def data_manager(temp_data_dir):
    """Create DataManager with temp directory."""
    return DataManager(data_dir=str(temp_data_dir))


@pytest.fixture
def notification_manager():
    return NotificationManager(snooze_minutes=15)


@pytest.fixture
def delivered(notification_manager):
    """List collecting every notification delivered to listeners."""
    received = []

    async def listener(notification):
        received.append(notification)

    notification_manager.add_listener(listener)
    return received


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 1, 8, 0))


@pytest.fixture
def manual_sleep():
    return ManualSleep()


@pytest.fixture
def timers(manual_sleep):
    return ReminderTimers(sleep=manual_sleep)


@pytest.fixture
def schedule_manager(data_manager, notification_manager, timers, clock):
    """Create ScheduleManager wired to fake time.

    Args:
        data_manager: DataManager fixture
        notification_manager: NotificationManager fixture
        timers: ReminderTimers using manual sleep
        clock: FakeClock fixture

    Returns:
        ScheduleManager: ScheduleManager instance for testing
    """
    return ScheduleManager(data_manager, notification_manager, timers=timers, clock=clock)


@pytest.fixture
def no_owner(monkeypatch):
    """Serve every chat regardless of OWNER_CHAT_ID in the environment."""
    monkeypatch.setattr(settings, "owner_chat_id", None)


@pytest.fixture
def mock_bot():
    """Create mock Bot.

    Returns:
        MagicMock: Mocked Telegram Bot with common methods
    """
    bot = MagicMock()
    bot.send_message = AsyncMock(side_effect=[MagicMock(message_id=100 + i) for i in range(10)])
    bot.delete_message = AsyncMock()
    return bot


@pytest.fixture
def mock_message():
    """Create mock Message.

    Returns:
        MagicMock: Mocked Telegram Message
    """
    message = MagicMock()
    message.from_user.id = 123456789
    message.text = "test message"
    message.answer = AsyncMock()
    return message


@pytest.fixture
def mock_callback_query():
    """Create mock CallbackQuery.

    Returns:
        MagicMock: Mocked Telegram CallbackQuery
    """
    callback = MagicMock()
    callback.from_user.id = 123456789
    callback.data = "taken:1"
    callback.answer = AsyncMock()
    callback.message = MagicMock()
    callback.message.delete = AsyncMock()
    callback.message.message_id = 12345
    return callback
