"""Unit tests for NotificationManager."""

import pytest

from farmedic.data.models import Medication, NotificationType


@pytest.fixture
def medication():
    return Medication(
        id=1,
        name="Ibuprofen",
        dosage="400 mg",
        times=["08:00", "16:00", "00:00"],
        next_dose="08:00",
        frequency_hours=8.0,
    )


@pytest.mark.asyncio
async def test_trigger_medication_notification(notification_manager, delivered, medication):
    notification = await notification_manager.trigger_medication_notification(medication)

    assert notification.title == "Medication time"
    assert notification.message == "Time to take Ibuprofen 400 mg"
    assert notification.type == NotificationType.MEDICATION
    assert notification.medication_id == 1
    assert notification_manager.active_notification is notification
    assert delivered == [notification]


@pytest.mark.asyncio
async def test_trigger_hydration_notification(notification_manager, delivered):
    notification = await notification_manager.trigger_hydration_notification()

    assert notification.title == "Time to drink water!"
    assert notification.message == "Have a glass to stay hydrated"
    assert notification.type == NotificationType.HYDRATION
    assert notification.medication_id is None
    assert delivered == [notification]


@pytest.mark.asyncio
async def test_newer_notification_replaces_active(notification_manager, medication):
    await notification_manager.trigger_medication_notification(medication)
    hydration = await notification_manager.trigger_hydration_notification()

    assert notification_manager.active_notification is hydration


@pytest.mark.asyncio
async def test_dismiss(notification_manager, medication):
    await notification_manager.trigger_medication_notification(medication)

    notification_manager.dismiss()
    assert notification_manager.active_notification is None

    # Dismissing with nothing active is a no-op
    notification_manager.dismiss()
    assert notification_manager.active_notification is None


@pytest.mark.asyncio
async def test_failing_listener_does_not_block_others(notification_manager, delivered, medication):
    async def broken(notification):
        raise RuntimeError("network down")

    notification_manager._listeners.insert(0, broken)

    notification = await notification_manager.trigger_medication_notification(medication)

    assert delivered == [notification]
    assert notification_manager.active_notification is notification


@pytest.mark.asyncio
async def test_removed_listener_is_not_called(notification_manager, medication):
    received = []

    async def listener(notification):
        received.append(notification)

    notification_manager.add_listener(listener)
    notification_manager.remove_listener(listener)
    notification_manager.remove_listener(listener)

    await notification_manager.trigger_medication_notification(medication)

    assert received == []


def test_notification_ids_are_unique(notification_manager, medication):
    ids = {notification_manager.build_medication_notification(medication).id for _ in range(50)}
    ids.add(notification_manager.build_hydration_notification().id)

    assert len(ids) == 51


def test_medication_message_without_dosage(notification_manager, medication):
    medication.dosage = ""

    notification = notification_manager.build_medication_notification(medication)

    assert notification.message == "Time to take Ibuprofen"


def test_format_reminder_message(notification_manager, medication):
    notification = notification_manager.build_medication_notification(medication)

    assert notification_manager.format_reminder_message(notification) == (
        "Medication time\nTime to take Ibuprofen 400 mg"
    )


def test_create_medication_keyboard(notification_manager, medication):
    """Test keyboard structure for a medication reminder."""
    notification = notification_manager.build_medication_notification(medication)

    keyboard = notification_manager.create_reminder_keyboard(notification)

    assert keyboard == {
        "inline_keyboard": [
            [{"text": "Taken", "callback_data": "taken:1"}],
            [{"text": "+15 min", "callback_data": "snooze:1"}],
            [{"text": "Skip", "callback_data": "skip:1"}],
        ]
    }


def test_create_hydration_keyboard(notification_manager):
    notification = notification_manager.build_hydration_notification()

    keyboard = notification_manager.create_reminder_keyboard(notification)

    assert keyboard["inline_keyboard"] == [
        [{"text": "I drank", "callback_data": "drink"}],
        [{"text": "+15 min", "callback_data": "snooze_water"}],
    ]
