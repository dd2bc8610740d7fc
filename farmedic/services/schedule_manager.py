"""Schedule manager for farmedic."""

import functools
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from loguru import logger

from farmedic.config import settings
from farmedic.data.models import (
    HISTORY_TYPE_HYDRATION,
    HISTORY_TYPE_MEDICATION,
    AppState,
    HistoryItem,
    HydrationState,
    Medication,
    Notification,
)
from farmedic.data.storage import DataManager
from farmedic.services.notification_manager import NotificationManager
from farmedic.services.reminder_timer import ReminderTimers
from farmedic.utils import (
    HydrationStatus,
    UrgencyStatus,
    classify_urgency,
    format_clock_time,
    format_time_since,
    generate_dose_times,
    hydration_interval_minutes,
    hydration_status,
    log_operation,
    next_dose_after,
    reminder_interval_seconds,
)
from farmedic.utils.timing import is_same_day

HYDRATION_TIMER_KEY = ("hydration",)


def medication_timer_key(medication_id: int) -> tuple:
    return ("medication", medication_id)


@dataclass
class HistorySummary:
    medications_taken: int
    medications_skipped: int
    water_glasses: int
    total_actions: int


class ScheduleManager:
    """State container for medications, hydration and history.

    Holds the in-memory state, persists it wholesale after every mutation
    and keeps one reminder timer per medication plus one for hydration.
    User responses to reminders (taken, skipped, snoozed, drank water) are
    recorded here.
    """

    def __init__(
        self,
        data_manager: DataManager,
        notification_manager: NotificationManager,
        timers: Optional[ReminderTimers] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize schedule manager.

        Args:
            data_manager: DataManager instance for persistence
            notification_manager: NotificationManager used to surface reminders
            timers: ReminderTimers instance (created if omitted)
            clock: Callable returning the current local time
        """
        self.data_manager = data_manager
        self.notification_manager = notification_manager
        self.timers = timers or ReminderTimers()
        self._clock = clock or datetime.now
        self.state = AppState()
        logger.debug("ScheduleManager initialized")

    @property
    def medications(self) -> list[Medication]:
        return self.state.medications

    @property
    def hydration_state(self) -> HydrationState:
        return self.state.hydration_state

    @property
    def history(self) -> list[HistoryItem]:
        return self.state.history

    def now(self) -> datetime:
        return self._clock()

    # Lifecycle

    async def load(self) -> None:
        """Load persisted state, resetting yesterday's water intake."""
        self.state = await self.data_manager.load_state()
        if self._roll_over_hydration_day():
            await self._persist()
        logger.info(
            f"State loaded: {len(self.medications)} medication(s), "
            f"{self.hydration_state.daily_intake}/{self.hydration_state.goal} glasses, "
            f"{len(self.history)} history item(s)"
        )

    async def start(self) -> None:
        """Load state and re-arm every enabled reminder."""
        await self.load()

        if self.hydration_state.reminders_enabled:
            self.schedule_hydration_reminder()

        for medication in self.medications:
            if medication.reminders_enabled:
                self.schedule_medication_reminder(medication)

        logger.info(f"Restored {len(self.timers.active_keys)} reminder(s)")

    async def stop(self) -> None:
        """Cancel every reminder timer."""
        await self.timers.cancel_all()
        logger.info("ScheduleManager stopped")

    async def reset(self) -> None:
        """Wipe persisted state and re-arm the default reminders."""
        await self.timers.cancel_all()
        self.notification_manager.dismiss()
        await self.data_manager.clear()
        self.state = AppState()

        if self.hydration_state.reminders_enabled:
            self.schedule_hydration_reminder()
        log_operation("state_reset")

    # Medications

    def get_medication_by_id(self, medication_id: int) -> Optional[Medication]:
        return self.state.get_medication_by_id(medication_id)

    async def add_medication(
        self,
        name: str,
        dosage: str,
        frequency_hours: float,
        reminders_enabled: bool = True,
    ) -> Medication:
        """Add a medication with dose times evenly spaced from now.

        Args:
            name: Medication name
            dosage: Dosage information
            frequency_hours: Hours between doses
            reminders_enabled: Whether to arm reminders right away

        Returns:
            Created Medication instance

        Raises:
            ValueError: If name is empty or frequency is not a positive finite number
        """
        name = name.strip()
        if not name:
            raise ValueError("Medication name cannot be empty")
        if not math.isfinite(frequency_hours) or frequency_hours <= 0:
            raise ValueError(f"Frequency must be a positive number of hours, got {frequency_hours}")

        times = generate_dose_times(self.now(), frequency_hours)
        medication = Medication(
            id=self.state.get_next_medication_id(),
            name=name,
            dosage=dosage.strip(),
            times=times,
            next_dose=times[0],
            frequency_hours=frequency_hours,
            reminders_enabled=reminders_enabled,
        )
        self.state.medications.append(medication)
        await self._persist()

        if reminders_enabled:
            self.schedule_medication_reminder(medication)

        log_operation(
            "medication_added",
            medication_id=medication.id,
            frequency_hours=frequency_hours,
            doses_per_day=len(times),
        )
        logger.info(
            f"Added medication {medication.id}: {name} {medication.dosage} "
            f"every {frequency_hours}h starting {medication.next_dose}"
        )
        return medication

    async def delete_medication(self, medication_id: int) -> bool:
        """Delete a medication and cancel its reminder.

        Returns:
            True if the medication was deleted, False if not found
        """
        if not self.state.remove_medication(medication_id):
            logger.warning(f"Medication {medication_id} not found for deletion")
            return False

        self.cancel_medication_reminder(medication_id)
        await self._persist()
        logger.info(f"Deleted medication {medication_id}")
        return True

    async def set_medication_reminders(self, medication_id: int, enabled: bool) -> bool:
        """Enable or disable reminders for a medication.

        Returns:
            True if the medication exists, False otherwise
        """
        medication = self.get_medication_by_id(medication_id)
        if medication is None:
            logger.warning(f"Medication {medication_id} not found when toggling reminders")
            return False

        medication.reminders_enabled = enabled
        await self._persist()

        if enabled:
            self.schedule_medication_reminder(medication)
        else:
            self.cancel_medication_reminder(medication_id)

        logger.info(
            f"Reminders {'enabled' if enabled else 'disabled'} for medication {medication_id}"
        )
        return True

    def schedule_medication_reminder(self, medication: Medication) -> None:
        interval = reminder_interval_seconds(
            medication.frequency_hours, settings.min_reminder_interval_seconds
        )
        self.timers.schedule(
            medication_timer_key(medication.id),
            interval,
            functools.partial(self._medication_timer_fired, medication.id),
        )

    def cancel_medication_reminder(self, medication_id: int) -> None:
        self.timers.cancel(medication_timer_key(medication_id))

    async def _medication_timer_fired(self, medication_id: int) -> bool:
        medication = self.get_medication_by_id(medication_id)
        if medication is None or not medication.reminders_enabled:
            logger.info(f"Medication {medication_id} gone or muted, stopping its reminders")
            return False

        await self.notification_manager.trigger_medication_notification(medication)
        return True

    async def dispatch_medication_reminder(self, medication_id: int) -> Optional[Notification]:
        """Surface a reminder for a medication.

        Returns:
            Triggered Notification, or None if the medication does not exist
        """
        medication = self.get_medication_by_id(medication_id)
        if medication is None:
            logger.warning(f"Medication {medication_id} not found, reminder not sent")
            return None
        return await self.notification_manager.trigger_medication_notification(medication)

    async def take_medication(self, medication_id: int) -> bool:
        """Record a dose as taken and advance the next dose time.

        Returns:
            True if the medication exists, False otherwise
        """
        medication = self.get_medication_by_id(medication_id)
        if medication is not None:
            now = self.now()
            medication.last_taken = now
            medication.next_dose = next_dose_after(medication.times, now) or medication.next_dose
            self._add_history(
                HISTORY_TYPE_MEDICATION,
                f"{medication.name} {medication.dosage} taken",
            )
            await self._persist()
            log_operation("medication_taken", medication_id=medication_id)
        else:
            logger.warning(f"Medication {medication_id} not found when marking taken")

        self.notification_manager.dismiss()
        return medication is not None

    async def skip_medication(self, medication_id: int) -> bool:
        medication = self.get_medication_by_id(medication_id)
        if medication is not None:
            self._add_history(
                HISTORY_TYPE_MEDICATION,
                f"{medication.name} {medication.dosage} skipped",
            )
            await self._persist()
            log_operation("medication_skipped", medication_id=medication_id)
        else:
            logger.warning(f"Medication {medication_id} not found when skipping")

        self.notification_manager.dismiss()
        return medication is not None

    def snooze_medication(self, medication_id: int, minutes: Optional[int] = None) -> None:
        """Re-surface a medication reminder after ``minutes``."""
        if minutes is None:
            minutes = settings.snooze_minutes
        self.timers.schedule_once(
            ("snooze",) + medication_timer_key(medication_id),
            minutes * 60,
            functools.partial(self.dispatch_medication_reminder, medication_id),
        )
        self.notification_manager.dismiss()
        log_operation("medication_snoozed", medication_id=medication_id, minutes=minutes)

    def medication_status(self, medication: Medication) -> UrgencyStatus:
        return classify_urgency(medication.next_dose, format_clock_time(self.now()))

    def time_since_last_taken(self, medication: Medication) -> str:
        return format_time_since(medication.last_taken, self.now())

    # Hydration

    async def update_hydration_settings(
        self,
        goal: int,
        custom_frequency: Optional[float],
        reminders_enabled: bool,
    ) -> HydrationState:
        """Update the hydration goal and reminder settings.

        Keeps today's intake. Re-arms or cancels the hydration reminder.

        Raises:
            ValueError: If goal or frequency is not positive
        """
        if goal < 1:
            raise ValueError(f"Goal must be at least 1 glass, got {goal}")
        if custom_frequency is not None and (
            not math.isfinite(custom_frequency) or custom_frequency <= 0
        ):
            raise ValueError(f"Frequency must be positive, got {custom_frequency}")

        state = self.hydration_state
        state.goal = goal
        state.custom_frequency = custom_frequency
        state.reminders_enabled = reminders_enabled
        await self._persist()

        if reminders_enabled:
            self.schedule_hydration_reminder()
        else:
            self.cancel_hydration_reminder()

        logger.info(
            f"Hydration settings updated: goal={goal}, "
            f"frequency={custom_frequency or 'auto'}, reminders={reminders_enabled}"
        )
        return state

    def schedule_hydration_reminder(self) -> None:
        state = self.hydration_state
        minutes = hydration_interval_minutes(
            state.goal, state.custom_frequency, settings.hydration_active_hours
        )
        self.timers.schedule(HYDRATION_TIMER_KEY, minutes * 60, self._hydration_timer_fired)

    def cancel_hydration_reminder(self) -> None:
        self.timers.cancel(HYDRATION_TIMER_KEY)

    async def _hydration_timer_fired(self) -> bool:
        if not self.hydration_state.reminders_enabled:
            return False

        if self._roll_over_hydration_day():
            await self._persist()

        state = self.hydration_state
        if state.daily_intake >= state.goal:
            logger.debug("Hydration goal reached, skipping reminder")
            return True

        await self.notification_manager.trigger_hydration_notification()
        return True

    async def dispatch_hydration_reminder(self) -> Notification:
        return await self.notification_manager.trigger_hydration_notification()

    async def drink_water(self) -> HydrationState:
        """Record one glass of water."""
        self._roll_over_hydration_day()

        state = self.hydration_state
        state.last_drunk = self.now()
        state.daily_intake += 1
        self._add_history(HISTORY_TYPE_HYDRATION, f"{settings.glass_volume_ml}ml of water")
        await self._persist()

        self.notification_manager.dismiss()
        log_operation("water_drunk", daily_intake=state.daily_intake, goal=state.goal)
        return state

    def snooze_hydration(self, minutes: Optional[int] = None) -> None:
        if minutes is None:
            minutes = settings.snooze_minutes
        self.timers.schedule_once(
            ("snooze",) + HYDRATION_TIMER_KEY,
            minutes * 60,
            self.dispatch_hydration_reminder,
        )
        self.notification_manager.dismiss()
        log_operation("hydration_snoozed", minutes=minutes)

    def hydration_today(self) -> HydrationState:
        """Hydration state with yesterday's intake already reset."""
        self._roll_over_hydration_day()
        return self.hydration_state

    def current_hydration_status(self) -> HydrationStatus:
        state = self.hydration_today()
        return hydration_status(state.daily_intake, state.goal)

    def _roll_over_hydration_day(self) -> bool:
        state = self.hydration_state
        if state.last_drunk is None or is_same_day(state.last_drunk, self.now()):
            return False
        if state.daily_intake == 0:
            return False

        logger.info(f"New day, resetting water intake (was {state.daily_intake})")
        state.daily_intake = 0
        return True

    # History

    def history_summary(self) -> HistorySummary:
        """Count recorded actions by kind."""
        taken = skipped = water = 0
        for item in self.history:
            if item.type == HISTORY_TYPE_HYDRATION:
                water += 1
            elif item.description.endswith(" taken"):
                taken += 1
            elif item.description.endswith(" skipped"):
                skipped += 1
        return HistorySummary(
            medications_taken=taken,
            medications_skipped=skipped,
            water_glasses=water,
            total_actions=len(self.history),
        )

    def _add_history(self, type: str, description: str) -> HistoryItem:
        return self.state.add_history(
            type,
            description,
            format_clock_time(self.now()),
            limit=settings.history_limit,
        )

    async def _persist(self) -> None:
        try:
            await self.data_manager.save_state(self.state)
        except Exception as e:
            # Already logged with traceback by the data manager
            logger.error(f"State not persisted: {type(e).__name__}: {e}")
