"""Data models for farmedic."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

HISTORY_TYPE_MEDICATION = "Medication"
HISTORY_TYPE_HYDRATION = "Hydration"


def _datetime_to_str(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _datetime_from_str(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO local date-time; empty or malformed values become None."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None


class NotificationType(str, Enum):
    """Kind of reminder a notification is about."""

    MEDICATION = "medication"
    HYDRATION = "hydration"


@dataclass
class Medication:
    """Medication data model.

    Attributes:
        id: Unique identifier for the medication (incremental)
        name: Name of the medication
        dosage: Dosage information (e.g., "200 mg", "2 tablets")
        times: Daily dose times in HH:MM format
        next_dose: Next dose time in HH:MM format
        frequency_hours: Hours between doses
        last_taken: Time of last intake or None
        reminders_enabled: Whether reminders are armed for this medication
    """

    id: int
    name: str
    dosage: str
    times: list[str]
    next_dose: str
    frequency_hours: float
    last_taken: Optional[datetime] = None
    reminders_enabled: bool = True

    def to_dict(self) -> dict:
        """Convert medication to dictionary for JSON serialization.

        Returns:
            Dictionary representation of the medication
        """
        return {
            "id": self.id,
            "name": self.name,
            "dosage": self.dosage,
            "times": list(self.times),
            "next_dose": self.next_dose,
            "frequency_hours": self.frequency_hours,
            "last_taken": _datetime_to_str(self.last_taken),
            "reminders_enabled": self.reminders_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Medication":
        """Create medication from dictionary.

        Args:
            data: Dictionary with medication data

        Returns:
            Medication instance
        """
        return cls(
            id=data["id"],
            name=data["name"],
            dosage=data["dosage"],
            times=list(data["times"]),
            next_dose=data["next_dose"],
            frequency_hours=float(data["frequency_hours"]),
            last_taken=_datetime_from_str(data.get("last_taken")),
            reminders_enabled=data.get("reminders_enabled", True),
        )


@dataclass
class HydrationState:
    """Hydration counters and reminder settings.

    Attributes:
        last_drunk: Time of the last glass or None
        daily_intake: Glasses drunk today
        goal: Daily goal in glasses
        custom_frequency: Fixed reminder frequency in hours, None to derive it from the goal
        reminders_enabled: Whether hydration reminders are armed
    """

    last_drunk: Optional[datetime] = None
    daily_intake: int = 0
    goal: int = 8
    custom_frequency: Optional[float] = None
    reminders_enabled: bool = True

    def to_dict(self) -> dict:
        return {
            "last_drunk": _datetime_to_str(self.last_drunk),
            "daily_intake": self.daily_intake,
            "goal": self.goal,
            "custom_frequency": self.custom_frequency,
            "reminders_enabled": self.reminders_enabled,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HydrationState":
        custom_frequency = data.get("custom_frequency")
        return cls(
            last_drunk=_datetime_from_str(data.get("last_drunk")),
            daily_intake=int(data.get("daily_intake", 0)),
            goal=int(data.get("goal", 8)),
            custom_frequency=float(custom_frequency) if custom_frequency is not None else None,
            reminders_enabled=data.get("reminders_enabled", True),
        )


@dataclass
class HistoryItem:
    """Logged user action, e.g. a dose taken or a glass of water."""

    id: int
    type: str
    description: str
    time: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "time": self.time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryItem":
        return cls(
            id=data["id"],
            type=data["type"],
            description=data["description"],
            time=data["time"],
        )


@dataclass
class Notification:
    """Reminder surfaced to the user. Never persisted."""

    id: int
    title: str
    message: str
    type: NotificationType
    medication_id: Optional[int] = None


@dataclass
class AppState:
    """Everything the state store persists.

    Attributes:
        medications: Medication list
        hydration_state: Hydration counters and settings
        history: Activity history, newest first
    """

    medications: list[Medication] = field(default_factory=list)
    hydration_state: HydrationState = field(default_factory=HydrationState)
    history: list[HistoryItem] = field(default_factory=list)

    def get_next_medication_id(self) -> int:
        """Get next available medication ID.

        Returns:
            Next medication ID (max existing ID + 1, or 1 if no medications)
        """
        if not self.medications:
            return 1
        return max(med.id for med in self.medications) + 1

    def get_next_history_id(self) -> int:
        if not self.history:
            return 1
        return max(item.id for item in self.history) + 1

    def get_medication_by_id(self, medication_id: int) -> Optional[Medication]:
        """Get medication by ID.

        Args:
            medication_id: Medication ID

        Returns:
            Medication instance or None if not found
        """
        for med in self.medications:
            if med.id == medication_id:
                return med
        return None

    def remove_medication(self, medication_id: int) -> bool:
        """Remove medication by ID.

        Args:
            medication_id: Medication ID to remove

        Returns:
            True if medication was removed, False if not found
        """
        for i, med in enumerate(self.medications):
            if med.id == medication_id:
                self.medications.pop(i)
                return True
        return False

    def add_history(self, type: str, description: str, time: str, limit: Optional[int] = None) -> HistoryItem:
        """Prepend a history entry, dropping the oldest ones beyond ``limit``.

        Args:
            type: Category label
            description: What happened
            time: Time of day in HH:MM format
            limit: Maximum number of entries to keep

        Returns:
            Created HistoryItem
        """
        item = HistoryItem(
            id=self.get_next_history_id(),
            type=type,
            description=description,
            time=time,
        )
        self.history.insert(0, item)
        if limit is not None and len(self.history) > limit:
            del self.history[limit:]
        return item
