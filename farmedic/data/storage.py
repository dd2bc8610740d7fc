"""Data storage manager for farmedic."""

import json
from pathlib import Path
from typing import Callable, Optional, TypeVar

import aiofiles

from farmedic.utils import log_operation, logger

from .models import AppState, HistoryItem, HydrationState, Medication

T = TypeVar("T")

MEDICATIONS_KEY = "medications"
HYDRATION_STATE_KEY = "hydration_state"
HISTORY_KEY = "history"

PREFERENCES_FILE = "preferences.json"


def encode_medications(medications: list[Medication]) -> str:
    return json.dumps([med.to_dict() for med in medications], ensure_ascii=False)


def decode_medications(blob: str) -> list[Medication]:
    return [Medication.from_dict(item) for item in json.loads(blob)]


def encode_hydration_state(state: HydrationState) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False)


def decode_hydration_state(blob: str) -> HydrationState:
    return HydrationState.from_dict(json.loads(blob))


def encode_history(history: list[HistoryItem]) -> str:
    return json.dumps([item.to_dict() for item in history], ensure_ascii=False)


def decode_history(blob: str) -> list[HistoryItem]:
    return [HistoryItem.from_dict(item) for item in json.loads(blob)]


class DataManager:
    """Manager for persisted state using a single preferences file.

    The file holds three named text blobs (medications, hydration state,
    history), each the JSON serialization of its section. Blobs are read in
    full and rewritten in full on every save. Uses atomic write pattern
    (write to temp file, then rename) for data integrity.
    """

    def __init__(self, data_dir: str = "data"):
        """Initialize data manager.

        Args:
            data_dir: Directory to store the preferences file
        """
        self.data_dir = Path(data_dir)
        self._ensure_data_dir()

    def _ensure_data_dir(self) -> None:
        """Ensure data directory exists."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Data directory ensured: {self.data_dir}")

    @property
    def file_path(self) -> Path:
        return self.data_dir / PREFERENCES_FILE

    @property
    def temp_file_path(self) -> Path:
        return self.data_dir / f"{PREFERENCES_FILE}.tmp"

    async def read_blobs(self) -> dict[str, str]:
        """Read raw text blobs from the preferences file.

        Returns:
            Mapping of key to serialized section. Empty if the file is
            missing or corrupted.
        """
        if not self.file_path.exists():
            logger.debug("Preferences file not found, using defaults")
            return {}

        try:
            async with aiofiles.open(self.file_path, mode="r", encoding="utf-8") as f:
                content = await f.read()
            data = json.loads(content)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(
                f"Unreadable preferences file {self.file_path}: {type(e).__name__}: {e}. "
                "Falling back to defaults."
            )
            return {}

        if not isinstance(data, dict):
            logger.error(f"Preferences file {self.file_path} is not an object, falling back to defaults")
            return {}

        return {key: value for key, value in data.items() if isinstance(value, str)}

    def _decode_section(
        self,
        blobs: dict[str, str],
        key: str,
        decode: Callable[[str], T],
        default: Callable[[], T],
    ) -> T:
        blob = blobs.get(key)
        if blob is None:
            return default()

        try:
            return decode(blob)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(
                f"Error loading {key}: {type(e).__name__}: {e}. Resetting to default."
            )
            return default()

    async def load_medications(self) -> list[Medication]:
        blobs = await self.read_blobs()
        return self._decode_section(blobs, MEDICATIONS_KEY, decode_medications, list)

    async def load_hydration_state(self) -> HydrationState:
        blobs = await self.read_blobs()
        return self._decode_section(blobs, HYDRATION_STATE_KEY, decode_hydration_state, HydrationState)

    async def load_history(self) -> list[HistoryItem]:
        blobs = await self.read_blobs()
        return self._decode_section(blobs, HISTORY_KEY, decode_history, list)

    async def load_state(self) -> AppState:
        """Load every section of the persisted state.

        A section that fails to deserialize is reset to its default value
        without affecting the others.

        Returns:
            AppState instance
        """
        blobs = await self.read_blobs()
        state = AppState(
            medications=self._decode_section(blobs, MEDICATIONS_KEY, decode_medications, list),
            hydration_state=self._decode_section(
                blobs, HYDRATION_STATE_KEY, decode_hydration_state, HydrationState
            ),
            history=self._decode_section(blobs, HISTORY_KEY, decode_history, list),
        )
        logger.debug(
            f"Loaded state: {len(state.medications)} medication(s), "
            f"{len(state.history)} history item(s)"
        )
        return state

    async def save_state(self, state: AppState) -> None:
        """Save the whole state with atomic write.

        Args:
            state: AppState instance to save

        Raises:
            Exception: If save operation fails
        """
        file_path = self.file_path
        temp_path = self.temp_file_path

        try:
            blobs = {
                MEDICATIONS_KEY: encode_medications(state.medications),
                HYDRATION_STATE_KEY: encode_hydration_state(state.hydration_state),
                HISTORY_KEY: encode_history(state.history),
            }
            json_content = json.dumps(blobs, ensure_ascii=False, indent=2)

            async with aiofiles.open(temp_path, mode="w", encoding="utf-8") as f:
                await f.write(json_content)

            # Atomic rename (replaces existing file)
            temp_path.replace(file_path)

            log_operation(
                "state_saved",
                medications_count=len(state.medications),
                history_count=len(state.history),
            )

        except Exception as e:
            logger.exception(f"Error saving state to {file_path}: {type(e).__name__}: {e}")
            # Clean up temp file if it exists
            if temp_path.exists():
                try:
                    temp_path.unlink()
                except OSError as unlink_error:
                    logger.error(f"Failed to remove temp file {temp_path}: {unlink_error}")
            raise

    async def clear(self) -> bool:
        """Delete the preferences file.

        Returns:
            True if file was deleted, False if file didn't exist
        """
        if not self.file_path.exists():
            logger.debug("Preferences file not found for deletion")
            return False

        self.file_path.unlink()
        logger.info(f"Deleted preferences file {self.file_path}")
        return True
