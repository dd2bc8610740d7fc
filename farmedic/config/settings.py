"""Configuration settings for farmedic."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        """Initialize settings by loading from .env file and environment variables."""
        # Load .env file if it exists
        env_path = Path(__file__).parent.parent.parent / ".env"
        load_dotenv(dotenv_path=env_path)

        # Telegram Bot Configuration (only needed when the bot surface runs)
        self.telegram_bot_token: Optional[str] = self._get_env("TELEGRAM_BOT_TOKEN")
        owner_chat_id = self._get_env("OWNER_CHAT_ID")
        self.owner_chat_id: Optional[int] = int(owner_chat_id) if owner_chat_id else None

        # Application Configuration
        self.log_level: str = self._get_env("LOG_LEVEL", "INFO")
        self.data_dir: Path = Path(self._get_env("DATA_DIR", "data"))
        self.logs_dir: Path = Path(self._get_env("LOGS_DIR", "logs"))

        # Reminder Configuration
        self.snooze_minutes: int = int(self._get_env("SNOOZE_MINUTES", "15"))
        self.min_reminder_interval_seconds: int = int(
            self._get_env("MIN_REMINDER_INTERVAL_SECONDS", "60")
        )
        self.hydration_active_hours: float = float(
            self._get_env("HYDRATION_ACTIVE_HOURS", "16")
        )
        self.glass_volume_ml: int = int(self._get_env("GLASS_VOLUME_ML", "250"))
        self.history_limit: int = int(self._get_env("HISTORY_LIMIT", "500"))

        # Ensure data directory exists
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _get_env(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get environment variable with optional default value.

        Args:
            key: Environment variable name
            default: Default value if variable is not set

        Returns:
            Environment variable value or default
        """
        return os.getenv(key, default)

    def require_bot_token(self) -> str:
        """Get the Telegram bot token, failing loudly if it is missing.

        Returns:
            Bot token

        Raises:
            ValueError: If TELEGRAM_BOT_TOKEN is not set
        """
        if not self.telegram_bot_token:
            raise ValueError(
                "Required environment variable 'TELEGRAM_BOT_TOKEN' is not set. "
                "Please set it in .env file or system environment."
            )
        return self.telegram_bot_token

    def __repr__(self) -> str:
        """Return string representation of settings (without sensitive data)."""
        return (
            f"Settings("
            f"telegram_bot_token={'*' * 8 if self.telegram_bot_token else None}, "
            f"owner_chat_id={self.owner_chat_id}, "
            f"log_level={self.log_level}, "
            f"data_dir={self.data_dir}, "
            f"logs_dir={self.logs_dir}, "
            f"snooze_minutes={self.snooze_minutes}, "
            f"min_reminder_interval_seconds={self.min_reminder_interval_seconds}, "
            f"hydration_active_hours={self.hydration_active_hours}, "
            f"glass_volume_ml={self.glass_volume_ml}, "
            f"history_limit={self.history_limit}"
            f")"
        )
