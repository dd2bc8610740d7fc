"""Configuration module for farmedic."""

from .settings import Settings

# Create a singleton settings instance
settings = Settings()

__all__ = ["settings", "Settings"]
