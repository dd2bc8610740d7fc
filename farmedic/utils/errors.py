"""Error formatting and operation logging helpers for farmedic."""

from typing import Optional

from aiogram.exceptions import TelegramAPIError, TelegramBadRequest, TelegramForbiddenError, TelegramNetworkError
from loguru import logger


def format_error_for_user(error: Exception) -> str:
    """Convert technical errors to short user-facing messages.
    
    Args:
        error: Exception to format
        
    Returns:
        User-friendly error message
    """
    if isinstance(error, TelegramForbiddenError):
        return "I can't message you. Please check that the bot is not blocked."
    
    if isinstance(error, TelegramBadRequest):
        return "Something went wrong with that request. Please try again."
    
    if isinstance(error, TelegramNetworkError):
        return "Network error. Check your connection and try again."
    
    if isinstance(error, TelegramAPIError):
        return "Telegram API error. Please try again."
    
    # Validation errors carry a readable message already
    if isinstance(error, ValueError):
        return f"Invalid input: {error}"
    
    if isinstance(error, OSError):
        return "Could not access stored data. Please try again."
    
    return "Internal error. Please try again."


def log_operation(
    operation_name: str,
    medication_id: Optional[int] = None,
    **extra_context,
) -> None:
    """Log an operation with structured context.
    
    Args:
        operation_name: Name of the operation being performed
        medication_id: Medication ID (if applicable)
        **extra_context: Additional context to include in log
    """
    context = {
        "operation": operation_name,
    }
    
    if medication_id is not None:
        context["medication_id"] = medication_id
    
    context.update(extra_context)
    
    logger.bind(**context).info(f"Operation: {operation_name}")


__all__ = [
    "format_error_for_user",
    "log_operation",
]
