"""Telegram bot handlers for farmedic."""

from typing import Optional

from aiogram import F, Router
from aiogram.exceptions import TelegramBadRequest
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from farmedic.bot.notifier import build_inline_keyboard
from farmedic.config import settings
from farmedic.data.models import Medication
from farmedic.services.schedule_manager import ScheduleManager
from farmedic.utils import format_error_for_user, hydration_progress_text, log_operation, logger

# Initialize router
router = Router()

# Initialize services (will be set in bot.py)
schedule_manager: Optional[ScheduleManager] = None

HISTORY_PAGE_SIZE = 10

HELP_TEXT = (
    "Commands:\n"
    "/meds - your medications\n"
    "/med <id> - medication details\n"
    "/add <name>; <dosage>; <hours>[; off] - add a medication\n"
    "/remove <id> - delete a medication\n"
    "/reminders <id> on|off - toggle medication reminders\n"
    "/water - hydration progress\n"
    "/drink - log a glass of water\n"
    "/hydration <goal> [<hours>|auto] [on|off] - hydration settings\n"
    "/history - recent activity\n"
    "/reset - delete all data"
)


def init_handlers(sm: ScheduleManager):
    """Initialize handlers with service instances.

    Args:
        sm: ScheduleManager instance
    """
    global schedule_manager
    schedule_manager = sm
    logger.info("Handlers initialized with service instances")


def is_owner(user_id: int) -> bool:
    """Only the configured owner is served; anyone when no owner is set."""
    return settings.owner_chat_id is None or user_id == settings.owner_chat_id


def parse_switch(value: str) -> bool:
    value = value.strip().lower()
    if value in ("on", "yes", "true", "1"):
        return True
    if value in ("off", "no", "false", "0"):
        return False
    raise ValueError(f"Expected on/off, got '{value}'")


def parse_medication_id(args: Optional[str]) -> int:
    if not args or not args.split()[0].isdigit():
        raise ValueError("Please give a medication id, e.g. /med 1")
    return int(args.split()[0])


def parse_add_args(args: Optional[str]) -> tuple[str, str, float, bool]:
    """Parse "/add <name>; <dosage>; <hours>[; off]".

    Returns:
        Tuple of (name, dosage, frequency_hours, reminders_enabled)

    Raises:
        ValueError: If arguments are missing or malformed
    """
    parts = [part.strip() for part in (args or "").split(";")]
    if len(parts) not in (3, 4):
        raise ValueError("Usage: /add <name>; <dosage>; <hours>[; off]")

    name, dosage, hours_str = parts[:3]
    try:
        frequency_hours = float(hours_str.replace(",", "."))
    except ValueError:
        raise ValueError(f"'{hours_str}' is not a number of hours") from None

    reminders_enabled = parse_switch(parts[3]) if len(parts) == 4 else True
    return name, dosage, frequency_hours, reminders_enabled


def parse_hydration_args(args: Optional[str]) -> tuple[int, Optional[float], bool]:
    """Parse "/hydration <goal> [<hours>|auto] [on|off]".

    Returns:
        Tuple of (goal, custom_frequency, reminders_enabled)
    """
    parts = (args or "").split()
    if not parts or not parts[0].isdigit():
        raise ValueError("Usage: /hydration <goal> [<hours>|auto] [on|off]")

    goal = int(parts[0])
    custom_frequency = None
    reminders_enabled = True

    for part in parts[1:]:
        if part.lower() == "auto":
            custom_frequency = None
        elif part.lower() in ("on", "off"):
            reminders_enabled = parse_switch(part)
        else:
            try:
                custom_frequency = float(part.replace(",", "."))
            except ValueError:
                raise ValueError(f"'{part}' is not a number of hours") from None

    return goal, custom_frequency, reminders_enabled


def format_medication_line(medication: Medication) -> str:
    doses = len(medication.times)
    status = schedule_manager.medication_status(medication)
    return (
        f"{medication.id}. {medication.name} {medication.dosage} • "
        f"{doses} time{'s' if doses > 1 else ''}/day\n"
        f"   Next: {medication.next_dose} ({status.label})"
    )


def format_medication_details(medication: Medication) -> str:
    status = schedule_manager.medication_status(medication)
    return "\n".join([
        f"💊 {medication.name}",
        f"Dosage: {medication.dosage}",
        f"Every {medication.frequency_hours:g}h: {', '.join(medication.times)}",
        f"Next dose: {medication.next_dose} ({status.label})",
        f"Last taken: {schedule_manager.time_since_last_taken(medication)}",
        f"Reminders: {'on' if medication.reminders_enabled else 'off'}",
    ])


def format_hydration_overview() -> str:
    state = schedule_manager.hydration_today()
    status = schedule_manager.current_hydration_status()
    progress = hydration_progress_text(state.daily_intake, state.goal, settings.glass_volume_ml)
    frequency = f"every {state.custom_frequency:g}h" if state.custom_frequency else "automatic"
    return "\n".join([
        f"💧 Today's progress: {progress}",
        f"{status.label} - {status.message}",
        f"Goal: {state.daily_intake}/{state.goal} glasses",
        f"Reminders: {'on' if state.reminders_enabled else 'off'} ({frequency})",
    ])


@router.message(Command("start", "help"))
async def handle_start_command(message: Message):
    """Handle /start command - main menu overview.

    Args:
        message: Incoming message with /start command
    """
    if not is_owner(message.from_user.id):
        return

    state = schedule_manager.hydration_today()
    progress = hydration_progress_text(state.daily_intake, state.goal, settings.glass_volume_ml)
    summary = schedule_manager.history_summary()
    await message.answer(
        "FARMEDIC\n\n"
        f"Today: {len(schedule_manager.medications)} medication(s), "
        f"{progress} water, {summary.total_actions} action(s) logged\n\n"
        f"{HELP_TEXT}"
    )


@router.message(Command("meds"))
async def handle_meds_command(message: Message):
    """Handle /meds command - list medications with their urgency."""
    if not is_owner(message.from_user.id):
        return

    medications = schedule_manager.medications
    if not medications:
        await message.answer("No medications yet. Add one with /add <name>; <dosage>; <hours>")
        return

    lines = ["MY MEDICATIONS"]
    lines.extend(format_medication_line(med) for med in medications)
    await message.answer("\n".join(lines))


@router.message(Command("med"))
async def handle_med_command(message: Message, command: CommandObject):
    """Handle /med <id> command - medication details."""
    if not is_owner(message.from_user.id):
        return

    try:
        medication_id = parse_medication_id(command.args)
    except ValueError as e:
        await message.answer(format_error_for_user(e))
        return

    medication = schedule_manager.get_medication_by_id(medication_id)
    if medication is None:
        await message.answer(f"Medication {medication_id} not found")
        return

    await message.answer(format_medication_details(medication))


@router.message(Command("add"))
async def handle_add_command(message: Message, command: CommandObject):
    """Handle /add command - add a medication."""
    if not is_owner(message.from_user.id):
        return

    try:
        name, dosage, frequency_hours, reminders_enabled = parse_add_args(command.args)
        medication = await schedule_manager.add_medication(
            name, dosage, frequency_hours, reminders_enabled
        )
    except ValueError as e:
        logger.info(f"Rejected /add: {e}")
        await message.answer(format_error_for_user(e))
        return

    await message.answer(
        f"Added {medication.name} {medication.dosage}\n"
        f"Doses: {', '.join(medication.times)}"
    )


@router.message(Command("remove"))
async def handle_remove_command(message: Message, command: CommandObject):
    """Handle /remove <id> command - delete a medication."""
    if not is_owner(message.from_user.id):
        return

    try:
        medication_id = parse_medication_id(command.args)
    except ValueError as e:
        await message.answer(format_error_for_user(e))
        return

    if await schedule_manager.delete_medication(medication_id):
        await message.answer(f"Medication {medication_id} deleted")
    else:
        await message.answer(f"Medication {medication_id} not found")


@router.message(Command("reminders"))
async def handle_reminders_command(message: Message, command: CommandObject):
    """Handle /reminders <id> on|off command."""
    if not is_owner(message.from_user.id):
        return

    try:
        parts = (command.args or "").split()
        if len(parts) != 2:
            raise ValueError("Usage: /reminders <id> on|off")
        medication_id = parse_medication_id(parts[0])
        enabled = parse_switch(parts[1])
    except ValueError as e:
        await message.answer(format_error_for_user(e))
        return

    if await schedule_manager.set_medication_reminders(medication_id, enabled):
        await message.answer(
            f"Reminders {'enabled' if enabled else 'disabled'} for medication {medication_id}"
        )
    else:
        await message.answer(f"Medication {medication_id} not found")


@router.message(Command("water"))
async def handle_water_command(message: Message):
    """Handle /water command - hydration progress with quick actions."""
    if not is_owner(message.from_user.id):
        return

    keyboard = build_inline_keyboard({
        "inline_keyboard": [[{"text": "Drink water", "callback_data": "drink"}]]
    })
    await message.answer(format_hydration_overview(), reply_markup=keyboard)


@router.message(Command("drink"))
async def handle_drink_command(message: Message):
    """Handle /drink command - log a glass of water."""
    if not is_owner(message.from_user.id):
        return

    await schedule_manager.drink_water()
    await message.answer(format_hydration_overview())


@router.message(Command("hydration"))
async def handle_hydration_command(message: Message, command: CommandObject):
    """Handle /hydration command - update hydration settings."""
    if not is_owner(message.from_user.id):
        return

    try:
        goal, custom_frequency, reminders_enabled = parse_hydration_args(command.args)
        await schedule_manager.update_hydration_settings(goal, custom_frequency, reminders_enabled)
    except ValueError as e:
        await message.answer(format_error_for_user(e))
        return

    await message.answer(format_hydration_overview())


@router.message(Command("history"))
async def handle_history_command(message: Message):
    """Handle /history command - recent activity and totals."""
    if not is_owner(message.from_user.id):
        return

    history = schedule_manager.history
    if not history:
        await message.answer("No activity yet. Take a medication or drink water to see it here.")
        return

    summary = schedule_manager.history_summary()
    lines = [
        f"💊 {summary.medications_taken} taken, {summary.medications_skipped} skipped | "
        f"💧 {summary.water_glasses} glasses",
        "",
    ]
    lines.extend(
        f"{item.time} {item.type}: {item.description}"
        for item in history[:HISTORY_PAGE_SIZE]
    )
    await message.answer("\n".join(lines))


@router.message(Command("reset"))
async def handle_reset_command(message: Message):
    """Handle /reset command - delete all data."""
    if not is_owner(message.from_user.id):
        return

    logger.info(f"Reset command from user {message.from_user.id}")
    await schedule_manager.reset()
    await message.answer("All data deleted.")


async def _close_reminder(callback: CallbackQuery) -> None:
    if callback.message is None:
        return
    try:
        await callback.message.delete()
    except TelegramBadRequest as e:
        logger.warning(f"Could not delete reminder message: {e}")


@router.callback_query(F.data.regexp(r"^(taken|skip|snooze):\d+$"))
async def handle_medication_callback(callback: CallbackQuery):
    """Handle taken/skip/snooze buttons of a medication reminder.

    Args:
        callback: Callback query from inline button
    """
    if not is_owner(callback.from_user.id):
        await callback.answer()
        return

    action, medication_id_str = callback.data.split(":")
    medication_id = int(medication_id_str)
    log_operation("medication_callback", medication_id=medication_id, action=action)

    medication = schedule_manager.get_medication_by_id(medication_id)
    if medication is None:
        logger.warning(f"Medication {medication_id} not found in callback handler")
        await callback.answer("Medication not found", show_alert=True)
        await _close_reminder(callback)
        return

    if action == "taken":
        await schedule_manager.take_medication(medication_id)
        await callback.answer(f"{medication.name} taken")
    elif action == "skip":
        await schedule_manager.skip_medication(medication_id)
        await callback.answer(f"{medication.name} skipped")
    else:
        schedule_manager.snooze_medication(medication_id)
        await callback.answer(f"I'll remind you in {settings.snooze_minutes} min")

    await _close_reminder(callback)


@router.callback_query(F.data == "drink")
async def handle_drink_callback(callback: CallbackQuery):
    if not is_owner(callback.from_user.id):
        await callback.answer()
        return

    state = await schedule_manager.drink_water()
    await callback.answer(f"{state.daily_intake}/{state.goal} glasses today")
    await _close_reminder(callback)


@router.callback_query(F.data == "snooze_water")
async def handle_snooze_water_callback(callback: CallbackQuery):
    if not is_owner(callback.from_user.id):
        await callback.answer()
        return

    schedule_manager.snooze_hydration()
    await callback.answer(f"I'll remind you in {settings.snooze_minutes} min")
    await _close_reminder(callback)
