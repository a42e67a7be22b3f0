"""Task Store - where confirmed voice captures land

Philosophy:
    A task is only useful if it survives the trip from "I said it" to
    "it's on my list". The store keeps exactly what the user confirmed:
    title, description, when, what kind, how urgent. Nothing is rounded
    or re-derived on the way in or out.

Components:
    models.py: Task, TaskPriority, TaskSource, ReminderInterval
    manager.py: Task CRUD operations and create_task_from_voice()
    categories.py: Category catalog and the parser's category table

Usage:
    from tasktracker.tasks.manager import create_task_from_voice, get_task
    from tasktracker.voice.parser import parse

    parsed = parse("Pay rent on the 1st", datetime.now())
    result = create_task_from_voice(parsed, user_id="alice")
    get_task(result["data"]["task_id"])["data"]["title"]   # "Pay rent"
"""

from pathlib import Path

# Path constants
PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = PROJECT_ROOT / "data" / "tasks.db"

# Valid values
PRIORITIES = ("urgent", "high", "medium", "low")
SOURCES = ("manual", "voice", "chat")
REMINDER_INTERVALS = ("1day", "12hrs", "6hrs", "1hr")

DEFAULT_PRIORITY = "medium"
DEFAULT_VOICE_REMINDER = "1hr"

__all__ = [
    "PROJECT_ROOT",
    "DB_PATH",
    "PRIORITIES",
    "SOURCES",
    "REMINDER_INTERVALS",
    "DEFAULT_PRIORITY",
    "DEFAULT_VOICE_REMINDER",
]
