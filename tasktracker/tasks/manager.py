"""
Tool: Task Manager
Purpose: CRUD operations for tasks, including tasks captured by voice

Tasks are stored with their due date as an ISO date and their due time
as "HH:MM", so what the user confirmed is exactly what comes back.

Usage:
    python -m tasktracker.tasks.manager --action create --user alice --title "Pay rent" --due-date 2024-04-01
    python -m tasktracker.tasks.manager --action list --user alice --pending
    python -m tasktracker.tasks.manager --action get --task-id abc123
    python -m tasktracker.tasks.manager --action update --task-id abc123 --priority high
    python -m tasktracker.tasks.manager --action complete --task-id abc123
    python -m tasktracker.tasks.manager --action delete --task-id abc123
    python -m tasktracker.tasks.manager --action voice --user alice --text "Call mom tomorrow at 5pm"

Dependencies:
    - sqlite3 (stdlib)
    - uuid (stdlib)

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
import uuid
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional, Union

from tasktracker.logging_config import get_logger, setup_logging
from tasktracker.tasks import (
    DB_PATH,
    DEFAULT_PRIORITY,
    DEFAULT_VOICE_REMINDER,
    PRIORITIES,
    REMINDER_INTERVALS,
    SOURCES,
)
from tasktracker.tasks.models import format_due_time, parse_due_time
from tasktracker.voice.models import ParsedVoiceInput

logger = get_logger(__name__)


def get_connection() -> sqlite3.Connection:
    """Get database connection, creating tables if needed."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(DB_PATH))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS categories (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE COLLATE NOCASE,
            color TEXT,
            icon TEXT,
            is_default INTEGER DEFAULT 0,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS tasks (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT,
            category_id TEXT,
            due_date TEXT,
            due_time TEXT,
            priority TEXT DEFAULT 'medium' CHECK(priority IN ('urgent', 'high', 'medium', 'low')),
            source TEXT DEFAULT 'manual' CHECK(source IN ('manual', 'voice', 'chat')),
            is_completed INTEGER DEFAULT 0,
            has_reminder INTEGER DEFAULT 0,
            reminder_intervals TEXT DEFAULT '[]',
            original_text TEXT,
            created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME DEFAULT CURRENT_TIMESTAMP,
            completed_at DATETIME,
            FOREIGN KEY(category_id) REFERENCES categories(id) ON DELETE SET NULL
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_user ON tasks(user_id)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_date)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_tasks_category ON tasks(category_id)")

    conn.commit()
    return conn


def row_to_dict(row: Optional[sqlite3.Row]) -> Optional[Dict[str, Any]]:
    """Convert sqlite3.Row to dictionary."""
    if row is None:
        return None
    return dict(row)


def generate_id() -> str:
    """Generate a short unique ID."""
    return uuid.uuid4().hex[:12]


def _normalize_due_date(value: Union[date, str, None]) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(value).isoformat()


def _normalize_due_time(value: Union[time, str, None]) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, time):
        return format_due_time(value)
    return format_due_time(parse_due_time(value))


def _validate(
    priority: Optional[str] = None,
    source: Optional[str] = None,
    reminder_intervals: Optional[List[str]] = None,
) -> Optional[str]:
    """Return an error message for the first invalid value, if any."""
    if priority is not None and priority not in PRIORITIES:
        return f"Invalid priority. Must be one of: {PRIORITIES}"
    if source is not None and source not in SOURCES:
        return f"Invalid source. Must be one of: {SOURCES}"
    for interval in reminder_intervals or []:
        if interval not in REMINDER_INTERVALS:
            return f"Invalid reminder interval '{interval}'. Must be one of: {REMINDER_INTERVALS}"
    return None


def create_task(
    user_id: str,
    title: str,
    description: Optional[str] = None,
    category_id: Optional[str] = None,
    due_date: Union[date, str, None] = None,
    due_time: Union[time, str, None] = None,
    priority: str = DEFAULT_PRIORITY,
    source: str = "manual",
    reminder_intervals: Optional[List[str]] = None,
    original_text: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a new task.

    Args:
        user_id: User who owns the task
        title: Task title (required, non-empty)
        description: Longer description
        category_id: Category from the catalog
        due_date: date or ISO date string
        due_time: time or "HH:MM"
        priority: urgent/high/medium/low
        source: manual/voice/chat
        reminder_intervals: Subset of REMINDER_INTERVALS; non-empty enables reminders
        original_text: Transcript the task was captured from

    Returns:
        dict with success status and task data
    """
    title = (title or "").strip()
    if not title:
        return {"success": False, "error": "Task title is required"}

    error = _validate(priority, source, reminder_intervals)
    if error:
        return {"success": False, "error": error}

    try:
        stored_date = _normalize_due_date(due_date)
        stored_time = _normalize_due_time(due_time)
    except ValueError as e:
        return {"success": False, "error": f"Invalid due date/time: {e}"}

    intervals = list(dict.fromkeys(reminder_intervals or []))
    task_id = generate_id()

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        INSERT INTO tasks (id, user_id, title, description, category_id, due_date, due_time,
                           priority, source, has_reminder, reminder_intervals, original_text)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    """, (
        task_id, user_id, title, description, category_id, stored_date, stored_time,
        priority, source, int(bool(intervals)), json.dumps(intervals), original_text,
    ))

    conn.commit()

    cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    task = row_to_dict(cursor.fetchone())

    conn.close()

    logger.info("task_created", task_id=task_id, user_id=user_id, source=source, priority=priority)

    return {
        "success": True,
        "data": {"task_id": task_id, "task": task},
        "message": f"Task created with ID {task_id}",
    }


def create_task_from_voice(
    parsed: ParsedVoiceInput,
    user_id: str,
    category_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Persist a confirmed voice capture.

    The parser never asserts "medium"; it is applied here when no
    priority was spoken. A scheduled capture gets a one-hour reminder.

    Args:
        parsed: The (possibly user-edited) parse result
        user_id: User who owns the task
        category_id: Catalog id for parsed.suggested_category, resolved by the caller

    Returns:
        dict with success status and task data
    """
    priority = parsed.suggested_priority.value if parsed.suggested_priority else DEFAULT_PRIORITY
    reminders = [DEFAULT_VOICE_REMINDER] if parsed.has_schedule else []

    return create_task(
        user_id=user_id,
        title=parsed.task_title,
        description=parsed.description,
        category_id=category_id,
        due_date=parsed.parsed_date,
        due_time=parsed.parsed_time,
        priority=priority,
        source="voice",
        reminder_intervals=reminders,
        original_text=parsed.original_text,
    )


def get_task(task_id: str) -> Dict[str, Any]:
    """
    Get task details by ID.

    Args:
        task_id: Task ID to fetch

    Returns:
        dict with task data
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    task = row_to_dict(cursor.fetchone())

    conn.close()

    if not task:
        return {"success": False, "error": f"Task not found: {task_id}"}

    return {"success": True, "data": task}


def list_tasks(
    user_id: str,
    completed: Optional[bool] = None,
    category_id: Optional[str] = None,
    priority: Optional[str] = None,
    due_on: Union[date, str, None] = None,
    limit: int = 50,
    offset: int = 0,
) -> Dict[str, Any]:
    """
    List tasks for a user with optional filters.

    Ordered by due date (undated last), then due time, then creation.

    Args:
        user_id: User whose tasks to list
        completed: Filter by completion state
        category_id: Filter by category
        priority: Filter by priority
        due_on: Only tasks due on this date
        limit: Maximum results
        offset: Pagination offset

    Returns:
        dict with task list
    """
    error = _validate(priority=priority)
    if error:
        return {"success": False, "error": error}

    conditions = ["user_id = ?"]
    params: List[Any] = [user_id]

    if completed is not None:
        conditions.append("is_completed = ?")
        params.append(int(completed))
    if category_id:
        conditions.append("category_id = ?")
        params.append(category_id)
    if priority:
        conditions.append("priority = ?")
        params.append(priority)
    if due_on:
        try:
            params.append(_normalize_due_date(due_on))
        except ValueError as e:
            return {"success": False, "error": f"Invalid date: {e}"}
        conditions.append("due_date = ?")

    where_clause = " AND ".join(conditions)

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute(f"""
        SELECT * FROM tasks
        WHERE {where_clause}
        ORDER BY due_date IS NULL, due_date, due_time IS NULL, due_time, created_at DESC
        LIMIT ? OFFSET ?
    """, params + [limit, offset])

    tasks = [row_to_dict(row) for row in cursor.fetchall()]

    cursor.execute(f"SELECT COUNT(*) as count FROM tasks WHERE {where_clause}", params)
    total = cursor.fetchone()["count"]

    conn.close()

    return {
        "success": True,
        "data": {"tasks": tasks, "total": total, "limit": limit, "offset": offset},
    }


_UNSET: Any = object()


def update_task(
    task_id: str,
    title: Optional[str] = None,
    description: Optional[str] = _UNSET,
    category_id: Optional[str] = _UNSET,
    due_date: Union[date, str, None] = _UNSET,
    due_time: Union[time, str, None] = _UNSET,
    priority: Optional[str] = None,
    reminder_intervals: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Update task fields.

    Nullable fields (description, category, due date/time) can be cleared
    by passing None explicitly; omitted fields are left alone.

    Args:
        task_id: Task to update
        title: New title
        description: New description, or None to clear
        category_id: New category, or None to clear
        due_date: New due date, or None to clear
        due_time: New due time, or None to clear
        priority: New priority
        reminder_intervals: Replacement interval list ([] disables reminders)

    Returns:
        dict with updated task
    """
    error = _validate(priority=priority, reminder_intervals=reminder_intervals)
    if error:
        return {"success": False, "error": error}
    if title is not None and not title.strip():
        return {"success": False, "error": "Task title is required"}

    updates = []
    params: List[Any] = []

    try:
        if title is not None:
            updates.append("title = ?")
            params.append(title.strip())
        if description is not _UNSET:
            updates.append("description = ?")
            params.append(description)
        if category_id is not _UNSET:
            updates.append("category_id = ?")
            params.append(category_id)
        if due_date is not _UNSET:
            updates.append("due_date = ?")
            params.append(_normalize_due_date(due_date))
        if due_time is not _UNSET:
            updates.append("due_time = ?")
            params.append(_normalize_due_time(due_time))
    except ValueError as e:
        return {"success": False, "error": f"Invalid due date/time: {e}"}

    if priority is not None:
        updates.append("priority = ?")
        params.append(priority)
    if reminder_intervals is not None:
        intervals = list(dict.fromkeys(reminder_intervals))
        updates.append("reminder_intervals = ?")
        params.append(json.dumps(intervals))
        updates.append("has_reminder = ?")
        params.append(int(bool(intervals)))

    if not updates:
        return {"success": False, "error": "No fields to update"}

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT id FROM tasks WHERE id = ?", (task_id,))
    if not cursor.fetchone():
        conn.close()
        return {"success": False, "error": f"Task not found: {task_id}"}

    updates.append("updated_at = ?")
    params.append(datetime.now().isoformat())
    params.append(task_id)

    cursor.execute(f"UPDATE tasks SET {', '.join(updates)} WHERE id = ?", params)
    conn.commit()

    cursor.execute("SELECT * FROM tasks WHERE id = ?", (task_id,))
    task = row_to_dict(cursor.fetchone())

    conn.close()

    return {"success": True, "data": task, "message": f"Task {task_id} updated"}


def complete_task(task_id: str) -> Dict[str, Any]:
    """
    Mark a task as completed.

    Args:
        task_id: Task to complete

    Returns:
        dict with success status
    """
    now = datetime.now().isoformat()

    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("""
        UPDATE tasks
        SET is_completed = 1, completed_at = ?, updated_at = ?
        WHERE id = ?
    """, (now, now, task_id))

    if cursor.rowcount == 0:
        conn.close()
        return {"success": False, "error": f"Task not found: {task_id}"}

    conn.commit()
    conn.close()

    logger.info("task_completed", task_id=task_id)

    return {"success": True, "message": f"Task {task_id} completed"}


def delete_task(task_id: str) -> Dict[str, Any]:
    """
    Delete a task.

    Args:
        task_id: Task to delete

    Returns:
        dict with success status
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("DELETE FROM tasks WHERE id = ?", (task_id,))

    if cursor.rowcount == 0:
        conn.close()
        return {"success": False, "error": f"Task not found: {task_id}"}

    conn.commit()
    conn.close()

    logger.info("task_deleted", task_id=task_id)

    return {"success": True, "message": f"Task {task_id} deleted"}


def main():
    setup_logging()
    parser = argparse.ArgumentParser(description="Task Manager - task CRUD operations")
    parser.add_argument(
        "--action",
        required=True,
        choices=["create", "list", "get", "update", "complete", "delete", "voice"],
        help="Action to perform",
    )

    parser.add_argument("--task-id", help="Task ID for operations")
    parser.add_argument("--user", help="User ID")

    parser.add_argument("--title", help="Task title")
    parser.add_argument("--description", help="Task description")
    parser.add_argument("--category-id", help="Category ID")
    parser.add_argument("--due-date", help="Due date (YYYY-MM-DD)")
    parser.add_argument("--due-time", help="Due time (HH:MM)")
    parser.add_argument("--priority", choices=PRIORITIES, help="Priority")
    parser.add_argument("--reminder", action="append", choices=REMINDER_INTERVALS, help="Reminder interval (repeatable)")
    parser.add_argument("--text", help="Transcript for --action voice")

    parser.add_argument("--pending", action="store_true", help="Only incomplete tasks")
    parser.add_argument("--limit", type=int, default=50, help="Max results")
    parser.add_argument("--offset", type=int, default=0, help="Pagination offset")

    args = parser.parse_args()

    result = None

    if args.action == "create":
        if not args.user or not args.title:
            print(json.dumps({"success": False, "error": "--user and --title required for create"}))
            sys.exit(1)
        result = create_task(
            user_id=args.user,
            title=args.title,
            description=args.description,
            category_id=args.category_id,
            due_date=args.due_date,
            due_time=args.due_time,
            priority=args.priority or DEFAULT_PRIORITY,
            reminder_intervals=args.reminder,
        )

    elif args.action == "list":
        if not args.user:
            print(json.dumps({"success": False, "error": "--user required for list"}))
            sys.exit(1)
        result = list_tasks(
            user_id=args.user,
            completed=False if args.pending else None,
            category_id=args.category_id,
            priority=args.priority,
            limit=args.limit,
            offset=args.offset,
        )

    elif args.action in ("get", "complete", "delete"):
        if not args.task_id:
            print(json.dumps({"success": False, "error": f"--task-id required for {args.action}"}))
            sys.exit(1)
        action = {"get": get_task, "complete": complete_task, "delete": delete_task}[args.action]
        result = action(args.task_id)

    elif args.action == "update":
        if not args.task_id:
            print(json.dumps({"success": False, "error": "--task-id required for update"}))
            sys.exit(1)
        changes: Dict[str, Any] = {}
        for name in ("description", "category_id", "due_date", "due_time"):
            if getattr(args, name) is not None:
                changes[name] = getattr(args, name)
        result = update_task(
            task_id=args.task_id,
            title=args.title,
            priority=args.priority,
            reminder_intervals=args.reminder,
            **changes,
        )

    elif args.action == "voice":
        if not args.user or not args.text:
            print(json.dumps({"success": False, "error": "--user and --text required for voice"}))
            sys.exit(1)
        from tasktracker.tasks.categories import get_category_by_name
        from tasktracker.voice.parser import parse

        parsed = parse(args.text, datetime.now())
        category_id = None
        if parsed.suggested_category:
            category = get_category_by_name(parsed.suggested_category)
            if category["success"]:
                category_id = category["data"]["id"]
        result = create_task_from_voice(parsed, args.user, category_id)
        if result["success"]:
            result["data"]["parsed"] = parsed.to_dict()

    if result:
        print(json.dumps(result, indent=2, default=str))
        if not result.get("success"):
            sys.exit(1)


if __name__ == "__main__":
    main()
