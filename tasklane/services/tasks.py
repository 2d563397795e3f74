"""
Tasks - CRUD operations

Tasks inherit every right from the list they live in. Reads need read on
the list; creating, changing and deleting tasks need write and are blocked
while the list or its namespace is archived.

The Favorites pseudo-list holds no tasks of its own. Listing it returns the
caller's favorite tasks from every list they can still read.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from tasklane.db import _utcnow
from tasklane.errors import InsufficientRightError, TaskNotFoundError, ValidationError
from tasklane.models import FAVORITES_PSEUDO_LIST_ID, FavoritesPseudoList, Task, TaskList
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import LinkShare, Principal, User
from tasklane.permissions.types import Right

logger = logging.getLogger(__name__)

# Fields a client may change through update_task
UPDATABLE_FIELDS = (
    "title",
    "description",
    "done",
    "due_date",
    "repeat_after",
    "priority",
    "hex_color",
    "position",
    "list_id",
)

_TASK_COLUMNS = """
    t.id, t.list_id, t.title, t.description, t.done, t.done_at, t.due_date,
    t.repeat_after, t.priority, t.hex_color, t.position, t.created_by_id,
    t.created_at, t.updated_at
"""


def _author_id(principal: Principal) -> int:
    """Tasks created through a link share are attributed to the user who shared it"""
    if isinstance(principal, LinkShare):
        return principal.shared_by_id
    return principal.id


def _validate_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError("Task title cannot be empty")
    if len(title) > 500:
        raise ValidationError("Task title cannot exceed 500 characters")
    return title.strip()


def _validate_due_date(due_date: Optional[str]) -> Optional[str]:
    if not due_date:
        return None
    try:
        return datetime.fromisoformat(due_date).isoformat()
    except ValueError:
        raise ValidationError(f"Invalid due date: {due_date}")


def _next_task_position(conn: sqlite3.Connection, list_id: int) -> float:
    """Calculate the next available position for a task in a list."""
    row = conn.execute(
        "SELECT COALESCE(MAX(position), 0) AS maxpos FROM tasks WHERE list_id = ?",
        (list_id,),
    ).fetchone()
    maxpos = float(row["maxpos"]) if row and row["maxpos"] is not None else 0.0
    return maxpos + 1024.0


def _is_favorite(conn: sqlite3.Connection, principal: Principal, task_id: int) -> bool:
    if not isinstance(principal, User):
        return False
    row = conn.execute(
        "SELECT 1 FROM favorites WHERE user_id = ? AND task_id = ?",
        (principal.id, task_id),
    ).fetchone()
    return row is not None


def _load_task(engine: AccessEngine, principal: Principal, task_id: int) -> Task:
    with engine.store.connection() as conn:
        row = conn.execute(
            f"SELECT {_TASK_COLUMNS} FROM tasks t WHERE t.id = ?", (task_id,)
        ).fetchone()
        if not row:
            raise TaskNotFoundError(task_id)
        return Task.from_row(row, is_favorite=_is_favorite(conn, principal, task_id))


# ===== Create / Read =====

def create_task(
    engine: AccessEngine,
    principal: Principal,
    list_id: int,
    title: str,
    description: Optional[str] = None,
    due_date: Optional[str] = None,
    repeat_after: int = 0,
    priority: int = 0,
    hex_color: Optional[str] = None,
    position: Optional[float] = None,
) -> Task:
    """Create a new task within a list.

    Args:
        list_id: ID of the parent list (not the Favorites pseudo-list)
        title: Task title (required, max 500 chars)
        due_date: Optional ISO 8601 timestamp
        repeat_after: Seconds the due date moves forward each time the task is done
        position: Optional position (auto-calculated if not provided)

    Returns:
        Created task

    Raises:
        ValidationError / ListNotFoundError / InsufficientRightError / ArchivedError
    """
    if list_id == FAVORITES_PSEUDO_LIST_ID:
        raise ValidationError("Tasks cannot be created in the favorites pseudo list")

    engine.require(principal, TaskList(id=list_id), Right.WRITE)

    title = _validate_title(title)
    due_date = _validate_due_date(due_date)
    if repeat_after < 0:
        raise ValidationError("repeat_after cannot be negative")

    now = _utcnow()
    with engine.store.connection() as conn:
        pos = position if position is not None else _next_task_position(conn, list_id)
        cur = conn.execute(
            """
            INSERT INTO tasks(list_id, title, description, done, due_date, repeat_after,
                              priority, hex_color, position, created_by_id, created_at, updated_at)
            VALUES (?, ?, ?, 0, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (list_id, title, description, due_date, repeat_after, priority, hex_color,
             pos, _author_id(principal), now, now),
        )
        conn.commit()
        task_id = cur.lastrowid

    logger.info(f"{principal.describe()} created task {task_id} in list {list_id}")
    return _load_task(engine, principal, task_id)


def get_task(engine: AccessEngine, principal: Principal, task_id: int) -> Task:
    """Read one task; needs read on its list"""
    task = _load_task(engine, principal, task_id)
    engine.require(principal, TaskList(id=task.list_id), Right.READ)
    return task


def list_tasks(
    engine: AccessEngine,
    principal: Principal,
    list_id: int,
    page: int = 1,
    per_page: Optional[int] = None,
) -> Tuple[List[Task], int]:
    """List the tasks of a list ordered by position.

    For the Favorites pseudo-list this returns the caller's favorite tasks,
    limited to lists the caller can still read.

    Returns:
        (tasks on this page, total number of tasks)
    """
    target = FavoritesPseudoList() if list_id == FAVORITES_PSEUDO_LIST_ID else TaskList(id=list_id)
    engine.require(principal, target, Right.READ)

    max_per_page = engine.settings.max_items_per_page
    per_page = min(per_page or max_per_page, max_per_page)
    page = max(page, 1)

    if isinstance(target, FavoritesPseudoList):
        return _list_favorite_tasks(engine, principal, page, per_page)

    user_id = principal.id if isinstance(principal, User) else 0
    with engine.store.connection() as conn:
        total = conn.execute(
            "SELECT COUNT(*) AS total FROM tasks WHERE list_id = ?", (list_id,)
        ).fetchone()["total"]
        rows = conn.execute(
            f"""
            SELECT {_TASK_COLUMNS}, f.task_id IS NOT NULL AS is_favorite
            FROM tasks t
            LEFT JOIN favorites f ON f.task_id = t.id AND f.user_id = ?
            WHERE t.list_id = ?
            ORDER BY t.position ASC, t.id ASC
            LIMIT ? OFFSET ?
            """,
            (user_id, list_id, per_page, (page - 1) * per_page),
        ).fetchall()

    return [Task.from_row(r, is_favorite=bool(r["is_favorite"])) for r in rows], total


def _list_favorite_tasks(
    engine: AccessEngine,
    principal: Principal,
    page: int,
    per_page: int,
) -> Tuple[List[Task], int]:
    with engine.store.connection() as conn:
        rows = conn.execute(
            f"""
            SELECT {_TASK_COLUMNS}
            FROM tasks t
            INNER JOIN favorites f ON f.task_id = t.id
            WHERE f.user_id = ?
            ORDER BY t.id ASC
            """,
            (principal.id,),
        ).fetchall()

    # Favorites outlive shares; drop tasks whose list is no longer readable
    readable: Dict[int, bool] = {}
    tasks = []
    for row in rows:
        list_id = row["list_id"]
        if list_id not in readable:
            readable[list_id] = engine.can_read(principal, TaskList(id=list_id))
        if readable[list_id]:
            tasks.append(Task.from_row(row, is_favorite=True))

    start = (page - 1) * per_page
    return tasks[start:start + per_page], len(tasks)


# ===== Update / Delete =====

def _apply_done(task: Task, values: Dict[str, Any]) -> None:
    """
    Resolve done/done_at/due_date for a change of the done flag

    Marking a repeating task done moves its due date forward by
    repeat_after seconds and leaves it undone.
    """
    done = values.get("done", task.done)
    repeat_after = values.get("repeat_after", task.repeat_after)

    if not task.done and done and repeat_after > 0:
        due_date = values.get("due_date", task.due_date)
        if due_date:
            rolled = datetime.fromisoformat(due_date) + timedelta(seconds=repeat_after)
            values["due_date"] = rolled.isoformat()
        values["done"] = False
        return

    if not task.done and done:
        values["done_at"] = _utcnow()
    elif task.done and not done:
        values["done_at"] = None


def update_task(
    engine: AccessEngine,
    principal: Principal,
    task_id: int,
    changes: Dict[str, Any],
) -> Task:
    """
    Partially update a task

    Only the keys present in `changes` are written, so a field can be
    cleared by sending it as None (or 0 / False). Moving the task to another
    list needs write on both lists.

    Args:
        changes: Mapping of field name to new value; keys outside UPDATABLE_FIELDS are rejected

    Raises:
        TaskNotFoundError / InsufficientRightError / ArchivedError / ValidationError
    """
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown task fields: {', '.join(sorted(unknown))}")

    task = _load_task(engine, principal, task_id)
    engine.require(principal, TaskList(id=task.list_id), Right.WRITE)

    values = dict(changes)
    if "title" in values:
        values["title"] = _validate_title(values["title"])
    if "due_date" in values:
        values["due_date"] = _validate_due_date(values["due_date"])
    if values.get("repeat_after") is None and "repeat_after" in values:
        values["repeat_after"] = 0
    if values.get("repeat_after", 0) < 0:
        raise ValidationError("repeat_after cannot be negative")
    if "priority" in values and values["priority"] is None:
        values["priority"] = 0
    if "position" in values and values["position"] is None:
        raise ValidationError("position cannot be cleared")
    if "done" in values and values["done"] is None:
        raise ValidationError("done cannot be cleared")
    if "done" in values:
        values["done"] = bool(values["done"])
        _apply_done(task, values)

    new_list_id = values.get("list_id")
    if new_list_id is None:
        values.pop("list_id", None)
    elif new_list_id != task.list_id:
        if new_list_id == FAVORITES_PSEUDO_LIST_ID:
            raise ValidationError("Tasks cannot be moved into the favorites pseudo list")
        engine.require(principal, TaskList(id=new_list_id), Right.WRITE)

    if values:
        values["updated_at"] = _utcnow()
        assignments = ", ".join(f"{col} = ?" for col in values)
        params = [int(v) if isinstance(v, bool) else v for v in values.values()]
        with engine.store.connection() as conn:
            conn.execute(
                f"UPDATE tasks SET {assignments} WHERE id = ?",
                (*params, task_id),
            )
            conn.commit()
        logger.info(f"{principal.describe()} updated task {task_id}: {sorted(changes)}")

    return _load_task(engine, principal, task_id)


def delete_task(engine: AccessEngine, principal: Principal, task_id: int) -> None:
    """Delete a task; needs write on its list"""
    task = _load_task(engine, principal, task_id)
    engine.require(principal, TaskList(id=task.list_id), Right.WRITE)
    with engine.store.connection() as conn:
        conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        conn.commit()
    logger.info(f"{principal.describe()} deleted task {task_id}")


def set_task_favorite(engine: AccessEngine, principal: Principal, task_id: int, favorite: bool) -> Task:
    """
    Mark or unmark a task as one of the caller's favorites

    Favorites are personal, so read on the list is enough and archived lists
    are not blocked.

    Raises:
        InsufficientRightError: The principal is a link share
    """
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot have favorites")

    task = _load_task(engine, principal, task_id)
    engine.require(principal, TaskList(id=task.list_id), Right.READ)

    with engine.store.connection() as conn:
        if favorite:
            conn.execute(
                "INSERT OR IGNORE INTO favorites(user_id, task_id) VALUES (?, ?)",
                (principal.id, task_id),
            )
        else:
            conn.execute(
                "DELETE FROM favorites WHERE user_id = ? AND task_id = ?",
                (principal.id, task_id),
            )
        conn.commit()

    logger.debug(f"User {principal.id} set favorite={favorite} on task {task_id}")
    return _load_task(engine, principal, task_id)
