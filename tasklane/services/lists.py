"""
Lists - CRUD operations

Provides create/read/update/delete/move for lists plus the listing of every
list a principal can reach. All decisions go through the AccessEngine with
the list re-loaded from the store:

- create: write on the target namespace, namespace not archived
- read: read on the list
- update: write on the list, neither list nor namespace archived
  (except the update that unarchives the list)
- delete: admin on the list
- move: admin on the list and create right in the target namespace
- favorite: read on the list, users only; favorites are per user and show
  up in the Favorites pseudo namespace (-1)
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional, Set, Tuple

from tasklane.db import _utcnow
from tasklane.errors import InsufficientRightError, ValidationError, ErrorType
from tasklane.models import (
    FAVORITES_PSEUDO_LIST,
    FAVORITES_PSEUDO_LIST_ID,
    FAVORITES_PSEUDO_NAMESPACE_ID,
    FavoritesPseudoList,
    Namespace,
    TaskList,
)
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import LinkShare, Principal, User
from tasklane.permissions.types import Right

logger = logging.getLogger(__name__)


def list_target(list_id: int):
    """The entity an id refers to: the Favorites pseudo-list or a real list"""
    if list_id == FAVORITES_PSEUDO_LIST_ID:
        return FavoritesPseudoList()
    return TaskList(id=list_id)


def _validate_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError("List title cannot be empty")
    if len(title) > 250:
        raise ValidationError("List title cannot exceed 250 characters")
    return title.strip()


def _validate_identifier(conn, identifier: Optional[str], list_id: int) -> Optional[str]:
    """Identifiers are optional, at most 10 characters and unique across lists"""
    if not identifier:
        return None
    if len(identifier) > 10:
        raise ValidationError("List identifier cannot exceed 10 characters")
    exists = conn.execute(
        "SELECT 1 FROM lists WHERE identifier = ? AND id != ?",
        (identifier, list_id),
    ).fetchone()
    if exists:
        raise ValidationError(
            f"List identifier '{identifier}' is not unique",
            error_type=ErrorType.IDENTIFIER_NOT_UNIQUE,
            details={"identifier": identifier},
        )
    return identifier


def _validate_hex_color(hex_color: Optional[str]) -> Optional[str]:
    if not hex_color:
        return None
    color = hex_color.lstrip("#")
    if len(color) != 6 or any(c not in "0123456789abcdefABCDEF" for c in color):
        raise ValidationError(f"Invalid hex color: {hex_color}")
    return color.lower()


def _escape_like(value: str) -> str:
    """Match `value` literally inside a LIKE pattern using '\\' as escape"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _favorite_list_ids(conn: sqlite3.Connection, principal: Principal) -> Set[int]:
    """Ids of the lists the principal marked as favorite; empty for link shares"""
    if not isinstance(principal, User):
        return set()
    rows = conn.execute("SELECT list_id FROM list_favorites WHERE user_id = ?", (principal.id,)).fetchall()
    return {r["list_id"] for r in rows}


def _with_favorite(engine: AccessEngine, principal: Principal, task_list: TaskList) -> TaskList:
    with engine.store.connection() as conn:
        task_list.is_favorite = task_list.id in _favorite_list_ids(conn, principal)
    return task_list


def create_list(
    engine: AccessEngine,
    principal: Principal,
    namespace_id: int,
    title: str,
    description: Optional[str] = None,
    identifier: Optional[str] = None,
    hex_color: Optional[str] = None,
) -> TaskList:
    """
    Create a list in a namespace; the caller becomes its owner

    Raises:
        NamespaceNotFoundError / InsufficientRightError / NamespaceIsArchivedError / ValidationError
    """
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot create lists")
    engine.require(principal, TaskList(id=0, namespace_id=namespace_id), Right.WRITE)

    title = _validate_title(title)
    hex_color = _validate_hex_color(hex_color)
    now = _utcnow()
    with engine.store.connection() as conn:
        identifier = _validate_identifier(conn, identifier, 0)
        cur = conn.execute(
            """
            INSERT INTO lists(title, description, identifier, hex_color, namespace_id,
                              owner_id, is_archived, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?)
            """,
            (title, description, identifier, hex_color, namespace_id, principal.id, now, now),
        )
        conn.commit()
        list_id = cur.lastrowid

    logger.info(f"User {principal.id} created list {list_id} in namespace {namespace_id}")
    return engine.store.get_list(list_id)


def get_list(engine: AccessEngine, principal: Principal, list_id: int) -> Dict[str, Any]:
    """
    Read one list (read right)

    `is_archived` is reported True when either the list or its namespace is
    archived. The Favorites pseudo-list is synthesized for the caller.
    """
    loaded = engine.require(principal, list_target(list_id), Right.READ)
    if isinstance(loaded, FavoritesPseudoList):
        return FAVORITES_PSEUDO_LIST.to_dict(owner_id=principal.id)

    data = _with_favorite(engine, principal, loaded).to_dict()
    data["is_archived"] = engine.archive.is_archived(loaded)
    return data


def list_lists(
    engine: AccessEngine,
    principal: Principal,
    search: str = "",
    page: int = 1,
    per_page: Optional[int] = None,
    include_archived: bool = False,
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Every list the principal can read

    A user reaches a list by owning it or its namespace, by a direct user
    share, or through a team holding a list or namespace grant. A link
    share only ever sees its own list.

    Args:
        search: Comma separated list ids, or a title substring
        page: 1-based page number
        per_page: Page size, capped by settings.max_items_per_page
        include_archived: Also return archived lists and lists in archived namespaces

    Returns:
        (lists on this page, total number of matching lists)
    """
    if isinstance(principal, LinkShare):
        loaded = engine.store.get_list(principal.list_id)
        return [loaded.to_dict()], 1

    max_per_page = engine.settings.max_items_per_page
    per_page = min(per_page or max_per_page, max_per_page)
    page = max(page, 1)

    conditions = []
    params: List[Any] = [principal.id] * 5

    ids = []
    for part in search.split(","):
        part = part.strip()
        if part.isdigit():
            ids.append(int(part))
        elif part:
            logger.debug(f"List search string part '{part}' is not a number")
    if ids:
        conditions.append(f"l.id IN ({','.join('?' for _ in ids)})")
        params.extend(ids)
    elif search:
        conditions.append("l.title LIKE ? ESCAPE '\\'")
        params.append(f"%{_escape_like(search)}%")

    if not include_archived:
        conditions.append("l.is_archived = 0 AND n.is_archived = 0")

    extra = "".join(f" AND {c}" for c in conditions)
    base = f"""
        FROM lists l
        INNER JOIN namespaces n ON l.namespace_id = n.id
        LEFT JOIN team_namespaces tn ON tn.namespace_id = n.id
        LEFT JOIN team_members tm ON tm.team_id = tn.team_id
        LEFT JOIN team_lists tl ON tl.list_id = l.id
        LEFT JOIN team_members tm2 ON tm2.team_id = tl.team_id
        LEFT JOIN users_lists ul ON ul.list_id = l.id
        WHERE (tm.user_id = ? OR tm2.user_id = ? OR ul.user_id = ?
               OR l.owner_id = ? OR n.owner_id = ?){extra}
    """

    with engine.store.connection() as conn:
        total = conn.execute(f"SELECT COUNT(DISTINCT l.id) AS total {base}", params).fetchone()["total"]
        rows = conn.execute(
            f"""
            SELECT DISTINCT l.id, l.title, l.description, l.identifier, l.hex_color,
                   l.namespace_id, l.owner_id, l.is_archived, l.created_at, l.updated_at
            {base}
            ORDER BY l.id
            LIMIT ? OFFSET ?
            """,
            (*params, per_page, (page - 1) * per_page),
        ).fetchall()

        favorite_ids = _favorite_list_ids(conn, principal)

    lists = [TaskList.from_row(r) for r in rows]
    for task_list in lists:
        task_list.is_favorite = task_list.id in favorite_ids
    return [l.to_dict() for l in lists], total


def update_list(
    engine: AccessEngine,
    principal: Principal,
    list_id: int,
    title: Optional[str] = None,
    description: Optional[str] = None,
    identifier: Optional[str] = None,
    hex_color: Optional[str] = None,
    is_archived: Optional[bool] = None,
) -> TaskList:
    """
    Update a list (write right)

    Fields left as None are not touched. An archived list only accepts the
    update that sets is_archived to False, and only while its namespace is
    not archived.

    Raises:
        ListNotFoundError / InsufficientRightError / ArchivedError / ValidationError
    """
    if list_id == FAVORITES_PSEUDO_LIST_ID:
        raise ValidationError("The favorites pseudo list cannot be changed")

    stored = engine.store.get_list(list_id)
    lifting = stored.is_archived and is_archived is False
    engine.require(principal, TaskList(id=list_id), Right.WRITE, lifting_archive=lifting)

    updates: Dict[str, Any] = {}
    if title is not None:
        updates["title"] = _validate_title(title)
    if description is not None:
        updates["description"] = description
    if hex_color is not None:
        updates["hex_color"] = _validate_hex_color(hex_color)
    if is_archived is not None:
        updates["is_archived"] = int(is_archived)

    with engine.store.connection() as conn:
        if identifier is not None:
            updates["identifier"] = _validate_identifier(conn, identifier, list_id)
        if updates:
            updates["updated_at"] = _utcnow()
            assignments = ", ".join(f"{col} = ?" for col in updates)
            conn.execute(
                f"UPDATE lists SET {assignments} WHERE id = ?",
                (*updates.values(), list_id),
            )
            conn.commit()

    if updates:
        logger.info(f"{principal.describe()} updated list {list_id}: {sorted(updates)}")
    return _with_favorite(engine, principal, engine.store.get_list(list_id))


def move_list(engine: AccessEngine, principal: Principal, list_id: int, namespace_id: int) -> TaskList:
    """
    Move a list into another namespace

    Needs admin on the list and the right to create lists in the target
    namespace; neither side may be archived.
    """
    if list_id == FAVORITES_PSEUDO_LIST_ID:
        raise ValidationError("The favorites pseudo list cannot be moved")
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot move lists")

    engine.require(principal, TaskList(id=list_id), Right.ADMIN)
    engine.require(principal, TaskList(id=0, namespace_id=namespace_id), Right.WRITE)

    with engine.store.connection() as conn:
        conn.execute(
            "UPDATE lists SET namespace_id = ?, updated_at = ? WHERE id = ?",
            (namespace_id, _utcnow(), list_id),
        )
        conn.commit()

    logger.info(f"User {principal.id} moved list {list_id} to namespace {namespace_id}")
    return _with_favorite(engine, principal, engine.store.get_list(list_id))


def delete_list(engine: AccessEngine, principal: Principal, list_id: int) -> None:
    """
    Delete a list and all its tasks (admin right)

    Raises:
        ListNotFoundError / InsufficientRightError / ArchivedError
    """
    if list_id == FAVORITES_PSEUDO_LIST_ID:
        raise ValidationError("The favorites pseudo list cannot be deleted")

    engine.require(principal, TaskList(id=list_id), Right.ADMIN)
    with engine.store.connection() as conn:
        conn.execute("DELETE FROM lists WHERE id = ?", (list_id,))
        conn.commit()
    logger.info(f"{principal.describe()} deleted list {list_id}")


def set_list_favorite(engine: AccessEngine, principal: Principal, list_id: int, favorite: bool) -> TaskList:
    """
    Mark or unmark a list as one of the caller's favorites

    Like task favorites this is personal: read on the list is enough and
    archived lists are not blocked.

    Raises:
        InsufficientRightError: The principal is a link share
        ValidationError: The Favorites pseudo-list itself
    """
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot have favorites")
    if list_id == FAVORITES_PSEUDO_LIST_ID:
        raise ValidationError("The favorites pseudo list cannot be a favorite")

    engine.require(principal, TaskList(id=list_id), Right.READ)

    with engine.store.connection() as conn:
        if favorite:
            conn.execute(
                "INSERT OR IGNORE INTO list_favorites(user_id, list_id) VALUES (?, ?)",
                (principal.id, list_id),
            )
        else:
            conn.execute(
                "DELETE FROM list_favorites WHERE user_id = ? AND list_id = ?",
                (principal.id, list_id),
            )
        conn.commit()

    logger.debug(f"User {principal.id} set favorite={favorite} on list {list_id}")
    return _with_favorite(engine, principal, engine.store.get_list(list_id))


def namespace_lists(
    engine: AccessEngine,
    principal: Principal,
    namespace_id: int,
    include_archived: bool = False,
) -> List[Dict[str, Any]]:
    """
    The lists of one namespace (read right on the namespace)

    Namespace -1 is the caller's Favorites namespace: the Favorites
    pseudo-list when the caller has favorite tasks, followed by every
    favorite list the caller can still read. Link shares are denied it.
    """
    engine.require(principal, Namespace(id=namespace_id), Right.READ)

    has_favorite_tasks = False
    with engine.store.connection() as conn:
        favorite_ids = _favorite_list_ids(conn, principal)
        if namespace_id == FAVORITES_PSEUDO_NAMESPACE_ID:
            has_favorite_tasks = conn.execute(
                "SELECT 1 FROM favorites WHERE user_id = ? LIMIT 1", (principal.id,)
            ).fetchone() is not None
            rows = []
            if favorite_ids:
                rows = conn.execute(
                    f"""
                    SELECT id, title, description, identifier, hex_color, namespace_id,
                           owner_id, is_archived, created_at, updated_at
                    FROM lists WHERE id IN ({','.join('?' for _ in favorite_ids)})
                    ORDER BY id
                    """,
                    sorted(favorite_ids),
                ).fetchall()
        else:
            rows = conn.execute(
                """
                SELECT id, title, description, identifier, hex_color, namespace_id,
                       owner_id, is_archived, created_at, updated_at
                FROM lists WHERE namespace_id = ?
                ORDER BY id
                """,
                (namespace_id,),
            ).fetchall()

    lists = [TaskList.from_row(r) for r in rows]
    if namespace_id == FAVORITES_PSEUDO_NAMESPACE_ID:
        # A favorite outlives the grant that made the list readable
        lists = [l for l in lists if engine.can_read(principal, l)]

    result = []
    if has_favorite_tasks:
        result.append(FAVORITES_PSEUDO_LIST.to_dict(owner_id=principal.id))
    for task_list in lists:
        archived = engine.archive.is_archived(task_list)
        if archived and not include_archived:
            continue
        task_list.is_favorite = task_list.id in favorite_ids
        data = task_list.to_dict()
        data["is_archived"] = archived
        result.append(data)
    return result
