"""
Namespaces - CRUD operations

Every operation authorizes through the AccessEngine against the namespace as
stored; updates and deletes need admin. An archived namespace only accepts
the update that unarchives it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from tasklane.db import _utcnow
from tasklane.errors import InsufficientRightError, ValidationError
from tasklane.models import FAVORITES_PSEUDO_NAMESPACE, Namespace
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal, User
from tasklane.permissions.types import Right

logger = logging.getLogger(__name__)


def _validate_title(title: Optional[str]) -> str:
    if not title or not title.strip():
        raise ValidationError("Namespace title cannot be empty")
    if len(title) > 250:
        raise ValidationError("Namespace title cannot exceed 250 characters")
    return title.strip()


def create_namespace(
    engine: AccessEngine,
    principal: Principal,
    title: str,
    description: Optional[str] = None,
) -> Namespace:
    """Create a namespace owned by the calling user

    Raises:
        InsufficientRightError: The principal is a link share
        ValidationError: Invalid title
    """
    if not engine.can_create(principal, Namespace(id=0)):
        raise InsufficientRightError("Link shares cannot create namespaces")
    title = _validate_title(title)

    now = _utcnow()
    with engine.store.connection() as conn:
        cur = conn.execute(
            """
            INSERT INTO namespaces(title, description, owner_id, is_archived, created_at, updated_at)
            VALUES (?, ?, ?, 0, ?, ?)
            """,
            (title, description, principal.id, now, now),
        )
        conn.commit()
        namespace_id = cur.lastrowid

    logger.info(f"User {principal.id} created namespace {namespace_id}")
    return engine.store.get_namespace(namespace_id)


def get_namespace(engine: AccessEngine, principal: Principal, namespace_id: int) -> Namespace:
    """Read one namespace (read right)"""
    return engine.require(principal, Namespace(id=namespace_id), Right.READ)


def list_namespaces(
    engine: AccessEngine,
    principal: Principal,
    include_archived: bool = False,
) -> List[Dict[str, Any]]:
    """
    Namespaces the user owns or reaches through a team grant

    The Favorites pseudo namespace is prepended when the user has at least
    one favorite task or list. Link shares see no namespaces.
    """
    if not isinstance(principal, User):
        return []

    archived_cond = "" if include_archived else "AND n.is_archived = 0"
    with engine.store.connection() as conn:
        rows = conn.execute(
            f"""
            SELECT DISTINCT n.id, n.title, n.description, n.owner_id, n.is_archived,
                   n.created_at, n.updated_at
            FROM namespaces n
            LEFT JOIN team_namespaces tn ON tn.namespace_id = n.id
            LEFT JOIN team_members tm ON tm.team_id = tn.team_id
            WHERE (n.owner_id = ? OR tm.user_id = ?)
            {archived_cond}
            ORDER BY n.id
            """,
            (principal.id, principal.id),
        ).fetchall()
        has_favorites = conn.execute(
            """
            SELECT 1 FROM favorites WHERE user_id = ?
            UNION ALL
            SELECT 1 FROM list_favorites WHERE user_id = ?
            LIMIT 1
            """,
            (principal.id, principal.id),
        ).fetchone() is not None

    namespaces = [Namespace.from_row(r).to_dict() for r in rows]
    if has_favorites:
        favorites = FAVORITES_PSEUDO_NAMESPACE.to_dict()
        favorites["owner_id"] = principal.id
        namespaces.insert(0, favorites)
    return namespaces


def update_namespace(
    engine: AccessEngine,
    principal: Principal,
    namespace_id: int,
    title: Optional[str] = None,
    description: Optional[str] = None,
    is_archived: Optional[bool] = None,
) -> Namespace:
    """
    Update a namespace (admin right)

    Fields left as None are not touched. While the namespace is archived the
    only accepted update is the one setting is_archived to False.

    Raises:
        NamespaceNotFoundError / InsufficientRightError / NamespaceIsArchivedError
    """
    stored = engine.store.get_namespace(namespace_id)
    lifting = stored.is_archived and is_archived is False
    engine.require(principal, Namespace(id=namespace_id), Right.ADMIN, lifting_archive=lifting)

    updates: Dict[str, Any] = {}
    if title is not None:
        updates["title"] = _validate_title(title)
    if description is not None:
        updates["description"] = description
    if is_archived is not None:
        updates["is_archived"] = int(is_archived)

    if updates:
        updates["updated_at"] = _utcnow()
        assignments = ", ".join(f"{col} = ?" for col in updates)
        with engine.store.connection() as conn:
            conn.execute(
                f"UPDATE namespaces SET {assignments} WHERE id = ?",
                (*updates.values(), namespace_id),
            )
            conn.commit()
        logger.info(f"{principal.describe()} updated namespace {namespace_id}: {sorted(updates)}")

    return engine.store.get_namespace(namespace_id)


def delete_namespace(engine: AccessEngine, principal: Principal, namespace_id: int) -> None:
    """
    Delete a namespace with all its lists and tasks (admin right)

    Raises:
        NamespaceNotFoundError / InsufficientRightError / NamespaceIsArchivedError
    """
    engine.require(principal, Namespace(id=namespace_id), Right.ADMIN)
    with engine.store.connection() as conn:
        conn.execute("DELETE FROM namespaces WHERE id = ?", (namespace_id,))
        conn.commit()
    logger.info(f"{principal.describe()} deleted namespace {namespace_id}")
