"""
Sharing - team and user grants

Manages the three persisted grant tables the authorizers read from:

- team_namespaces: a team's right on a namespace (reaches every list in it)
- team_lists: a team's right on one list
- users_lists: a user's right on one list

Granting, changing and revoking a grant needs admin on the target, which
must not be archived. Granting again replaces the stored right. Listing
the grants of an entity needs read. Link shares cannot manage grants.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Union

from tasklane.db import _utcnow
from tasklane.errors import InsufficientRightError, TeamNotFoundError, ValidationError
from tasklane.models import Namespace, TaskList
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal, User
from tasklane.permissions.types import GRANTABLE_RIGHTS, Right

logger = logging.getLogger(__name__)


def parse_grantable_right(value: Union[str, Right]) -> Right:
    """Turn a client-supplied right into a storable one

    Raises:
        ValidationError: Unknown right, or `none`
    """
    try:
        right = Right(value)
    except ValueError:
        raise ValidationError(f"Unknown right: {value}", details={"right": str(value)})
    if right not in GRANTABLE_RIGHTS:
        raise ValidationError(f"Right '{right.value}' cannot be granted", details={"right": right.value})
    return right


def _require_user(principal: Principal) -> User:
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot manage shares")
    return principal


def _require_team(conn, team_id: int) -> None:
    if not conn.execute("SELECT id FROM teams WHERE id = ?", (team_id,)).fetchone():
        raise TeamNotFoundError(team_id)


def _grant_dict(row) -> Dict[str, Any]:
    data = dict(row)
    data["right"] = data.pop("access_right")
    return data


# ===== Namespace <-> team =====

def share_namespace_with_team(
    engine: AccessEngine,
    principal: Principal,
    namespace_id: int,
    team_id: int,
    right: Union[str, Right],
) -> Dict[str, Any]:
    """Grant a team `right` on a namespace, or change the right it already has"""
    user = _require_user(principal)
    right = parse_grantable_right(right)
    engine.require(user, Namespace(id=namespace_id), Right.ADMIN)

    now = _utcnow()
    with engine.store.connection() as conn:
        _require_team(conn, team_id)
        conn.execute(
            """
            INSERT INTO team_namespaces(team_id, namespace_id, access_right, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(team_id, namespace_id)
            DO UPDATE SET access_right = excluded.access_right, updated_at = excluded.updated_at
            """,
            (team_id, namespace_id, right.value, now, now),
        )
        conn.commit()

    logger.info(f"User {user.id} shared namespace {namespace_id} with team {team_id} ({right.value})")
    return {"team_id": team_id, "namespace_id": namespace_id, "right": right.value}


def unshare_namespace_with_team(
    engine: AccessEngine,
    principal: Principal,
    namespace_id: int,
    team_id: int,
) -> bool:
    """Revoke a team's namespace grant

    Returns:
        True if a grant was removed
    """
    user = _require_user(principal)
    engine.require(user, Namespace(id=namespace_id), Right.ADMIN)
    with engine.store.connection() as conn:
        cur = conn.execute(
            "DELETE FROM team_namespaces WHERE namespace_id = ? AND team_id = ?",
            (namespace_id, team_id),
        )
        conn.commit()

    if cur.rowcount:
        logger.info(f"User {user.id} revoked namespace {namespace_id} from team {team_id}")
    return cur.rowcount > 0


def list_namespace_team_shares(
    engine: AccessEngine,
    principal: Principal,
    namespace_id: int,
) -> List[Dict[str, Any]]:
    """Teams holding a grant on the namespace"""
    engine.require(principal, Namespace(id=namespace_id), Right.READ)
    with engine.store.connection() as conn:
        rows = conn.execute(
            """
            SELECT tn.team_id, t.name AS team_name, tn.access_right, tn.created_at, tn.updated_at
            FROM team_namespaces tn
            INNER JOIN teams t ON t.id = tn.team_id
            WHERE tn.namespace_id = ?
            ORDER BY tn.team_id
            """,
            (namespace_id,),
        ).fetchall()
    return [_grant_dict(r) for r in rows]


# ===== List <-> team =====

def share_list_with_team(
    engine: AccessEngine,
    principal: Principal,
    list_id: int,
    team_id: int,
    right: Union[str, Right],
) -> Dict[str, Any]:
    """Grant a team `right` on a list, or change the right it already has"""
    user = _require_user(principal)
    right = parse_grantable_right(right)
    engine.require(user, TaskList(id=list_id), Right.ADMIN)

    now = _utcnow()
    with engine.store.connection() as conn:
        _require_team(conn, team_id)
        conn.execute(
            """
            INSERT INTO team_lists(team_id, list_id, access_right, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(team_id, list_id)
            DO UPDATE SET access_right = excluded.access_right, updated_at = excluded.updated_at
            """,
            (team_id, list_id, right.value, now, now),
        )
        conn.commit()

    logger.info(f"User {user.id} shared list {list_id} with team {team_id} ({right.value})")
    return {"team_id": team_id, "list_id": list_id, "right": right.value}


def unshare_list_with_team(engine: AccessEngine, principal: Principal, list_id: int, team_id: int) -> bool:
    """Revoke a team's list grant"""
    user = _require_user(principal)
    engine.require(user, TaskList(id=list_id), Right.ADMIN)
    with engine.store.connection() as conn:
        cur = conn.execute(
            "DELETE FROM team_lists WHERE list_id = ? AND team_id = ?",
            (list_id, team_id),
        )
        conn.commit()

    if cur.rowcount:
        logger.info(f"User {user.id} revoked list {list_id} from team {team_id}")
    return cur.rowcount > 0


def list_list_team_shares(engine: AccessEngine, principal: Principal, list_id: int) -> List[Dict[str, Any]]:
    """Teams holding a direct grant on the list"""
    engine.require(principal, TaskList(id=list_id), Right.READ)
    with engine.store.connection() as conn:
        rows = conn.execute(
            """
            SELECT tl.team_id, t.name AS team_name, tl.access_right, tl.created_at, tl.updated_at
            FROM team_lists tl
            INNER JOIN teams t ON t.id = tl.team_id
            WHERE tl.list_id = ?
            ORDER BY tl.team_id
            """,
            (list_id,),
        ).fetchall()
    return [_grant_dict(r) for r in rows]


# ===== List <-> user =====

def share_list_with_user(
    engine: AccessEngine,
    principal: Principal,
    list_id: int,
    user_id: int,
    right: Union[str, Right],
) -> Dict[str, Any]:
    """Grant a user `right` on a list, or change the right they already have

    Raises:
        ValidationError: Unknown user, or the user owns the list
    """
    user = _require_user(principal)
    right = parse_grantable_right(right)
    task_list = engine.require(user, TaskList(id=list_id), Right.ADMIN)
    if task_list.owner_id == user_id:
        raise ValidationError(f"User {user_id} owns list {list_id}")

    now = _utcnow()
    with engine.store.connection() as conn:
        if not conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone():
            raise ValidationError(f"User {user_id} does not exist")
        conn.execute(
            """
            INSERT INTO users_lists(user_id, list_id, access_right, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id, list_id)
            DO UPDATE SET access_right = excluded.access_right, updated_at = excluded.updated_at
            """,
            (user_id, list_id, right.value, now, now),
        )
        conn.commit()

    logger.info(f"User {user.id} shared list {list_id} with user {user_id} ({right.value})")
    return {"user_id": user_id, "list_id": list_id, "right": right.value}


def unshare_list_with_user(engine: AccessEngine, principal: Principal, list_id: int, user_id: int) -> bool:
    """Revoke a user's list grant"""
    user = _require_user(principal)
    engine.require(user, TaskList(id=list_id), Right.ADMIN)
    with engine.store.connection() as conn:
        cur = conn.execute(
            "DELETE FROM users_lists WHERE list_id = ? AND user_id = ?",
            (list_id, user_id),
        )
        conn.commit()

    if cur.rowcount:
        logger.info(f"User {user.id} revoked list {list_id} from user {user_id}")
    return cur.rowcount > 0


def list_list_user_shares(engine: AccessEngine, principal: Principal, list_id: int) -> List[Dict[str, Any]]:
    """Users holding a direct grant on the list"""
    engine.require(principal, TaskList(id=list_id), Right.READ)
    with engine.store.connection() as conn:
        rows = conn.execute(
            """
            SELECT ul.user_id, u.username, ul.access_right, ul.created_at, ul.updated_at
            FROM users_lists ul
            LEFT JOIN users u ON u.id = ul.user_id
            WHERE ul.list_id = ?
            ORDER BY ul.user_id
            """,
            (list_id,),
        ).fetchall()
    return [_grant_dict(r) for r in rows]
