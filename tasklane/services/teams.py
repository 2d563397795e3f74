"""
Users & Teams

Minimal identity bookkeeping the grant store reads from: user rows and team
membership. Authentication lives upstream; these functions only record facts.

Team membership is managed by team admins. The creator of a team is its
first admin.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, List, Optional

from tasklane.db import _utcnow
from tasklane.errors import InsufficientRightError, TeamNotFoundError, ValidationError
from tasklane.permissions.principals import Principal, User
from tasklane.permissions.storage import GrantStore

logger = logging.getLogger(__name__)


# ===== Users =====

def create_user(store: GrantStore, username: str) -> User:
    """Register a user identity

    Raises:
        ValidationError: Empty or already taken username
    """
    if not username or not username.strip():
        raise ValidationError("Username cannot be empty")

    with store.connection() as conn:
        try:
            cur = conn.execute(
                "INSERT INTO users(username, created_at) VALUES (?, ?)",
                (username.strip(), _utcnow()),
            )
        except sqlite3.IntegrityError:
            raise ValidationError(f"Username '{username}' is already taken")
        conn.commit()
        user_id = cur.lastrowid

    logger.info(f"Created user {user_id} ({username})")
    return User(id=user_id, username=username.strip())


def user_exists(store: GrantStore, user_id: int) -> bool:
    with store.connection() as conn:
        row = conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
    return row is not None


# ===== Teams =====

def _require_user(principal: Principal) -> User:
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot manage teams")
    return principal


def _get_team(conn: sqlite3.Connection, team_id: int) -> sqlite3.Row:
    row = conn.execute(
        "SELECT id, name, description, created_by_id, created_at FROM teams WHERE id = ?",
        (team_id,),
    ).fetchone()
    if not row:
        raise TeamNotFoundError(team_id)
    return row


def _require_team_admin(conn: sqlite3.Connection, team_id: int, user: User) -> None:
    _get_team(conn, team_id)
    row = conn.execute(
        "SELECT admin FROM team_members WHERE team_id = ? AND user_id = ?",
        (team_id, user.id),
    ).fetchone()
    if not row or not row["admin"]:
        raise InsufficientRightError(f"Only team admins can manage members of team {team_id}")


def _admin_ids(conn: sqlite3.Connection, team_id: int) -> List[int]:
    rows = conn.execute(
        "SELECT user_id FROM team_members WHERE team_id = ? AND admin = 1 ORDER BY user_id",
        (team_id,),
    ).fetchall()
    return [r["user_id"] for r in rows]


def create_team(
    store: GrantStore,
    principal: Principal,
    name: str,
    description: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a team; the creator becomes its first admin member"""
    user = _require_user(principal)
    if not name or not name.strip():
        raise ValidationError("Team name cannot be empty")
    if len(name) > 250:
        raise ValidationError("Team name cannot exceed 250 characters")

    now = _utcnow()
    with store.connection() as conn:
        cur = conn.execute(
            "INSERT INTO teams(name, description, created_by_id, created_at) VALUES (?,?,?,?)",
            (name.strip(), description, user.id, now),
        )
        team_id = cur.lastrowid
        conn.execute(
            "INSERT INTO team_members(team_id, user_id, admin, created_at) VALUES (?,?,1,?)",
            (team_id, user.id, now),
        )
        conn.commit()

    logger.info(f"User {user.id} created team {team_id}")
    return {
        "id": team_id,
        "name": name.strip(),
        "description": description,
        "created_by_id": user.id,
        "created_at": now,
    }


def add_team_member(
    store: GrantStore,
    principal: Principal,
    team_id: int,
    user_id: int,
    admin: bool = False,
) -> Dict[str, Any]:
    """Add a user to a team, or update their admin flag if already a member

    Raises:
        ValidationError: Unknown user, or the change would demote the last admin
    """
    user = _require_user(principal)
    with store.connection() as conn:
        _require_team_admin(conn, team_id, user)
        if not conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone():
            raise ValidationError(f"User {user_id} does not exist")
        if not admin and _admin_ids(conn, team_id) == [user_id]:
            raise ValidationError("Cannot demote the last admin of a team")
        conn.execute(
            """
            INSERT INTO team_members(team_id, user_id, admin, created_at) VALUES (?,?,?,?)
            ON CONFLICT(team_id, user_id) DO UPDATE SET admin = excluded.admin
            """,
            (team_id, user_id, int(admin), _utcnow()),
        )
        conn.commit()

    logger.info(f"User {user.id} added user {user_id} to team {team_id} (admin={admin})")
    return {"team_id": team_id, "user_id": user_id, "admin": admin}


def remove_team_member(store: GrantStore, principal: Principal, team_id: int, user_id: int) -> bool:
    """Remove a user from a team. The last admin cannot be removed.

    Returns:
        True if a membership was removed
    """
    user = _require_user(principal)
    with store.connection() as conn:
        _require_team_admin(conn, team_id, user)
        if _admin_ids(conn, team_id) == [user_id]:
            raise ValidationError("Cannot remove the last admin of a team")
        cur = conn.execute(
            "DELETE FROM team_members WHERE team_id = ? AND user_id = ?",
            (team_id, user_id),
        )
        conn.commit()

    if cur.rowcount:
        logger.info(f"User {user.id} removed user {user_id} from team {team_id}")
    return cur.rowcount > 0


def list_team_members(store: GrantStore, principal: Principal, team_id: int) -> List[Dict[str, Any]]:
    """Members of a team; only visible to members"""
    user = _require_user(principal)
    with store.connection() as conn:
        _get_team(conn, team_id)
        rows = conn.execute(
            """
            SELECT tm.user_id, u.username, tm.admin
            FROM team_members tm
            LEFT JOIN users u ON u.id = tm.user_id
            WHERE tm.team_id = ?
            ORDER BY tm.user_id
            """,
            (team_id,),
        ).fetchall()

    members = [{"user_id": r["user_id"], "username": r["username"], "admin": bool(r["admin"])} for r in rows]
    if user.id not in {m["user_id"] for m in members}:
        raise InsufficientRightError(f"Not a member of team {team_id}")
    return members
