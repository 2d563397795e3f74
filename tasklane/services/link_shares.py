"""
Link Shares

A link share is a random hash that grants whoever presents it one fixed
right on one list. Only users create them:

- sharing read or write needs write on the list
- sharing admin needs admin on the list

Listing and deleting the shares of a list needs admin, and is also limited
to users: a link share never sees the hashes of its siblings.
"""

from __future__ import annotations

import logging
import secrets
from typing import Any, Dict, List, Union

from tasklane.db import _utcnow
from tasklane.errors import InsufficientRightError, LinkShareNotFoundError
from tasklane.models import TaskList
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import LinkShare, Principal, User
from tasklane.permissions.types import Right
from .sharing import parse_grantable_right

logger = logging.getLogger(__name__)


def _require_user(principal: Principal) -> User:
    if not isinstance(principal, User):
        raise InsufficientRightError("Link shares cannot manage link shares")
    return principal


def create_link_share(
    engine: AccessEngine,
    principal: Principal,
    list_id: int,
    right: Union[str, Right] = Right.READ,
) -> LinkShare:
    """
    Create a link share for a list

    Raises:
        InsufficientRightError: Link share principal, or not enough right for the requested share
        ValidationError: `right` is not a grantable right
        ListNotFoundError / ArchivedError
    """
    _require_user(principal)
    right = parse_grantable_right(right)

    needed = Right.ADMIN if right == Right.ADMIN else Right.WRITE
    engine.require(principal, TaskList(id=list_id), needed)

    share_hash = secrets.token_urlsafe(engine.settings.link_share_hash_length)
    with engine.store.connection() as conn:
        cur = conn.execute(
            """
            INSERT INTO link_shares(hash, list_id, access_right, shared_by_id, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (share_hash, list_id, right.value, principal.id, _utcnow()),
        )
        conn.commit()
        share_id = cur.lastrowid

    logger.info(f"User {principal.id} created link share {share_id} on list {list_id} ({right.value})")
    return engine.store.get_link_share(share_id)


def list_link_shares(engine: AccessEngine, principal: Principal, list_id: int) -> List[Dict[str, Any]]:
    """All link shares of a list (admin right; users only, the hashes are secrets)"""
    _require_user(principal)
    engine.require(principal, TaskList(id=list_id), Right.ADMIN, check_archived=False)
    with engine.store.connection() as conn:
        rows = conn.execute(
            """
            SELECT id, hash, list_id, access_right, shared_by_id, created_at
            FROM link_shares WHERE list_id = ?
            ORDER BY id
            """,
            (list_id,),
        ).fetchall()
    return [LinkShare.from_row(r).to_dict() for r in rows]


def delete_link_share(engine: AccessEngine, principal: Principal, list_id: int, share_id: int) -> None:
    """
    Delete a link share (admin right on its list)

    Raises:
        InsufficientRightError: Link share principal
        LinkShareNotFoundError: No such share on this list
    """
    _require_user(principal)
    engine.require(principal, TaskList(id=list_id), Right.ADMIN)
    share = engine.store.get_link_share(share_id)
    if share.list_id != list_id:
        raise LinkShareNotFoundError(share_id)

    with engine.store.connection() as conn:
        conn.execute("DELETE FROM link_shares WHERE id = ?", (share_id,))
        conn.commit()
    logger.info(f"{principal.describe()} deleted link share {share_id} on list {list_id}")


def authenticate_link_share(engine: AccessEngine, share_hash: str) -> LinkShare:
    """
    Resolve a presented hash into a LinkShare principal

    Raises:
        LinkShareNotFoundError: Unknown hash
    """
    share = engine.store.get_link_share_by_hash(share_hash)
    logger.debug(f"Authenticated link share {share.id} on list {share.list_id}")
    return share
