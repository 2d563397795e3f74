"""
Grant Store

Read-side query contract the authorizers consult at decision time:
team membership, namespace/list grants, entity lookups and link shares.
Nothing is cached; every call reflects what a single query observed.

Any sqlite3.Error is logged and re-raised as StoreUnavailableError with the
original exception chained. There is no local retry.
"""

import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Optional, Set

from tasklane.db import get_db_connection
from tasklane.errors import (
    ListNotFoundError,
    LinkShareNotFoundError,
    NamespaceNotFoundError,
    StoreUnavailableError,
)
from tasklane.models import Namespace, TaskList
from .hierarchy import max_right
from .principals import LinkShare
from .types import Right

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ArchiveState:
    """Archived bits of a list and its namespace, loaded by one join"""
    list_id: int
    list_archived: bool
    namespace_id: int
    namespace_archived: bool


class GrantStore:
    """
    SQLite-backed grant store

    Args:
        db_path: Path to the app database. None resolves it from settings on
            every connection.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Open a connection, translate store failures, always close.

        Commits are the caller's responsibility.
        """
        conn = None
        try:
            conn = get_db_connection(self.db_path)
            yield conn
        except sqlite3.Error as e:
            logger.error(f"Grant store query failed: {e}")
            raise StoreUnavailableError(details={"cause": str(e)}) from e
        finally:
            if conn is not None:
                conn.close()

    # ===== Membership =====

    def find_teams_containing(self, user_id: int) -> Set[int]:
        """Ids of every team the user is a member of"""
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT team_id FROM team_members WHERE user_id = ?",
                (user_id,),
            ).fetchall()
        return {row["team_id"] for row in rows}

    # ===== Grants =====

    def find_namespace_grant(self, namespace_id: int, team_ids: Iterable[int]) -> Right:
        """Highest right any of the teams holds on the namespace"""
        team_ids = list(team_ids)
        if not team_ids:
            return Right.NONE

        placeholders = ','.join('?' for _ in team_ids)
        with self.connection() as conn:
            rows = conn.execute(
                f"""
                SELECT access_right FROM team_namespaces
                WHERE namespace_id = ? AND team_id IN ({placeholders})
                """,
                (namespace_id, *team_ids),
            ).fetchall()
        return max_right(*(Right(row["access_right"]) for row in rows))

    def find_list_grant(self, list_id: int, user_id: int, team_ids: Iterable[int]) -> Right:
        """Highest right from a direct user share or any of the teams' list shares"""
        team_ids = list(team_ids)
        with self.connection() as conn:
            if team_ids:
                placeholders = ','.join('?' for _ in team_ids)
                rows = conn.execute(
                    f"""
                    SELECT access_right FROM users_lists
                    WHERE list_id = ? AND user_id = ?

                    UNION ALL

                    SELECT access_right FROM team_lists
                    WHERE list_id = ? AND team_id IN ({placeholders})
                    """,
                    (list_id, user_id, list_id, *team_ids),
                ).fetchall()
            else:
                rows = conn.execute(
                    "SELECT access_right FROM users_lists WHERE list_id = ? AND user_id = ?",
                    (list_id, user_id),
                ).fetchall()
        return max_right(*(Right(row["access_right"]) for row in rows))

    # ===== Entities =====

    def get_namespace(self, namespace_id: int) -> Namespace:
        """Load a namespace; raises NamespaceNotFoundError"""
        if namespace_id < 1:
            raise NamespaceNotFoundError(namespace_id)

        with self.connection() as conn:
            row = conn.execute(
                """
                SELECT id, title, description, owner_id, is_archived, created_at, updated_at
                FROM namespaces WHERE id = ?
                """,
                (namespace_id,),
            ).fetchone()
        if not row:
            raise NamespaceNotFoundError(namespace_id)
        return Namespace.from_row(row)

    def get_list(self, list_id: int) -> TaskList:
        """Load a list; raises ListNotFoundError"""
        if list_id < 1:
            raise ListNotFoundError(list_id)

        with self.connection() as conn:
            row = conn.execute(
                """
                SELECT id, title, description, identifier, hex_color, namespace_id,
                       owner_id, is_archived, created_at, updated_at
                FROM lists WHERE id = ?
                """,
                (list_id,),
            ).fetchone()
        if not row:
            raise ListNotFoundError(list_id)
        return TaskList.from_row(row)

    def get_archive_state(self, list_id: int) -> ArchiveState:
        """Archived bits of a list and its namespace; raises ListNotFoundError"""
        with self.connection() as conn:
            row = conn.execute(
                """
                SELECT l.id AS list_id, l.is_archived AS list_archived,
                       n.id AS namespace_id, n.is_archived AS namespace_archived
                FROM lists l
                LEFT JOIN namespaces n ON l.namespace_id = n.id
                WHERE l.id = ?
                """,
                (list_id,),
            ).fetchone()
        if not row:
            raise ListNotFoundError(list_id)
        return ArchiveState(
            list_id=row["list_id"],
            list_archived=bool(row["list_archived"]),
            namespace_id=row["namespace_id"],
            namespace_archived=bool(row["namespace_archived"]),
        )

    # ===== Link shares =====

    def get_link_share_by_hash(self, share_hash: str) -> LinkShare:
        """Resolve a link share token; raises LinkShareNotFoundError"""
        with self.connection() as conn:
            row = conn.execute(
                """
                SELECT id, hash, list_id, access_right, shared_by_id, created_at
                FROM link_shares WHERE hash = ?
                """,
                (share_hash,),
            ).fetchone()
        if not row:
            raise LinkShareNotFoundError()
        return LinkShare.from_row(row)

    def get_link_share(self, share_id: int) -> LinkShare:
        """Load a link share by id; raises LinkShareNotFoundError"""
        with self.connection() as conn:
            row = conn.execute(
                """
                SELECT id, hash, list_id, access_right, shared_by_id, created_at
                FROM link_shares WHERE id = ?
                """,
                (share_id,),
            ).fetchone()
        if not row:
            raise LinkShareNotFoundError(share_id)
        return LinkShare.from_row(row)
