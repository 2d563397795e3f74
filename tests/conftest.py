"""
Shared pytest fixtures for TaskLane tests.

Provides:
- Database fixtures (temporary database with the schema applied)
- GrantStore / AccessEngine bound to that database
- Row factories for users, teams, namespaces, lists, tasks and grants
- FastAPI TestClient with the engine dependency overridden
"""

import sqlite3
from pathlib import Path
from typing import Generator, Iterable, Optional

import pytest

from tasklane.config import TaskLaneSettings
from tasklane.db import _utcnow, ensure_schema, get_db_connection
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import LinkShare, User
from tasklane.permissions.storage import GrantStore
from tasklane.permissions.types import Right


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def settings(tmp_path: Path) -> TaskLaneSettings:
    """Settings pointing at a per-test data directory"""
    return TaskLaneSettings(
        environment="testing",
        data_dir=tmp_path,
        perms_explain=True,
        max_items_per_page=50,
    )


@pytest.fixture
def db_path(settings: TaskLaneSettings) -> Path:
    """Fresh database file with the TaskLane schema"""
    path = settings.app_db
    ensure_schema(path)
    return path


@pytest.fixture
def store(db_path: Path) -> GrantStore:
    return GrantStore(db_path)


@pytest.fixture
def engine(store: GrantStore, settings: TaskLaneSettings) -> AccessEngine:
    return AccessEngine(store=store, settings=settings)


# ============================================================================
# Data Factories
# ============================================================================

class Factory:
    """Inserts rows directly, bypassing authorization"""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._users = 0

    def _insert(self, sql: str, params: tuple) -> int:
        conn = get_db_connection(self.db_path)
        try:
            cur = conn.execute(sql, params)
            conn.commit()
            return cur.lastrowid
        finally:
            conn.close()

    def user(self, username: Optional[str] = None) -> User:
        self._users += 1
        username = username or f"user{self._users}"
        user_id = self._insert(
            "INSERT INTO users(username, created_at) VALUES (?, ?)",
            (username, _utcnow()),
        )
        return User(id=user_id, username=username)

    def team(self, members: Iterable[User] = (), admins: Iterable[User] = (), name: str = "team") -> int:
        creator = next(iter(admins), None) or next(iter(members), None)
        team_id = self._insert(
            "INSERT INTO teams(name, created_by_id, created_at) VALUES (?, ?, ?)",
            (name, creator.id if creator else 0, _utcnow()),
        )
        for member in admins:
            self.add_member(team_id, member, admin=True)
        for member in members:
            self.add_member(team_id, member)
        return team_id

    def add_member(self, team_id: int, user: User, admin: bool = False) -> None:
        self._insert(
            "INSERT INTO team_members(team_id, user_id, admin, created_at) VALUES (?, ?, ?, ?)",
            (team_id, user.id, int(admin), _utcnow()),
        )

    def namespace(self, owner: User, title: str = "Namespace", archived: bool = False) -> int:
        now = _utcnow()
        return self._insert(
            """
            INSERT INTO namespaces(title, owner_id, is_archived, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (title, owner.id, int(archived), now, now),
        )

    def task_list(
        self,
        namespace_id: int,
        owner: User,
        title: str = "List",
        archived: bool = False,
        identifier: Optional[str] = None,
    ) -> int:
        now = _utcnow()
        return self._insert(
            """
            INSERT INTO lists(title, identifier, namespace_id, owner_id, is_archived, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (title, identifier, namespace_id, owner.id, int(archived), now, now),
        )

    def task(self, list_id: int, creator: User, title: str = "Task", **fields) -> int:
        now = _utcnow()
        return self._insert(
            """
            INSERT INTO tasks(list_id, title, done, due_date, repeat_after, priority,
                              position, created_by_id, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                list_id,
                title,
                int(fields.get("done", False)),
                fields.get("due_date"),
                fields.get("repeat_after", 0),
                fields.get("priority", 0),
                fields.get("position", 1024.0),
                creator.id,
                now,
                now,
            ),
        )

    def favorite(self, user: User, task_id: int) -> None:
        self._insert("INSERT INTO favorites(user_id, task_id) VALUES (?, ?)", (user.id, task_id))

    def grant_team_namespace(self, team_id: int, namespace_id: int, right: Right) -> None:
        now = _utcnow()
        self._insert(
            """
            INSERT INTO team_namespaces(team_id, namespace_id, access_right, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (team_id, namespace_id, right.value, now, now),
        )

    def grant_team_list(self, team_id: int, list_id: int, right: Right) -> None:
        now = _utcnow()
        self._insert(
            """
            INSERT INTO team_lists(team_id, list_id, access_right, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (team_id, list_id, right.value, now, now),
        )

    def grant_user_list(self, user: User, list_id: int, right: Right) -> None:
        now = _utcnow()
        self._insert(
            """
            INSERT INTO users_lists(user_id, list_id, access_right, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (user.id, list_id, right.value, now, now),
        )

    def link_share(self, list_id: int, right: Right, shared_by: User, share_hash: Optional[str] = None) -> LinkShare:
        share_hash = share_hash or f"hash-{list_id}-{right.value}-{shared_by.id}"
        created_at = _utcnow()
        share_id = self._insert(
            """
            INSERT INTO link_shares(hash, list_id, access_right, shared_by_id, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (share_hash, list_id, right.value, shared_by.id, created_at),
        )
        return LinkShare(
            id=share_id,
            hash=share_hash,
            list_id=list_id,
            right=right,
            shared_by_id=shared_by.id,
            created_at=created_at,
        )

    def set_archived(self, table: str, entity_id: int, archived: bool = True) -> None:
        assert table in ("namespaces", "lists")
        conn = get_db_connection(self.db_path)
        try:
            conn.execute(f"UPDATE {table} SET is_archived = ? WHERE id = ?", (int(archived), entity_id))
            conn.commit()
        finally:
            conn.close()

    def fetch(self, sql: str, params: tuple = ()) -> list:
        conn = get_db_connection(self.db_path)
        try:
            return conn.execute(sql, params).fetchall()
        finally:
            conn.close()


@pytest.fixture
def factory(db_path: Path) -> Factory:
    return Factory(db_path)


# ============================================================================
# API Client Fixtures
# ============================================================================

@pytest.fixture
def app(engine: AccessEngine, settings: TaskLaneSettings):
    """FastAPI app wired to the test engine"""
    from tasklane.app_factory import create_app
    from tasklane.deps import get_engine

    application = create_app(settings)
    application.dependency_overrides[get_engine] = lambda: engine
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> Generator:
    from fastapi.testclient import TestClient

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
