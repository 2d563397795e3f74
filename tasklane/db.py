"""
Database utilities and schema management

Provides the shared SQLite connection helper and idempotent schema creation
for every TaskLane table: identities (users, teams, team members), entities
(namespaces, lists, tasks, task and list favorites) and grants (team_namespaces,
team_lists, users_lists, link_shares).
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, UTC
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    """Return current UTC time as ISO format string."""
    return datetime.now(UTC).isoformat()


def get_db_connection(db_path: Optional[Path] = None) -> sqlite3.Connection:
    """
    Get connection to the app database with row factory and optimized settings.

    Args:
        db_path: Optional explicit path. If None, loads from settings.

    Returns:
        SQLite connection with row factory
    """
    if db_path is None:
        from tasklane.config import get_settings
        db_path = get_settings().app_db

    conn = sqlite3.connect(str(db_path), timeout=30.0)
    conn.row_factory = sqlite3.Row

    # WAL for concurrent readers during authorization checks
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute("PRAGMA busy_timeout=30000")

    return conn


def ensure_schema(db_path: Optional[Path] = None) -> None:
    """Create TaskLane tables and indexes if they don't exist (idempotent)."""
    logger.info("Ensuring TaskLane schema exists...")
    conn = get_db_connection(db_path)
    try:
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS users (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              username TEXT NOT NULL UNIQUE,
              created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS teams (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              name TEXT NOT NULL,
              description TEXT,
              created_by_id INTEGER NOT NULL,
              created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS team_members (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              team_id INTEGER NOT NULL,
              user_id INTEGER NOT NULL,
              admin INTEGER NOT NULL DEFAULT 0,
              created_at TEXT NOT NULL,
              UNIQUE(team_id, user_id),
              FOREIGN KEY(team_id) REFERENCES teams(id) ON DELETE CASCADE
            );
            CREATE INDEX IF NOT EXISTS idx_team_members_user ON team_members(user_id);

            CREATE TABLE IF NOT EXISTS namespaces (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              title TEXT NOT NULL,
              description TEXT,
              owner_id INTEGER NOT NULL,
              is_archived INTEGER NOT NULL DEFAULT 0,
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL
            );
            CREATE INDEX IF NOT EXISTS idx_namespaces_owner ON namespaces(owner_id);

            CREATE TABLE IF NOT EXISTS lists (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              title TEXT NOT NULL,
              description TEXT,
              identifier TEXT,
              hex_color TEXT,
              namespace_id INTEGER NOT NULL,
              owner_id INTEGER NOT NULL,
              is_archived INTEGER NOT NULL DEFAULT 0,
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL,
              FOREIGN KEY(namespace_id) REFERENCES namespaces(id) ON DELETE CASCADE
            );
            CREATE INDEX IF NOT EXISTS idx_lists_namespace ON lists(namespace_id);
            CREATE INDEX IF NOT EXISTS idx_lists_owner ON lists(owner_id);

            CREATE TABLE IF NOT EXISTS tasks (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              list_id INTEGER NOT NULL,
              title TEXT NOT NULL,
              description TEXT,
              done INTEGER NOT NULL DEFAULT 0,
              done_at TEXT,
              due_date TEXT,
              repeat_after INTEGER NOT NULL DEFAULT 0,
              priority INTEGER NOT NULL DEFAULT 0,
              hex_color TEXT,
              position REAL NOT NULL,
              created_by_id INTEGER NOT NULL,
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL,
              FOREIGN KEY(list_id) REFERENCES lists(id) ON DELETE CASCADE
            );
            CREATE INDEX IF NOT EXISTS idx_tasks_list_pos ON tasks(list_id, position);

            CREATE TABLE IF NOT EXISTS favorites (
              user_id INTEGER NOT NULL,
              task_id INTEGER NOT NULL,
              PRIMARY KEY(user_id, task_id),
              FOREIGN KEY(task_id) REFERENCES tasks(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS list_favorites (
              user_id INTEGER NOT NULL,
              list_id INTEGER NOT NULL,
              PRIMARY KEY(user_id, list_id),
              FOREIGN KEY(list_id) REFERENCES lists(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS team_namespaces (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              team_id INTEGER NOT NULL,
              namespace_id INTEGER NOT NULL,
              access_right TEXT NOT NULL CHECK(access_right IN ('read','write','admin')),
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL,
              UNIQUE(team_id, namespace_id),
              FOREIGN KEY(team_id) REFERENCES teams(id) ON DELETE CASCADE,
              FOREIGN KEY(namespace_id) REFERENCES namespaces(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS team_lists (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              team_id INTEGER NOT NULL,
              list_id INTEGER NOT NULL,
              access_right TEXT NOT NULL CHECK(access_right IN ('read','write','admin')),
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL,
              UNIQUE(team_id, list_id),
              FOREIGN KEY(team_id) REFERENCES teams(id) ON DELETE CASCADE,
              FOREIGN KEY(list_id) REFERENCES lists(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS users_lists (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              user_id INTEGER NOT NULL,
              list_id INTEGER NOT NULL,
              access_right TEXT NOT NULL CHECK(access_right IN ('read','write','admin')),
              created_at TEXT NOT NULL,
              updated_at TEXT NOT NULL,
              UNIQUE(user_id, list_id),
              FOREIGN KEY(list_id) REFERENCES lists(id) ON DELETE CASCADE
            );

            CREATE TABLE IF NOT EXISTS link_shares (
              id INTEGER PRIMARY KEY AUTOINCREMENT,
              hash TEXT NOT NULL UNIQUE,
              list_id INTEGER NOT NULL,
              access_right TEXT NOT NULL CHECK(access_right IN ('read','write','admin')),
              shared_by_id INTEGER NOT NULL,
              created_at TEXT NOT NULL,
              FOREIGN KEY(list_id) REFERENCES lists(id) ON DELETE CASCADE
            );
            """
        )
        conn.commit()
    finally:
        conn.close()


__all__ = [
    "_utcnow",
    "get_db_connection",
    "ensure_schema",
]
