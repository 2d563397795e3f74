"""
Principals

The two kinds of actor the engine authorizes:
- User: an identity resolved through ownership, teams and namespaces
- LinkShare: a capability token bound to one list and one right
"""

import sqlite3
from dataclasses import dataclass
from typing import Optional, Union

from .types import Right


@dataclass(frozen=True)
class User:
    """Opaque user identity"""
    id: int
    username: Optional[str] = None

    def describe(self) -> str:
        return f"user:{self.id}"


@dataclass(frozen=True)
class LinkShare:
    """
    Capability principal

    Anyone presenting `hash` holds exactly `right` on `list_id` and nothing
    else. Instances are immutable; there is no way to elevate the right.
    """
    id: int
    hash: str
    list_id: int
    right: Right
    shared_by_id: int
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "LinkShare":
        return cls(
            id=row["id"],
            hash=row["hash"],
            list_id=row["list_id"],
            right=Right(row["access_right"]),
            shared_by_id=row["shared_by_id"],
            created_at=row["created_at"],
        )

    def describe(self) -> str:
        return f"link_share:{self.id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "hash": self.hash,
            "list_id": self.list_id,
            "right": self.right.value,
            "shared_by_id": self.shared_by_id,
            "created_at": self.created_at,
        }


Principal = Union[User, LinkShare]
