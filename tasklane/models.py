"""
Entity Types

Store-loaded entities the access engine reasons about. Authorization is
always computed from these as loaded by the GrantStore, never from request
payloads.

The Favorites pseudo-list and pseudo-namespace are synthesized per user and
never persisted; they use the reserved id -1.
"""

import sqlite3
from dataclasses import dataclass, field
from typing import Optional, Union


FAVORITES_PSEUDO_NAMESPACE_ID = -1
FAVORITES_PSEUDO_LIST_ID = -1


@dataclass
class Namespace:
    """A container of lists, owned by exactly one user"""
    id: int
    title: str = ""
    owner_id: int = 0
    description: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Namespace":
        return cls(
            id=row["id"],
            title=row["title"],
            owner_id=row["owner_id"],
            description=row["description"],
            is_archived=bool(row["is_archived"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "owner_id": self.owner_id,
            "is_archived": self.is_archived,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class TaskList:
    """A real, persisted list of tasks inside a namespace"""
    id: int
    namespace_id: int = 0
    owner_id: int = 0
    title: str = ""
    description: Optional[str] = None
    identifier: Optional[str] = None
    hex_color: Optional[str] = None
    is_archived: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    # Per requesting user; not a stored column of the list
    is_favorite: bool = field(default=False, compare=False)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "TaskList":
        return cls(
            id=row["id"],
            namespace_id=row["namespace_id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row["description"],
            identifier=row["identifier"],
            hex_color=row["hex_color"],
            is_archived=bool(row["is_archived"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "identifier": self.identifier,
            "hex_color": self.hex_color,
            "namespace_id": self.namespace_id,
            "owner_id": self.owner_id,
            "is_archived": self.is_archived,
            "is_favorite_pseudo_list": False,
            "is_favorite": self.is_favorite,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class FavoritesPseudoList:
    """The per-user Favorites list; owned by whoever asks for it"""
    id: int = FAVORITES_PSEUDO_LIST_ID
    namespace_id: int = FAVORITES_PSEUDO_NAMESPACE_ID
    title: str = "Favorites"
    description: str = "This list has all tasks marked as favorites."
    is_archived: bool = False

    def to_dict(self, owner_id: int) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "identifier": None,
            "hex_color": None,
            "namespace_id": self.namespace_id,
            "owner_id": owner_id,
            "is_archived": False,
            "is_favorite_pseudo_list": True,
            "is_favorite": True,
            "created_at": None,
            "updated_at": None,
        }


FAVORITES_PSEUDO_LIST = FavoritesPseudoList()

FAVORITES_PSEUDO_NAMESPACE = Namespace(
    id=FAVORITES_PSEUDO_NAMESPACE_ID,
    title="Favorites",
    description="Favorite lists and tasks.",
)

# An entity a list authorization can target
ListEntity = Union[TaskList, FavoritesPseudoList]


@dataclass
class Task:
    """A task inside a list"""
    id: int
    list_id: int
    title: str
    created_by_id: int
    position: float
    description: Optional[str] = None
    done: bool = False
    done_at: Optional[str] = None
    due_date: Optional[str] = None
    repeat_after: int = 0
    priority: int = 0
    hex_color: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_favorite: bool = field(default=False)

    @classmethod
    def from_row(cls, row: sqlite3.Row, is_favorite: bool = False) -> "Task":
        return cls(
            id=row["id"],
            list_id=row["list_id"],
            title=row["title"],
            created_by_id=row["created_by_id"],
            position=row["position"],
            description=row["description"],
            done=bool(row["done"]),
            done_at=row["done_at"],
            due_date=row["due_date"],
            repeat_after=row["repeat_after"],
            priority=row["priority"],
            hex_color=row["hex_color"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            is_favorite=is_favorite,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "list_id": self.list_id,
            "title": self.title,
            "description": self.description,
            "done": self.done,
            "done_at": self.done_at,
            "due_date": self.due_date,
            "repeat_after": self.repeat_after,
            "priority": self.priority,
            "hex_color": self.hex_color,
            "position": self.position,
            "created_by_id": self.created_by_id,
            "is_favorite": self.is_favorite,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
