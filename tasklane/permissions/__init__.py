"""
Permissions Package

Access-control resolution engine for namespaces and lists.

This package provides:
- Right lattice (Right, LEVEL_HIERARCHY, max_right, satisfies)
- Principals (User, LinkShare)
- GrantStore: read-side queries against the app database
- NamespaceAuthorizer / ListAuthorizer: effective right resolution
- ArchiveGuard: blocks mutations of archived lists and namespaces
- AccessEngine: authorize() plus can_read/can_write/... predicates

FastAPI dependencies live in .decorators and are imported from there
directly.
"""

from .types import Right, DenyReason, AccessDecision, GRANTABLE_RIGHTS
from .hierarchy import LEVEL_HIERARCHY, max_right, satisfies
from .principals import User, LinkShare, Principal
from .storage import GrantStore, ArchiveState
from .namespace_rights import NamespaceAuthorizer
from .list_rights import ListAuthorizer
from .archive import ArchiveGuard
from .engine import AccessEngine, get_access_engine, reset_access_engine

__all__ = [
    # Types
    "Right",
    "DenyReason",
    "AccessDecision",
    "GRANTABLE_RIGHTS",
    # Hierarchy
    "LEVEL_HIERARCHY",
    "max_right",
    "satisfies",
    # Principals
    "User",
    "LinkShare",
    "Principal",
    # Store
    "GrantStore",
    "ArchiveState",
    # Authorizers
    "NamespaceAuthorizer",
    "ListAuthorizer",
    "ArchiveGuard",
    # Engine
    "AccessEngine",
    "get_access_engine",
    "reset_access_engine",
]
