"""
Permission Types

Core type definitions for the access-control engine.
"""

from enum import Enum
from typing import Any, Optional
from dataclasses import dataclass


class Right(str, Enum):
    """Access levels, ordered NONE < READ < WRITE < ADMIN (see hierarchy.py)"""
    NONE = "none"
    READ = "read"
    WRITE = "write"
    ADMIN = "admin"


# Rights that may be persisted as a grant
GRANTABLE_RIGHTS = (Right.READ, Right.WRITE, Right.ADMIN)


class DenyReason(str, Enum):
    """Why an authorization request was denied"""
    NOT_FOUND = "not_found"
    INSUFFICIENT_RIGHT = "insufficient_right"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class AccessDecision:
    """
    Verdict of a single authorization request

    Attributes:
        allowed: Whether the request is admitted
        right: Effective right the principal holds (NONE when not found)
        required: Right the request asked for
        reason: Deny reason; None when allowed
        error: Typed exception describing the denial, raised by AccessEngine.require
        entity: The store-loaded entity the decision was computed on, when allowed
    """
    allowed: bool
    right: Right
    required: Right
    reason: Optional[DenyReason] = None
    error: Optional[Exception] = None
    entity: Optional[Any] = None

    def __bool__(self) -> bool:
        return self.allowed
