"""
Errors Package

Provides standardized error handling for TaskLane:
- ErrorType enum for error categories
- Exception classes (TaskLaneError and subclasses)
- FastAPI exception handlers producing ErrorResponse bodies
"""

from tasklane.errors.types import (
    ErrorType,
    TaskLaneError,
    EntityNotFoundError,
    NamespaceNotFoundError,
    ListNotFoundError,
    TaskNotFoundError,
    TeamNotFoundError,
    LinkShareNotFoundError,
    GrantNotFoundError,
    InsufficientRightError,
    ArchivedError,
    ListIsArchivedError,
    NamespaceIsArchivedError,
    AuthError,
    ValidationError,
    StoreUnavailableError,
)

__all__ = [
    "ErrorType",
    "TaskLaneError",
    "EntityNotFoundError",
    "NamespaceNotFoundError",
    "ListNotFoundError",
    "TaskNotFoundError",
    "TeamNotFoundError",
    "LinkShareNotFoundError",
    "GrantNotFoundError",
    "InsufficientRightError",
    "ArchivedError",
    "ListIsArchivedError",
    "NamespaceIsArchivedError",
    "AuthError",
    "ValidationError",
    "StoreUnavailableError",
]
