"""
Error Types - Enums and exception classes for error handling

Contains:
- ErrorType enum (standardized error types)
- Exception classes (TaskLaneError and subclasses)

Authorization failures form their own branch so that callers can tell
"no such entity" apart from "entity exists but the right is missing" and
from "entity is archived".
"""

from typing import Optional, Dict, Any
from enum import Enum


class ErrorType(Enum):
    """Standard error types"""
    # Lookup errors
    NAMESPACE_NOT_FOUND = "namespace_not_found"
    LIST_NOT_FOUND = "list_not_found"
    TASK_NOT_FOUND = "task_not_found"
    TEAM_NOT_FOUND = "team_not_found"
    LINK_SHARE_NOT_FOUND = "link_share_not_found"
    GRANT_NOT_FOUND = "grant_not_found"

    # Authorization errors
    INSUFFICIENT_RIGHT = "insufficient_right"
    LIST_IS_ARCHIVED = "list_is_archived"
    NAMESPACE_IS_ARCHIVED = "namespace_is_archived"
    UNAUTHORIZED = "unauthorized"

    # Validation errors
    INVALID_INPUT = "invalid_input"
    IDENTIFIER_NOT_UNIQUE = "identifier_not_unique"

    # Generic
    STORE_UNAVAILABLE = "store_unavailable"
    INTERNAL_ERROR = "internal_error"


class TaskLaneError(Exception):
    """Base exception for TaskLane"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_type = error_type
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


# ===== Not found =====

class EntityNotFoundError(TaskLaneError):
    """An id did not resolve to a stored entity"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=error_type,
            status_code=404,
            details=details
        )


class NamespaceNotFoundError(EntityNotFoundError):
    def __init__(self, namespace_id: int):
        self.namespace_id = namespace_id
        super().__init__(
            f"Namespace {namespace_id} does not exist",
            ErrorType.NAMESPACE_NOT_FOUND,
            {"namespace_id": namespace_id},
        )


class ListNotFoundError(EntityNotFoundError):
    def __init__(self, list_id: int):
        self.list_id = list_id
        super().__init__(
            f"List {list_id} does not exist",
            ErrorType.LIST_NOT_FOUND,
            {"list_id": list_id},
        )


class TaskNotFoundError(EntityNotFoundError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(
            f"Task {task_id} does not exist",
            ErrorType.TASK_NOT_FOUND,
            {"task_id": task_id},
        )


class TeamNotFoundError(EntityNotFoundError):
    def __init__(self, team_id: int):
        self.team_id = team_id
        super().__init__(
            f"Team {team_id} does not exist",
            ErrorType.TEAM_NOT_FOUND,
            {"team_id": team_id},
        )


class LinkShareNotFoundError(EntityNotFoundError):
    def __init__(self, share_id: Optional[int] = None):
        self.share_id = share_id
        super().__init__(
            "Link share does not exist",
            ErrorType.LINK_SHARE_NOT_FOUND,
            {"share_id": share_id} if share_id is not None else None,
        )


class GrantNotFoundError(EntityNotFoundError):
    """Revoking a share that was never granted"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, ErrorType.GRANT_NOT_FOUND, details)


# ===== Authorization =====

class InsufficientRightError(TaskLaneError):
    """The entity exists but the principal's right is below the required level"""

    def __init__(
        self,
        message: str = "Insufficient right",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=ErrorType.INSUFFICIENT_RIGHT,
            status_code=403,
            details=details
        )


class ArchivedError(TaskLaneError):
    """A mutation targeted an archived list or namespace"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=error_type,
            status_code=412,  # Precondition Failed
            details=details
        )


class ListIsArchivedError(ArchivedError):
    def __init__(self, list_id: int):
        self.list_id = list_id
        super().__init__(
            f"List {list_id} is archived",
            ErrorType.LIST_IS_ARCHIVED,
            {"list_id": list_id},
        )


class NamespaceIsArchivedError(ArchivedError):
    def __init__(self, namespace_id: int):
        self.namespace_id = namespace_id
        super().__init__(
            f"Namespace {namespace_id} is archived",
            ErrorType.NAMESPACE_IS_ARCHIVED,
            {"namespace_id": namespace_id},
        )


class AuthError(TaskLaneError):
    """No usable principal on the request"""

    def __init__(
        self,
        message: str = "Authentication required",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=ErrorType.UNAUTHORIZED,
            status_code=401,
            details=details
        )


# ===== Other =====

class ValidationError(TaskLaneError):
    """Validation errors"""

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.INVALID_INPUT,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=error_type,
            status_code=400,
            details=details
        )


class StoreUnavailableError(TaskLaneError):
    """A store query failed; never retried locally"""

    def __init__(
        self,
        message: str = "Grant store unavailable",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            error_type=ErrorType.STORE_UNAVAILABLE,
            status_code=500,
            details=details
        )
