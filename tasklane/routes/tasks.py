"""
Task Routes

Tasks are addressed through their list for creation and listing, and by
id otherwise. PATCH only changes the fields present in the request body,
so a field can be cleared by sending it explicitly.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from tasklane.deps import get_current_principal, get_current_user, get_engine
from tasklane.models import ListEntity
from tasklane.permissions.decorators import require_list_right
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal, User
from tasklane.permissions.types import Right
from tasklane.routes.schemas import PaginatedResponse, SuccessResponse
from tasklane.services import tasks as task_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tasks"])


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    due_date: Optional[str] = None
    repeat_after: int = Field(0, ge=0)
    priority: int = 0
    hex_color: Optional[str] = Field(None, max_length=7)
    position: Optional[float] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    done: Optional[bool] = None
    due_date: Optional[str] = None
    repeat_after: Optional[int] = Field(None, ge=0)
    priority: Optional[int] = None
    hex_color: Optional[str] = Field(None, max_length=7)
    position: Optional[float] = None
    list_id: Optional[int] = None


class TaskItem(BaseModel):
    id: int
    list_id: int
    title: str
    description: Optional[str]
    done: bool
    done_at: Optional[str]
    due_date: Optional[str]
    repeat_after: int
    priority: int
    hex_color: Optional[str]
    position: float
    created_by_id: int
    is_favorite: bool
    created_at: Optional[str]
    updated_at: Optional[str]


@router.get(
    "/lists/{list_id}/tasks",
    response_model=PaginatedResponse[TaskItem],
    status_code=status.HTTP_200_OK,
    name="list_tasks",
    summary="List tasks",
    description="Tasks of a list ordered by position. List -1 yields the caller's favorite tasks.",
)
async def list_tasks(
    list_id: int,
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> PaginatedResponse[TaskItem]:
    tasks, total = task_service.list_tasks(engine, principal, list_id, page=page, per_page=per_page)
    return PaginatedResponse(
        data=[TaskItem(**t.to_dict()) for t in tasks],
        total=total,
        page=page,
        per_page=min(per_page or engine.settings.max_items_per_page, engine.settings.max_items_per_page),
    )


@router.post(
    "/lists/{list_id}/tasks",
    response_model=SuccessResponse[TaskItem],
    status_code=status.HTTP_201_CREATED,
    name="create_task",
    summary="Create task",
    description="Requires write on the list; the list and its namespace must not be archived.",
)
async def create_task(
    list_id: int,
    body: TaskCreate,
    task_list: ListEntity = Depends(require_list_right(Right.WRITE)),
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[TaskItem]:
    task = task_service.create_task(
        engine,
        principal,
        task_list.id,
        body.title,
        description=body.description,
        due_date=body.due_date,
        repeat_after=body.repeat_after,
        priority=body.priority,
        hex_color=body.hex_color,
        position=body.position,
    )
    return SuccessResponse(
        data=TaskItem(**task.to_dict()),
        message=f"Task '{task.title}' created successfully",
    )


@router.get(
    "/tasks/{task_id}",
    response_model=SuccessResponse[TaskItem],
    status_code=status.HTTP_200_OK,
    name="get_task",
    summary="Get task",
)
async def get_task(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[TaskItem]:
    task = task_service.get_task(engine, principal, task_id)
    return SuccessResponse(data=TaskItem(**task.to_dict()))


@router.patch(
    "/tasks/{task_id}",
    response_model=SuccessResponse[TaskItem],
    status_code=status.HTTP_200_OK,
    name="update_task",
    summary="Update task",
)
async def update_task(
    task_id: int,
    body: TaskUpdate,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[TaskItem]:
    task = task_service.update_task(engine, principal, task_id, body.model_dump(exclude_unset=True))
    return SuccessResponse(data=TaskItem(**task.to_dict()), message="Task updated successfully")


@router.delete(
    "/tasks/{task_id}",
    response_model=SuccessResponse[dict],
    status_code=status.HTTP_200_OK,
    name="delete_task",
    summary="Delete task",
)
async def delete_task(
    task_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[dict]:
    task_service.delete_task(engine, principal, task_id)
    return SuccessResponse(data={"task_id": task_id}, message="Task deleted successfully")


@router.put(
    "/tasks/{task_id}/favorite",
    response_model=SuccessResponse[TaskItem],
    status_code=status.HTTP_200_OK,
    name="favorite_task",
    summary="Mark task as favorite",
)
async def favorite_task(
    task_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[TaskItem]:
    task = task_service.set_task_favorite(engine, user, task_id, True)
    return SuccessResponse(data=TaskItem(**task.to_dict()))


@router.delete(
    "/tasks/{task_id}/favorite",
    response_model=SuccessResponse[TaskItem],
    status_code=status.HTTP_200_OK,
    name="unfavorite_task",
    summary="Unmark task as favorite",
)
async def unfavorite_task(
    task_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[TaskItem]:
    task = task_service.set_task_favorite(engine, user, task_id, False)
    return SuccessResponse(data=TaskItem(**task.to_dict()))
