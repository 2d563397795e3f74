"""
List Routes

CRUD for lists, plus moving a list between namespaces. The Favorites
pseudo-list is addressed as list id -1 and is read-only here; favorite
lists are listed under namespace -1.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from tasklane.deps import get_current_principal, get_current_user, get_engine
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal, User
from tasklane.routes.schemas import PaginatedResponse, SuccessResponse
from tasklane.services import lists as list_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["lists"])


class ListCreate(BaseModel):
    title: str = Field(min_length=1, max_length=250)
    description: Optional[str] = None
    identifier: Optional[str] = Field(None, max_length=10)
    hex_color: Optional[str] = Field(None, max_length=7)


class ListUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=250)
    description: Optional[str] = None
    identifier: Optional[str] = Field(None, max_length=10)
    hex_color: Optional[str] = Field(None, max_length=7)
    is_archived: Optional[bool] = None


class ListMove(BaseModel):
    namespace_id: int


class ListItem(BaseModel):
    id: int
    title: str
    description: Optional[str]
    identifier: Optional[str]
    hex_color: Optional[str]
    namespace_id: int
    owner_id: int
    is_archived: bool
    is_favorite_pseudo_list: bool = False
    is_favorite: bool = False
    created_at: Optional[str]
    updated_at: Optional[str]


@router.get(
    "/lists",
    response_model=PaginatedResponse[ListItem],
    status_code=status.HTTP_200_OK,
    name="list_lists",
    summary="List lists",
    description="Every list the caller can read. `search` takes a title fragment or comma separated ids.",
)
async def list_lists(
    search: str = Query(""),
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1),
    include_archived: bool = Query(False),
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> PaginatedResponse[ListItem]:
    items, total = list_service.list_lists(
        engine,
        principal,
        search=search,
        page=page,
        per_page=per_page,
        include_archived=include_archived,
    )
    return PaginatedResponse(
        data=[ListItem(**item) for item in items],
        total=total,
        page=page,
        per_page=min(per_page or engine.settings.max_items_per_page, engine.settings.max_items_per_page),
    )


@router.get(
    "/namespaces/{namespace_id}/lists",
    response_model=SuccessResponse[List[ListItem]],
    status_code=status.HTTP_200_OK,
    name="namespace_lists",
    summary="List the lists of a namespace",
    description="Requires read on the namespace. Namespace -1 yields the caller's favorite lists.",
)
async def namespace_lists(
    namespace_id: int,
    include_archived: bool = Query(False),
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[ListItem]]:
    items = list_service.namespace_lists(engine, principal, namespace_id, include_archived=include_archived)
    return SuccessResponse(data=[ListItem(**item) for item in items])


@router.post(
    "/namespaces/{namespace_id}/lists",
    response_model=SuccessResponse[ListItem],
    status_code=status.HTTP_201_CREATED,
    name="create_list",
    summary="Create list",
    description="Requires write on the namespace, which must not be archived.",
)
async def create_list(
    namespace_id: int,
    body: ListCreate,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[ListItem]:
    task_list = list_service.create_list(
        engine,
        principal,
        namespace_id,
        body.title,
        description=body.description,
        identifier=body.identifier,
        hex_color=body.hex_color,
    )
    return SuccessResponse(
        data=ListItem(**task_list.to_dict()),
        message=f"List '{task_list.title}' created successfully",
    )


@router.get(
    "/lists/{list_id}",
    response_model=SuccessResponse[ListItem],
    status_code=status.HTTP_200_OK,
    name="get_list",
    summary="Get list",
)
async def get_list(
    list_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[ListItem]:
    data = list_service.get_list(engine, principal, list_id)
    return SuccessResponse(data=ListItem(**data))


@router.patch(
    "/lists/{list_id}",
    response_model=SuccessResponse[ListItem],
    status_code=status.HTTP_200_OK,
    name="update_list",
    summary="Update list",
    description="Requires write. An archived list only accepts is_archived=false.",
)
async def update_list(
    list_id: int,
    body: ListUpdate,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[ListItem]:
    task_list = list_service.update_list(
        engine,
        principal,
        list_id,
        **body.model_dump(exclude_unset=True),
    )
    return SuccessResponse(
        data=ListItem(**task_list.to_dict()),
        message="List updated successfully",
    )


@router.post(
    "/lists/{list_id}/move",
    response_model=SuccessResponse[ListItem],
    status_code=status.HTTP_200_OK,
    name="move_list",
    summary="Move list",
    description="Requires admin on the list and write on the target namespace.",
)
async def move_list(
    list_id: int,
    body: ListMove,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[ListItem]:
    task_list = list_service.move_list(engine, principal, list_id, body.namespace_id)
    return SuccessResponse(
        data=ListItem(**task_list.to_dict()),
        message=f"List moved to namespace {body.namespace_id}",
    )


@router.delete(
    "/lists/{list_id}",
    response_model=SuccessResponse[dict],
    status_code=status.HTTP_200_OK,
    name="delete_list",
    summary="Delete list",
)
async def delete_list(
    list_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[dict]:
    list_service.delete_list(engine, principal, list_id)
    return SuccessResponse(data={"list_id": list_id}, message="List deleted successfully")


@router.put(
    "/lists/{list_id}/favorite",
    response_model=SuccessResponse[ListItem],
    status_code=status.HTTP_200_OK,
    name="favorite_list",
    summary="Mark list as favorite",
)
async def favorite_list(
    list_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[ListItem]:
    task_list = list_service.set_list_favorite(engine, user, list_id, True)
    return SuccessResponse(data=ListItem(**task_list.to_dict()))


@router.delete(
    "/lists/{list_id}/favorite",
    response_model=SuccessResponse[ListItem],
    status_code=status.HTTP_200_OK,
    name="unfavorite_list",
    summary="Unmark list as favorite",
)
async def unfavorite_list(
    list_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[ListItem]:
    task_list = list_service.set_list_favorite(engine, user, list_id, False)
    return SuccessResponse(data=ListItem(**task_list.to_dict()))
