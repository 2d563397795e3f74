"""
Namespace Routes

CRUD for namespaces. Authorization happens in the service layer (or the
require_namespace_right dependency); denials surface through the TaskLane
exception handlers as 403/404/412.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from tasklane.deps import get_current_principal, get_engine
from tasklane.models import Namespace
from tasklane.permissions.decorators import require_namespace_right
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal
from tasklane.permissions.types import Right
from tasklane.routes.schemas import SuccessResponse
from tasklane.services import namespaces as ns_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/namespaces", tags=["namespaces"])


class NamespaceCreate(BaseModel):
    title: str = Field(min_length=1, max_length=250)
    description: Optional[str] = None


class NamespaceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=250)
    description: Optional[str] = None
    is_archived: Optional[bool] = None


class NamespaceItem(BaseModel):
    id: int
    title: str
    description: Optional[str]
    owner_id: int
    is_archived: bool
    created_at: Optional[str]
    updated_at: Optional[str]


@router.get(
    "",
    response_model=SuccessResponse[List[NamespaceItem]],
    status_code=status.HTTP_200_OK,
    name="list_namespaces",
    summary="List namespaces",
    description="Namespaces the caller owns or reaches through a team",
)
async def list_namespaces(
    include_archived: bool = Query(False),
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[NamespaceItem]]:
    items = ns_service.list_namespaces(engine, principal, include_archived=include_archived)
    return SuccessResponse(
        data=[NamespaceItem(**n) for n in items],
        message=f"Retrieved {len(items)} namespace(s)",
    )


@router.post(
    "",
    response_model=SuccessResponse[NamespaceItem],
    status_code=status.HTTP_201_CREATED,
    name="create_namespace",
    summary="Create namespace",
)
async def create_namespace(
    body: NamespaceCreate,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[NamespaceItem]:
    namespace = ns_service.create_namespace(engine, principal, body.title, description=body.description)
    return SuccessResponse(
        data=NamespaceItem(**namespace.to_dict()),
        message=f"Namespace '{namespace.title}' created successfully",
    )


@router.get(
    "/{namespace_id}",
    response_model=SuccessResponse[NamespaceItem],
    status_code=status.HTTP_200_OK,
    name="get_namespace",
    summary="Get namespace",
)
async def get_namespace(
    namespace: Namespace = Depends(require_namespace_right(Right.READ)),
) -> SuccessResponse[NamespaceItem]:
    return SuccessResponse(data=NamespaceItem(**namespace.to_dict()))


@router.patch(
    "/{namespace_id}",
    response_model=SuccessResponse[NamespaceItem],
    status_code=status.HTTP_200_OK,
    name="update_namespace",
    summary="Update namespace",
    description="Requires admin. An archived namespace only accepts is_archived=false.",
)
async def update_namespace(
    namespace_id: int,
    body: NamespaceUpdate,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[NamespaceItem]:
    namespace = ns_service.update_namespace(
        engine,
        principal,
        namespace_id,
        **body.model_dump(exclude_unset=True),
    )
    return SuccessResponse(
        data=NamespaceItem(**namespace.to_dict()),
        message="Namespace updated successfully",
    )


@router.delete(
    "/{namespace_id}",
    response_model=SuccessResponse[dict],
    status_code=status.HTTP_200_OK,
    name="delete_namespace",
    summary="Delete namespace",
    description="Requires admin. Deletes every list and task in the namespace.",
)
async def delete_namespace(
    namespace_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[dict]:
    ns_service.delete_namespace(engine, principal, namespace_id)
    return SuccessResponse(
        data={"namespace_id": namespace_id},
        message="Namespace deleted successfully",
    )
