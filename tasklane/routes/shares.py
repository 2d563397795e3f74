"""
Sharing Routes

Team and user grants on namespaces and lists, and link shares on lists.
PUT creates a grant or replaces its right; DELETE revokes it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from tasklane.deps import get_current_principal, get_current_user, get_engine
from tasklane.errors import GrantNotFoundError
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal, User
from tasklane.permissions.types import Right
from tasklane.routes.schemas import SuccessResponse
from tasklane.services import link_shares as link_share_service
from tasklane.services import sharing as sharing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["sharing"])


class GrantBody(BaseModel):
    right: Right


class LinkShareCreate(BaseModel):
    right: Right = Right.READ


class LinkShareItem(BaseModel):
    id: int
    hash: str
    list_id: int
    right: Right
    shared_by_id: int
    created_at: str


def _revoked(removed: bool, what: str) -> None:
    if not removed:
        raise GrantNotFoundError(f"{what} does not exist")


# ===== Namespace <-> team =====

@router.get(
    "/namespaces/{namespace_id}/teams",
    response_model=SuccessResponse[List[Dict[str, Any]]],
    status_code=status.HTTP_200_OK,
    name="list_namespace_teams",
)
async def list_namespace_teams(
    namespace_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[Dict[str, Any]]]:
    grants = sharing_service.list_namespace_team_shares(engine, principal, namespace_id)
    return SuccessResponse(data=grants, message=f"Retrieved {len(grants)} team share(s)")


@router.put(
    "/namespaces/{namespace_id}/teams/{team_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="share_namespace_with_team",
    description="Requires admin on the namespace.",
)
async def share_namespace_with_team(
    namespace_id: int,
    team_id: int,
    body: GrantBody,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    grant = sharing_service.share_namespace_with_team(engine, user, namespace_id, team_id, body.right)
    return SuccessResponse(data=grant, message=f"Namespace shared with team {team_id}")


@router.delete(
    "/namespaces/{namespace_id}/teams/{team_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="unshare_namespace_with_team",
)
async def unshare_namespace_with_team(
    namespace_id: int,
    team_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    removed = sharing_service.unshare_namespace_with_team(engine, user, namespace_id, team_id)
    _revoked(removed, f"Share of namespace {namespace_id} with team {team_id}")
    return SuccessResponse(data={"namespace_id": namespace_id, "team_id": team_id}, message="Share revoked")


# ===== List <-> team =====

@router.get(
    "/lists/{list_id}/teams",
    response_model=SuccessResponse[List[Dict[str, Any]]],
    status_code=status.HTTP_200_OK,
    name="list_list_teams",
)
async def list_list_teams(
    list_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[Dict[str, Any]]]:
    grants = sharing_service.list_list_team_shares(engine, principal, list_id)
    return SuccessResponse(data=grants, message=f"Retrieved {len(grants)} team share(s)")


@router.put(
    "/lists/{list_id}/teams/{team_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="share_list_with_team",
    description="Requires admin on the list.",
)
async def share_list_with_team(
    list_id: int,
    team_id: int,
    body: GrantBody,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    grant = sharing_service.share_list_with_team(engine, user, list_id, team_id, body.right)
    return SuccessResponse(data=grant, message=f"List shared with team {team_id}")


@router.delete(
    "/lists/{list_id}/teams/{team_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="unshare_list_with_team",
)
async def unshare_list_with_team(
    list_id: int,
    team_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    removed = sharing_service.unshare_list_with_team(engine, user, list_id, team_id)
    _revoked(removed, f"Share of list {list_id} with team {team_id}")
    return SuccessResponse(data={"list_id": list_id, "team_id": team_id}, message="Share revoked")


# ===== List <-> user =====

@router.get(
    "/lists/{list_id}/users",
    response_model=SuccessResponse[List[Dict[str, Any]]],
    status_code=status.HTTP_200_OK,
    name="list_list_users",
)
async def list_list_users(
    list_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[Dict[str, Any]]]:
    grants = sharing_service.list_list_user_shares(engine, principal, list_id)
    return SuccessResponse(data=grants, message=f"Retrieved {len(grants)} user share(s)")


@router.put(
    "/lists/{list_id}/users/{user_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="share_list_with_user",
    description="Requires admin on the list.",
)
async def share_list_with_user(
    list_id: int,
    user_id: int,
    body: GrantBody,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    grant = sharing_service.share_list_with_user(engine, user, list_id, user_id, body.right)
    return SuccessResponse(data=grant, message=f"List shared with user {user_id}")


@router.delete(
    "/lists/{list_id}/users/{user_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="unshare_list_with_user",
)
async def unshare_list_with_user(
    list_id: int,
    user_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    removed = sharing_service.unshare_list_with_user(engine, user, list_id, user_id)
    _revoked(removed, f"Share of list {list_id} with user {user_id}")
    return SuccessResponse(data={"list_id": list_id, "user_id": user_id}, message="Share revoked")


# ===== Link shares =====

@router.get(
    "/lists/{list_id}/shares",
    response_model=SuccessResponse[List[LinkShareItem]],
    status_code=status.HTTP_200_OK,
    name="list_link_shares",
    description="Requires admin on the list.",
)
async def list_link_shares(
    list_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[LinkShareItem]]:
    shares = link_share_service.list_link_shares(engine, principal, list_id)
    return SuccessResponse(
        data=[LinkShareItem(**s) for s in shares],
        message=f"Retrieved {len(shares)} link share(s)",
    )


@router.post(
    "/lists/{list_id}/shares",
    response_model=SuccessResponse[LinkShareItem],
    status_code=status.HTTP_201_CREATED,
    name="create_link_share",
    description="Read and write shares need write on the list; admin shares need admin.",
)
async def create_link_share(
    list_id: int,
    body: LinkShareCreate,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[LinkShareItem]:
    share = link_share_service.create_link_share(engine, principal, list_id, body.right)
    return SuccessResponse(
        data=LinkShareItem(**share.to_dict()),
        message="Link share created successfully",
    )


@router.delete(
    "/lists/{list_id}/shares/{share_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="delete_link_share",
)
async def delete_link_share(
    list_id: int,
    share_id: int,
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    link_share_service.delete_link_share(engine, principal, list_id, share_id)
    return SuccessResponse(data={"list_id": list_id, "share_id": share_id}, message="Link share deleted")
