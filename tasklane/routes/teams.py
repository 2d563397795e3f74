"""
Team Routes

Team creation and membership. Membership changes are restricted to team
admins; link shares cannot use these endpoints.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from tasklane.deps import get_current_user, get_engine
from tasklane.errors import GrantNotFoundError
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import User
from tasklane.routes.schemas import SuccessResponse
from tasklane.services import teams as team_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/teams", tags=["teams"])


class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=250)
    description: Optional[str] = None


class MemberBody(BaseModel):
    admin: bool = False


@router.post(
    "",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_201_CREATED,
    name="create_team",
    summary="Create team",
)
async def create_team(
    body: TeamCreate,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    team = team_service.create_team(engine.store, user, body.name, description=body.description)
    return SuccessResponse(data=team, message=f"Team '{team['name']}' created successfully")


@router.get(
    "/{team_id}/members",
    response_model=SuccessResponse[List[Dict[str, Any]]],
    status_code=status.HTTP_200_OK,
    name="list_team_members",
)
async def list_team_members(
    team_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[List[Dict[str, Any]]]:
    members = team_service.list_team_members(engine.store, user, team_id)
    return SuccessResponse(data=members, message=f"Retrieved {len(members)} member(s)")


@router.put(
    "/{team_id}/members/{user_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="add_team_member",
)
async def add_team_member(
    team_id: int,
    user_id: int,
    body: MemberBody,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    member = team_service.add_team_member(engine.store, user, team_id, user_id, admin=body.admin)
    return SuccessResponse(data=member, message=f"User {user_id} added to team {team_id}")


@router.delete(
    "/{team_id}/members/{user_id}",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="remove_team_member",
)
async def remove_team_member(
    team_id: int,
    user_id: int,
    user: User = Depends(get_current_user),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    if not team_service.remove_team_member(engine.store, user, team_id, user_id):
        raise GrantNotFoundError(f"User {user_id} is not a member of team {team_id}")
    return SuccessResponse(data={"team_id": team_id, "user_id": user_id}, message="Member removed")
