"""
Permission diagnostics router

Exposes AccessEngine.explain for the calling principal. Disabled unless
TASKLANE_PERMS_EXPLAIN is set.
"""

import logging
from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, Query, status

from tasklane.deps import get_current_principal, get_engine
from tasklane.models import Namespace
from tasklane.permissions.engine import AccessEngine
from tasklane.permissions.principals import Principal
from tasklane.permissions.types import Right
from tasklane.routes.schemas import SuccessResponse
from tasklane.services.lists import list_target

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/permissions", tags=["permissions"])


@router.get(
    "/explain",
    response_model=SuccessResponse[Dict[str, Any]],
    status_code=status.HTTP_200_OK,
    name="permissions_explain",
    summary="Explain an access decision",
)
async def explain(
    kind: Literal["namespace", "list"] = Query(...),
    entity_id: int = Query(...),
    required: Right = Query(Right.READ),
    principal: Principal = Depends(get_current_principal),
    engine: AccessEngine = Depends(get_engine),
) -> SuccessResponse[Dict[str, Any]]:
    entity = Namespace(id=entity_id) if kind == "namespace" else list_target(entity_id)
    return SuccessResponse(data=engine.explain(principal, entity, required))
