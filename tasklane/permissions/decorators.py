"""
Permission Dependencies

FastAPI dependency factories that authorize the current principal on the
namespace or list named in the path, before the route body runs.

Usage:
    @router.get("/lists/{list_id}")
    async def read_list(task_list: TaskList = Depends(require_list_right(Right.READ))):
        ...
"""

import logging
from typing import Callable

from fastapi import Depends

from tasklane.deps import get_current_principal, get_engine
from tasklane.models import FAVORITES_PSEUDO_LIST_ID, FavoritesPseudoList, ListEntity, Namespace, TaskList
from .engine import AccessEngine
from .principals import Principal
from .types import Right

logger = logging.getLogger(__name__)


def require_list_right(level: Right) -> Callable:
    """
    Dependency requiring `level` on the list identified by the `list_id` path parameter

    Returns:
        Dependency yielding the store-loaded list
    """
    def dependency(
        list_id: int,
        principal: Principal = Depends(get_current_principal),
        engine: AccessEngine = Depends(get_engine),
    ) -> ListEntity:
        target = FavoritesPseudoList() if list_id == FAVORITES_PSEUDO_LIST_ID else TaskList(id=list_id)
        return engine.require(principal, target, level)

    return dependency


def require_namespace_right(level: Right) -> Callable:
    """
    Dependency requiring `level` on the namespace identified by the `namespace_id` path parameter

    Returns:
        Dependency yielding the store-loaded namespace
    """
    def dependency(
        namespace_id: int,
        principal: Principal = Depends(get_current_principal),
        engine: AccessEngine = Depends(get_engine),
    ) -> Namespace:
        return engine.require(principal, Namespace(id=namespace_id), level)

    return dependency
