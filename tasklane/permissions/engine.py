"""
Access-Control Engine

Single entry point CRUD handlers use to ask "may this principal do this to
that entity?". For every request the engine:

1. Re-loads the target entity by id from the GrantStore (caller-supplied
   owner/namespace fields are never trusted)
2. Computes the principal's effective right through the Namespace or List
   Authorizer
3. Compares it against the required right
4. For mutating requests (required >= WRITE) consults the Archive Guard

and returns an AccessDecision. Denials carry a reason (not_found,
insufficient_right, archived) and the typed error a handler can raise.

StoreUnavailableError is never turned into a denial; it propagates.
"""

import logging
from typing import Any, Dict, Optional, Union

from tasklane.config import TaskLaneSettings, get_settings
from tasklane.errors import (
    ArchivedError,
    EntityNotFoundError,
    InsufficientRightError,
    NamespaceIsArchivedError,
)
from tasklane.models import (
    FAVORITES_PSEUDO_LIST,
    FAVORITES_PSEUDO_LIST_ID,
    FAVORITES_PSEUDO_NAMESPACE,
    FAVORITES_PSEUDO_NAMESPACE_ID,
    FavoritesPseudoList,
    Namespace,
    TaskList,
)
from tasklane.structured_logger import log_with_context
from .archive import ArchiveGuard
from .hierarchy import LEVEL_HIERARCHY, satisfies
from .list_rights import ListAuthorizer
from .namespace_rights import NamespaceAuthorizer
from .principals import Principal
from .storage import GrantStore
from .types import AccessDecision, DenyReason, Right

logger = logging.getLogger(__name__)

Entity = Union[Namespace, TaskList, FavoritesPseudoList]


def describe_entity(entity: Entity) -> str:
    if isinstance(entity, Namespace):
        return f"namespace:{entity.id}"
    if isinstance(entity, TaskList) and entity.id == 0:
        return f"new_list_in_namespace:{entity.namespace_id}"
    return f"list:{entity.id}"


class AccessEngine:
    """
    Authorization facade over the Namespace/List Authorizers and the Archive Guard

    Args:
        store: Grant store to query; defaults to one on the configured app database
        settings: Settings; defaults to get_settings()
    """

    def __init__(self, store: Optional[GrantStore] = None, settings: Optional[TaskLaneSettings] = None):
        self.store = store or GrantStore()
        self.settings = settings or get_settings()
        self.namespaces = NamespaceAuthorizer(self.store)
        self.lists = ListAuthorizer(self.store, self.namespaces)
        self.archive = ArchiveGuard(self.store)

    # ===== Loading =====

    def load(self, entity: Entity) -> Entity:
        """
        Re-load an entity from the store by id

        A TaskList with id 0 is a list about to be created and is returned
        as-is; its namespace is loaded when it is authorized.

        Raises:
            NamespaceNotFoundError / ListNotFoundError
        """
        if isinstance(entity, FavoritesPseudoList):
            return FAVORITES_PSEUDO_LIST
        if isinstance(entity, Namespace):
            if entity.id == FAVORITES_PSEUDO_NAMESPACE_ID:
                return FAVORITES_PSEUDO_NAMESPACE
            return self.store.get_namespace(entity.id)
        if entity.id == FAVORITES_PSEUDO_LIST_ID:
            return FAVORITES_PSEUDO_LIST
        if entity.id == 0:
            return TaskList(id=0, namespace_id=entity.namespace_id)
        return self.store.get_list(entity.id)

    def _right_on_loaded(self, principal: Principal, entity: Entity) -> Right:
        if isinstance(entity, Namespace):
            return self.namespaces.effective_right(principal, entity)
        if isinstance(entity, TaskList) and entity.id == 0:
            namespace = self.load(Namespace(id=entity.namespace_id))
            return self.namespaces.effective_right(principal, namespace)
        return self.lists.effective_right(principal, entity)

    def effective_right(self, principal: Principal, entity: Entity) -> Right:
        """
        Effective right of a principal on an entity, loaded fresh from the store

        Raises:
            EntityNotFoundError: The entity does not exist
        """
        return self._right_on_loaded(principal, self.load(entity))

    # ===== Authorization =====

    def authorize(
        self,
        principal: Principal,
        entity: Entity,
        required: Right,
        check_archived: Optional[bool] = None,
        lifting_archive: bool = False,
    ) -> AccessDecision:
        """
        Decide whether a principal holds `required` on an entity

        Args:
            principal: User or LinkShare
            entity: Namespace, TaskList (id 0 for a list being created) or the Favorites pseudo-list.
                Only the id (and namespace_id for new lists) is read from it.
            required: Right the operation needs
            check_archived: Consult the Archive Guard; defaults to required >= WRITE
            lifting_archive: The operation unarchives this very entity; its own
                archived bit is ignored, an archived parent namespace still blocks

        Returns:
            AccessDecision; `entity` holds the store-loaded entity when it resolved
        """
        if check_archived is None:
            check_archived = satisfies(required, Right.WRITE)

        try:
            loaded = self.load(entity)
            right = self._right_on_loaded(principal, loaded)
        except EntityNotFoundError as e:
            return self._deny(principal, entity, Right.NONE, required, DenyReason.NOT_FOUND, e)

        if not satisfies(right, required):
            error = InsufficientRightError(
                f"{describe_entity(loaded)} requires {required.value}, principal has {right.value}",
                details={"required": required.value, "right": right.value},
            )
            return self._deny(principal, loaded, right, required, DenyReason.INSUFFICIENT_RIGHT, error)

        if check_archived:
            try:
                self._check_archive(loaded, lifting_archive)
            except ArchivedError as e:
                return self._deny(principal, loaded, right, required, DenyReason.ARCHIVED, e)
            except EntityNotFoundError as e:
                return self._deny(principal, loaded, Right.NONE, required, DenyReason.NOT_FOUND, e)

        logger.debug(f"Access granted: {principal.describe()} has {right.value} on {describe_entity(loaded)}")
        return AccessDecision(allowed=True, right=right, required=required, entity=loaded)

    def _check_archive(self, entity: Entity, lifting_archive: bool) -> None:
        if isinstance(entity, Namespace):
            if entity.is_archived and not lifting_archive:
                raise NamespaceIsArchivedError(entity.id)
            return
        self.archive.check_writable(entity, lifting_list_archive=lifting_archive)

    def _deny(
        self,
        principal: Principal,
        entity: Entity,
        right: Right,
        required: Right,
        reason: DenyReason,
        error: Exception,
    ) -> AccessDecision:
        log_with_context(
            logger,
            "warning",
            f"Access denied: {principal.describe()} on {describe_entity(entity)} ({reason.value})",
            {
                "principal": principal.describe(),
                "entity": describe_entity(entity),
                "right": right.value,
                "required": required.value,
                "reason": reason.value,
            },
        )
        return AccessDecision(
            allowed=False, right=right, required=required, reason=reason, error=error
        )

    def require(self, principal: Principal, entity: Entity, required: Right, **kwargs) -> Entity:
        """
        Like authorize, but raise the typed error on denial

        Returns:
            The store-loaded entity

        Raises:
            EntityNotFoundError / InsufficientRightError / ArchivedError
        """
        decision = self.authorize(principal, entity, required, **kwargs)
        if not decision.allowed:
            raise decision.error
        return decision.entity

    # ===== Convenience predicates =====

    def can_read(self, principal: Principal, entity: Entity) -> bool:
        return self.authorize(principal, entity, Right.READ).allowed

    def can_write(self, principal: Principal, entity: Entity) -> bool:
        """Write right and not archived; on a list this also admits creating tasks in it"""
        return self.authorize(principal, entity, Right.WRITE).allowed

    def is_admin(self, principal: Principal, entity: Entity) -> bool:
        """Admin right, regardless of archival"""
        return self.authorize(principal, entity, Right.ADMIN, check_archived=False).allowed

    def can_create(self, principal: Principal, entity: Entity) -> bool:
        """
        Namespaces: any user. Lists: write on the target namespace, which
        must not be archived.
        """
        if isinstance(entity, Namespace):
            return self.namespaces.can_create(principal)
        target = TaskList(id=0, namespace_id=entity.namespace_id)
        return self.authorize(principal, target, Right.WRITE).allowed

    def can_update(self, principal: Principal, entity: Entity) -> bool:
        """Namespaces need admin, lists need write"""
        required = Right.ADMIN if isinstance(entity, Namespace) else Right.WRITE
        return self.authorize(principal, entity, required).allowed

    def can_delete(self, principal: Principal, entity: Entity) -> bool:
        return self.authorize(principal, entity, Right.ADMIN).allowed

    # ===== Diagnostics =====

    def explain(self, principal: Principal, entity: Entity, required: Right = Right.READ) -> Dict[str, Any]:
        """
        Explain why an access request is granted or denied

        Only enabled when TASKLANE_PERMS_EXPLAIN=1 is set.
        """
        if not self.settings.perms_explain:
            return {
                "error": "Diagnostics disabled. Set TASKLANE_PERMS_EXPLAIN=1 to enable."
            }

        decision = self.authorize(principal, entity, required)
        explanation = {
            "decision": "allow" if decision.allowed else "deny",
            "principal": principal.describe(),
            "entity": describe_entity(entity),
            "right": decision.right.value,
            "right_level": LEVEL_HIERARCHY[decision.right],
            "required": required.value,
            "required_level": LEVEL_HIERARCHY[required],
            "reason": decision.reason.value if decision.reason else None,
        }
        if decision.error is not None:
            explanation["detail"] = str(decision.error)
        return explanation


# Global access engine instance
_access_engine: Optional[AccessEngine] = None


def get_access_engine() -> AccessEngine:
    """Get or initialize the global access engine"""
    global _access_engine

    if _access_engine is None:
        _access_engine = AccessEngine()

    return _access_engine


def reset_access_engine() -> None:
    """Drop the global engine so the next call rebuilds it from settings"""
    global _access_engine
    _access_engine = None
