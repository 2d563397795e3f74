"""
Namespace Authorizer

Resolves a principal's effective right on a namespace from ownership and
team-namespace grants.
"""

import logging
from typing import Optional, Set

from tasklane.models import FAVORITES_PSEUDO_NAMESPACE_ID, Namespace
from .hierarchy import satisfies
from .principals import LinkShare, Principal, User
from .storage import GrantStore
from .types import Right

logger = logging.getLogger(__name__)


class NamespaceAuthorizer:
    """Namespace-level rights: owner is admin, otherwise the best team grant"""

    def __init__(self, store: GrantStore):
        self.store = store

    def effective_right(
        self,
        principal: Principal,
        namespace: Namespace,
        team_ids: Optional[Set[int]] = None,
    ) -> Right:
        """
        Effective right of a principal on a store-loaded namespace

        Args:
            principal: User or LinkShare
            namespace: Namespace as loaded by the GrantStore
            team_ids: Teams of the user, when the caller already looked them up

        Returns:
            Right held; NONE for link shares
        """
        if isinstance(principal, LinkShare):
            return Right.NONE

        # Everyone can see their own Favorites namespace, nobody can change it
        if namespace.id == FAVORITES_PSEUDO_NAMESPACE_ID:
            return Right.READ

        if principal.id == namespace.owner_id:
            return Right.ADMIN

        if team_ids is None:
            team_ids = self.store.find_teams_containing(principal.id)
        return self.store.find_namespace_grant(namespace.id, team_ids)

    def is_admin(self, principal: Principal, namespace: Namespace) -> bool:
        return satisfies(self.effective_right(principal, namespace), Right.ADMIN)

    def can_write(self, principal: Principal, namespace: Namespace) -> bool:
        return satisfies(self.effective_right(principal, namespace), Right.WRITE)

    def can_read(self, principal: Principal, namespace: Namespace) -> bool:
        return satisfies(self.effective_right(principal, namespace), Right.READ)

    def can_create(self, principal: Principal) -> bool:
        """Any user may create a namespace; link shares never can"""
        return isinstance(principal, User)

    def can_update(self, principal: Principal, namespace_id: int) -> bool:
        """Admin on the namespace as currently stored"""
        return self.is_admin(principal, self.store.get_namespace(namespace_id))

    def can_delete(self, principal: Principal, namespace_id: int) -> bool:
        """Admin on the namespace as currently stored"""
        return self.is_admin(principal, self.store.get_namespace(namespace_id))
