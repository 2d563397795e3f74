"""
List Authorizer

Resolves a principal's effective right on a list. Dispatch happens once, on
the principal kind and the list kind:

- LinkShare: the share's stored right on its own list, NONE elsewhere
- FavoritesPseudoList: ADMIN for the requesting user
- TaskList: max(owner, direct user grant, team list grants, namespace right)

The grant paths are independent and merged with max_right; a list grant can
extend access beyond the namespace, and namespace rights always reach down
into every list.
"""

import logging

from tasklane.models import FavoritesPseudoList, ListEntity, TaskList
from .hierarchy import max_right, satisfies
from .namespace_rights import NamespaceAuthorizer
from .principals import LinkShare, Principal
from .storage import GrantStore
from .types import Right

logger = logging.getLogger(__name__)


class ListAuthorizer:
    """List-level rights, composed with the NamespaceAuthorizer"""

    def __init__(self, store: GrantStore, namespaces: NamespaceAuthorizer):
        self.store = store
        self.namespaces = namespaces

    def effective_right(self, principal: Principal, task_list: ListEntity) -> Right:
        """
        Effective right of a principal on a store-loaded list

        Args:
            principal: User or LinkShare
            task_list: TaskList as loaded by the GrantStore, or the Favorites pseudo-list

        Returns:
            Right held by the principal
        """
        if isinstance(principal, LinkShare):
            return self._link_share_right(principal, task_list)
        if isinstance(task_list, FavoritesPseudoList):
            return Right.ADMIN
        return self._user_right(principal, task_list)

    def _link_share_right(self, share: LinkShare, task_list: ListEntity) -> Right:
        if isinstance(task_list, TaskList) and task_list.id == share.list_id:
            return share.right
        return Right.NONE

    def _user_right(self, user, task_list: TaskList) -> Right:
        if user.id == task_list.owner_id:
            return Right.ADMIN

        team_ids = self.store.find_teams_containing(user.id)
        direct = self.store.find_list_grant(task_list.id, user.id, team_ids)
        if direct == Right.ADMIN:
            return direct

        namespace = self.store.get_namespace(task_list.namespace_id)
        inherited = self.namespaces.effective_right(user, namespace, team_ids=team_ids)
        return max_right(direct, inherited)

    def is_admin(self, principal: Principal, task_list: ListEntity) -> bool:
        return satisfies(self.effective_right(principal, task_list), Right.ADMIN)

    def can_write(self, principal: Principal, task_list: ListEntity) -> bool:
        return satisfies(self.effective_right(principal, task_list), Right.WRITE)

    def can_read(self, principal: Principal, task_list: ListEntity) -> bool:
        return satisfies(self.effective_right(principal, task_list), Right.READ)

    def can_create(self, principal: Principal, namespace_id: int) -> bool:
        """
        Creating a list needs write on the target namespace

        The list does not exist yet, so it is never consulted.
        """
        namespace = self.store.get_namespace(namespace_id)
        return self.namespaces.can_write(principal, namespace)

    def can_update(self, principal: Principal, list_id: int) -> bool:
        """Write on the list as currently stored"""
        return self.can_write(principal, self.store.get_list(list_id))

    def can_delete(self, principal: Principal, list_id: int) -> bool:
        """Admin on the list as currently stored"""
        return self.is_admin(principal, self.store.get_list(list_id))
