"""
Archive Guard

Blocks mutations of archived lists and of anything inside an archived
namespace, independent of the principal's right. Reads are never blocked.
"""

import logging

from tasklane.errors import ListIsArchivedError, NamespaceIsArchivedError
from tasklane.models import FavoritesPseudoList, ListEntity
from .storage import GrantStore

logger = logging.getLogger(__name__)


class ArchiveGuard:
    """Checks the list and namespace archived bits before a write"""

    def __init__(self, store: GrantStore):
        self.store = store

    def check_writable(self, task_list: ListEntity, lifting_list_archive: bool = False) -> None:
        """
        Raise if the list or its namespace is archived

        A list with id 0 is about to be created, so only its target namespace
        is checked. When both bits are set the list is reported, being the
        more specific cause.

        Args:
            task_list: List to check; only `id` and, for new lists, `namespace_id` are read
            lifting_list_archive: The write is the one that unarchives this list;
                skip the list bit but still honour the namespace bit

        Raises:
            ListIsArchivedError: The list itself is archived
            NamespaceIsArchivedError: The parent namespace is archived
            ListNotFoundError: The list does not exist
        """
        if isinstance(task_list, FavoritesPseudoList):
            return

        if task_list.id == 0:
            self.check_namespace_writable(task_list.namespace_id)
            return

        state = self.store.get_archive_state(task_list.id)
        if state.list_archived and not lifting_list_archive:
            logger.debug(f"List {state.list_id} is archived")
            raise ListIsArchivedError(state.list_id)
        if state.namespace_archived:
            logger.debug(f"Namespace {state.namespace_id} of list {state.list_id} is archived")
            raise NamespaceIsArchivedError(state.namespace_id)

    def check_namespace_writable(self, namespace_id: int) -> None:
        """
        Raise NamespaceIsArchivedError if the namespace is archived

        Raises:
            NamespaceNotFoundError: The namespace does not exist
        """
        namespace = self.store.get_namespace(namespace_id)
        if namespace.is_archived:
            raise NamespaceIsArchivedError(namespace.id)

    def is_archived(self, task_list: ListEntity) -> bool:
        """True when the list or its namespace is archived"""
        if isinstance(task_list, FavoritesPseudoList) or task_list.id == 0:
            return False
        state = self.store.get_archive_state(task_list.id)
        return state.list_archived or state.namespace_archived
