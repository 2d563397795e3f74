"""
Tests for AccessEngine (tasklane/permissions/engine.py)

Tests cover:
- authorize() decisions and deny reasons
- require() raising typed errors
- Re-loading entities from the store
- Convenience predicates
- Store failures propagating as StoreUnavailableError
- explain() diagnostics
- Global engine helpers
"""

import sqlite3
from unittest.mock import patch

import pytest

from tasklane.errors import (
    InsufficientRightError,
    ListIsArchivedError,
    ListNotFoundError,
    NamespaceIsArchivedError,
    NamespaceNotFoundError,
    StoreUnavailableError,
)
from tasklane.models import FAVORITES_PSEUDO_NAMESPACE_ID, FavoritesPseudoList, Namespace, TaskList
from tasklane.permissions.engine import AccessEngine, get_access_engine, reset_access_engine
from tasklane.permissions.types import DenyReason, Right


# ========== authorize() ==========

class TestAuthorize:
    """Decisions and deny reasons"""

    def test_allowed_decision_carries_loaded_entity(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a, title="Groceries")
        decision = engine.authorize(a, TaskList(id=list_id), Right.READ)
        assert decision.allowed
        assert decision.right == Right.ADMIN
        assert decision.entity.title == "Groceries"

    def test_not_found(self, engine, factory):
        decision = engine.authorize(factory.user(), TaskList(id=999), Right.READ)
        assert not decision.allowed
        assert decision.reason == DenyReason.NOT_FOUND
        assert isinstance(decision.error, ListNotFoundError)
        assert decision.right == Right.NONE

    def test_insufficient_right(self, engine, factory):
        a, b = factory.user(), factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        factory.grant_user_list(b, list_id, Right.READ)

        decision = engine.authorize(b, TaskList(id=list_id), Right.WRITE)
        assert not decision.allowed
        assert decision.reason == DenyReason.INSUFFICIENT_RIGHT
        assert decision.right == Right.READ
        assert decision.required == Right.WRITE

    def test_archived(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a, archived=True)
        decision = engine.authorize(a, TaskList(id=list_id), Right.WRITE)
        assert decision.reason == DenyReason.ARCHIVED
        assert isinstance(decision.error, ListIsArchivedError)

    def test_rights_checked_before_archive(self, engine, factory):
        """An outsider learns nothing about archival"""
        a, d = factory.user(), factory.user()
        list_id = factory.task_list(factory.namespace(a), a, archived=True)
        decision = engine.authorize(d, TaskList(id=list_id), Right.WRITE)
        assert decision.reason == DenyReason.INSUFFICIENT_RIGHT

    def test_reads_skip_archive_check(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a, archived=True)
        assert engine.authorize(a, TaskList(id=list_id), Right.READ).allowed

    def test_check_archived_override(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a, archived=True)
        assert engine.authorize(a, TaskList(id=list_id), Right.ADMIN, check_archived=False).allowed
        assert not engine.authorize(a, TaskList(id=list_id), Right.READ, check_archived=True).allowed

    def test_archived_namespace(self, engine, factory):
        a = factory.user()
        ns_id = factory.namespace(a, archived=True)
        decision = engine.authorize(a, Namespace(id=ns_id), Right.ADMIN)
        assert decision.reason == DenyReason.ARCHIVED
        assert isinstance(decision.error, NamespaceIsArchivedError)

    def test_lifting_namespace_archive(self, engine, factory):
        a = factory.user()
        ns_id = factory.namespace(a, archived=True)
        assert engine.authorize(a, Namespace(id=ns_id), Right.ADMIN, lifting_archive=True).allowed

    def test_new_list_in_missing_namespace(self, engine, factory):
        decision = engine.authorize(factory.user(), TaskList(id=0, namespace_id=404), Right.WRITE)
        assert decision.reason == DenyReason.NOT_FOUND
        assert isinstance(decision.error, NamespaceNotFoundError)


class TestReload:
    """Caller-supplied entity fields are never trusted"""

    def test_forged_owner_is_ignored(self, engine, factory):
        a, mallory = factory.user(), factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        forged = TaskList(id=list_id, owner_id=mallory.id)
        assert engine.effective_right(mallory, forged) == Right.NONE

    def test_forged_namespace_is_ignored(self, engine, factory):
        a, mallory = factory.user(), factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        own_ns = factory.namespace(mallory)
        forged = TaskList(id=list_id, namespace_id=own_ns)
        assert not engine.can_read(mallory, forged)

    def test_forged_namespace_owner_is_ignored(self, engine, factory):
        a, mallory = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        assert not engine.is_admin(mallory, Namespace(id=ns_id, owner_id=mallory.id))

    def test_grant_changes_apply_on_next_check(self, engine, factory):
        a, b = factory.user(), factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        assert not engine.can_read(b, TaskList(id=list_id))
        factory.grant_user_list(b, list_id, Right.READ)
        assert engine.can_read(b, TaskList(id=list_id))


class TestRequire:
    """require() raises the typed error"""

    def test_returns_loaded_entity(self, engine, factory):
        a = factory.user()
        ns_id = factory.namespace(a, title="Work")
        assert engine.require(a, Namespace(id=ns_id), Right.READ).title == "Work"

    def test_raises_insufficient_right(self, engine, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        with pytest.raises(InsufficientRightError) as exc:
            engine.require(b, Namespace(id=ns_id), Right.READ)
        assert exc.value.status_code == 403
        assert exc.value.details == {"required": "read", "right": "none"}

    def test_raises_not_found(self, engine, factory):
        with pytest.raises(NamespaceNotFoundError):
            engine.require(factory.user(), Namespace(id=77), Right.READ)


class TestPredicates:
    """can_read / can_write / is_admin / can_create / can_update / can_delete"""

    def test_namespace_update_needs_admin(self, engine, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        factory.grant_team_namespace(factory.team(members=[b]), ns_id, Right.WRITE)
        assert engine.can_write(b, Namespace(id=ns_id))
        assert not engine.can_update(b, Namespace(id=ns_id))
        assert engine.can_update(a, Namespace(id=ns_id))

    def test_list_update_needs_write_delete_needs_admin(self, engine, factory):
        a, b = factory.user(), factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        factory.grant_user_list(b, list_id, Right.WRITE)
        assert engine.can_update(b, TaskList(id=list_id))
        assert not engine.can_delete(b, TaskList(id=list_id))
        assert engine.can_delete(a, TaskList(id=list_id))

    def test_is_admin_ignores_archival(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a, archived=True)
        assert engine.is_admin(a, TaskList(id=list_id))
        assert not engine.can_delete(a, TaskList(id=list_id))

    def test_can_create_namespace(self, engine, factory):
        a = factory.user()
        share = factory.link_share(factory.task_list(factory.namespace(a), a), Right.ADMIN, a)
        assert engine.can_create(a, Namespace(id=0))
        assert not engine.can_create(share, Namespace(id=0))

    def test_can_create_list(self, engine, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        archived_ns = factory.namespace(a, archived=True)
        assert engine.can_create(a, TaskList(id=0, namespace_id=ns_id))
        assert not engine.can_create(b, TaskList(id=0, namespace_id=ns_id))
        assert not engine.can_create(a, TaskList(id=0, namespace_id=archived_ns))

    def test_link_share_cannot_create_list(self, engine, factory):
        a = factory.user()
        ns_id = factory.namespace(a)
        share = factory.link_share(factory.task_list(ns_id, a), Right.ADMIN, a)
        assert not engine.can_create(share, TaskList(id=0, namespace_id=ns_id))

    def test_link_share_predicates(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        share = factory.link_share(list_id, Right.WRITE, a)
        assert engine.can_read(share, TaskList(id=list_id))
        assert engine.can_write(share, TaskList(id=list_id))
        assert engine.can_update(share, TaskList(id=list_id))
        assert not engine.can_delete(share, TaskList(id=list_id))

    def test_favorites(self, engine, factory):
        a = factory.user()
        assert engine.can_read(a, FavoritesPseudoList())
        assert engine.can_read(a, Namespace(id=FAVORITES_PSEUDO_NAMESPACE_ID))
        assert not engine.can_write(a, Namespace(id=FAVORITES_PSEUDO_NAMESPACE_ID))


class TestStoreFailures:
    """Store errors are surfaced, never turned into denials"""

    def test_sqlite_error_becomes_store_unavailable(self, engine, factory):
        a = factory.user()
        list_id = factory.task_list(factory.namespace(a), a)
        with patch(
            "tasklane.permissions.storage.get_db_connection",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            with pytest.raises(StoreUnavailableError) as exc:
                engine.authorize(a, TaskList(id=list_id), Right.READ)
        assert isinstance(exc.value.__cause__, sqlite3.OperationalError)
        assert exc.value.status_code == 500


class TestExplain:
    """explain() diagnostics"""

    def test_explain_allow(self, engine, factory):
        a = factory.user()
        ns_id = factory.namespace(a)
        result = engine.explain(a, Namespace(id=ns_id), Right.WRITE)
        assert result["decision"] == "allow"
        assert result["right"] == "admin"
        assert result["required_level"] == 2
        assert result["reason"] is None

    def test_explain_deny(self, engine, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        result = engine.explain(b, Namespace(id=ns_id), Right.READ)
        assert result["decision"] == "deny"
        assert result["reason"] == "insufficient_right"
        assert result["principal"] == f"user:{b.id}"
        assert "detail" in result

    def test_explain_disabled(self, store, settings, factory):
        quiet = AccessEngine(store=store, settings=settings.model_copy(update={"perms_explain": False}))
        result = quiet.explain(factory.user(), Namespace(id=1))
        assert "error" in result


class TestGlobalEngine:
    """get_access_engine / reset_access_engine"""

    def test_singleton_and_reset(self):
        reset_access_engine()
        first = get_access_engine()
        assert get_access_engine() is first
        reset_access_engine()
        assert get_access_engine() is not first
        reset_access_engine()
