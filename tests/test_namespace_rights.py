"""
Tests for NamespaceAuthorizer (tasklane/permissions/namespace_rights.py)

Tests cover:
- Owner is admin regardless of team grants
- Team grants, best of several teams
- Favorites pseudo namespace
- Link shares have no namespace rights
- can_create / can_update / can_delete
"""

import pytest

from tasklane.errors import NamespaceNotFoundError
from tasklane.models import FAVORITES_PSEUDO_NAMESPACE
from tasklane.permissions.types import Right


@pytest.fixture
def authorizer(engine):
    return engine.namespaces


class TestNamespaceOwner:
    """Ownership"""

    def test_owner_is_admin(self, authorizer, store, factory):
        a = factory.user()
        ns = store.get_namespace(factory.namespace(a))
        assert authorizer.effective_right(a, ns) == Right.ADMIN
        assert authorizer.is_admin(a, ns)

    def test_owner_is_admin_regardless_of_team_grants(self, authorizer, store, factory):
        """A lower team grant never reduces the owner's right"""
        a = factory.user()
        ns_id = factory.namespace(a)
        team = factory.team(members=[a])
        factory.grant_team_namespace(team, ns_id, Right.READ)
        assert authorizer.effective_right(a, store.get_namespace(ns_id)) == Right.ADMIN


class TestNamespaceTeamGrants:
    """Team-namespace grants"""

    def test_unrelated_user_has_none(self, authorizer, store, factory):
        a, d = factory.user(), factory.user()
        ns = store.get_namespace(factory.namespace(a))
        assert authorizer.effective_right(d, ns) == Right.NONE
        assert not authorizer.can_read(d, ns)

    def test_team_write_scenario(self, authorizer, store, factory):
        """Team T has write on N, B is the sole member of T"""
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns_id, Right.WRITE)

        ns = store.get_namespace(ns_id)
        assert authorizer.can_read(b, ns)
        assert authorizer.can_write(b, ns)
        assert not authorizer.is_admin(b, ns)

    def test_best_of_several_teams(self, authorizer, store, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        readers = factory.team(members=[b], name="readers")
        admins = factory.team(members=[b], name="admins")
        factory.grant_team_namespace(readers, ns_id, Right.READ)
        factory.grant_team_namespace(admins, ns_id, Right.ADMIN)
        assert authorizer.effective_right(b, store.get_namespace(ns_id)) == Right.ADMIN

    def test_grant_on_other_namespace_does_not_leak(self, authorizer, store, factory):
        a, b = factory.user(), factory.user()
        ns1, ns2 = factory.namespace(a), factory.namespace(a)
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns1, Right.ADMIN)
        assert authorizer.effective_right(b, store.get_namespace(ns2)) == Right.NONE

    def test_precomputed_team_ids_are_used(self, authorizer, store, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns_id, Right.WRITE)
        ns = store.get_namespace(ns_id)
        assert authorizer.effective_right(b, ns, team_ids=set()) == Right.NONE
        assert authorizer.effective_right(b, ns, team_ids={team}) == Right.WRITE


class TestNamespaceSpecialPrincipals:
    """Favorites namespace and link shares"""

    def test_favorites_namespace_is_read_only(self, authorizer, factory):
        a = factory.user()
        assert authorizer.effective_right(a, FAVORITES_PSEUDO_NAMESPACE) == Right.READ
        assert not authorizer.can_write(a, FAVORITES_PSEUDO_NAMESPACE)

    def test_link_share_has_no_namespace_right(self, authorizer, store, factory):
        a = factory.user()
        ns_id = factory.namespace(a)
        share = factory.link_share(factory.task_list(ns_id, a), Right.ADMIN, a)
        assert authorizer.effective_right(share, store.get_namespace(ns_id)) == Right.NONE


class TestNamespaceOperations:
    """can_create / can_update / can_delete"""

    def test_any_user_can_create(self, authorizer, factory):
        assert authorizer.can_create(factory.user())

    def test_link_share_cannot_create(self, authorizer, factory):
        a = factory.user()
        share = factory.link_share(factory.task_list(factory.namespace(a), a), Right.ADMIN, a)
        assert not authorizer.can_create(share)

    def test_update_and_delete_need_admin(self, authorizer, factory):
        a, b = factory.user(), factory.user()
        ns_id = factory.namespace(a)
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns_id, Right.WRITE)

        assert authorizer.can_update(a, ns_id)
        assert authorizer.can_delete(a, ns_id)
        assert not authorizer.can_update(b, ns_id)
        assert not authorizer.can_delete(b, ns_id)

    def test_update_missing_namespace_raises_not_found(self, authorizer, factory):
        with pytest.raises(NamespaceNotFoundError):
            authorizer.can_update(factory.user(), 9999)
