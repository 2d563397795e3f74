"""
Tests for ListAuthorizer (tasklane/permissions/list_rights.py)

Tests cover:
- Owner / namespace owner / unrelated user scenario
- Direct user and team list grants
- Namespace inheritance: list right never below namespace right
- Grant paths are merged with max, never intersected
- Monotonicity and re-grant idempotence
- Favorites pseudo-list
- Link-share principals
"""

import pytest

from tasklane.errors import ListNotFoundError
from tasklane.models import FAVORITES_PSEUDO_LIST
from tasklane.permissions.hierarchy import LEVEL_HIERARCHY
from tasklane.permissions.types import Right


@pytest.fixture
def lists(engine):
    return engine.lists


@pytest.fixture
def setup(factory):
    """User A owns list L inside namespace N owned by user C"""
    a, c = factory.user("alice"), factory.user("carol")
    ns_id = factory.namespace(c)
    list_id = factory.task_list(ns_id, a)
    return a, c, ns_id, list_id


class TestListOwnership:
    """Owner, namespace owner and unrelated user"""

    def test_owner_namespace_owner_unrelated_scenario(self, lists, store, factory, setup):
        a, c, _, list_id = setup
        d = factory.user("dave")
        task_list = store.get_list(list_id)

        assert lists.can_read(a, task_list)
        assert lists.can_read(c, task_list)
        assert not lists.can_read(d, task_list)

    def test_owner_and_namespace_owner_are_admin(self, lists, store, setup):
        a, c, _, list_id = setup
        task_list = store.get_list(list_id)
        assert lists.effective_right(a, task_list) == Right.ADMIN
        assert lists.effective_right(c, task_list) == Right.ADMIN


class TestListGrants:
    """Direct user grants, team list grants and namespace inheritance"""

    @pytest.mark.parametrize("right", [Right.READ, Right.WRITE, Right.ADMIN])
    def test_direct_user_grant(self, lists, store, factory, setup, right):
        _, _, _, list_id = setup
        b = factory.user()
        factory.grant_user_list(b, list_id, right)
        assert lists.effective_right(b, store.get_list(list_id)) == right

    def test_team_list_grant(self, lists, store, factory, setup):
        _, _, _, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])
        factory.grant_team_list(team, list_id, Right.WRITE)
        assert lists.can_write(b, store.get_list(list_id))
        assert not lists.is_admin(b, store.get_list(list_id))

    def test_team_write_scenario_reaches_lists(self, lists, store, factory, setup):
        """Team write on N gives write on every list under N"""
        _, _, ns_id, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns_id, Right.WRITE)
        other_list = factory.task_list(ns_id, factory.user())

        assert lists.can_write(b, store.get_list(list_id))
        assert lists.can_write(b, store.get_list(other_list))

    def test_list_grant_extends_beyond_namespace(self, lists, store, factory, setup):
        """A higher list grant wins over a lower namespace grant"""
        _, _, ns_id, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns_id, Right.READ)
        factory.grant_user_list(b, list_id, Right.ADMIN)
        assert lists.effective_right(b, store.get_list(list_id)) == Right.ADMIN

    def test_namespace_grant_not_reduced_by_list_grant(self, lists, store, factory, setup):
        """A lower list grant never cuts down the namespace right"""
        _, _, ns_id, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])
        factory.grant_team_namespace(team, ns_id, Right.ADMIN)
        factory.grant_user_list(b, list_id, Right.READ)
        assert lists.effective_right(b, store.get_list(list_id)) == Right.ADMIN

    def test_best_of_user_and_team_list_grants(self, lists, store, factory, setup):
        _, _, _, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])
        factory.grant_user_list(b, list_id, Right.READ)
        factory.grant_team_list(team, list_id, Right.WRITE)
        assert lists.effective_right(b, store.get_list(list_id)) == Right.WRITE


class TestListRightProperties:
    """Properties that hold for every grant combination"""

    @pytest.mark.parametrize("ns_right", [None, Right.READ, Right.WRITE, Right.ADMIN])
    @pytest.mark.parametrize("list_right", [None, Right.READ, Right.WRITE, Right.ADMIN])
    def test_list_right_at_least_namespace_right(self, engine, store, factory, ns_right, list_right):
        owner, b = factory.user(), factory.user()
        ns_id = factory.namespace(owner)
        list_id = factory.task_list(ns_id, owner)
        team = factory.team(members=[b])
        if ns_right:
            factory.grant_team_namespace(team, ns_id, ns_right)
        if list_right:
            factory.grant_user_list(b, list_id, list_right)

        on_list = engine.lists.effective_right(b, store.get_list(list_id))
        on_namespace = engine.namespaces.effective_right(b, store.get_namespace(ns_id))
        assert LEVEL_HIERARCHY[on_list] >= LEVEL_HIERARCHY[on_namespace]

    def test_granting_higher_right_is_monotonic(self, lists, store, factory, setup):
        """Adding a grant path never lowers the effective right"""
        _, _, ns_id, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])

        seen = [lists.effective_right(b, store.get_list(list_id))]
        factory.grant_team_list(team, list_id, Right.READ)
        seen.append(lists.effective_right(b, store.get_list(list_id)))
        factory.grant_team_namespace(team, ns_id, Right.WRITE)
        seen.append(lists.effective_right(b, store.get_list(list_id)))
        factory.grant_user_list(b, list_id, Right.ADMIN)
        seen.append(lists.effective_right(b, store.get_list(list_id)))

        levels = [LEVEL_HIERARCHY[r] for r in seen]
        assert levels == sorted(levels)
        assert seen[-1] == Right.ADMIN

    def test_regrant_is_idempotent(self, engine, store, factory, setup):
        """Re-issuing the same namespace grant leaves the right unchanged"""
        from tasklane.services.sharing import share_namespace_with_team

        _, c, ns_id, list_id = setup
        b = factory.user()
        team = factory.team(members=[b])

        share_namespace_with_team(engine, c, ns_id, team, Right.WRITE)
        first = engine.lists.effective_right(b, store.get_list(list_id))
        share_namespace_with_team(engine, c, ns_id, team, Right.WRITE)
        second = engine.lists.effective_right(b, store.get_list(list_id))

        assert first == second == Right.WRITE
        rows = factory.fetch("SELECT * FROM team_namespaces WHERE namespace_id = ?", (ns_id,))
        assert len(rows) == 1


class TestFavoritesPseudoList:
    """The Favorites pseudo-list"""

    def test_user_is_admin(self, lists, factory):
        assert lists.effective_right(factory.user(), FAVORITES_PSEUDO_LIST) == Right.ADMIN

    def test_link_share_has_none(self, lists, factory, setup):
        a, _, _, list_id = setup
        share = factory.link_share(list_id, Right.ADMIN, a)
        assert lists.effective_right(share, FAVORITES_PSEUDO_LIST) == Right.NONE


class TestLinkShareRights:
    """Link-share principals"""

    @pytest.mark.parametrize("right", [Right.READ, Right.WRITE, Right.ADMIN])
    def test_share_right_on_own_list(self, lists, store, factory, setup, right):
        a, _, _, list_id = setup
        share = factory.link_share(list_id, right, a)
        assert lists.effective_right(share, store.get_list(list_id)) == right

    def test_share_has_nothing_on_other_list(self, lists, store, factory, setup):
        """A share on L1 gives none on L2, even in the same namespace"""
        a, _, ns_id, list_id = setup
        other = factory.task_list(ns_id, a)
        share = factory.link_share(list_id, Right.ADMIN, a)
        assert lists.effective_right(share, store.get_list(other)) == Right.NONE
        assert not lists.can_read(share, store.get_list(other))


class TestListOperations:
    """can_create / can_update / can_delete"""

    def test_create_needs_namespace_write(self, lists, factory, setup):
        _, c, ns_id, _ = setup
        reader, writer = factory.user(), factory.user()
        factory.grant_team_namespace(factory.team(members=[reader]), ns_id, Right.READ)
        factory.grant_team_namespace(factory.team(members=[writer]), ns_id, Right.WRITE)

        assert lists.can_create(c, ns_id)
        assert lists.can_create(writer, ns_id)
        assert not lists.can_create(reader, ns_id)

    def test_update_needs_write_delete_needs_admin(self, lists, factory, setup):
        _, _, _, list_id = setup
        writer = factory.user()
        factory.grant_user_list(writer, list_id, Right.WRITE)
        assert lists.can_update(writer, list_id)
        assert not lists.can_delete(writer, list_id)

    def test_update_refetches_list(self, lists, factory, setup):
        with pytest.raises(ListNotFoundError):
            lists.can_update(factory.user(), 424242)
