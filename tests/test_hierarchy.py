"""
Tests for the right lattice (tasklane/permissions/types.py, hierarchy.py)

Tests cover:
- Right enum values and string behaviour
- LEVEL_HIERARCHY ordering
- max_right / satisfies
- AccessDecision truthiness
"""

import itertools

import pytest

from tasklane.permissions.hierarchy import LEVEL_HIERARCHY, max_right, satisfies
from tasklane.permissions.types import GRANTABLE_RIGHTS, AccessDecision, DenyReason, Right


ALL_RIGHTS = [Right.NONE, Right.READ, Right.WRITE, Right.ADMIN]


# ========== Right Enum Tests ==========

class TestRight:
    """Tests for the Right enum"""

    def test_enum_values(self):
        """Stored string values"""
        assert Right.NONE.value == "none"
        assert Right.READ.value == "read"
        assert Right.WRITE.value == "write"
        assert Right.ADMIN.value == "admin"

    def test_enum_from_string(self):
        assert Right("read") == Right.READ
        assert Right("admin") == Right.ADMIN

    def test_str_enum(self):
        """Right is a str subclass so it serializes as its value"""
        assert isinstance(Right.WRITE, str)
        assert Right.WRITE == "write"

    def test_none_is_not_grantable(self):
        assert Right.NONE not in GRANTABLE_RIGHTS
        assert set(GRANTABLE_RIGHTS) == {Right.READ, Right.WRITE, Right.ADMIN}


# ========== Level Hierarchy Tests ==========

class TestLevelHierarchy:
    """Tests for LEVEL_HIERARCHY"""

    def test_hierarchy_ordering(self):
        assert LEVEL_HIERARCHY[Right.NONE] == 0
        assert LEVEL_HIERARCHY[Right.READ] == 1
        assert LEVEL_HIERARCHY[Right.WRITE] == 2
        assert LEVEL_HIERARCHY[Right.ADMIN] == 3

    def test_all_rights_ranked(self):
        assert set(LEVEL_HIERARCHY) == set(Right)


# ========== Lattice Operation Tests ==========

class TestMaxRight:
    """Tests for max_right"""

    def test_empty_is_none(self):
        assert max_right() == Right.NONE

    def test_single(self):
        assert max_right(Right.WRITE) == Right.WRITE

    def test_picks_highest(self):
        assert max_right(Right.READ, Right.ADMIN, Right.WRITE) == Right.ADMIN
        assert max_right(Right.NONE, Right.READ) == Right.READ

    @pytest.mark.parametrize("a,b", list(itertools.product(ALL_RIGHTS, repeat=2)))
    def test_commutative(self, a, b):
        assert max_right(a, b) == max_right(b, a)

    @pytest.mark.parametrize("a", ALL_RIGHTS)
    def test_idempotent(self, a):
        assert max_right(a, a) == a

    def test_accepts_generator(self):
        assert max_right(*(r for r in [Right.READ, Right.WRITE])) == Right.WRITE


class TestSatisfies:
    """Tests for satisfies"""

    @pytest.mark.parametrize("have", ALL_RIGHTS)
    def test_reflexive(self, have):
        assert satisfies(have, have)

    def test_higher_satisfies_lower(self):
        assert satisfies(Right.ADMIN, Right.WRITE)
        assert satisfies(Right.WRITE, Right.READ)
        assert satisfies(Right.READ, Right.NONE)

    def test_lower_does_not_satisfy_higher(self):
        assert not satisfies(Right.READ, Right.WRITE)
        assert not satisfies(Right.WRITE, Right.ADMIN)
        assert not satisfies(Right.NONE, Right.READ)


# ========== AccessDecision Tests ==========

class TestAccessDecision:
    """Tests for AccessDecision"""

    def test_allowed_is_truthy(self):
        decision = AccessDecision(allowed=True, right=Right.ADMIN, required=Right.READ)
        assert decision
        assert decision.reason is None

    def test_denied_is_falsy(self):
        decision = AccessDecision(
            allowed=False,
            right=Right.READ,
            required=Right.WRITE,
            reason=DenyReason.INSUFFICIENT_RIGHT,
        )
        assert not decision
        assert decision.reason == DenyReason.INSUFFICIENT_RIGHT

    def test_frozen(self):
        decision = AccessDecision(allowed=True, right=Right.READ, required=Right.READ)
        with pytest.raises(AttributeError):
            decision.allowed = False
