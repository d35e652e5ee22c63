"""Tests for nesting permission policies."""

import pytest

from ultra_robust_bbcode.filters import (
    RESTRICTIVE_POLICY,
    NestingAllowance,
    PermissionPolicy,
    TagCategory,
    is_allowed,
)


class TestPermissionPolicy:
    """Test policy construction."""

    def test_defaults(self) -> None:
        """Test default policy accepts everything and is inline."""
        policy = PermissionPolicy()

        assert policy.allowed is NestingAllowance.ALL
        assert policy.category is TagCategory.INLINE

    def test_from_names(self) -> None:
        """Test building a policy from configuration strings."""
        policy = PermissionPolicy.from_names("Inline", "BLOCK")

        assert policy == PermissionPolicy(NestingAllowance.INLINE_ONLY, TagCategory.BLOCK)

    def test_from_names_rejects_unknown_values(self) -> None:
        """Test unknown allowance names raise ValueError."""
        with pytest.raises(ValueError):
            PermissionPolicy.from_names("sometimes", "inline")

    def test_restrictive_policy(self) -> None:
        """Test the policy used for unknown tags."""
        assert RESTRICTIVE_POLICY.allowed is NestingAllowance.NONE
        assert RESTRICTIVE_POLICY.category is TagCategory.BLOCK


class TestIsAllowed:
    """Test the nesting permission check."""

    @pytest.mark.parametrize("allowed, category, expected", [
        (NestingAllowance.ALL, TagCategory.INLINE, True),
        (NestingAllowance.ALL, TagCategory.BLOCK, True),
        (NestingAllowance.INLINE_ONLY, TagCategory.INLINE, True),
        (NestingAllowance.INLINE_ONLY, TagCategory.BLOCK, False),
        (NestingAllowance.BLOCK_ONLY, TagCategory.INLINE, True),
        (NestingAllowance.BLOCK_ONLY, TagCategory.BLOCK, False),
        (NestingAllowance.NONE, TagCategory.INLINE, False),
        (NestingAllowance.NONE, TagCategory.BLOCK, False),
    ])
    def test_permission_table(self, allowed, category, expected) -> None:
        """Test every parent allowance against every child category."""
        parent = PermissionPolicy(allowed, TagCategory.BLOCK)

        assert is_allowed(parent, category) is expected

    def test_missing_child_category(self) -> None:
        """Test a child without a category is only accepted by ALL."""
        assert is_allowed(PermissionPolicy(NestingAllowance.ALL), None)
        assert not is_allowed(PermissionPolicy(NestingAllowance.INLINE_ONLY), None)
