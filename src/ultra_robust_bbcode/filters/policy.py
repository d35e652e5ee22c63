"""Nesting permission policies for BBCode tags.

Every tag declares the category it belongs to (inline or block) and which
categories of child tags it accepts. The tree core consults these policies
while cleaning each nesting level.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class NestingAllowance(Enum):
    """Which child tags a parent tag accepts."""

    ALL = "all"
    INLINE_ONLY = "inline"
    BLOCK_ONLY = "block"
    NONE = "none"


class TagCategory(Enum):
    """Category a tag belongs to when it appears as a child."""

    INLINE = "inline"
    BLOCK = "block"


@dataclass(frozen=True)
class PermissionPolicy:
    """Nesting metadata for one tag."""

    allowed: NestingAllowance = NestingAllowance.ALL
    category: TagCategory = TagCategory.INLINE

    @classmethod
    def from_names(cls, allowed: str, category: str) -> "PermissionPolicy":
        """Build a policy from configuration strings such as ``"inline"``."""
        return cls(NestingAllowance(allowed.lower()), TagCategory(category.lower()))


# Applied to tags the registry does not know: they accept no child tags.
RESTRICTIVE_POLICY = PermissionPolicy(NestingAllowance.NONE, TagCategory.BLOCK)


def is_allowed(parent: PermissionPolicy, child_category: Optional[TagCategory]) -> bool:
    """Check whether a child of ``child_category`` may nest inside ``parent``.

    ``BLOCK_ONLY`` admits the same children as ``INLINE_ONLY``: inline ones.
    Markup written against this behaviour depends on it, so it is kept.
    """
    if parent.allowed is NestingAllowance.ALL:
        return True
    if parent.allowed in (NestingAllowance.INLINE_ONLY, NestingAllowance.BLOCK_ONLY):
        return child_category is TagCategory.INLINE
    return False
