"""Tag filters, nesting policies and the tag registry.

Key Components:
    FilterRegistry: Maps tag names to rendering strategies and policies
    Filter: Base rendering strategy producing opening and closing markup
    TagDefinition: Declarative tag metadata (HTML tag, category, attributes)
    PermissionPolicy: Nesting allowance and category of a tag
"""

from .base import Filter, StripFilter, TagDefinition, escape_attribute
from .builtin import BlockFilter, DefaultFilter, QuoteFilter, UrlFilter
from .policy import (
    RESTRICTIVE_POLICY,
    NestingAllowance,
    PermissionPolicy,
    TagCategory,
    is_allowed,
)
from .registry import (
    FilterRegistry,
    StrippingRegistry,
    UnknownTagError,
    default_registry,
)

__all__ = [
    "BlockFilter",
    "DefaultFilter",
    "Filter",
    "FilterRegistry",
    "NestingAllowance",
    "PermissionPolicy",
    "QuoteFilter",
    "RESTRICTIVE_POLICY",
    "StripFilter",
    "StrippingRegistry",
    "TagCategory",
    "TagDefinition",
    "UnknownTagError",
    "UrlFilter",
    "default_registry",
    "escape_attribute",
    "is_allowed",
]
