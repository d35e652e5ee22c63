"""Rendering strategies (filters) for BBCode tags.

A filter owns a family of tag definitions and turns a tag name plus its
attributes into opening and closing HTML markup. Filters are looked up per
tag through the :class:`~ultra_robust_bbcode.filters.registry.FilterRegistry`.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from .policy import NestingAllowance, PermissionPolicy, TagCategory

_BARE_AMPERSAND = re.compile(r"&(?!(?:[a-zA-Z][a-zA-Z0-9]*|#[0-9]+|#[xX][0-9a-fA-F]+);)")


def escape_attribute(value: str) -> str:
    """Escape an attribute value without re-encoding existing entities."""
    value = _BARE_AMPERSAND.sub("&amp;", value)
    return value.replace("\"", "&quot;").replace("<", "&lt;").replace(">", "&gt;")


@dataclass(frozen=True)
class TagDefinition:
    """Declarative description of one BBCode tag.

    ``attributes`` maps an accepted BBCode attribute name to the regular
    expression its value must fully match. ``attribute_map`` renames
    accepted attributes to their HTML attribute names; unmapped attributes
    are not emitted.
    """

    name: str
    html_tag: str
    category: TagCategory = TagCategory.INLINE
    allowed: NestingAllowance = NestingAllowance.ALL
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)
    attribute_map: Mapping[str, str] = field(default_factory=dict, hash=False)
    html_attributes: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate tag definition."""
        if not self.name:
            raise ValueError("Tag name cannot be empty")
        if self.name != self.name.lower():
            raise ValueError("Tag names must be lower-case")
        unknown = set(self.attribute_map) - set(self.attributes)
        if unknown:
            raise ValueError(f"attribute_map references undeclared attributes: {sorted(unknown)}")

    @property
    def policy(self) -> PermissionPolicy:
        """Nesting policy derived from this definition."""
        return PermissionPolicy(self.allowed, self.category)


class Filter:
    """Base rendering strategy mapping tag definitions to HTML."""

    name = "filter"
    tags: Dict[str, TagDefinition] = {}

    def __init__(self, tags: Optional[Mapping[str, TagDefinition]] = None) -> None:
        self._tags: Dict[str, TagDefinition] = dict(tags if tags is not None else self.tags)

    @property
    def tag_names(self):
        return list(self._tags)

    def has_tag(self, tag_name: str) -> bool:
        return tag_name in self._tags

    def tag(self, tag_name: str) -> TagDefinition:
        """Return the definition for ``tag_name``.

        Raises:
            KeyError: if this filter does not define the tag
        """
        return self._tags[tag_name]

    def open_tag(self, tag_name: str, attributes: Mapping[str, str]) -> str:
        """Render the opening markup for ``tag_name``."""
        definition = self.tag(tag_name)
        rendered = dict(definition.html_attributes)
        for bb_name, html_name in definition.attribute_map.items():
            if bb_name in attributes:
                rendered[html_name] = attributes[bb_name]
        return f"<{definition.html_tag}{self._format_attributes(rendered)}>"

    def close_tag(self, tag_name: str) -> str:
        """Render the closing markup for ``tag_name``."""
        return f"</{self.tag(tag_name).html_tag}>"

    @staticmethod
    def _format_attributes(attributes: Mapping[str, str]) -> str:
        return "".join(
            f' {name}="{escape_attribute(value)}"'
            for name, value in attributes.items()
        )


class StripFilter(Filter):
    """Filter that emits no markup, leaving only the text content."""

    name = "strip"

    def __init__(self) -> None:
        super().__init__({})

    def open_tag(self, tag_name: str, attributes: Mapping[str, str]) -> str:
        return ""

    def close_tag(self, tag_name: str) -> str:
        return ""
