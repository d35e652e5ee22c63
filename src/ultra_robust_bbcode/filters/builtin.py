"""Built-in BBCode filters.

Covers the common forum tag set: text styling, links, block alignment and
quotations. Additional filters can be registered on a
:class:`~ultra_robust_bbcode.filters.registry.FilterRegistry` at runtime.
"""

from typing import Mapping

from .base import Filter, TagDefinition, escape_attribute
from .policy import NestingAllowance, TagCategory

URL_PATTERN = r"(?:https?|ftps?|irc|file|telnet)://\S*"
ALIGN_PATTERN = r"left|center|right|justify"
IDENTIFIER_PATTERN = r"[a-z][a-z0-9_\- ]*"


def _inline(name: str, html_tag: str) -> TagDefinition:
    return TagDefinition(
        name=name,
        html_tag=html_tag,
        category=TagCategory.INLINE,
        allowed=NestingAllowance.INLINE_ONLY,
    )


class DefaultFilter(Filter):
    """Basic inline text styling."""

    name = "default"
    tags = {
        "b": _inline("b", "b"),
        "i": _inline("i", "i"),
        "u": _inline("u", "u"),
        "s": _inline("s", "del"),
        "sub": _inline("sub", "sub"),
        "sup": _inline("sup", "sup"),
    }


class UrlFilter(Filter):
    """Hyperlinks; the link target comes from the default attribute."""

    name = "url"
    tags = {
        "url": TagDefinition(
            name="url",
            html_tag="a",
            category=TagCategory.INLINE,
            allowed=NestingAllowance.INLINE_ONLY,
            attributes={"default": URL_PATTERN},
            attribute_map={"default": "href"},
        ),
        "link": TagDefinition(
            name="link",
            html_tag="a",
            category=TagCategory.INLINE,
            allowed=NestingAllowance.INLINE_ONLY,
            attributes={"default": URL_PATTERN},
            attribute_map={"default": "href"},
        ),
    }


class BlockFilter(Filter):
    """Block containers."""

    name = "block"
    tags = {
        "align": TagDefinition(
            name="align",
            html_tag="div",
            category=TagCategory.BLOCK,
            allowed=NestingAllowance.ALL,
            attributes={"default": ALIGN_PATTERN},
        ),
        "div": TagDefinition(
            name="div",
            html_tag="div",
            category=TagCategory.BLOCK,
            allowed=NestingAllowance.ALL,
            attributes={"id": IDENTIFIER_PATTERN, "class": IDENTIFIER_PATTERN},
            attribute_map={"id": "id", "class": "class"},
        ),
    }

    def open_tag(self, tag_name: str, attributes: Mapping[str, str]) -> str:
        if tag_name == "align" and "default" in attributes:
            style = f"text-align: {attributes['default'].lower()}"
            return f"<div{self._format_attributes({'style': style})}>"
        return super().open_tag(tag_name, attributes)


class QuoteFilter(Filter):
    """Quotations with an optional author line."""

    name = "quote"
    tags = {
        "quote": TagDefinition(
            name="quote",
            html_tag="blockquote",
            category=TagCategory.BLOCK,
            allowed=NestingAllowance.ALL,
            attributes={"default": r"[^\[\]]{1,100}"},
            html_attributes={"class": "bbcode-quote"},
        ),
    }

    def open_tag(self, tag_name: str, attributes: Mapping[str, str]) -> str:
        markup = super().open_tag(tag_name, attributes)
        author = attributes.get("default")
        if author:
            markup += f'<cite>{escape_attribute(author)}</cite>'
        return markup
