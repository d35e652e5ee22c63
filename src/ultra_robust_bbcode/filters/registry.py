"""Tag registry mapping tag names to filters and nesting policies."""

import threading
from typing import Dict, Iterable, List, Optional

from ultra_robust_bbcode.shared import get_logger

from .base import Filter, StripFilter, TagDefinition
from .builtin import BlockFilter, DefaultFilter, QuoteFilter, UrlFilter
from .policy import PermissionPolicy


class UnknownTagError(KeyError):
    """Raised when a tag name has no registered filter."""

    def __init__(self, tag_name: str) -> None:
        super().__init__(tag_name)
        self.tag_name = tag_name

    def __str__(self) -> str:
        return f"No filter registered for tag [{self.tag_name}]"


class FilterRegistry:
    """Registry of filters keyed by the tag names they define.

    When two filters define the same tag the most recently added one wins.
    """

    def __init__(
        self,
        filters: Optional[Iterable[Filter]] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        self._filters: Dict[str, Filter] = {}
        self._by_tag: Dict[str, Filter] = {}
        self._lock = threading.RLock()
        self.logger = get_logger(__name__, correlation_id, "filter_registry")

        for filter_ in filters or ():
            self.add_filter(filter_)

    def add_filter(self, filter_: Filter) -> "FilterRegistry":
        """Register a filter and every tag it defines."""
        with self._lock:
            self._filters[filter_.name] = filter_
            for tag_name in filter_.tag_names:
                previous = self._by_tag.get(tag_name)
                if previous is not None and previous is not filter_:
                    self.logger.warning(
                        "Tag redefined by another filter",
                        extra={
                            "tag": tag_name,
                            "previous_filter": previous.name,
                            "filter": filter_.name,
                        }
                    )
                self._by_tag[tag_name] = filter_
        return self

    def remove_filter(self, name: str) -> bool:
        """Unregister a filter by name. Returns False if it was not registered."""
        with self._lock:
            filter_ = self._filters.pop(name, None)
            if filter_ is None:
                return False
            for tag_name in [t for t, f in self._by_tag.items() if f is filter_]:
                del self._by_tag[tag_name]
            return True

    def has_tag(self, tag_name: str) -> bool:
        return tag_name in self._by_tag

    @property
    def tag_names(self) -> List[str]:
        return sorted(self._by_tag)

    @property
    def filters(self) -> List[Filter]:
        return list(self._filters.values())

    def filter_for(self, tag_name: str) -> Filter:
        """Return the rendering strategy for ``tag_name``.

        Raises:
            UnknownTagError: if no filter defines the tag
        """
        try:
            return self._by_tag[tag_name]
        except KeyError:
            raise UnknownTagError(tag_name) from None

    def tag(self, tag_name: str) -> TagDefinition:
        """Return the tag definition for ``tag_name``."""
        return self.filter_for(tag_name).tag(tag_name)

    def policy_for(self, tag_name: str) -> PermissionPolicy:
        """Return the nesting policy for ``tag_name``.

        Raises:
            UnknownTagError: if no filter defines the tag
        """
        return self.tag(tag_name).policy

    def stripping(self) -> "StrippingRegistry":
        """View of this registry whose filters emit no markup."""
        return StrippingRegistry(self)


class StrippingRegistry:
    """Registry view sharing tags and policies but rendering no markup."""

    def __init__(self, source: FilterRegistry) -> None:
        self._source = source
        self._strip = StripFilter()

    def has_tag(self, tag_name: str) -> bool:
        return self._source.has_tag(tag_name)

    @property
    def tag_names(self) -> List[str]:
        return self._source.tag_names

    def tag(self, tag_name: str) -> TagDefinition:
        return self._source.tag(tag_name)

    def policy_for(self, tag_name: str) -> PermissionPolicy:
        return self._source.policy_for(tag_name)

    def filter_for(self, tag_name: str) -> Filter:
        # Keep the unknown-tag contract of the source registry.
        self._source.filter_for(tag_name)
        return self._strip


def default_registry(correlation_id: Optional[str] = None) -> FilterRegistry:
    """Create a registry holding all built-in filters."""
    return FilterRegistry(
        [DefaultFilter(), UrlFilter(), BlockFilter(), QuoteFilter()],
        correlation_id=correlation_id,
    )
