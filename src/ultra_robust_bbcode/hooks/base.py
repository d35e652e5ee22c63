"""Base class for text-processing hooks run around parsing and stripping."""

from ultra_robust_bbcode.filters import FilterRegistry


class Hook:
    """Extension point invoked by the parser before and after each operation.

    Every method is a no-op by default, so subclasses override only the
    stages they care about. Text hooks must return the (possibly modified)
    content.
    """

    name = "hook"

    def startup(self) -> None:
        """Load any data needed before the first parse."""

    def setup_filters(self, registry: FilterRegistry) -> None:
        """Register filters this hook depends on."""

    def before_parse(self, content: str) -> str:
        return content

    def after_parse(self, content: str) -> str:
        return content

    def before_strip(self, content: str) -> str:
        return content

    def after_strip(self, content: str) -> str:
        return content

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
