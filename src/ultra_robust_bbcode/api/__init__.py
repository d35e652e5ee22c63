"""Public parsing API and integration adapters.

Key Components:
    parse_string / strip_string / parse_file: One-call entry points
    BBCodeParser: Configurable, reusable parser with hooks and statistics
    get_adapter: Access to lxml and BeautifulSoup integration adapters
"""

from .adapters import (
    AdapterMetadata,
    AdapterRegistry,
    AdapterType,
    BeautifulSoupAdapter,
    ConversionResult,
    IntegrationAdapter,
    LxmlAdapter,
    get_adapter,
    list_available_adapters,
    register_adapter,
)
from .parser import BBCodeParser, parse_file, parse_string, strip_string

__all__ = [
    "AdapterMetadata",
    "AdapterRegistry",
    "AdapterType",
    "BBCodeParser",
    "BeautifulSoupAdapter",
    "ConversionResult",
    "IntegrationAdapter",
    "LxmlAdapter",
    "get_adapter",
    "list_available_adapters",
    "parse_file",
    "parse_string",
    "register_adapter",
    "strip_string",
]
