"""Integration adapters handing rendered BBCode to popular HTML libraries.

This module provides conversion utilities and an adapter framework for
integrating parse results with lxml and BeautifulSoup while maintaining the
never-fail philosophy. Target libraries are imported lazily, so an adapter
whose library is missing simply reports itself as unavailable.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Type

from ultra_robust_bbcode.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    get_logger,
)
from ultra_robust_bbcode.tree import ParseResult

# Number of timings kept per adapter
MAX_RECORDED_CONVERSIONS = 1000


class AdapterType(Enum):
    """Types of integration adapters."""

    HTML_LIBRARY = auto()    # HTML processing libraries (lxml, BeautifulSoup)
    PLUGIN = auto()          # Custom plugin adapters


@dataclass
class AdapterMetadata:
    """Metadata about an integration adapter."""

    name: str
    version: str
    adapter_type: AdapterType
    target_library: str
    description: str
    author: str = "ultra-robust-bbcode"


@dataclass
class ConversionResult:
    """Result of a conversion operation."""

    success: bool
    converted_data: Any
    original_data: Any
    conversion_time_ms: float
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    diagnostics: List[DiagnosticEntry] = field(default_factory=list)


class AdapterPerformanceProfiler:
    """Keeps recent conversion timings per adapter."""

    def __init__(self) -> None:
        self._metrics: Dict[str, List[float]] = {}
        self._lock = threading.RLock()

    def record_conversion(self, adapter_name: str, conversion_time_ms: float) -> None:
        with self._lock:
            times = self._metrics.setdefault(adapter_name, [])
            times.append(conversion_time_ms)
            if len(times) > MAX_RECORDED_CONVERSIONS:
                del times[:-MAX_RECORDED_CONVERSIONS]

    def get_statistics(self, adapter_name: str) -> Dict[str, float]:
        """Get performance statistics for an adapter."""
        with self._lock:
            times = self._metrics.get(adapter_name)
            if not times:
                return {}
            return {
                "count": len(times),
                "average_ms": sum(times) / len(times),
                "min_ms": min(times),
                "max_ms": max(times),
                "total_ms": sum(times),
            }


class IntegrationAdapter(ABC):
    """Abstract base class for all integration adapters.

    ``to_target`` turns the rendered output of a ParseResult into the target
    library's document object; ``from_target`` extracts the text of such an
    object and parses it as BBCode.
    """

    def __init__(self, correlation_id: Optional[str] = None) -> None:
        """Initialize the integration adapter.

        Args:
            correlation_id: Optional correlation ID for request tracking
        """
        self.correlation_id = correlation_id
        self._logger = get_logger(__name__, correlation_id, self.__class__.__name__)
        self._profiler = AdapterPerformanceProfiler()

    @property
    @abstractmethod
    def metadata(self) -> AdapterMetadata:
        """Get adapter metadata."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the target library is importable."""

    @abstractmethod
    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert the rendered output of ``parse_result`` to the target format."""

    @abstractmethod
    def from_target(self, target_data: Any) -> ConversionResult:
        """Parse the text content of ``target_data`` as BBCode."""

    def get_performance_stats(self) -> Dict[str, float]:
        """Get performance statistics for this adapter."""
        return self._profiler.get_statistics(self.metadata.name)

    def _record_performance(self, operation_time_ms: float) -> None:
        self._profiler.record_conversion(self.metadata.name, operation_time_ms)

    def _check_parse_result(
        self, parse_result: ParseResult, start_time: float
    ) -> Optional[ConversionResult]:
        if not parse_result.success or parse_result.tree is None:
            return self._create_error_result(
                "ParseResult is not successful or has no tree",
                parse_result,
                (time.time() - start_time) * 1000
            )
        return None

    def _parse_text(self, text: str) -> ParseResult:
        from ultra_robust_bbcode.api.parser import BBCodeParser

        return BBCodeParser(correlation_id=self.correlation_id).parse(text)

    def _create_error_result(
        self,
        error_message: str,
        original_data: Any,
        conversion_time_ms: float = 0.0
    ) -> ConversionResult:
        """Create a ConversionResult for error conditions."""
        self._logger.warning(error_message)
        return ConversionResult(
            success=False,
            converted_data=None,
            original_data=original_data,
            conversion_time_ms=conversion_time_ms,
            errors=[error_message],
            diagnostics=[
                DiagnosticEntry(
                    severity=DiagnosticSeverity.ERROR,
                    message=error_message,
                    component=self.__class__.__name__,
                    correlation_id=self.correlation_id
                )
            ]
        )


class AdapterRegistry:
    """Registry for managing integration adapters."""

    def __init__(self) -> None:
        self._adapters: Dict[str, Type[IntegrationAdapter]] = {}
        self._instances: Dict[str, IntegrationAdapter] = {}
        self._lock = threading.RLock()
        self._logger = get_logger(__name__, None, "adapter_registry")

    def register(self, adapter_class: Type[IntegrationAdapter]) -> None:
        """Register an adapter class under its metadata name."""
        with self._lock:
            metadata = adapter_class().metadata
            self._adapters[metadata.name] = adapter_class

    def get_adapter(
        self,
        adapter_name: str,
        correlation_id: Optional[str] = None
    ) -> Optional[IntegrationAdapter]:
        """Get an adapter instance by name.

        Args:
            adapter_name: Name of the adapter
            correlation_id: Optional correlation ID

        Returns:
            Adapter instance if found and available, None otherwise

        Only the instance without a correlation ID is cached; request-scoped
        instances are created per call so the registry does not grow with
        the number of requests.
        """
        with self._lock:
            adapter_class = self._adapters.get(adapter_name)
            if adapter_class is None:
                return None

            if correlation_id is None and adapter_name in self._instances:
                return self._instances[adapter_name]

            instance = adapter_class(correlation_id)
            if not instance.is_available():
                self._logger.info(
                    "Adapter library not available",
                    extra={"adapter": adapter_name}
                )
                return None
            if correlation_id is None:
                self._instances[adapter_name] = instance
            return instance

    def list_available_adapters(self) -> List[AdapterMetadata]:
        """List metadata for every registered adapter whose library is installed."""
        with self._lock:
            instances = [adapter_class() for adapter_class in self._adapters.values()]
        return [instance.metadata for instance in instances if instance.is_available()]


# Global adapter registry instance
_adapter_registry = AdapterRegistry()


def register_adapter(adapter_class: Type[IntegrationAdapter]) -> None:
    """Register an integration adapter globally."""
    _adapter_registry.register(adapter_class)


def get_adapter(
    adapter_name: str,
    correlation_id: Optional[str] = None
) -> Optional[IntegrationAdapter]:
    """Get a registered adapter instance.

    Args:
        adapter_name: Name of the adapter ("lxml" or "beautifulsoup" built in)
        correlation_id: Optional correlation ID

    Returns:
        Adapter instance if available, None otherwise
    """
    return _adapter_registry.get_adapter(adapter_name, correlation_id)


def list_available_adapters() -> List[AdapterMetadata]:
    """List all available integration adapters."""
    return _adapter_registry.list_available_adapters()


class LxmlAdapter(IntegrationAdapter):
    """Adapter producing an ``lxml.html`` element from rendered output.

    The fragment is wrapped in a ``<div>`` so output with leading text or
    several top-level elements converts to a single element.
    """

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="lxml",
            version="1.0.0",
            adapter_type=AdapterType.HTML_LIBRARY,
            target_library="lxml",
            description="Rendered BBCode as an lxml.html fragment element"
        )

    def is_available(self) -> bool:
        try:
            import lxml.html  # noqa: F401
            return True
        except ImportError:
            return False

    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert rendered output to an ``lxml.html.HtmlElement``.

        Args:
            parse_result: Successful parse result

        Returns:
            ConversionResult containing the wrapping ``div`` element
        """
        start_time = time.time()

        error = self._check_parse_result(parse_result, start_time)
        if error is not None:
            return error

        import lxml.etree
        import lxml.html

        try:
            element = lxml.html.fragment_fromstring(
                parse_result.output, create_parent="div"
            )
        except (ValueError, lxml.etree.ParserError) as e:
            return self._create_error_result(
                f"Failed to convert to lxml: {e}",
                parse_result,
                (time.time() - start_time) * 1000
            )

        processing_time = (time.time() - start_time) * 1000
        self._record_performance(processing_time)

        return ConversionResult(
            success=True,
            converted_data=element,
            original_data=parse_result,
            conversion_time_ms=processing_time,
            metadata={
                "lxml_version": lxml.etree.LXML_VERSION,
                "element_count": len(element.xpath(".//*")),
            }
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        """Parse the text content of an lxml element as BBCode.

        Args:
            target_data: ``lxml.html.HtmlElement``

        Returns:
            ConversionResult containing a ParseResult
        """
        start_time = time.time()

        if not hasattr(target_data, "text_content"):
            return self._create_error_result(
                "Target data is not a valid lxml.html element",
                target_data,
                (time.time() - start_time) * 1000
            )

        text = target_data.text_content()
        parse_result = self._parse_text(text)

        processing_time = (time.time() - start_time) * 1000
        self._record_performance(processing_time)

        return ConversionResult(
            success=parse_result.success,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=processing_time,
            metadata={
                "original_tag": target_data.tag,
                "text_length": len(text),
            }
        )


class BeautifulSoupAdapter(IntegrationAdapter):
    """Adapter producing a ``BeautifulSoup`` document from rendered output."""

    parser_name = "html.parser"

    @property
    def metadata(self) -> AdapterMetadata:
        return AdapterMetadata(
            name="beautifulsoup",
            version="1.0.0",
            adapter_type=AdapterType.HTML_LIBRARY,
            target_library="beautifulsoup4",
            description="Rendered BBCode as a BeautifulSoup document"
        )

    def is_available(self) -> bool:
        try:
            from bs4 import BeautifulSoup  # noqa: F401
            return True
        except ImportError:
            return False

    def to_target(self, parse_result: ParseResult) -> ConversionResult:
        """Convert rendered output to a ``BeautifulSoup`` object.

        Args:
            parse_result: Successful parse result

        Returns:
            ConversionResult containing the soup
        """
        start_time = time.time()

        error = self._check_parse_result(parse_result, start_time)
        if error is not None:
            return error

        from bs4 import BeautifulSoup

        soup = BeautifulSoup(parse_result.output, self.parser_name)

        processing_time = (time.time() - start_time) * 1000
        self._record_performance(processing_time)

        return ConversionResult(
            success=True,
            converted_data=soup,
            original_data=parse_result,
            conversion_time_ms=processing_time,
            metadata={
                "parser_name": self.parser_name,
                "tag_count": len(soup.find_all(True)),
            }
        )

    def from_target(self, target_data: Any) -> ConversionResult:
        """Parse the text of a BeautifulSoup object as BBCode.

        Args:
            target_data: ``BeautifulSoup`` document or ``Tag``

        Returns:
            ConversionResult containing a ParseResult
        """
        start_time = time.time()

        if not hasattr(target_data, "get_text"):
            return self._create_error_result(
                "Target data is not a valid BeautifulSoup object",
                target_data,
                (time.time() - start_time) * 1000
            )

        text = target_data.get_text()
        parse_result = self._parse_text(text)

        processing_time = (time.time() - start_time) * 1000
        self._record_performance(processing_time)

        return ConversionResult(
            success=parse_result.success,
            converted_data=parse_result,
            original_data=target_data,
            conversion_time_ms=processing_time,
            metadata={"text_length": len(text)}
        )


register_adapter(LxmlAdapter)
register_adapter(BeautifulSoupAdapter)
