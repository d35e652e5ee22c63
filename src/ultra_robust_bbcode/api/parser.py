"""Core parser API with progressive disclosure for ultra-robust BBCode parsing.

This module provides the main parsing API, from simple module-level functions
to a configurable, reusable parser class, following the never-fail philosophy:
every call returns a :class:`ParseResult`, failures are reported through its
diagnostics.
"""

import html
import time
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ultra_robust_bbcode.chunks import BBCodeLexer
from ultra_robust_bbcode.filters import Filter, FilterRegistry, default_registry
from ultra_robust_bbcode.hooks import Hook
from ultra_robust_bbcode.shared import (
    DiagnosticSeverity,
    ParserConfig,
    get_logger,
)
from ultra_robust_bbcode.tree import ParseResult, TreeBuilder

# Constants for API operations
PREVIEW_LENGTH = 100  # Max length for content preview in logs
MS_PER_SECOND = 1000  # Milliseconds per second conversion


def parse_string(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Render BBCode ``text`` to HTML.

    Args:
        text: BBCode markup
        config: Optional parser configuration (defaults apply otherwise)
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult whose ``output`` holds the rendered HTML

    Examples:
        Simple rendering:
        >>> parse_string("[b]bold[/b]").output
        '<b>bold</b>'

        Malformed markup is repaired rather than rejected:
        >>> result = parse_string("[b]bold")
        >>> result.output, result.has_repairs
        ('bold', True)
    """
    return BBCodeParser(config=config, correlation_id=correlation_id).parse(text)


def strip_string(
    text: str,
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Remove recognised BBCode markup from ``text``, keeping the content.

    Examples:
        >>> strip_string("[quote=Ann]hi [i]there[/i][/quote]").output
        'hi there'
    """
    return BBCodeParser(config=config, correlation_id=correlation_id).strip(text)


def parse_file(
    file_path: Union[str, Path],
    encoding: str = "utf-8",
    config: Optional[ParserConfig] = None,
    correlation_id: Optional[str] = None
) -> ParseResult:
    """Render the BBCode stored in a file.

    Args:
        file_path: Path to the file (string or Path object)
        encoding: Text encoding; undecodable bytes are replaced
        config: Optional parser configuration
        correlation_id: Optional correlation ID for request tracking

    Returns:
        ParseResult; a missing or unreadable file yields ``success=False``

    Examples:
        >>> result = parse_file("missing.bbcode")
        >>> result.success
        False
        >>> "not found" in result.diagnostics[0].message.lower()
        True
    """
    start_time = time.time()
    logger = get_logger(__name__, correlation_id, "parse_file")

    path_obj = Path(file_path) if isinstance(file_path, str) else file_path

    logger.info(
        "Starting file parse operation",
        extra={
            "file_path": str(path_obj),
            "file_exists": path_obj.exists(),
            "encoding": encoding
        }
    )

    error_message = None
    if not path_obj.exists():
        error_message = f"File not found: {path_obj}"
    elif not path_obj.is_file():
        error_message = f"Path is not a file: {path_obj}"

    if error_message:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(error_message, correlation_id, processing_time)

    try:
        with path_obj.open(encoding=encoding, errors="replace") as file:
            content = file.read()
    except PermissionError:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        return _create_error_result(
            f"Permission denied accessing file: {path_obj}",
            correlation_id,
            processing_time
        )
    except (OSError, LookupError) as e:
        processing_time = (time.time() - start_time) * MS_PER_SECOND
        logger.exception("File read failed", extra={"file_path": str(path_obj)})
        return _create_error_result(
            f"File read failed: {e}",
            correlation_id,
            processing_time
        )

    result = BBCodeParser(config=config, correlation_id=correlation_id).parse(content)
    result.add_diagnostic(
        DiagnosticSeverity.INFO,
        f"File parsed with encoding: {encoding}",
        "file_parser",
        details={"file_path": str(path_obj), "encoding": encoding}
    )
    return result


def _create_error_result(
    error_message: str,
    correlation_id: Optional[str],
    processing_time: float
) -> ParseResult:
    """Create error result following never-fail philosophy.

    Args:
        error_message: Error description
        correlation_id: Optional correlation ID
        processing_time: Processing time in milliseconds

    Returns:
        ParseResult with error information
    """
    result = ParseResult(correlation_id=correlation_id)
    result.success = False
    result.performance.processing_time_ms = processing_time

    result.add_diagnostic(
        DiagnosticSeverity.CRITICAL,
        error_message,
        "api_parser"
    )

    return result


class BBCodeParser:
    """Configurable BBCode parser with hooks, custom filters and reuse.

    The pipeline for each call is: hooks (before) -> optional HTML escaping
    -> lexing -> tree building -> rendering -> hooks (after).

    Attributes:
        config: Current parser configuration
        registry: Tag registry used for lexing, nesting rules and rendering
        correlation_id: Correlation ID for request tracking

    Examples:
        Basic usage with default configuration:
        >>> parser = BBCodeParser()
        >>> parser.parse("[url=http://example.com]site[/url]").output
        '<a href="http://example.com">site</a>'

        Hooks run around every call:
        >>> from ultra_robust_bbcode.hooks import CensorHook
        >>> parser = BBCodeParser(hooks=[CensorHook(["heck"])])
        >>> parser.parse("[b]heck[/b]").output
        '<b>****</b>'
    """

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        registry: Optional[FilterRegistry] = None,
        hooks: Optional[Iterable[Hook]] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the parser.

        Args:
            config: Parser configuration (defaults to ``ParserConfig()``)
            registry: Tag registry (defaults to the built-in filter set)
            hooks: Hooks to install, in invocation order
            correlation_id: Optional correlation ID for request tracking
        """
        self.config = config or ParserConfig()
        self.correlation_id = (
            correlation_id if self.config.global_.enable_correlation_tracking else None
        )
        self.registry = registry or default_registry(self.correlation_id)
        self.logger = get_logger(__name__, self.correlation_id, "bbcode_parser")

        self._hooks: List[Hook] = []
        for hook in hooks or []:
            self.add_hook(hook)

        # Parser state for multi-parse scenarios
        self._parse_count = 0
        self._total_processing_time = 0.0
        self._successful_parses = 0

        self.logger.info(
            "BBCodeParser initialized",
            extra={
                "config_name": self.config.name,
                "tag_count": len(self.registry.tag_names),
                "hook_count": len(self._hooks)
            }
        )

    @property
    def hooks(self) -> List[Hook]:
        return list(self._hooks)

    def add_hook(self, hook: Hook) -> "BBCodeParser":
        """Install ``hook``, letting it register filters and start up."""
        hook.setup_filters(self.registry)
        hook.startup()
        self._hooks.append(hook)
        self.logger.debug("Hook added", extra={"hook": hook.name})
        return self

    def add_filter(self, filter_: Filter) -> "BBCodeParser":
        """Register an additional filter on this parser's registry."""
        self.registry.add_filter(filter_)
        return self

    def parse(self, text: str) -> ParseResult:
        """Render ``text`` to HTML.

        Args:
            text: BBCode markup

        Returns:
            ParseResult with the rendered output, tree and repairs
        """
        return self._process(text, strip=False)

    def strip(self, text: str) -> ParseResult:
        """Render ``text`` with all recognised tags removed.

        Nesting rules and repairs are identical to :meth:`parse`; only the
        tag markup is dropped.
        """
        return self._process(text, strip=True)

    def _process(self, text: str, strip: bool) -> ParseResult:
        start_time = time.time()
        operation = "strip" if strip else "parse"

        self.logger.info(
            f"Starting {operation} operation",
            extra={
                "content_length": len(text),
                "preview": (
                    text[:PREVIEW_LENGTH] + "..."
                    if len(text) > PREVIEW_LENGTH else text
                ),
                "parse_count": self._parse_count + 1
            }
        )

        try:
            limit = self.config.global_.max_input_size_bytes
            if limit is not None and len(text.encode("utf-8")) > limit:
                processing_time = (time.time() - start_time) * MS_PER_SECOND
                self._record(processing_time, success=False)
                return _create_error_result(
                    f"Input exceeds maximum size of {limit} bytes",
                    self.correlation_id,
                    processing_time
                )

            for hook in self._hooks:
                text = hook.before_strip(text) if strip else hook.before_parse(text)

            if self.config.render.escape_html:
                text = html.escape(text, quote=False)

            lexer = BBCodeLexer(self.registry, self.config.lexer, self.correlation_id)
            lex_result = lexer.lex(text)

            registry = self.registry.stripping() if strip else self.registry
            builder = TreeBuilder(registry, self.config.tree, self.correlation_id)
            result = builder.build(lex_result.chunks)

            if result.success and result.tree is not None:
                output = result.tree.render()
                for hook in self._hooks:
                    output = hook.after_strip(output) if strip else hook.after_parse(output)
                if self.config.render.trim_output:
                    output = output.strip()
                result.output = output

            processing_time = (time.time() - start_time) * MS_PER_SECOND
            result.performance.processing_time_ms = processing_time
            result.performance.characters_processed = lex_result.character_count
            self._record(processing_time, result.success)

            self.logger.info(
                f"{operation.capitalize()} completed",
                extra={
                    "success": result.success,
                    "node_count": result.node_count,
                    "repair_count": result.repair_count,
                    "processing_time_ms": processing_time,
                    "total_parses": self._parse_count
                }
            )
            return result

        except Exception as e:
            # Never-fail guarantee
            processing_time = (time.time() - start_time) * MS_PER_SECOND
            self._record(processing_time, success=False)

            self.logger.exception(
                f"{operation.capitalize()} failed",
                extra={"processing_time_ms": processing_time}
            )
            return _create_error_result(
                f"{operation.capitalize()} failed: {e}",
                self.correlation_id,
                processing_time
            )

    def _record(self, processing_time: float, success: bool) -> None:
        self._parse_count += 1
        self._total_processing_time += processing_time
        if success:
            self._successful_parses += 1

    @property
    def statistics(self) -> Dict[str, Any]:
        """Get parser usage statistics.

        Returns:
            Dictionary with parse counts, success rate and timings
        """
        return {
            "total_parses": self._parse_count,
            "successful_parses": self._successful_parses,
            "success_rate": (
                self._successful_parses / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "total_processing_time_ms": self._total_processing_time,
            "average_processing_time_ms": (
                self._total_processing_time / self._parse_count
                if self._parse_count > 0 else 0.0
            ),
            "correlation_id": self.correlation_id,
        }

    def reset_statistics(self) -> None:
        """Reset parser usage statistics."""
        self._parse_count = 0
        self._total_processing_time = 0.0
        self._successful_parses = 0

        self.logger.info("Parser statistics reset")
