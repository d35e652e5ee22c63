"""BBCode lexer splitting raw markup into typed chunks.

Only tags known to the registry become tag chunks; anything else that looks
like a tag (unknown names, malformed brackets) is kept as plain text. The
chunks are contiguous and cover the whole input.
"""

import re
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ultra_robust_bbcode.filters import FilterRegistry
from ultra_robust_bbcode.shared import LexerConfig, get_logger

from .chunk import Chunk

_ATTRIBUTE_PATTERN = re.compile(
    r"""([a-zA-Z][\w-]*)\s*=\s*(?:"([^"]*)"|'([^']*)'|(\S+))"""
)
_DEFAULT_ATTRIBUTE_PATTERN = re.compile(
    r"""^=\s*(?:"([^"]*)"|'([^']*)'|(.*?))(?=\s+[a-zA-Z][\w-]*\s*=|\s*$)""",
    re.DOTALL,
)


@dataclass
class LexResult:
    """Chunks produced from one input with lexing statistics."""

    chunks: List[Chunk] = field(default_factory=list)
    character_count: int = 0
    processing_time_ms: float = 0.0
    tags_found: int = 0

    @property
    def chunk_count(self) -> int:
        return len(self.chunks)


class BBCodeLexer:
    """Lexer turning BBCode text into an ordered sequence of chunks."""

    def __init__(
        self,
        registry: FilterRegistry,
        config: Optional[LexerConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize the lexer.

        Args:
            registry: Registry deciding which tag names are recognised
            config: Lexer configuration (brackets, limits)
            correlation_id: Optional correlation ID for request tracking
        """
        self.registry = registry
        self.config = config or LexerConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "bbcode_lexer")

        open_ = re.escape(self.config.open_bracket)
        close = re.escape(self.config.close_bracket)
        self._tag_pattern = re.compile(
            rf"{open_}(/?)([a-zA-Z][a-zA-Z0-9]*)([^{open_}{close}]*){close}"
        )

    def lex(self, text: str) -> LexResult:
        """Split ``text`` into chunks.

        Args:
            text: Raw markup

        Returns:
            LexResult whose chunk texts concatenate back to ``text``
        """
        start_time = time.time()
        chunks: List[Chunk] = []
        tags_found = 0
        position = 0

        for match in self._tag_pattern.finditer(text):
            chunk = self._build_tag(match)
            if chunk is None:
                continue

            if match.start() > position:
                chunks.append(Chunk.plain(text[position:match.start()]))
            chunks.append(chunk)
            tags_found += 1
            position = match.end()

        if position < len(text):
            chunks.append(Chunk.plain(text[position:]))

        result = LexResult(
            chunks=chunks,
            character_count=len(text),
            processing_time_ms=(time.time() - start_time) * 1000,
            tags_found=tags_found,
        )

        self.logger.debug(
            "Lexing completed",
            extra={
                "character_count": result.character_count,
                "chunk_count": result.chunk_count,
                "tags_found": tags_found,
            }
        )
        return result

    def _build_tag(self, match: "re.Match[str]") -> Optional[Chunk]:
        """Turn a bracketed match into a tag chunk, or None if it stays text."""
        source = match.group(0)
        if len(source) > self.config.max_tag_length:
            return None

        is_close, name, rest = match.group(1), match.group(2), match.group(3)
        if self.config.lowercase_tags:
            name = name.lower()
        if not self.registry.has_tag(name):
            return None

        if is_close:
            if rest.strip():
                return None
            return Chunk.close(name, text=source)

        if rest and not (rest.startswith("=") or rest[0].isspace()):
            return None
        return Chunk.open(name, self._parse_attributes(name, rest), text=source)

    def _parse_attributes(self, tag_name: str, source: str) -> Dict[str, str]:
        """Parse and validate the attribute part of an opening tag."""
        found: Dict[str, str] = {}

        remainder = source
        default = _DEFAULT_ATTRIBUTE_PATTERN.match(source)
        if default:
            value = next((g for g in default.groups() if g is not None), "")
            found["default"] = value.strip()
            remainder = source[default.end():]

        for attribute in _ATTRIBUTE_PATTERN.finditer(remainder):
            value = next(g for g in attribute.groups()[1:] if g is not None)
            found[attribute.group(1).lower()] = value

        definition = self.registry.tag(tag_name)
        accepted: Dict[str, str] = {}
        for name, value in found.items():
            pattern = definition.attributes.get(name)
            if pattern is None:
                continue
            if re.fullmatch(pattern, value, re.IGNORECASE | re.DOTALL):
                accepted[name] = value
            else:
                self.logger.debug(
                    "Dropped attribute with invalid value",
                    extra={"tag": tag_name, "attribute": name}
                )
        return accepted
