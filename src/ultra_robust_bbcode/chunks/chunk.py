"""Typed chunk records produced by the lexer.

A chunk is one lexical unit of the markup stream: a run of plain text, an
opening tag with its attributes, or a closing tag. Chunks are immutable and
keep the exact source text they were cut from, so concatenating the ``text``
of every chunk reproduces the original input.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Optional


class ChunkType(Enum):
    """Kinds of chunks in a lexed markup stream."""

    TEXT = auto()       # Plain text between tags
    TAG_OPEN = auto()   # Opening tag: [b], [url=...]
    TAG_CLOSE = auto()  # Closing tag: [/b]


@dataclass(frozen=True)
class Chunk:
    """A single lexed unit of markup."""

    type: ChunkType
    text: str
    tag: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Validate chunk consistency."""
        if self.type is ChunkType.TEXT:
            if self.tag is not None:
                raise ValueError("Text chunks cannot carry a tag name")
            if self.attributes:
                raise ValueError("Text chunks cannot carry attributes")
        else:
            if not self.tag:
                raise ValueError("Tag chunks require a tag name")
            if self.type is ChunkType.TAG_CLOSE and self.attributes:
                raise ValueError("Closing tag chunks cannot carry attributes")

    @classmethod
    def plain(cls, text: str) -> "Chunk":
        """Create a plain text chunk."""
        return cls(ChunkType.TEXT, text)

    @classmethod
    def open(
        cls,
        tag: str,
        attributes: Optional[Dict[str, str]] = None,
        text: Optional[str] = None
    ) -> "Chunk":
        """Create an opening tag chunk, reconstructing ``[tag]`` when no text is given."""
        name = tag.lower()
        return cls(
            ChunkType.TAG_OPEN,
            text if text is not None else f"[{name}]",
            name,
            dict(attributes or {}),
        )

    @classmethod
    def close(cls, tag: str, text: Optional[str] = None) -> "Chunk":
        """Create a closing tag chunk, reconstructing ``[/tag]`` when no text is given."""
        name = tag.lower()
        return cls(ChunkType.TAG_CLOSE, text if text is not None else f"[/{name}]", name)

    @property
    def is_text(self) -> bool:
        return self.type is ChunkType.TEXT

    @property
    def is_open(self) -> bool:
        return self.type is ChunkType.TAG_OPEN

    @property
    def is_close(self) -> bool:
        return self.type is ChunkType.TAG_CLOSE

    def merged_with(self, other: "Chunk") -> "Chunk":
        """Return a text chunk holding this chunk's text followed by ``other``'s."""
        if not (self.is_text and other.is_text):
            raise ValueError("Only text chunks can be merged")
        return Chunk.plain(self.text + other.text)
