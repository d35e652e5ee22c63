"""Chunk records and the BBCode lexer.

Key Components:
    Chunk: Immutable lexed unit (plain text, opening tag, closing tag)
    ChunkType: Enumeration of chunk kinds
    BBCodeLexer: Splits raw markup into chunks for registered tags
"""

from .chunk import Chunk, ChunkType
from .lexer import BBCodeLexer, LexResult

__all__ = [
    "BBCodeLexer",
    "Chunk",
    "ChunkType",
    "LexResult",
]
