"""Ultra-Robust BBCode Parser.

A never-fail BBCode renderer that turns arbitrarily malformed markup into a
well-nested tree: mismatched, orphaned and unclosed tags are repaired, tags
are nested only where their parent allows it, and the result renders to HTML
or to plain text.

Progressive API Disclosure:
- Level 1: Simple functions - parse_string(), strip_string(), parse_file()
- Level 2: Configured parser - BBCodeParser class with hooks and filters
- Level 3: Core building blocks - BBCodeLexer, Node, clean_chunks
"""

__version__ = "0.1.0"
__author__ = "Ultra Robust BBCode Parser Team"

# Progressive API disclosure - Level 1: Simple functions
# Progressive API disclosure - Level 2: Advanced configuration
from .api import BBCodeParser, parse_file, parse_string, strip_string

# Core building blocks for custom pipelines
from .chunks import BBCodeLexer, Chunk, ChunkType
from .filters import Filter, FilterRegistry, TagDefinition, default_registry
from .hooks import CensorHook, Hook

# Configuration classes for advanced usage
from .shared.config import ParserConfig

# Core result objects for all API levels
from .tree import Node, ParseResult, StructureRepair, clean_chunks

__all__ = [
    # Version and metadata
    "__author__",
    "__version__",

    # Level 1: Simple parsing functions (progressive disclosure entry point)
    "parse_string",
    "strip_string",
    "parse_file",

    # Level 2: Advanced parser class and extension points
    "BBCodeParser",
    "CensorHook",
    "Filter",
    "FilterRegistry",
    "Hook",
    "TagDefinition",
    "default_registry",

    # Level 3: Core building blocks
    "BBCodeLexer",
    "Chunk",
    "ChunkType",
    "Node",
    "clean_chunks",

    # Result objects and data structures
    "ParseResult",
    "StructureRepair",

    # Configuration classes for advanced usage
    "ParserConfig",
]
