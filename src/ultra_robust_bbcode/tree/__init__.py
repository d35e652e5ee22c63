"""Node tree construction, nesting repair and rendering.

Key Components:
    Node: Tree element built from a chunk span, rendered through tag filters
    clean_chunks: Per-level nesting repair of a chunk span
    TreeBuilder: Builds trees and reports structural repairs
    ParseResult: Output, tree, repairs and diagnostics of one parse
"""

from .builder import ParseResult, TreeBuilder
from .cleaner import clean_chunks
from .node import Node, build_tree, render
from .repairs import StructureRepair

__all__ = [
    "Node",
    "ParseResult",
    "StructureRepair",
    "TreeBuilder",
    "build_tree",
    "clean_chunks",
    "render",
]
