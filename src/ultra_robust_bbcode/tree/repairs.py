"""Records of structural repairs applied while building the node tree."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ultra_robust_bbcode.chunks.chunk import Chunk

ORPHANED_CLOSE = "orphaned_close"
MISMATCHED_CLOSE = "mismatched_close"
UNCLOSED_OPEN = "unclosed_open"
DISALLOWED_NESTING = "disallowed_nesting"
UNKNOWN_TAG = "unknown_tag"
UNTERMINATED_SPAN = "unterminated_span"
DEPTH_LIMIT = "depth_limit"

REPAIR_TYPES = frozenset({
    ORPHANED_CLOSE,
    MISMATCHED_CLOSE,
    UNCLOSED_OPEN,
    DISALLOWED_NESTING,
    UNKNOWN_TAG,
    UNTERMINATED_SPAN,
    DEPTH_LIMIT,
})

_VALID_SEVERITIES = ("minor", "major")


@dataclass
class StructureRepair:
    """Information about one structural repair made to the chunk stream."""

    repair_type: str
    description: str
    chunk: Optional[Chunk] = None
    severity: str = "minor"

    def __post_init__(self) -> None:
        """Validate repair information."""
        if self.repair_type not in REPAIR_TYPES:
            raise ValueError(f"Unknown repair type: {self.repair_type}")
        if not self.description:
            raise ValueError("Repair description cannot be empty")
        if self.severity not in _VALID_SEVERITIES:
            raise ValueError(f"Repair severity must be one of {_VALID_SEVERITIES}")

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "repair_type": self.repair_type,
            "description": self.description,
            "severity": self.severity,
        }
        if self.chunk is not None:
            result["chunk"] = self.chunk.text
        return result
