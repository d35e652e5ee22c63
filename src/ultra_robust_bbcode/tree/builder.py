"""Tree builder producing parse results from chunk streams.

This module wraps the node core with the diagnostics, metrics and never-fail
reporting that the public API returns to callers.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ultra_robust_bbcode.chunks.chunk import Chunk
from ultra_robust_bbcode.filters import FilterRegistry
from ultra_robust_bbcode.shared import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
    TreeConfig,
    get_logger,
)

from .node import Node, build_tree
from .repairs import StructureRepair


@dataclass
class ParseResult:
    """Comprehensive result object for one parse or strip operation.

    Contains the rendered output, the node tree, structural repairs and
    diagnostics following the never-fail philosophy.
    """

    output: str = ""
    tree: Optional[Node] = None
    success: bool = True

    diagnostics: List[DiagnosticEntry] = field(default_factory=list)
    repairs: List[StructureRepair] = field(default_factory=list)
    performance: PerformanceMetrics = field(default_factory=PerformanceMetrics)

    correlation_id: Optional[str] = None

    @property
    def repair_count(self) -> int:
        """Get total number of repairs applied."""
        return len(self.repairs)

    @property
    def has_repairs(self) -> bool:
        """Check if the input needed any structural repair."""
        return bool(self.repairs)

    @property
    def node_count(self) -> int:
        """Number of nodes in the tree, excluding the synthetic root."""
        if self.tree is None:
            return 0
        return sum(1 for _ in self.tree.iter_nodes()) - 1

    @property
    def processing_time_ms(self) -> float:
        return self.performance.processing_time_ms

    def add_diagnostic(
        self,
        severity: DiagnosticSeverity,
        message: str,
        component: str,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Add diagnostic entry to result."""
        self.diagnostics.append(
            DiagnosticEntry(
                severity=severity,
                message=message,
                component=component,
                details=details,
                correlation_id=self.correlation_id,
            )
        )

    def get_diagnostics_by_severity(
        self,
        severity: DiagnosticSeverity
    ) -> List[DiagnosticEntry]:
        """Get diagnostics of specific severity level."""
        return [diag for diag in self.diagnostics if diag.severity == severity]

    def has_errors(self) -> bool:
        """Check if result contains any error diagnostics."""
        return any(
            diag.severity in (DiagnosticSeverity.ERROR, DiagnosticSeverity.CRITICAL)
            for diag in self.diagnostics
        )

    def get_repair_summary(self) -> Dict[str, Any]:
        """Get repair counts grouped by repair type."""
        repair_types: Dict[str, int] = {}
        for repair in self.repairs:
            repair_types[repair.repair_type] = repair_types.get(repair.repair_type, 0) + 1
        return {
            "total_repairs": self.repair_count,
            "repair_types": repair_types,
        }

    def summary(self) -> Dict[str, Any]:
        """Get summary statistics for the parse result."""
        severities: Dict[str, int] = {}
        for diagnostic in self.diagnostics:
            name = diagnostic.severity.name
            severities[name] = severities.get(name, 0) + 1

        return {
            "success": self.success,
            "node_count": self.node_count,
            "output_length": len(self.output),
            "repair_summary": self.get_repair_summary(),
            "diagnostics_by_severity": severities,
            "performance": self.performance.to_dict(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a JSON-serializable dictionary."""
        return {
            "success": self.success,
            "output": self.output,
            "tree": self.tree.to_dict() if self.tree is not None else None,
            "repairs": [repair.to_dict() for repair in self.repairs],
            "diagnostics": [diag.to_dict() for diag in self.diagnostics],
            "performance": self.performance.to_dict(),
            "correlation_id": self.correlation_id,
        }


class TreeBuilder:
    """Builds node trees from chunk streams and reports what was repaired."""

    def __init__(
        self,
        registry: FilterRegistry,
        config: Optional[TreeConfig] = None,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize tree builder.

        Args:
            registry: Tag registry supplying nesting policies and filters
            config: Tree building configuration
            correlation_id: Optional correlation ID for request tracking
        """
        self.registry = registry
        self.config = config or TreeConfig()
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "tree_builder")

    def build(self, chunks: Sequence[Chunk]) -> ParseResult:
        """Build the node tree for ``chunks``.

        Args:
            chunks: Complete lexed chunk stream

        Returns:
            ParseResult holding the tree (not yet rendered) and repair data
        """
        start_time = time.time()
        result = ParseResult(correlation_id=self.correlation_id)
        result.performance.chunks_generated = len(chunks)

        self.logger.info("Starting tree building", extra={"chunk_count": len(chunks)})

        if not chunks:
            result.add_diagnostic(
                DiagnosticSeverity.INFO,
                "No chunks provided - empty tree created",
                "tree_builder",
                details={"input_type": "empty"}
            )

        repairs: Optional[List[StructureRepair]] = (
            [] if self.config.record_repairs else None
        )

        try:
            result.tree = build_tree(
                chunks, self.registry, repairs, max_depth=self.config.max_depth
            )
        except Exception as e:
            processing_time = (time.time() - start_time) * 1000
            self.logger.exception(
                "Tree building failed",
                extra={"processing_time_ms": processing_time}
            )
            result.success = False
            result.performance.processing_time_ms = processing_time
            result.add_diagnostic(
                DiagnosticSeverity.CRITICAL,
                f"Tree building failed: {e}",
                "tree_builder",
                details={"exception_type": type(e).__name__}
            )
            return result

        if repairs:
            result.repairs = repairs
            self._report_repairs(result)

        result.performance.nodes_built = result.node_count
        result.performance.repairs_applied = result.repair_count
        result.performance.processing_time_ms = (time.time() - start_time) * 1000

        self.logger.info(
            "Tree building completed",
            extra={
                "node_count": result.node_count,
                "repair_count": result.repair_count,
                "processing_time_ms": result.performance.processing_time_ms,
            }
        )
        return result

    def _report_repairs(self, result: ParseResult) -> None:
        for repair in result.repairs:
            if repair.severity == "major" or self.config.report_repairs_as_warnings:
                severity = DiagnosticSeverity.WARNING
            else:
                severity = DiagnosticSeverity.INFO
            result.add_diagnostic(
                severity,
                repair.description,
                "structure_repair",
                details={"repair_type": repair.repair_type}
            )
