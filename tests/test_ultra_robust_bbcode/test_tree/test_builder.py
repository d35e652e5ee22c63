"""Tests for the tree builder and parse results."""

from unittest.mock import patch

import pytest

from ultra_robust_bbcode.chunks import BBCodeLexer, Chunk
from ultra_robust_bbcode.filters import default_registry
from ultra_robust_bbcode.shared import DiagnosticSeverity, TreeConfig
from ultra_robust_bbcode.tree import ParseResult, StructureRepair, TreeBuilder


@pytest.fixture
def builder() -> TreeBuilder:
    return TreeBuilder(default_registry(), correlation_id="test-123")


def _chunks(markup: str):
    return BBCodeLexer(default_registry()).lex(markup).chunks


class TestStructureRepair:
    """Test repair record validation."""

    def test_valid_repair(self) -> None:
        """Test creating and serialising a repair."""
        repair = StructureRepair("unclosed_open", "Dropped [b]", Chunk.open("b"))

        assert repair.severity == "minor"
        assert repair.to_dict() == {
            "repair_type": "unclosed_open",
            "description": "Dropped [b]",
            "severity": "minor",
            "chunk": "[b]",
        }

    def test_unknown_type_raises_error(self) -> None:
        """Test repair types are validated."""
        with pytest.raises(ValueError, match="Unknown repair type"):
            StructureRepair("guesswork", "x")

    def test_empty_description_raises_error(self) -> None:
        """Test descriptions are required."""
        with pytest.raises(ValueError, match="description cannot be empty"):
            StructureRepair("unclosed_open", "")

    def test_invalid_severity_raises_error(self) -> None:
        """Test severities are validated."""
        with pytest.raises(ValueError, match="severity must be one of"):
            StructureRepair("unclosed_open", "x", severity="fatal")


class TestTreeBuilder:
    """Test building parse results from chunk streams."""

    def test_build_well_formed(self, builder: TreeBuilder) -> None:
        """Test well-formed markup needs no repairs."""
        result = builder.build(_chunks("[b]x[/b] y"))

        assert result.success
        assert result.tree is not None
        assert result.node_count == 3
        assert not result.has_repairs
        assert result.diagnostics == []
        assert result.correlation_id == "test-123"
        assert result.performance.chunks_generated == 4
        assert result.performance.nodes_built == 3

    def test_build_does_not_render(self, builder: TreeBuilder) -> None:
        """Test rendering is left to the caller."""
        result = builder.build(_chunks("[b]x[/b]"))

        assert result.output == ""
        assert not result.tree.is_rendered

    def test_empty_input_diagnostic(self, builder: TreeBuilder) -> None:
        """Test an empty chunk stream is reported as INFO."""
        result = builder.build([])

        assert result.success
        assert result.node_count == 0
        infos = result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)
        assert len(infos) == 1
        assert "empty tree" in infos[0].message

    def test_repairs_become_warnings(self, builder: TreeBuilder) -> None:
        """Test every repair is reported as a WARNING diagnostic by default."""
        result = builder.build(_chunks("[b][i]x[/b]"))

        assert result.repair_count == 1
        assert result.get_repair_summary() == {
            "total_repairs": 1,
            "repair_types": {"mismatched_close": 1},
        }
        warnings = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)
        assert len(warnings) == 1
        assert warnings[0].details == {"repair_type": "mismatched_close"}
        assert warnings[0].correlation_id == "test-123"
        assert not result.has_errors()

    def test_minor_repairs_as_info(self) -> None:
        """Test minor repairs can be downgraded to INFO."""
        builder = TreeBuilder(
            default_registry(), TreeConfig(report_repairs_as_warnings=False)
        )

        result = builder.build(_chunks("x[/b]"))

        assert result.repair_count == 1
        assert len(result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)) == 1
        assert result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING) == []

    def test_repairs_not_recorded_when_disabled(self) -> None:
        """Test repairs are still applied but not recorded."""
        builder = TreeBuilder(default_registry(), TreeConfig(record_repairs=False))

        result = builder.build(_chunks("[b]x"))

        assert result.repairs == []
        assert result.tree.render() == "x"

    def test_max_depth_from_config(self) -> None:
        """Test the configured depth limit is applied and reported."""
        builder = TreeBuilder(default_registry(), TreeConfig(max_depth=1))

        result = builder.build(_chunks("[b][i]x[/i][/b]"))

        assert result.success
        assert result.tree.render() == "<b>[i]x[/i]</b>"
        assert [r.repair_type for r in result.repairs] == ["depth_limit"]
        assert len(result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)) == 1

    def test_failure_becomes_critical_diagnostic(self, builder: TreeBuilder) -> None:
        """Test an exception while building yields an unsuccessful result."""
        with patch(
            "ultra_robust_bbcode.tree.builder.build_tree",
            side_effect=RuntimeError("boom"),
        ):
            result = builder.build(_chunks("[b]x[/b]"))

        assert not result.success
        assert result.tree is None
        assert result.has_errors()
        critical = result.get_diagnostics_by_severity(DiagnosticSeverity.CRITICAL)
        assert "boom" in critical[0].message
        assert critical[0].details == {"exception_type": "RuntimeError"}


class TestParseResult:
    """Test parse result helpers."""

    def test_defaults(self) -> None:
        """Test an empty result."""
        result = ParseResult()

        assert result.success
        assert result.output == ""
        assert result.node_count == 0
        assert result.repair_count == 0
        assert result.processing_time_ms == 0.0

    def test_summary_and_to_dict(self, builder: TreeBuilder) -> None:
        """Test serialisable summaries."""
        result = builder.build(_chunks("[b]x"))
        result.output = result.tree.render()

        summary = result.summary()
        assert summary["success"] is True
        assert summary["output_length"] == 1
        assert summary["repair_summary"]["total_repairs"] == 1
        assert summary["diagnostics_by_severity"] == {"WARNING": 1}

        data = result.to_dict()
        assert data["output"] == "x"
        assert data["tree"] == {"root": True, "children": [{"text": "x"}]}
        assert data["repairs"][0]["repair_type"] == "unclosed_open"
        assert data["diagnostics"][0]["severity"] == "WARNING"
        assert data["correlation_id"] == "test-123"
