"""Tests for node tree construction and rendering."""

from typing import List, Mapping

import pytest

from ultra_robust_bbcode.chunks import BBCodeLexer, Chunk
from ultra_robust_bbcode.filters import (
    Filter,
    FilterRegistry,
    NestingAllowance,
    TagCategory,
    TagDefinition,
    UnknownTagError,
    default_registry,
)
from ultra_robust_bbcode.tree import Node, StructureRepair, build_tree, render
from ultra_robust_bbcode.shared.config import DEFAULT_MAX_DEPTH
from ultra_robust_bbcode.tree.repairs import DEPTH_LIMIT, UNTERMINATED_SPAN

T = Chunk.plain
O = Chunk.open
C = Chunk.close


class CountingFilter(Filter):
    """Filter wrapping b and i in HTML while counting every call."""

    name = "counting"
    tags = {
        "b": TagDefinition("b", "b", TagCategory.INLINE, NestingAllowance.INLINE_ONLY),
        "i": TagDefinition("i", "i", TagCategory.INLINE, NestingAllowance.INLINE_ONLY),
        "box": TagDefinition("box", "div", TagCategory.BLOCK, NestingAllowance.ALL),
    }

    def __init__(self) -> None:
        super().__init__()
        self.open_calls = 0
        self.close_calls = 0

    def open_tag(self, tag_name: str, attributes: Mapping[str, str]) -> str:
        self.open_calls += 1
        return super().open_tag(tag_name, attributes)

    def close_tag(self, tag_name: str) -> str:
        self.close_calls += 1
        return super().close_tag(tag_name)


@pytest.fixture
def counting() -> CountingFilter:
    return CountingFilter()


@pytest.fixture
def registry(counting: CountingFilter) -> FilterRegistry:
    return FilterRegistry([counting])


def _build(markup: str, registry: FilterRegistry, repairs: List[StructureRepair] = None) -> Node:
    chunks = BBCodeLexer(registry).lex(markup).chunks
    return build_tree(chunks, registry, repairs)


class TestTreeShape:
    """Test the structure of built trees."""

    def test_plain_text_round_trip(self, registry: FilterRegistry) -> None:
        """Test input without tags renders to the concatenated chunk text."""
        chunks = [T("hello "), T("<world>"), T(" & more")]

        root = build_tree(chunks, registry)

        assert render(root) == "hello <world> & more"
        assert len(root.children) == 1

    def test_balanced_nesting_preserved(self, registry: FilterRegistry) -> None:
        """Test [b]x[i]y[/i]z[/b] builds b with text, i and text children."""
        root = _build("[b]x[i]y[/i]z[/b]", registry)

        assert len(root.children) == 1
        bold = root.children[0]
        assert bold.tag_name == "b"
        assert [child.tag_name for child in bold.children] == [None, "i", None]
        assert bold.children[0].raw_text == "x"
        assert bold.children[2].raw_text == "z"

        italic = bold.children[1]
        assert len(italic.children) == 1
        assert italic.children[0].raw_text == "y"

        assert render(root) == "<b>x<i>y</i>z</b>"

    def test_unclosed_tag_renders_as_plain_text(self, registry: FilterRegistry) -> None:
        """Test [b]x renders exactly like x."""
        assert render(_build("[b]x", registry)) == render(_build("x", registry)) == "x"

    def test_mismatched_close_discards_inner_tag(self, registry: FilterRegistry) -> None:
        """Test [b][i]x[/b] keeps b markup, drops i markup and keeps x."""
        output = render(_build("[b][i]x[/b]", registry))

        assert output == "<b>x</b>"
        assert "<i>" not in output and "</i>" not in output

    def test_disallowed_nesting_keeps_content(self, registry: FilterRegistry) -> None:
        """Test an inline-only tag drops a block child but keeps its text."""
        repairs: List[StructureRepair] = []

        output = render(_build("[b]a[box]inner[/box]c[/b]", registry, repairs))

        assert output == "<b>ainnerc</b>"
        assert [r.repair_type for r in repairs] == ["disallowed_nesting"]

    def test_adjacent_text_single_leaf(self, registry: FilterRegistry) -> None:
        """Test two consecutive text chunks yield exactly one leaf."""
        root = build_tree([T("foo"), T("bar")], registry)

        assert len(root.children) == 1
        assert root.children[0].is_leaf
        assert root.children[0].raw_text == "foobar"

    def test_same_name_nesting(self, registry: FilterRegistry) -> None:
        """Test [b]a[b]b[/b]c[/b] nests b inside b."""
        root = _build("[b]a[b]b[/b]c[/b]", registry)

        outer = root.children[0]
        assert [child.tag_name for child in outer.children] == [None, "b", None]
        assert render(root) == "<b>a<b>b</b>c</b>"

    def test_root_is_synthetic(self, registry: FilterRegistry) -> None:
        """Test the root never takes its tag from the first chunk."""
        root = _build("[b]x[/b]", registry)

        assert root.is_root
        assert root.tag is None
        assert root.children[0].tag_name == "b"

    def test_raw_text_excludes_own_markers(self, registry: FilterRegistry) -> None:
        """Test a tagged node's raw text is its cleaned content."""
        root = _build("[box]a[b]c[/b][/box]", registry)

        assert root.children[0].raw_text == "a[b]c[/b]"
        assert root.children[0].children[1].raw_text == "c"

    def test_empty_tag_renders_empty(self, registry: FilterRegistry) -> None:
        """Test a tag pair without content produces a childless node."""
        root = _build("a[b][/b]c", registry)

        assert [child.tag_name for child in root.children] == [None, "b", None]
        assert root.children[1].children == []
        assert render(root) == "ac"

    def test_empty_input(self, registry: FilterRegistry) -> None:
        """Test building from no chunks."""
        root = build_tree([], registry)

        assert root.children == []
        assert render(root) == ""

    def test_attributes_exposed(self) -> None:
        """Test node attributes come from the opening tag."""
        registry = default_registry()
        root = _build("[url=http://example.com]site[/url]", registry)

        assert root.children[0].attributes == {"default": "http://example.com"}
        assert render(root) == '<a href="http://example.com">site</a>'


class TestUnterminatedSpan:
    """Test the degenerate case of a child span that never closes."""

    def test_node_degenerates_to_raw_text(self, registry: FilterRegistry) -> None:
        """Test a tagged span whose child is never closed keeps only raw text."""
        repairs: List[StructureRepair] = []

        node = Node.build([O("box"), O("b"), T("x"), C("box")], registry, repairs=repairs)

        assert node.tag_name == "box"
        assert node.children == []
        assert node.render() == "[b]x"
        assert [r.repair_type for r in repairs] == [UNTERMINATED_SPAN]
        assert repairs[0].severity == "major"


class TestRendering:
    """Test memoised rendering."""

    def test_render_is_idempotent(self, registry: FilterRegistry, counting: CountingFilter) -> None:
        """Test a second render returns the same string without calling the filter."""
        root = _build("[b]x[i]y[/i][/b] and [i]z[/i]", registry)

        first = render(root)
        calls = (counting.open_calls, counting.close_calls)
        second = render(root)

        assert first == second == "<b>x<i>y</i></b> and <i>z</i>"
        assert calls == (3, 3)
        assert (counting.open_calls, counting.close_calls) == calls
        assert root.is_rendered

    def test_child_render_is_reused(self, registry: FilterRegistry, counting: CountingFilter) -> None:
        """Test rendering a subtree first lets the root reuse it."""
        root = _build("[b]x[/b]", registry)

        root.children[0].render()
        root.render()

        assert counting.open_calls == 1

    def test_leaf_render(self) -> None:
        """Test a leaf renders its raw text verbatim."""
        assert Node.leaf("<raw>").render() == "<raw>"

    def test_unknown_tag_propagates(self, registry: FilterRegistry) -> None:
        """Test a failing filter lookup surfaces to the caller."""
        node = Node.build([O("zzz"), T("x"), C("zzz")], registry)

        with pytest.raises(UnknownTagError):
            node.render()


class TestNavigation:
    """Test tree inspection helpers."""

    def test_iter_and_find(self, registry: FilterRegistry) -> None:
        """Test iterating nodes and finding by tag name."""
        root = _build("[b]x[i]y[/i][/b][i]z[/i]", registry)

        assert len(list(root.iter_nodes())) == 7
        assert len(root.find_all("i")) == 2
        assert root.find_all("box") == []

    def test_depth(self, registry: FilterRegistry) -> None:
        """Test subtree height."""
        root = _build("[b]x[i]y[/i][/b]", registry)

        assert root.depth() == 3
        assert Node.leaf("x").depth() == 0

    def test_to_dict(self, registry: FilterRegistry) -> None:
        """Test dictionary representation."""
        root = _build("a[b]x[/b]", registry)

        assert root.to_dict() == {
            "root": True,
            "children": [
                {"text": "a"},
                {"tag": "b", "children": [{"text": "x"}]},
            ],
        }

    def test_repr(self, registry: FilterRegistry) -> None:
        """Test readable representations."""
        root = _build("a[b]x[/b]", registry)

        assert repr(root) == "Node(root, children=2)"
        assert repr(root.children[0]) == "Node(text='a')"
        assert repr(root.children[1]) == "Node(tag='b', children=1)"


class TestDepthLimit:
    """Test that nesting depth is bounded."""

    def test_deep_nesting_builds_and_renders(self, registry: FilterRegistry) -> None:
        """Test a 1000-deep input builds and renders with deeper tags as text."""
        repairs: List[StructureRepair] = []
        markup = "[b]" * 1000 + "x" + "[/b]" * 1000

        root = _build(markup, registry, repairs)
        output = render(root)

        assert output == (
            "<b>" * DEFAULT_MAX_DEPTH
            + "[b]" * (1000 - DEFAULT_MAX_DEPTH) + "x" + "[/b]" * (1000 - DEFAULT_MAX_DEPTH)
            + "</b>" * DEFAULT_MAX_DEPTH
        )
        assert root.depth() == DEFAULT_MAX_DEPTH + 1
        assert [r.repair_type for r in repairs] == [DEPTH_LIMIT]
        assert repairs[0].severity == "major"

    def test_custom_limit(self, registry: FilterRegistry) -> None:
        """Test tags inside a node at the limit are kept as text."""
        repairs: List[StructureRepair] = []
        chunks = BBCodeLexer(registry).lex("[b]a[i]b[b]c[/b][/i][/b]").chunks

        root = build_tree(chunks, registry, repairs, max_depth=2)

        assert render(root) == "<b>a<i>b[b]c[/b]</i></b>"
        italic = root.children[0].children[1]
        assert italic.tag_name == "i"
        assert [child.is_leaf for child in italic.children] == [True]
        assert [r.repair_type for r in repairs] == [DEPTH_LIMIT]

    def test_text_only_node_at_limit(self, registry: FilterRegistry) -> None:
        """Test a node at the limit holding only text needs no repair."""
        repairs: List[StructureRepair] = []
        chunks = BBCodeLexer(registry).lex("[b][i]x[/i][/b]").chunks

        root = build_tree(chunks, registry, repairs, max_depth=2)

        assert render(root) == "<b><i>x</i></b>"
        assert repairs == []
