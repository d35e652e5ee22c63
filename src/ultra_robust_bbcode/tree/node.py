"""Node tree construction and rendering.

Each :class:`Node` owns the chunk span of one balanced tag pair (or a run of
plain text). Building a node cleans its span, then partitions the cleaned
sequence into child nodes with a single linear scan, recursing into every
child tag span up to a maximum depth. Rendering walks the finished tree and
asks each tag's filter for its opening and closing markup.
"""

from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from ultra_robust_bbcode.chunks.chunk import Chunk
from ultra_robust_bbcode.filters import FilterRegistry
from ultra_robust_bbcode.shared import get_logger
from ultra_robust_bbcode.shared.config import DEFAULT_MAX_DEPTH

from .cleaner import clean_chunks
from .repairs import DEPTH_LIMIT, UNTERMINATED_SPAN, StructureRepair

logger = get_logger(__name__, component="node_builder")


class Node:
    """One element of the parsed tree.

    A node is either a text leaf, a tagged element with ordered children, or
    the synthetic root that owns the top-level forest. Structure is fixed
    once built; only the render cache is written afterwards.
    """

    __slots__ = ("tag", "children", "raw_text", "is_root", "_registry", "_rendered")

    def __init__(
        self,
        registry: Optional[FilterRegistry] = None,
        tag: Optional[Chunk] = None,
        children: Optional[List["Node"]] = None,
        raw_text: str = "",
        is_root: bool = False
    ) -> None:
        self.tag = tag
        self.children: List[Node] = children if children is not None else []
        self.raw_text = raw_text
        self.is_root = is_root
        self._registry = registry
        self._rendered: Optional[str] = None

    @classmethod
    def leaf(cls, text: str) -> "Node":
        """Create a text leaf node."""
        return cls(raw_text=text)

    @classmethod
    def build(
        cls,
        chunks: Sequence[Chunk],
        registry: FilterRegistry,
        root: bool = False,
        repairs: Optional[List[StructureRepair]] = None,
        depth: int = 0,
        max_depth: int = DEFAULT_MAX_DEPTH
    ) -> "Node":
        """Build a node, and recursively its children, from a chunk span.

        Args:
            chunks: The span; for a tagged node it starts with the node's own
                opening tag and ends with its closing tag
            registry: Tag registry supplying policies and filters
            root: Build the synthetic root instead of a tagged node
            repairs: Optional list receiving structural repair records
            depth: Nesting level of this node (the root is level 0)
            max_depth: Deepest level built as tagged nodes; tags inside a
                node at this level are kept as text

        Returns:
            The constructed node
        """
        tag = None
        if not root and chunks and chunks[0].is_open:
            tag = chunks[0]

        cleaned = clean_chunks(
            chunks, registry, tag.tag if tag is not None else None, repairs
        )
        raw_text = "".join(chunk.text for chunk in cleaned)

        if depth >= max_depth and any(not chunk.is_text for chunk in cleaned):
            _record_depth_limit(tag, max_depth, repairs)
            return cls(registry, tag, [cls.leaf(raw_text)], raw_text, is_root=root)

        children = cls._partition(cleaned, registry, repairs, depth + 1, max_depth)
        if children is None:
            _record_unterminated(tag, repairs)
            children = []

        return cls(registry, tag, children, raw_text, is_root=root)

    @classmethod
    def _partition(
        cls,
        cleaned: List[Chunk],
        registry: FilterRegistry,
        repairs: Optional[List[StructureRepair]],
        depth: int,
        max_depth: int
    ) -> Optional[List["Node"]]:
        """Split a cleaned span into child nodes.

        Returns ``None`` when a child tag span is opened but never closed.
        """
        children: List[Node] = []
        open_tag: Optional[str] = None
        open_index = -1
        nested = 0

        for i, chunk in enumerate(cleaned):
            if open_tag is None:
                if chunk.is_text:
                    children.append(cls.leaf(chunk.text))
                elif chunk.is_open:
                    open_tag = chunk.tag
                    open_index = i
                    nested = 0
                # A close with nothing tracked was already judged by the cleaner.
                continue

            if chunk.tag != open_tag:
                continue
            if chunk.is_open:
                nested += 1
            elif chunk.is_close:
                if nested == 0:
                    children.append(
                        cls.build(
                            cleaned[open_index:i + 1],
                            registry,
                            repairs=repairs,
                            depth=depth,
                            max_depth=max_depth,
                        )
                    )
                    open_tag = None
                else:
                    nested -= 1

        if open_tag is not None:
            return None
        return children

    @property
    def tag_name(self) -> Optional[str]:
        return self.tag.tag if self.tag is not None else None

    @property
    def attributes(self) -> Mapping[str, str]:
        return self.tag.attributes if self.tag is not None else {}

    @property
    def is_leaf(self) -> bool:
        return self.tag is None and not self.children and not self.is_root

    @property
    def is_rendered(self) -> bool:
        return self._rendered is not None

    def render(self) -> str:
        """Render this node and its subtree, computing the result at most once.

        Raises:
            UnknownTagError: if a tagged node's filter cannot be found
        """
        if self._rendered is not None:
            return self._rendered

        if self.is_root:
            output = "".join(child.render() for child in self.children)
        elif self.tag is None or not self.children:
            output = self.raw_text
        else:
            filter_ = self._registry.filter_for(self.tag.tag)
            output = (
                filter_.open_tag(self.tag.tag, self.tag.attributes)
                + "".join(child.render() for child in self.children)
                + filter_.close_tag(self.tag.tag)
            )

        self._rendered = output
        return output

    def iter_nodes(self) -> Iterator["Node"]:
        """Iterate over this node and all descendants in document order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def find_all(self, tag_name: str) -> List["Node"]:
        """Find all descendant nodes carrying ``tag_name``."""
        return [
            node for node in self.iter_nodes()
            if node is not self and node.tag_name == tag_name
        ]

    def depth(self) -> int:
        """Height of the subtree below this node (a leaf has depth 0)."""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        if self.is_leaf:
            return {"text": self.raw_text}

        result: Dict[str, Any] = {}
        if self.is_root:
            result["root"] = True
        if self.tag is not None:
            result["tag"] = self.tag.tag
            if self.tag.attributes:
                result["attributes"] = dict(self.tag.attributes)
        result["children"] = [child.to_dict() for child in self.children]
        if not self.children:
            result["text"] = self.raw_text
        return result

    def __repr__(self) -> str:
        if self.is_root:
            return f"Node(root, children={len(self.children)})"
        if self.tag is None:
            return f"Node(text={self.raw_text!r})"
        return f"Node(tag={self.tag.tag!r}, children={len(self.children)})"


def _record_unterminated(
    tag: Optional[Chunk],
    repairs: Optional[List[StructureRepair]]
) -> None:
    name = tag.tag if tag is not None else "root"
    description = f"Child span inside [{name}] was never closed; kept as text"
    logger.warning(description)
    if repairs is not None:
        repairs.append(StructureRepair(UNTERMINATED_SPAN, description, tag, "major"))


def _record_depth_limit(
    tag: Optional[Chunk],
    max_depth: int,
    repairs: Optional[List[StructureRepair]]
) -> None:
    name = tag.tag if tag is not None else "root"
    description = (
        f"Tags nested deeper than {max_depth} levels inside [{name}] kept as text"
    )
    logger.warning(description, extra={"max_depth": max_depth})
    if repairs is not None:
        repairs.append(StructureRepair(DEPTH_LIMIT, description, tag, "major"))


def build_tree(
    chunks: Sequence[Chunk],
    registry: FilterRegistry,
    repairs: Optional[List[StructureRepair]] = None,
    max_depth: int = DEFAULT_MAX_DEPTH
) -> Node:
    """Build the synthetic root node for a complete chunk stream.

    Nesting deeper than ``max_depth`` tag levels is not built into nodes,
    so building and rendering stay within the interpreter's recursion limit.
    """
    return Node.build(chunks, registry, root=True, repairs=repairs, max_depth=max_depth)


def render(node: Node) -> str:
    """Render a tree built by :func:`build_tree`."""
    return node.render()
