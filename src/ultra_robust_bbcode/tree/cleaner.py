"""Chunk cleaning for one nesting level of the node tree.

The cleaner turns the flat chunk span of a single node into a well-nested
sequence: adjacent text is merged, unmatched and unclosed tags are dropped
at the top level, and tags the enclosing tag does not permit are removed
inside nested spans. Tag markers are discarded; the text around them stays.
"""

from typing import List, Optional, Sequence, Set, Tuple

from ultra_robust_bbcode.chunks.chunk import Chunk
from ultra_robust_bbcode.filters import (
    RESTRICTIVE_POLICY,
    FilterRegistry,
    PermissionPolicy,
    UnknownTagError,
    is_allowed,
)
from ultra_robust_bbcode.shared import get_logger

from .repairs import (
    DISALLOWED_NESTING,
    MISMATCHED_CLOSE,
    ORPHANED_CLOSE,
    UNCLOSED_OPEN,
    UNKNOWN_TAG,
    StructureRepair,
)

logger = get_logger(__name__, component="chunk_cleaner")


def clean_chunks(
    chunks: Sequence[Chunk],
    registry: FilterRegistry,
    parent_tag: Optional[str] = None,
    repairs: Optional[List[StructureRepair]] = None
) -> List[Chunk]:
    """Produce the well-nested chunk sequence for one node span.

    Args:
        chunks: Flat chunk span of the node, in source order
        registry: Tag registry used for nesting policies
        parent_tag: Tag of the node owning the span; ``None`` for the root
        repairs: Optional list receiving a record of every repair made

    Returns:
        New list of chunks, stable in order, with adjacent text merged
    """
    if not chunks:
        return []

    if parent_tag is None:
        return _clean_root(chunks, repairs)
    return _clean_nested(chunks, registry, parent_tag, repairs)


def _clean_root(
    chunks: Sequence[Chunk],
    repairs: Optional[List[StructureRepair]]
) -> List[Chunk]:
    clean: List[Chunk] = []
    # (tag name, position in ``clean``) of provisionally accepted open tags
    open_tags: List[Tuple[str, int]] = []
    discarded: Set[int] = set()

    for chunk in chunks:
        if chunk.is_text:
            _append_text(clean, chunk)

        elif chunk.is_open:
            open_tags.append((chunk.tag, len(clean)))
            clean.append(chunk)

        else:
            if not open_tags:
                _record(repairs, ORPHANED_CLOSE,
                        f"Dropped closing tag [/{chunk.tag}] with no open tag", chunk)
                continue

            name, _ = open_tags[-1]
            if name == chunk.tag:
                open_tags.pop()
            else:
                while open_tags:
                    name, index = open_tags.pop()
                    if name == chunk.tag:
                        break
                    discarded.add(index)
                    _record(repairs, MISMATCHED_CLOSE,
                            f"Dropped [{name}] left open before [/{chunk.tag}]",
                            clean[index])

            clean.append(chunk)

    for name, index in reversed(open_tags):
        discarded.add(index)
        _record(repairs, UNCLOSED_OPEN, f"Dropped unclosed tag [{name}]", clean[index])

    return _compact(clean, discarded)


def _clean_nested(
    chunks: Sequence[Chunk],
    registry: FilterRegistry,
    parent_tag: str,
    repairs: Optional[List[StructureRepair]]
) -> List[Chunk]:
    parent = _parent_policy(registry, parent_tag, repairs)
    last = len(chunks) - 1
    clean: List[Chunk] = []

    for i, chunk in enumerate(chunks):
        if chunk.is_text:
            _append_text(clean, chunk)

        elif chunk.is_open:
            # Index 0 is the span's own opening tag.
            if i != 0 and _child_allowed(registry, parent, parent_tag, chunk, repairs):
                clean.append(chunk)

        elif i != last and _child_allowed(registry, parent, parent_tag, chunk, None):
            clean.append(chunk)

    return clean


def _parent_policy(
    registry: FilterRegistry,
    tag_name: str,
    repairs: Optional[List[StructureRepair]]
) -> PermissionPolicy:
    try:
        return registry.policy_for(tag_name)
    except UnknownTagError:
        _record(repairs, UNKNOWN_TAG,
                f"Tag [{tag_name}] has no policy; its child tags are dropped")
        return RESTRICTIVE_POLICY


def _child_allowed(
    registry: FilterRegistry,
    parent: PermissionPolicy,
    parent_tag: str,
    chunk: Chunk,
    repairs: Optional[List[StructureRepair]]
) -> bool:
    try:
        child = registry.policy_for(chunk.tag)
    except UnknownTagError:
        _record(repairs, UNKNOWN_TAG, f"Dropped unknown tag [{chunk.tag}]", chunk)
        return False

    if is_allowed(parent, child.category):
        return True

    _record(repairs, DISALLOWED_NESTING,
            f"Dropped [{chunk.tag}] not permitted inside [{parent_tag}]", chunk)
    return False


def _append_text(clean: List[Chunk], chunk: Chunk) -> None:
    if clean and clean[-1].is_text:
        clean[-1] = clean[-1].merged_with(chunk)
    else:
        clean.append(chunk)


def _compact(clean: List[Chunk], discarded: Set[int]) -> List[Chunk]:
    if not discarded:
        return clean

    # Text on both sides of a discarded tag becomes one run.
    result: List[Chunk] = []
    for index, chunk in enumerate(clean):
        if index in discarded:
            continue
        if chunk.is_text:
            _append_text(result, chunk)
        else:
            result.append(chunk)
    return result


def _record(
    repairs: Optional[List[StructureRepair]],
    repair_type: str,
    description: str,
    chunk: Optional[Chunk] = None
) -> None:
    logger.debug(description, extra={"repair_type": repair_type})
    if repairs is not None:
        repairs.append(StructureRepair(repair_type, description, chunk))
