"""Cross translation-unit merging keyed on declaration USR."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ast_model.kinds import NodeKind
from ast_model.node import POPULATED_FIELDS, Node, create_node

logger = logging.getLogger(__name__)


def index_by_usr(root: Node) -> dict[str, Node]:
    """Map every non-empty USR reachable from ``root`` to its first node."""
    index: dict[str, Node] = {}
    if root.usr:
        index[root.usr] = root
    for node in root.iter_descendants():
        if node.usr and node.usr not in index:
            index[node.usr] = node
    return index


def deep_copy_node(source: Node) -> Node:
    """Copy ``source`` with every attribute, tag and descendant.

    The copy is detached: its parent is None regardless of the source.
    """
    root_copy = create_node(source.kind)
    _copy_fields(source, root_copy)

    # Explicit stack of (original, copy) pairs keeps deep trees off the
    # interpreter recursion limit.
    stack = [(source, root_copy)]
    while stack:
        original, copy = stack.pop()
        for child in original.children:
            child_copy = create_node(child.kind)
            _copy_fields(child, child_copy)
            copy.add_child(child_copy)
            stack.append((child, child_copy))
    return root_copy


def _copy_fields(source: Node, target: Node) -> None:
    for field_name in POPULATED_FIELDS:
        setattr(target, field_name, getattr(source, field_name))
    target.set_tags(source.tags)


def merge_trees(a: Optional[Node], b: Optional[Node]) -> Optional[Node]:
    """Merge two translation-unit trees into a new canonical tree.

    Every top-level declaration of ``a`` is copied. A top-level declaration
    of ``b`` is copied only when its USR is empty or absent from the index
    built over ``a``, so on conflicts the declaration from ``a`` wins, tags
    and children included. Same-USR siblings within ``b`` are all kept.

    Args:
        a: Preferred tree, or None.
        b: Secondary tree, or None.

    Returns:
        A new ``translation_unit`` root, or the non-None input unchanged
        when the other side is None.
    """
    if a is None:
        return b
    if b is None:
        return a

    merged = create_node(NodeKind.TRANSLATION_UNIT)
    merged.name = a.name
    index = index_by_usr(a)

    for child in a.children:
        merged.add_child(deep_copy_node(child))

    skipped = 0
    for child in b.children:
        if child.usr and child.usr in index:
            skipped += 1
            continue
        merged.add_child(deep_copy_node(child))

    logger.debug(
        "Merged %d + %d top-level declarations (%d duplicates skipped)",
        len(a.children),
        len(b.children),
        skipped,
    )
    return merged


def merge_all(trees: Iterable[Optional[Node]]) -> Optional[Node]:
    """Left-fold ``merge_trees`` over ``trees``; earlier trees win."""
    merged: Optional[Node] = None
    for tree in trees:
        if tree is None:
            continue
        merged = tree if merged is None else merge_trees(merged, tree)
    return merged
