"""
Doxygen comment handling and tag annotation discovery.

Tags reach the tree through two surface forms:

- doxygen lines of the shape ``/// @name(args)`` preceding a declaration
  (standard doxygen commands such as ``@brief`` are not tags);
- ``[[clang::annotate("name(args)")]]`` or
  ``__attribute__((annotate("...")))`` attributes on the declaration.

Both are reduced here to raw annotation strings for the tag parser.
"""

import logging
import re
from typing import List, Optional

from tree_sitter import Node

from extraction.config import (
    ANNOTATE_ATTRIBUTE_RE,
    BRIEF_COMMAND_RE,
    COMMENT_NODE,
    DOXYGEN_COMMANDS,
    DOXYGEN_PREFIXES,
    DOXYGEN_TRAILING_PREFIXES,
)

logger = logging.getLogger(__name__)

_TAG_LINE_RE = re.compile(r"^@(?P<name>[A-Za-z_][\w:.\-]*)")
_ESCAPE_RE = re.compile(r"\\(.)")


def is_doxygen_comment(comment_text: str) -> bool:
    """Check if a comment is a Doxygen-style documentation comment.

    Args:
        comment_text: The text content of the comment.

    Returns:
        True if the comment starts with Doxygen markers (///, /**, //!, /*!)
    """
    stripped = comment_text.strip()
    return any(stripped.startswith(prefix) for prefix in DOXYGEN_PREFIXES)


def is_trailing_doxygen_comment(comment_text: str) -> bool:
    """Check for member comments placed after the declaration (``///<``)."""
    stripped = comment_text.strip()
    return any(stripped.startswith(prefix) for prefix in DOXYGEN_TRAILING_PREFIXES)


def clean_doxygen_comment(comment_text: str) -> str:
    """Strip Doxygen comment delimiters and leading asterisks.

    Removes the ``///``, ``//!``, ``/**``, ``/*!`` openers (and the ``<`` of
    trailing member comments), ``*/`` closers and continuation ``*``.
    Blank lines are dropped.

    Args:
        comment_text: Raw comment text with delimiters.

    Returns:
        Cleaned comment text.
    """
    cleaned_lines = []
    for line in comment_text.split("\n"):
        stripped = line.strip()
        for prefix in ("///", "//!", "/**", "/*!"):
            if stripped.startswith(prefix):
                stripped = stripped[3:]
                break
        if stripped.startswith("<"):
            stripped = stripped[1:]

        stripped = stripped.strip()

        # Strip trailing block marker regardless of line position.
        if stripped.endswith("*/"):
            stripped = stripped[:-2].rstrip()

        # Strip continuation '*' in multiline block comments.
        if stripped.startswith("*"):
            stripped = stripped[1:].lstrip()

        if stripped:
            cleaned_lines.append(stripped)

    return "\n".join(cleaned_lines)


def _node_text(node: Node, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def get_preceding_comments(node: Node, source_bytes: bytes) -> Optional[str]:
    """Collect all Doxygen comments immediately preceding a declaration.

    Walks backward through siblings to find comments that directly precede
    the given node (with at most 1 blank line gap). Trailing member
    comments belong to the previous declaration and end the walk.

    Args:
        node: The syntax node to find comments for.
        source_bytes: The raw source file bytes.

    Returns:
        Cleaned Doxygen comment text, or None if no comments found.
    """
    comments = []
    sibling = node.prev_named_sibling
    expected_end_row = node.start_point.row

    while sibling is not None and sibling.type == COMMENT_NODE:
        gap = expected_end_row - sibling.end_point.row
        if gap > 1:
            break

        comment_text = _node_text(sibling, source_bytes)
        if is_trailing_doxygen_comment(comment_text):
            break
        if is_doxygen_comment(comment_text):
            comments.append(comment_text)

        expected_end_row = sibling.start_point.row
        sibling = sibling.prev_named_sibling

    comments.reverse()
    if comments:
        return "\n".join(clean_doxygen_comment(c) for c in comments)
    return None


def get_trailing_comment(node: Node, source_bytes: bytes) -> Optional[str]:
    """Return a ``///<`` comment that follows ``node`` on its last line."""
    sibling = node.next_named_sibling
    if sibling is None or sibling.type != COMMENT_NODE:
        return None
    if sibling.start_point.row != node.end_point.row:
        return None
    comment_text = _node_text(sibling, source_bytes)
    if not is_trailing_doxygen_comment(comment_text):
        return None
    return clean_doxygen_comment(comment_text)


def extract_brief(comment: str) -> str:
    """Brief description: ``@brief`` text, else the first plain line."""
    lines = comment.split("\n")
    for line in lines:
        match = BRIEF_COMMAND_RE.match(line)
        if match:
            return line[match.end():].strip()
    for line in lines:
        if not line.startswith(("@", "\\")):
            return line.strip()
    return ""


def extract_tag_annotations(comment: str) -> List[str]:
    """Raw tag strings from ``@name(args)`` lines of a cleaned comment.

    Example:
        >>> extract_tag_annotations("Person record\\n@serialize\\n@brief x")
        ['serialize']
    """
    annotations = []
    for line in comment.split("\n"):
        stripped = line.strip()
        match = _TAG_LINE_RE.match(stripped)
        if not match:
            continue
        if match.group("name").lower() in DOXYGEN_COMMANDS:
            continue
        annotations.append(stripped[1:].strip())
    return annotations


def extract_attribute_annotations(declaration_text: str) -> List[str]:
    """Raw tag strings from ``annotate("...")`` attributes in ``declaration_text``."""
    return [
        _ESCAPE_RE.sub(r"\1", match.group(1)).strip()
        for match in ANNOTATE_ATTRIBUTE_RE.finditer(declaration_text)
    ]
