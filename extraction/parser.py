"""
Tree-sitter parser initialization and file parsing utilities.

Thin wrapper over ``tree_sitter`` / ``tree_sitter_cpp`` that the tree
builder consumes. Syntax errors never abort parsing; they are counted and
reported so callers can decide how much to trust the resulting tree.
"""

import logging
from typing import Tuple, Union

import tree_sitter_cpp as tscpp
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

# Module-level language constant
CPP_LANGUAGE = Language(tscpp.language())


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for C++.

    Returns:
        A Parser instance configured with the C++ language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"struct Person { int age; };")
    """
    parser = Parser(CPP_LANGUAGE)
    logger.debug("Created tree-sitter C++ parser")
    return parser


def to_source_bytes(source: Union[str, bytes]) -> bytes:
    """Accept source text as ``str`` or UTF-8 ``bytes``.

    Raises:
        TypeError: If source is neither str nor bytes.
    """
    if isinstance(source, str):
        return source.encode("utf-8")
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be str or bytes, got {type(source).__name__}")
    return source


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of C++ source code.

    Args:
        source: UTF-8 encoded bytes of C++ source code.

    Returns:
        A Tree object representing the parsed syntax tree.

    Raises:
        TypeError: If source is not bytes.
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    tree = create_parser().parse(source)
    if tree.root_node.has_error:
        logger.warning("Parsed tree contains syntax errors")

    logger.debug("Parsed %d bytes of C++ code", len(source))
    return tree


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a C++ source file from disk.

    Args:
        file_path: Path to a C/C++ source or header file.

    Returns:
        A tuple of (Tree, source_bytes).

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error("File not found: %s", file_path)
        raise
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise

    tree = parse_bytes(source_bytes)
    logger.debug("Parsed file: %s", file_path)
    return tree, source_bytes


def count_error_nodes(tree: Union[Tree, Node]) -> int:
    """Count ``ERROR`` and missing nodes in a parsed tree."""
    root = tree.root_node if isinstance(tree, Tree) else tree
    if not root.has_error:
        return 0

    count = 0
    stack = [root]
    while stack:
        node = stack.pop()
        if node.is_error or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count
