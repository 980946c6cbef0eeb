"""
High-level orchestrator for building declaration trees.

This module provides the main entry points for turning source text, single
files, directories or wildcard patterns into translation-unit trees, and
for folding many translation units into one merged tree.
"""

import glob
import logging
import os
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple, Union

from ast_model.merge import merge_trees
from ast_model.node import Node
from core.structured_logging import stage_scope, unit_scope
from extraction.builder import TreeBuilder, build_translation_unit
from extraction.config import CPP_EXTENSIONS, SKIP_DIRECTORIES
from extraction.parser import count_error_nodes, parse_bytes, parse_file, to_source_bytes

logger = logging.getLogger(__name__)


@dataclass
class TranslationUnitDiagnostics:
    """Per-file build diagnostics."""

    root: Node
    nodes_built: int
    parse_error_count: int


class ExtractionStats:
    """Statistics for a parse-and-merge operation."""

    def __init__(self):
        self.files_processed = 0
        self.files_failed = 0
        self.nodes_built = 0
        self.parse_errors = 0
        self.top_level_declarations = 0

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_failed": self.files_failed,
            "nodes_built": self.nodes_built,
            "parse_errors": self.parse_errors,
            "top_level_declarations": self.top_level_declarations,
        }

    def __str__(self) -> str:
        return (
            f"ExtractionStats(processed={self.files_processed}, "
            f"failed={self.files_failed}, nodes={self.nodes_built}, "
            f"parse_errors={self.parse_errors}, "
            f"top_level={self.top_level_declarations})"
        )


def parse_source(source: Union[str, bytes], file_path: str = "<memory>") -> Node:
    """Build a translation-unit tree from in-memory source text.

    Args:
        source: C/C++ source as text or UTF-8 bytes.
        file_path: Name recorded in node locations.

    Returns:
        The ``translation_unit`` root node.

    Example:
        >>> root = parse_source("/// @serialize\\nstruct Person { int age; };")
        >>> root.children[0].tags[0].name
        'serialize'
    """
    source_bytes = to_source_bytes(source)
    return build_translation_unit(parse_bytes(source_bytes), source_bytes, file_path)


def _parse_file_with_diagnostics(file_path: str) -> TranslationUnitDiagnostics:
    file_path = os.path.abspath(file_path)

    if not os.path.isfile(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    ext = os.path.splitext(file_path)[1]
    if ext not in CPP_EXTENSIONS:
        raise ValueError(
            f"File {file_path} is not a C/C++ source file. "
            f"Expected one of: {sorted(CPP_EXTENSIONS)}"
        )

    with unit_scope(os.path.basename(file_path)):
        logger.info("Parsing translation unit %s", file_path)
        tree, source_bytes = parse_file(file_path)
        parse_error_count = count_error_nodes(tree)
        if parse_error_count:
            logger.warning(
                "File %s contains syntax errors (%d error nodes)",
                file_path,
                parse_error_count,
            )

        builder = TreeBuilder(source_bytes, file_path)
        root = builder.build(tree)
        logger.info(
            "Built %d declaration nodes (%d top-level) from %s",
            builder.nodes_built,
            len(root.children),
            file_path,
        )

    return TranslationUnitDiagnostics(
        root=root,
        nodes_built=builder.nodes_built,
        parse_error_count=parse_error_count,
    )


def parse_translation_unit(file_path: str) -> Node:
    """Build the declaration tree for a single C/C++ file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a C/C++ source file.
    """
    try:
        return _parse_file_with_diagnostics(file_path).root
    except (OSError, ValueError) as e:
        logger.error("Error parsing %s: %s", file_path, e)
        raise


def discover_cpp_files(directory: str) -> List[str]:
    """Recursively discover all C/C++ source files in a directory.

    Hidden and build/cache directories are skipped.

    Returns:
        Sorted list of absolute paths.
    """
    cpp_files = []
    directory = os.path.abspath(directory)

    logger.info("Discovering C/C++ files in %s", directory)

    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in SKIP_DIRECTORIES]
        for file in files:
            if os.path.splitext(file)[1] in CPP_EXTENSIONS:
                cpp_files.append(os.path.join(root, file))

    logger.info("Found %d C/C++ files", len(cpp_files))
    return sorted(cpp_files)


def import_files(pattern: str) -> List[str]:
    """Resolve an input pattern to a sorted list of source files.

    ``pattern`` may be a single file, a directory (searched recursively) or
    a wildcard such as ``include/*.hpp`` or ``src/**/*.cpp``. Wildcard
    matches are not filtered by extension.
    """
    if os.path.isdir(pattern):
        return discover_cpp_files(pattern)
    if os.path.isfile(pattern):
        return [os.path.abspath(pattern)]

    matches = sorted(
        os.path.abspath(match)
        for match in glob.glob(pattern, recursive=True)
        if os.path.isfile(match)
    )
    if not matches:
        logger.warning("No files match %s", pattern)
    return matches


def parse_and_merge(
    paths: Iterable[str],
    continue_on_error: bool = True,
) -> Tuple[Optional[Node], ExtractionStats]:
    """Parse every file and fold the translation units into one tree.

    Files are merged in the given order, so on USR conflicts the
    declaration from the earliest file wins.

    Args:
        paths: Source files to parse.
        continue_on_error: If True, log and count failing files and keep
            going. If False, re-raise the first failure.

    Returns:
        A tuple of (merged root or None when nothing parsed, stats).
    """
    stats = ExtractionStats()
    merged: Optional[Node] = None

    for file_path in paths:
        try:
            with stage_scope("parse"):
                diagnostics = _parse_file_with_diagnostics(file_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to parse %s: %s", file_path, e)
            stats.files_failed += 1
            if not continue_on_error:
                raise
            continue

        stats.files_processed += 1
        stats.nodes_built += diagnostics.nodes_built
        stats.parse_errors += diagnostics.parse_error_count
        with stage_scope("merge"), unit_scope(os.path.basename(file_path)):
            merged = merge_trees(merged, diagnostics.root)

    if merged is not None:
        stats.top_level_declarations = len(merged.children)
    logger.info("Parse and merge complete: %s", stats)
    return merged, stats
