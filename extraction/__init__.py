"""
Front-end adapter.

Tree-sitter based C/C++ parser that builds ``ast_model`` declaration trees,
extracting doxygen comments, ``@tag`` annotations and annotate attributes.
"""

from extraction.parser import create_parser, parse_file, parse_bytes, count_error_nodes
from extraction.comments import (
    clean_doxygen_comment,
    extract_attribute_annotations,
    extract_tag_annotations,
    is_doxygen_comment,
)
from extraction.builder import TreeBuilder, build_translation_unit, evaluate_enum_value
from extraction.extractor import (
    ExtractionStats,
    discover_cpp_files,
    import_files,
    parse_and_merge,
    parse_source,
    parse_translation_unit,
)

__all__ = [
    # Low-level parsing
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    # Comments and tags
    "clean_doxygen_comment",
    "extract_attribute_annotations",
    "extract_tag_annotations",
    "is_doxygen_comment",
    # Tree building
    "TreeBuilder",
    "build_translation_unit",
    "evaluate_enum_value",
    # High-level orchestration
    "ExtractionStats",
    "discover_cpp_files",
    "import_files",
    "parse_and_merge",
    "parse_source",
    "parse_translation_unit",
]
