"""
Declaration tree model.

Node/tag data model for parsed C/C++ declarations, the cross-unit merge
engine and the kind/tag filter used by generators.
"""

from ast_model.kinds import (
    AccessSpecifier,
    NodeKind,
    StorageClass,
    is_callable_kind,
    is_record_kind,
    is_type_declaration_kind,
    kind_from_string,
    kind_to_string,
)
from ast_model.source import SourceLocation, SourceRange
from ast_model.type_info import TypeInfo
from ast_model.tags import Tag, parse_tag, parse_tags, split_tag_arguments
from ast_model.node import Node, create_node
from ast_model.merge import deep_copy_node, index_by_usr, merge_all, merge_trees
from ast_model.filter import FilterConfig, NodeFilter, NodeInclusion
from ast_model.dump import format_tree, node_to_dict

__all__ = [
    # Enums and classification
    "AccessSpecifier",
    "NodeKind",
    "StorageClass",
    "is_callable_kind",
    "is_record_kind",
    "is_type_declaration_kind",
    "kind_from_string",
    "kind_to_string",
    # Value types
    "SourceLocation",
    "SourceRange",
    "TypeInfo",
    "Tag",
    "parse_tag",
    "parse_tags",
    "split_tag_arguments",
    # Tree
    "Node",
    "create_node",
    # Engines
    "deep_copy_node",
    "index_by_usr",
    "merge_all",
    "merge_trees",
    "FilterConfig",
    "NodeFilter",
    "NodeInclusion",
    # Output
    "format_tree",
    "node_to_dict",
]
