"""
Configuration constants for C++ declaration tree building.

Defines the tree-sitter node type strings the builder dispatches on and
their mapping onto declaration kinds.
"""

import re
from typing import Dict, Set

from ast_model.kinds import NodeKind

# Record specifiers and the declaration kind each one produces
RECORD_SPECIFIERS: Dict[str, NodeKind] = {
    "class_specifier": NodeKind.CLASS_DECL,
    "struct_specifier": NodeKind.STRUCT_DECL,
    "union_specifier": NodeKind.UNION_DECL,
}

ENUM_SPECIFIER: str = "enum_specifier"

# Template wrapper node type
TEMPLATE_WRAPPER: str = "template_declaration"

# Namespace definition node type
NAMESPACE_NODE: str = "namespace_definition"
NAMESPACE_ALIAS_NODE: str = "namespace_alias_definition"

# Comment node type (includes //, /* */, /** */)
COMMENT_NODE: str = "comment"

LINKAGE_NODE: str = "linkage_specification"

# Preprocessor directives that may contain code we need to traverse
PREPROCESSOR_CONTAINERS: Set[str] = {
    "preproc_ifdef",
    "preproc_ifndef",
    "preproc_if",
    "preproc_elif",
    "preproc_else",
    "preproc_elifdef",
}

# Nodes that carry one or more declarators
DECLARATION_NODES: Set[str] = {
    "declaration",
    "field_declaration",
}

FUNCTION_DEFINITION_NODES: Set[str] = {
    "function_definition",
    "inline_method_definition",
}

TYPEDEF_NODE: str = "type_definition"
ALIAS_NODE: str = "alias_declaration"
USING_NODE: str = "using_declaration"
FRIEND_NODE: str = "friend_declaration"
STATIC_ASSERT_NODE: str = "static_assert_declaration"
ACCESS_SPECIFIER_NODE: str = "access_specifier"

# Parameter list entries
PARAMETER_NODES: Set[str] = {
    "parameter_declaration",
    "optional_parameter_declaration",
    "variadic_parameter_declaration",
}

# Template parameter list entries and the kind each produces
TEMPLATE_PARAMETER_KINDS: Dict[str, NodeKind] = {
    "type_parameter_declaration": NodeKind.TEMPLATE_TYPE_PARAMETER,
    "optional_type_parameter_declaration": NodeKind.TEMPLATE_TYPE_PARAMETER,
    "variadic_type_parameter_declaration": NodeKind.TEMPLATE_TYPE_PARAMETER,
    "parameter_declaration": NodeKind.TEMPLATE_NON_TYPE_PARAMETER,
    "optional_parameter_declaration": NodeKind.TEMPLATE_NON_TYPE_PARAMETER,
    "variadic_parameter_declaration": NodeKind.TEMPLATE_NON_TYPE_PARAMETER,
    "template_template_parameter_declaration": NodeKind.TEMPLATE_TEMPLATE_PARAMETER,
}

# Leaf nodes that name a declarator
NAME_NODES: Set[str] = {
    "identifier",
    "field_identifier",
    "type_identifier",
    "destructor_name",
    "operator_name",
    "operator_cast",
    "qualified_identifier",
    "template_function",
    "template_method",
}

# Doxygen comment prefixes
DOXYGEN_PREFIXES: tuple = (
    "/**",
    "///",
    "//!",
    "/*!",
)

# Doxygen prefixes documenting the preceding member
DOXYGEN_TRAILING_PREFIXES: tuple = (
    "///<",
    "//!<",
    "/**<",
    "/*!<",
)

# Standard doxygen commands; any other ``@word`` line is a tag
DOXYGEN_COMMANDS: Set[str] = {
    "brief", "short", "details", "param", "tparam", "return", "returns",
    "retval", "throw", "throws", "exception", "note", "warning", "see", "sa",
    "since", "deprecated", "todo", "bug", "author", "authors", "date",
    "version", "copyright", "file", "class", "struct", "union", "enum",
    "fn", "var", "def", "namespace", "typedef", "code", "endcode",
    "verbatim", "endverbatim", "pre", "post", "invariant", "remark",
    "remarks", "attention", "example", "ingroup", "defgroup", "addtogroup",
    "{", "}",
}

BRIEF_COMMAND_RE = re.compile(r"^[@\\](?:brief|short)\s+")

# Attribute annotations: [[clang::annotate("...")]] and the GNU spelling
ANNOTATE_ATTRIBUTE_RE = re.compile(
    r'(?:\[\[\s*(?:clang::)?annotate|__attribute__\s*\(\(\s*annotate)'
    r'\s*\(\s*"((?:[^"\\]|\\.)*)"'
)

# C/C++ file extensions
CPP_EXTENSIONS: Set[str] = {
    ".cpp",
    ".cc",
    ".cxx",
    ".c",
    ".h",
    ".hh",
    ".hpp",
    ".hxx",
    ".inl",
}

# Directories never descended into during discovery
SKIP_DIRECTORIES: Set[str] = {
    ".git",
    "build",
    "cmake-build-debug",
    "cmake-build-release",
    "node_modules",
    "__pycache__",
}
