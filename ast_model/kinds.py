"""Declaration kinds, access specifiers and storage classes.

Every classification predicate in this module is a pure function of the
kind; none of them look at any other node state.
"""

from __future__ import annotations

from enum import Enum


class NodeKind(str, Enum):
    """Closed set of declaration kinds a node can carry."""

    UNKNOWN = "unknown"
    TRANSLATION_UNIT = "translation_unit"
    NAMESPACE_DECL = "namespace_decl"
    NAMESPACE_ALIAS = "namespace_alias"
    USING_DIRECTIVE = "using_directive"
    USING_DECLARATION = "using_declaration"
    CLASS_DECL = "class_decl"
    STRUCT_DECL = "struct_decl"
    UNION_DECL = "union_decl"
    ENUM_DECL = "enum_decl"
    ENUM_CONSTANT_DECL = "enum_constant_decl"
    TYPEDEF_DECL = "typedef_decl"
    TYPE_ALIAS_DECL = "type_alias_decl"
    FIELD_DECL = "field_decl"
    METHOD_DECL = "method_decl"
    CONSTRUCTOR_DECL = "constructor_decl"
    DESTRUCTOR_DECL = "destructor_decl"
    CONVERSION_DECL = "conversion_decl"
    FUNCTION_DECL = "function_decl"
    FUNCTION_TEMPLATE = "function_template"
    PARAMETER_DECL = "parameter_decl"
    VARIABLE_DECL = "variable_decl"
    CLASS_TEMPLATE = "class_template"
    TEMPLATE_TYPE_PARAMETER = "template_type_parameter"
    TEMPLATE_NON_TYPE_PARAMETER = "template_non_type_parameter"
    TEMPLATE_TEMPLATE_PARAMETER = "template_template_parameter"
    FRIEND_DECL = "friend_decl"
    BASE_SPECIFIER = "base_specifier"
    LINKAGE_SPEC = "linkage_spec"
    STATIC_ASSERT_DECL = "static_assert_decl"


class AccessSpecifier(str, Enum):
    """C++ member access."""

    INVALID = "invalid"
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class StorageClass(str, Enum):
    """Declared storage duration / linkage keyword."""

    NONE = "none"
    EXTERN = "extern"
    STATIC = "static"
    REGISTER = "register"
    AUTO = "auto"
    THREAD_LOCAL = "thread_local"


# ---------------------------------------------------------------------------
# Classification sets
# ---------------------------------------------------------------------------

TYPE_DECLARATION_KINDS = frozenset({
    NodeKind.CLASS_DECL,
    NodeKind.STRUCT_DECL,
    NodeKind.UNION_DECL,
    NodeKind.ENUM_DECL,
    NodeKind.TYPEDEF_DECL,
    NodeKind.TYPE_ALIAS_DECL,
})

RECORD_KINDS = frozenset({
    NodeKind.CLASS_DECL,
    NodeKind.STRUCT_DECL,
    NodeKind.UNION_DECL,
})

CALLABLE_KINDS = frozenset({
    NodeKind.FUNCTION_DECL,
    NodeKind.FUNCTION_TEMPLATE,
    NodeKind.METHOD_DECL,
    NodeKind.CONSTRUCTOR_DECL,
    NodeKind.DESTRUCTOR_DECL,
    NodeKind.CONVERSION_DECL,
})

METHOD_KINDS = frozenset({
    NodeKind.METHOD_DECL,
    NodeKind.CONSTRUCTOR_DECL,
    NodeKind.DESTRUCTOR_DECL,
    NodeKind.CONVERSION_DECL,
})

_KINDS_BY_NAME = {kind.value: kind for kind in NodeKind}


def is_type_declaration_kind(kind: NodeKind) -> bool:
    """True for class, struct, union, enum, typedef and type alias."""
    return kind in TYPE_DECLARATION_KINDS


def is_record_kind(kind: NodeKind) -> bool:
    """True for class, struct and union."""
    return kind in RECORD_KINDS


def is_callable_kind(kind: NodeKind) -> bool:
    """True for free functions, function templates and every method flavour."""
    return kind in CALLABLE_KINDS


def kind_to_string(kind: NodeKind) -> str:
    return kind.value


def kind_from_string(name: str) -> NodeKind:
    """Resolve a kind from its string name.

    Unrecognized names map to ``NodeKind.UNKNOWN``; callers that need to
    reject them should use ``parse_kind_name`` instead.
    """
    return _KINDS_BY_NAME.get(name.strip().lower(), NodeKind.UNKNOWN)


def parse_kind_name(name: str) -> NodeKind:
    """Resolve a kind from its string name.

    Raises:
        ValueError: If ``name`` is not a known kind name.
    """
    key = name.strip().lower()
    if key not in _KINDS_BY_NAME:
        raise ValueError(f"Unknown node kind: {name!r}")
    return _KINDS_BY_NAME[key]


def access_to_string(access: AccessSpecifier) -> str:
    return access.value


def storage_class_to_string(storage: StorageClass) -> str:
    return storage.value
