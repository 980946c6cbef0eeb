"""Plain-text summaries of record declarations."""

from __future__ import annotations

from ast_model.kinds import AccessSpecifier, NodeKind
from ast_model.node import Node


def _access_suffix(node: Node) -> str:
    if node.access is AccessSpecifier.INVALID:
        return ""
    return f" [{node.access.value}]"


def _method_line(method: Node) -> str:
    label = method.display_name or method.name
    line = f"    Method: {label}"
    if method.kind not in (NodeKind.CONSTRUCTOR_DECL, NodeKind.DESTRUCTOR_DECL):
        line += f" -> {method.return_type.spelling or 'void'}"
    line += _access_suffix(method)
    if method.is_const_method:
        line += " [const]"
    if method.is_virtual:
        line += " [virtual]"
    if method.is_pure_virtual:
        line += " [pure]"
    if method.is_static:
        line += " [static]"
    return line


def describe_record(node: Node) -> list[str]:
    """Describe a class/struct/union as indented report lines.

    Args:
        node: A record declaration node.

    Returns:
        Lines starting with ``<kind>: <qualified name>``, followed by the brief
        comment, tags, bases, fields and methods (each method lists its
        parameters). Non-record nodes yield an empty list.
    """
    if not node.is_record_declaration():
        return []

    label = node.qualified_name or node.name or "<anonymous>"
    lines = [f"{node.kind_name}: {label}"]
    if node.brief_comment:
        lines.append(f"    Brief: {node.brief_comment}")
    if node.tags:
        lines.append("    Tags: " + ", ".join(tag.get_full() for tag in node.tags))

    for base in node.bases():
        line = f"    Base: {base.name}"
        if base.is_virtual_base:
            line += " [virtual]"
        lines.append(line + _access_suffix(base))

    for field in node.fields():
        lines.append(
            f"    Field: {field.name} ({field.type.spelling}){_access_suffix(field)}"
        )

    for method in node.methods():
        lines.append(_method_line(method))
        params = method.parameters()
        if params:
            lines.append("      Parameters:")
            for param in params:
                lines.append(f"        {param.name} ({param.type.spelling})")

    return lines


def describe_enum(node: Node) -> list[str]:
    """Describe an enum declaration and its constants."""
    if node.kind is not NodeKind.ENUM_DECL:
        return []

    label = node.qualified_name or node.name or "<anonymous>"
    header = f"{node.kind_name}: {label}"
    if node.is_scoped_enum:
        header += " [scoped]"
    if node.underlying_type:
        header += f" : {node.underlying_type}"
    lines = [header]
    for constant in node.enum_constants():
        lines.append(f"    Value: {constant.name} = {constant.enum_value}")
    return lines


def describe_type(node: Node) -> list[str]:
    """Describe any type declaration; aliases get a single line."""
    if node.is_record_declaration():
        return describe_record(node)
    if node.kind is NodeKind.ENUM_DECL:
        return describe_enum(node)
    label = node.qualified_name or node.name
    return [f"{node.kind_name}: {label} = {node.type.spelling}"]
