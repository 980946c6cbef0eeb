"""Human- and JSON-oriented renderings of a node tree."""

from __future__ import annotations

from typing import Any

from ast_model.node import Node


def _describe(node: Node) -> str:
    label = node.qualified_name or node.name or node.display_name
    parts = [node.kind_name]
    if label:
        parts.append(label)
    if node.type.is_valid():
        parts.append(f"[{node.type.spelling}]")
    if node.tags:
        parts.append(" ".join(f"@{tag.get_full()}" for tag in node.tags))
    if node.location.is_valid():
        parts.append(f"<{node.location.to_string_short()}>")
    return " ".join(parts)


def format_tree(root: Node, indent: str = "  ") -> str:
    """Render ``root`` and its subtree as an indented outline."""
    lines = [_describe(root)]
    stack = [(child, 1) for child in reversed(root.children)]
    while stack:
        node, depth = stack.pop()
        lines.append(f"{indent * depth}{_describe(node)}")
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return "\n".join(lines)


def node_to_dict(node: Node) -> dict[str, Any]:
    """Convert a subtree into plain JSON-serializable data.

    Only populated attributes are emitted to keep dumps readable.
    """
    payload: dict[str, Any] = {"kind": node.kind_name}
    for key in ("name", "qualified_name", "display_name", "usr"):
        value = getattr(node, key)
        if value:
            payload[key] = value
    if node.location.is_valid():
        payload["location"] = node.location.to_string()
    if node.type.is_valid():
        payload["type"] = node.type.spelling
    if node.return_type.is_valid():
        payload["return_type"] = node.return_type.spelling
    if node.access.value != "invalid":
        payload["access"] = node.access.value
    if node.storage_class.value != "none":
        payload["storage_class"] = node.storage_class.value

    flags = sorted(
        key
        for key, value in vars(node).items()
        if (key.startswith("is_") or key.startswith("has_")) and value is True
    )
    if flags:
        payload["flags"] = flags
    if node.is_bitfield:
        payload["bitfield_width"] = node.bitfield_width
    if node.kind_name == "enum_constant_decl":
        payload["enum_value"] = node.enum_value
    if node.default_value:
        payload["default_value"] = node.default_value
    if node.underlying_type:
        payload["underlying_type"] = node.underlying_type
    if node.brief_comment:
        payload["brief"] = node.brief_comment
    if node.tags:
        payload["tags"] = [{"name": tag.name, "args": list(tag.args)} for tag in node.tags]
    if node.children:
        payload["children"] = [node_to_dict(child) for child in node.children]
    return payload
