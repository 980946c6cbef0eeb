"""
Declaration tree building from tree-sitter syntax trees.

This module walks a parsed C++ syntax tree and produces the ``ast_model``
node tree: one ``Node`` per declaration, populated with names, USR,
location, type information, modifiers, doc comments and tags.

Tree-sitter has no semantic analysis, so a few facts are recovered from
source text instead of the grammar (pure/deleted/defaulted markers,
trailing method qualifiers, declaration keywords). Names used across
scopes are resolved only against declarations already seen in the same
translation unit.
"""

import ast
import logging
import operator
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from tree_sitter import Node as SyntaxNode
from tree_sitter import Tree

from ast_model.kinds import AccessSpecifier, NodeKind, StorageClass
from ast_model.node import Node, create_node
from ast_model.source import SourceLocation, SourceRange
from ast_model.tags import parse_tags
from ast_model.type_info import TypeInfo
from core.usr_contract import (
    USR_ANONYMOUS_NAMESPACE,
    USR_CLASS_TEMPLATE,
    USR_ENUM,
    USR_FIELD,
    USR_NAMESPACE,
    USR_NAMESPACE_ALIAS,
    USR_RECORD,
    USR_TYPE_ALIAS,
    USR_TYPEDEF,
    USR_UNION,
    USR_USING_DECLARATION,
    USR_VARIABLE,
    make_callable_usr,
    make_member_usr,
    make_usr,
    normalize_cpp_entity_name,
)
from extraction.comments import (
    extract_attribute_annotations,
    extract_brief,
    extract_tag_annotations,
    get_preceding_comments,
    get_trailing_comment,
)
from extraction.config import (
    ACCESS_SPECIFIER_NODE,
    ALIAS_NODE,
    COMMENT_NODE,
    DECLARATION_NODES,
    ENUM_SPECIFIER,
    FRIEND_NODE,
    FUNCTION_DEFINITION_NODES,
    LINKAGE_NODE,
    NAME_NODES,
    NAMESPACE_ALIAS_NODE,
    NAMESPACE_NODE,
    PARAMETER_NODES,
    PREPROCESSOR_CONTAINERS,
    RECORD_SPECIFIERS,
    STATIC_ASSERT_NODE,
    TEMPLATE_PARAMETER_KINDS,
    TEMPLATE_WRAPPER,
    TYPEDEF_NODE,
    USING_NODE,
)

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_ATTRIBUTE_RE = re.compile(r"\[\[.*?\]\]|__attribute__\s*\(\(.*?\)\)", re.S)
_PURE_RE = re.compile(r"=\s*0\b")
_DELETED_RE = re.compile(r"=\s*delete\b")
_DEFAULTED_RE = re.compile(r"=\s*default\b")
_NOEXCEPT_FALSE_RE = re.compile(r"\bnoexcept\s*\(\s*false\s*\)")
_INITIALIZER_COLON_RE = re.compile(r"(?<!:):(?!:)")
_CONVERSION_NAME_RE = re.compile(r"^operator\s+[A-Za-z_]")
_USING_NAMESPACE_RE = re.compile(r"^using\s+namespace\s+")
_INT_SUFFIX_RE = re.compile(r"\b(0[xX][0-9a-fA-F]+|\d+)[uUlL]+\b")
_OCTAL_RE = re.compile(r"\b0([0-7]+)\b")
_QUALIFIED_REF_RE = re.compile(r"(?:[A-Za-z_]\w*::)+([A-Za-z_]\w*)")
_C_DIVISION_RE = re.compile(r"(?<!/)/(?!/)")

_BODY_NODES = {"compound_statement", "try_statement", "function_try_block"}
_ABSTRACT_POINTER = "abstract_pointer_declarator"
_ABSTRACT_REFERENCE = "abstract_reference_declarator"
_ABSTRACT_ARRAY = "abstract_array_declarator"
_ABSTRACT_FUNCTION = "abstract_function_declarator"

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.BitOr: operator.or_,
    ast.BitAnd: operator.and_,
    ast.BitXor: operator.xor,
    ast.LShift: operator.lshift,
    ast.RShift: operator.rshift,
}

_UNARY_OPERATORS = {
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
    ast.Invert: operator.invert,
}

_STORAGE_KEYWORDS = (
    ("thread_local", StorageClass.THREAD_LOCAL),
    ("extern", StorageClass.EXTERN),
    ("static", StorageClass.STATIC),
    ("register", StorageClass.REGISTER),
)


@dataclass(frozen=True)
class _Scope:
    """Lexical scope while walking: qualified names and owner USR."""

    names: Tuple[str, ...] = ()
    usr: str = ""
    record_name: str = ""

    def qualify(self, name: str) -> str:
        return "::".join(self.names + (name,)) if name else "::".join(self.names)


@dataclass
class _DeclaratorInfo:
    """Flattened view of a (possibly nested) declarator chain."""

    name_node: Optional[SyntaxNode] = None
    pointer_suffix: str = ""
    array_suffix: str = ""
    function: Optional[SyntaxNode] = None
    is_function_pointer: bool = False
    value: Optional[SyntaxNode] = None


@dataclass
class _ParameterInfo:
    syntax: SyntaxNode
    name: str
    spelling: str
    name_node: Optional[SyntaxNode]
    default_value: str = ""
    is_pack: bool = False


def _normalize(text: str) -> str:
    return _SPACE_RE.sub(" ", text).strip()


def _strip_template_args(name: str) -> str:
    index = name.find("<")
    return name[:index].strip() if index > 0 else name


def split_qualified_name(text: str) -> List[str]:
    """Split ``a::b<c::d>::e`` on ``::`` outside template argument lists."""
    parts: List[str] = []
    depth = 0
    start = 0
    index = 0
    while index < len(text):
        char = text[index]
        if char == "<":
            depth += 1
        elif char == ">":
            depth = max(0, depth - 1)
        elif depth == 0 and text.startswith("::", index):
            parts.append(text[start:index].strip())
            index += 2
            start = index
            continue
        index += 1
    parts.append(text[start:].strip())
    return [part for part in parts if part]


def _keywords(text: str) -> Set[str]:
    return set(_WORD_RE.findall(_ATTRIBUTE_RE.sub(" ", text)))


def _parse_access(text: str) -> AccessSpecifier:
    word = text.strip().rstrip(":").strip()
    try:
        return AccessSpecifier(word)
    except ValueError:
        return AccessSpecifier.INVALID


def _storage_class(keywords: Set[str]) -> StorageClass:
    for keyword, storage in _STORAGE_KEYWORDS:
        if keyword in keywords:
            return storage
    return StorageClass.NONE


def _compose_spelling(base: str, pointer_suffix: str = "", array_suffix: str = "") -> str:
    spelling = base
    if pointer_suffix:
        spelling = f"{spelling} {pointer_suffix}"
    if array_suffix:
        spelling = f"{spelling}{array_suffix}"
    return spelling


def _evaluate_expression(node: ast.AST, known: Dict[str, int]) -> int:
    if isinstance(node, ast.Constant) and isinstance(node.value, int):
        return node.value
    if isinstance(node, ast.Name) and node.id in known:
        return known[node.id]
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate_expression(node.operand, known))
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_expression(node.left, known)
        right = _evaluate_expression(node.right, known)
        return _BINARY_OPERATORS[type(node.op)](left, right)
    raise ValueError(f"unsupported enumerator expression: {ast.dump(node)}")


def evaluate_enum_value(expression: str, known: Dict[str, int]) -> Optional[int]:
    """Evaluate a constant enumerator initializer.

    Supports integer literals (with C suffixes), references to previously
    seen enumerators and arithmetic/bitwise operators. Anything else
    yields None.
    """
    text = expression.replace("'", "")
    text = _INT_SUFFIX_RE.sub(r"\1", text)
    text = _OCTAL_RE.sub(r"0o\1", text)
    text = _QUALIFIED_REF_RE.sub(r"\1", text)
    text = _C_DIVISION_RE.sub("//", text)
    try:
        tree = ast.parse(text.strip(), mode="eval")
        return _evaluate_expression(tree.body, known)
    except (SyntaxError, ArithmeticError, ValueError):
        return None


class TreeBuilder:
    """Builds one translation-unit ``Node`` tree from a syntax tree."""

    def __init__(self, source_bytes: bytes, file_path: str = ""):
        self._source = source_bytes
        self._file_path = file_path
        # qualified name (template args stripped) -> (usr, is_record)
        self._known_scopes: Dict[str, Tuple[str, bool]] = {}
        self.nodes_built = 0

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def build(self, tree: Tree) -> Node:
        root = create_node(NodeKind.TRANSLATION_UNIT)
        root.name = self._file_path
        root.display_name = self._file_path
        root.location = self._location(tree.root_node)
        root.extent = self._extent(tree.root_node)
        self._visit_container(tree.root_node, root, _Scope(), AccessSpecifier.INVALID)
        logger.debug("Built %d declaration nodes for %s", self.nodes_built, self._file_path)
        return root

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _text(self, syntax: Optional[SyntaxNode]) -> str:
        if syntax is None:
            return ""
        return self._source[syntax.start_byte:syntax.end_byte].decode("utf-8", errors="replace")

    def _slice(self, start: int, end: int) -> str:
        if end <= start:
            return ""
        return self._source[start:end].decode("utf-8", errors="replace")

    def _location(self, syntax: SyntaxNode) -> SourceLocation:
        row, column = syntax.start_point
        return SourceLocation(self._file_path, row + 1, column + 1, syntax.start_byte)

    def _extent(self, syntax: SyntaxNode) -> SourceRange:
        end_row, end_column = syntax.end_point
        return SourceRange(
            start=self._location(syntax),
            end=SourceLocation(self._file_path, end_row + 1, end_column + 1, syntax.end_byte),
        )

    def _new_node(
        self,
        kind: NodeKind,
        syntax: SyntaxNode,
        anchor: SyntaxNode,
        name_node: Optional[SyntaxNode] = None,
    ) -> Node:
        node = create_node(kind)
        node.location = self._location(name_node if name_node is not None else syntax)
        node.extent = self._extent(anchor)
        self.nodes_built += 1
        return node

    def _attach_documentation(
        self,
        node: Node,
        anchor: SyntaxNode,
        header_text: str,
        allow_trailing: bool = False,
    ) -> None:
        comment = get_preceding_comments(anchor, self._source)
        if comment is None and allow_trailing:
            comment = get_trailing_comment(anchor, self._source)
        annotations: List[str] = []
        if comment:
            node.comment = comment
            node.brief_comment = extract_brief(comment)
            annotations.extend(extract_tag_annotations(comment))
        annotations.extend(extract_attribute_annotations(header_text))
        if annotations:
            node.add_tags(parse_tags(annotations))

    def _register_scope(self, qualified_name: str, usr: str, is_record: bool) -> None:
        key = "::".join(_strip_template_args(p) for p in split_qualified_name(qualified_name))
        if key and usr:
            self._known_scopes.setdefault(key, (usr, is_record))

    def _resolve_scope(self, scope: _Scope, path: List[str]) -> Tuple[str, bool]:
        """USR of a scope named by a qualified-name prefix, and whether it is a record."""
        stripped = [_strip_template_args(p) for p in path]
        for depth in range(len(scope.names), -1, -1):
            candidate = "::".join(
                [_strip_template_args(n) for n in scope.names[:depth]] + stripped
            )
            if candidate in self._known_scopes:
                return self._known_scopes[candidate]
        usr = scope.usr
        for component in stripped:
            usr = make_usr(usr, USR_RECORD, component)
        return usr, True

    def _base_type_spelling(self, declaration: SyntaxNode, type_node: Optional[SyntaxNode]) -> str:
        """Type text with leading/trailing cv qualifiers of the declaration."""
        if type_node is None:
            return ""
        if type_node.type in RECORD_SPECIFIERS or type_node.type == ENUM_SPECIFIER:
            name_node = type_node.child_by_field_name("name")
            if type_node.child_by_field_name("body") is not None or name_node is None:
                base = _normalize(self._text(name_node)) if name_node is not None else "(anonymous)"
            else:
                base = _normalize(self._text(type_node))
        else:
            base = _normalize(self._text(type_node))

        prefix = _keywords(self._slice(declaration.start_byte, type_node.start_byte))
        declarator = declaration.child_by_field_name("declarator")
        suffix_end = declarator.start_byte if declarator is not None else type_node.end_byte
        suffix = _keywords(self._slice(type_node.end_byte, suffix_end))
        qualifiers = [q for q in ("const", "volatile") if q in prefix or q in suffix]
        if qualifiers:
            base = " ".join(qualifiers + [base])
        return base

    def _unwrap_declarator(self, declarator: Optional[SyntaxNode]) -> _DeclaratorInfo:
        info = _DeclaratorInfo()
        node = declarator
        while node is not None:
            node_type = node.type
            if node_type == "init_declarator":
                info.value = node.child_by_field_name("value")
                node = node.child_by_field_name("declarator")
            elif node_type in ("pointer_declarator", _ABSTRACT_POINTER):
                qualifiers = " ".join(
                    self._text(c) for c in node.named_children if c.type == "type_qualifier"
                )
                if info.function is None:
                    info.pointer_suffix += "*" + qualifiers
                node = node.child_by_field_name("declarator")
            elif node_type in ("reference_declarator", _ABSTRACT_REFERENCE):
                token = "&&" if any(c.type == "&&" for c in node.children) else "&"
                if info.function is None:
                    info.pointer_suffix += token
                node = node.named_children[-1] if node.named_children else None
            elif node_type in ("array_declarator", _ABSTRACT_ARRAY):
                size = node.child_by_field_name("size")
                info.array_suffix = f"[{_normalize(self._text(size))}]" + info.array_suffix
                node = node.child_by_field_name("declarator")
            elif node_type in ("function_declarator", _ABSTRACT_FUNCTION):
                if info.function is None:
                    info.function = node
                inner = node.child_by_field_name("declarator")
                if inner is not None and inner.type in ("parenthesized_declarator", "abstract_parenthesized_declarator", _ABSTRACT_POINTER):
                    info.is_function_pointer = True
                node = inner
            elif node_type in ("parenthesized_declarator", "abstract_parenthesized_declarator", "attributed_declarator"):
                node = node.named_children[0] if node.named_children else None
            elif node_type == "operator_cast":
                info.name_node = node
                if info.function is None:
                    info.function = node.child_by_field_name("declarator")
                break
            elif node_type in NAME_NODES:
                info.name_node = node
                break
            else:
                break
        return info

    def _function_pointer_spelling(self, base: str, info: _DeclaratorInfo) -> str:
        params, variadic = self._parameter_infos(
            info.function.child_by_field_name("parameters") if info.function else None
        )
        spellings = [p.spelling for p in params] + (["..."] if variadic else [])
        return f"{_compose_spelling(base, info.pointer_suffix)} (*)({', '.join(spellings)})"

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _visit_container(
        self,
        container: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
    ) -> AccessSpecifier:
        for child in container.named_children:
            if child.type == COMMENT_NODE:
                continue
            if child.type == ACCESS_SPECIFIER_NODE:
                access = _parse_access(self._text(child))
                continue
            if child.type in PREPROCESSOR_CONTAINERS:
                access = self._visit_container(child, parent, scope, access)
                continue
            self._visit(child, parent, scope, access)
        return access

    def _visit(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        template: Optional[SyntaxNode] = None,
        anchor: Optional[SyntaxNode] = None,
    ) -> None:
        node_type = syntax.type
        anchor = anchor or syntax
        if node_type == NAMESPACE_NODE:
            self._build_namespace(syntax, parent, scope)
        elif node_type == NAMESPACE_ALIAS_NODE:
            self._build_namespace_alias(syntax, parent, scope)
        elif node_type == USING_NODE:
            self._build_using(syntax, parent, scope, access)
        elif node_type == ALIAS_NODE:
            self._build_type_alias(syntax, parent, scope, access, template, anchor)
        elif node_type == TYPEDEF_NODE:
            self._build_typedef(syntax, parent, scope, access, anchor)
        elif node_type in RECORD_SPECIFIERS:
            self._build_record(syntax, parent, scope, access, template, anchor)
        elif node_type == ENUM_SPECIFIER:
            self._build_enum(syntax, parent, scope, access, anchor)
        elif node_type in DECLARATION_NODES or node_type in FUNCTION_DEFINITION_NODES:
            self._build_declaration(syntax, parent, scope, access, template, anchor)
        elif node_type == TEMPLATE_WRAPPER:
            self._build_template(syntax, parent, scope, access, anchor)
        elif node_type == FRIEND_NODE:
            self._build_friend(syntax, parent, access, anchor)
        elif node_type == STATIC_ASSERT_NODE:
            self._build_static_assert(syntax, parent)
        elif node_type == LINKAGE_NODE:
            self._build_linkage(syntax, parent, scope, access)
        elif node_type == "ERROR":
            logger.debug(
                "Skipping unparsable region at %s:%d",
                self._file_path,
                syntax.start_point[0] + 1,
            )

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def _build_namespace(self, syntax: SyntaxNode, parent: Node, scope: _Scope) -> None:
        name_node = syntax.child_by_field_name("name")
        body = syntax.child_by_field_name("body")
        is_inline = "inline" in _keywords(self._slice(syntax.start_byte, (name_node or body or syntax).start_byte))
        names = split_qualified_name(_normalize(self._text(name_node))) if name_node else [""]

        current_parent = parent
        current_scope = scope
        for index, name in enumerate(names):
            node = self._new_node(NodeKind.NAMESPACE_DECL, syntax, syntax, name_node)
            node.name = name
            node.display_name = name
            node.is_definition = body is not None
            if name:
                node.qualified_name = current_scope.qualify(name)
                node.usr = make_usr(current_scope.usr, USR_NAMESPACE, name)
                node.is_inline = is_inline and index == len(names) - 1
                self._register_scope(node.qualified_name, node.usr, is_record=False)
                next_scope = _Scope(names=current_scope.names + (name,), usr=node.usr)
            else:
                node.is_anonymous = True
                node.qualified_name = current_scope.qualify("")
                node.usr = make_usr(current_scope.usr, USR_ANONYMOUS_NAMESPACE)
                next_scope = _Scope(names=current_scope.names, usr=node.usr)
            if index == 0:
                self._attach_documentation(node, syntax, self._slice(syntax.start_byte, (body or syntax).start_byte))
            current_parent.add_child(node)
            current_parent = node
            current_scope = next_scope

        if body is not None:
            self._visit_container(body, current_parent, current_scope, AccessSpecifier.INVALID)

    def _build_namespace_alias(self, syntax: SyntaxNode, parent: Node, scope: _Scope) -> None:
        name_node = syntax.child_by_field_name("name")
        name = _normalize(self._text(name_node))
        text = _normalize(self._text(syntax)).rstrip(";")
        target = text.split("=", 1)[1].strip() if "=" in text else ""
        node = self._new_node(NodeKind.NAMESPACE_ALIAS, syntax, syntax, name_node)
        node.name = name
        node.qualified_name = scope.qualify(name)
        node.display_name = f"{name} = {target}" if target else name
        node.usr = make_usr(scope.usr, USR_NAMESPACE_ALIAS, name) if name else ""
        parent.add_child(node)

    def _build_using(self, syntax: SyntaxNode, parent: Node, scope: _Scope, access: AccessSpecifier) -> None:
        text = _normalize(self._text(syntax)).rstrip(";").strip()
        if _USING_NAMESPACE_RE.match(text):
            target = _USING_NAMESPACE_RE.sub("", text).strip()
            node = self._new_node(NodeKind.USING_DIRECTIVE, syntax, syntax)
            node.name = target
            node.display_name = target
            node.qualified_name = target
        else:
            target = normalize_cpp_entity_name(text[len("using"):])
            if target.startswith("typename "):
                target = target[len("typename "):]
            components = split_qualified_name(target)
            node = self._new_node(NodeKind.USING_DECLARATION, syntax, syntax)
            node.name = components[-1] if components else target
            node.display_name = target
            node.qualified_name = scope.qualify(node.name)
            node.usr = make_usr(scope.usr, USR_USING_DECLARATION, target) if target else ""
            if scope.record_name:
                node.access = access
        parent.add_child(node)

    def _build_linkage(self, syntax: SyntaxNode, parent: Node, scope: _Scope, access: AccessSpecifier) -> None:
        value = syntax.child_by_field_name("value")
        body = syntax.child_by_field_name("body")
        node = self._new_node(NodeKind.LINKAGE_SPEC, syntax, syntax)
        node.name = self._text(value).strip().strip('"')
        node.display_name = node.name
        parent.add_child(node)
        if body is None:
            return
        if body.type == "declaration_list":
            self._visit_container(body, node, scope, access)
        else:
            self._visit(body, node, scope, access, anchor=syntax)

    def _build_template(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        anchor: SyntaxNode,
    ) -> None:
        parameters = syntax.child_by_field_name("parameters")
        for child in syntax.named_children:
            if child.type == COMMENT_NODE:
                continue
            if parameters is not None and child.id == parameters.id:
                continue
            self._visit(child, parent, scope, access, template=parameters, anchor=anchor)
            return

    def _add_template_parameters(self, owner: Node, parameters: Optional[SyntaxNode]) -> None:
        if parameters is None:
            return
        for child in parameters.named_children:
            kind = TEMPLATE_PARAMETER_KINDS.get(child.type)
            if kind is None:
                continue
            node = self._new_node(kind, child, child)
            if kind == NodeKind.TEMPLATE_NON_TYPE_PARAMETER:
                type_node = child.child_by_field_name("type")
                info = self._unwrap_declarator(child.child_by_field_name("declarator"))
                node.name = _normalize(self._text(info.name_node))
                spelling = _compose_spelling(
                    self._base_type_spelling(child, type_node), info.pointer_suffix, info.array_suffix
                )
                node.type = TypeInfo.from_spelling(spelling)
                default = child.child_by_field_name("default_value")
            else:
                name_node = child.child_by_field_name("name")
                if name_node is None:
                    identifiers = [c for c in child.named_children if c.type == "type_identifier"]
                    if child.type == "template_template_parameter_declaration":
                        nested = [c for c in child.named_children if c.type in TEMPLATE_PARAMETER_KINDS]
                        if nested:
                            identifiers = [c for c in nested[-1].named_children if c.type == "type_identifier"]
                    name_node = identifiers[-1] if identifiers else None
                node.name = _normalize(self._text(name_node))
                default = child.child_by_field_name("default_type")
            node.is_variadic = child.type.startswith("variadic") or "..." in self._text(child)
            if default is not None:
                node.has_default_value = True
                node.default_value = _normalize(self._text(default))
            node.display_name = node.name
            node.qualified_name = node.name
            node.usr = make_member_usr(owner.usr, node.name)
            owner.add_child(node)

    # ------------------------------------------------------------------
    # Types
    # ------------------------------------------------------------------

    def _build_record(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        template: Optional[SyntaxNode] = None,
        anchor: Optional[SyntaxNode] = None,
        typedef_name: str = "",
    ) -> Node:
        anchor = anchor or syntax
        kind = RECORD_SPECIFIERS[syntax.type]
        name_node = syntax.child_by_field_name("name")
        body = syntax.child_by_field_name("body")
        is_specialization = name_node is not None and name_node.type == "template_type"
        has_template_params = template is not None and bool(template.named_children)

        if has_template_params and not is_specialization:
            kind = NodeKind.CLASS_TEMPLATE

        node = self._new_node(kind, syntax, anchor, name_node)
        owner_usr = scope.usr
        qualified_path: List[str] = []
        if name_node is None:
            node.is_anonymous = True
        else:
            full_name = normalize_cpp_entity_name(self._text(name_node))
            components = split_qualified_name(full_name)
            if len(components) > 1:
                owner_usr, _ = self._resolve_scope(scope, components[:-1])
                qualified_path = components[:-1]
            last = components[-1] if components else full_name
            node.name = _strip_template_args(last) if is_specialization else last
            node.display_name = last

        # Unnamed records have no qualified name of their own.
        node.qualified_name = (
            scope.qualify("::".join(qualified_path + [node.display_name])) if node.name else ""
        )
        node.is_template = has_template_params
        node.is_template_specialization = is_specialization
        node.is_definition = body is not None
        node.access = access if scope.record_name else AccessSpecifier.INVALID
        node.type = TypeInfo.from_spelling(node.qualified_name or node.name)

        if kind == NodeKind.CLASS_TEMPLATE:
            marker = USR_CLASS_TEMPLATE
        elif kind == NodeKind.UNION_DECL:
            marker = USR_UNION
        else:
            marker = USR_RECORD
        # Members of an unnamed record are keyed under a line-local scope.
        if node.name:
            node.usr = make_usr(owner_usr, marker, node.display_name)
            member_scope_usr = node.usr
        elif typedef_name:
            node.usr = make_usr(owner_usr, f"{marker}A", typedef_name)
            member_scope_usr = node.usr
        else:
            member_scope_usr = make_usr(owner_usr, f"{marker}a", str(syntax.start_point[0] + 1))

        header_end = body.start_byte if body is not None else syntax.end_byte
        self._attach_documentation(node, anchor, self._slice(anchor.start_byte, header_end))
        for child in syntax.children:
            if child.type == "virtual_specifier" and self._text(child).strip() == "final":
                node.is_final = True

        parent.add_child(node)
        if node.name:
            self._register_scope(node.qualified_name, node.usr, is_record=True)
        self._add_template_parameters(node, template)

        is_class_keyword = syntax.type == "class_specifier"
        default_access = AccessSpecifier.PRIVATE if is_class_keyword else AccessSpecifier.PUBLIC
        for child in syntax.named_children:
            if child.type == "base_class_clause":
                self._add_bases(node, child, default_access)

        if body is not None:
            if node.name:
                child_scope = _Scope(
                    names=scope.names + tuple(qualified_path) + (node.name,),
                    usr=member_scope_usr,
                    record_name=node.name,
                )
            else:
                child_scope = _Scope(
                    names=scope.names,
                    usr=member_scope_usr,
                    record_name=scope.record_name or "(anonymous)",
                )
            self._visit_container(body, node, child_scope, default_access)
        return node

    def _add_bases(self, record: Node, clause: SyntaxNode, default_access: AccessSpecifier) -> None:
        pending_access: Optional[AccessSpecifier] = None
        pending_virtual = False
        for child in clause.children:
            text = _normalize(self._text(child))
            if child.type == ",":
                pending_access, pending_virtual = None, False
            elif child.type == ACCESS_SPECIFIER_NODE or text in ("public", "protected", "private"):
                pending_access = _parse_access(text)
            elif text == "virtual":
                pending_virtual = True
            elif child.is_named and child.type != COMMENT_NODE:
                base = self._new_node(NodeKind.BASE_SPECIFIER, child, child)
                base.name = normalize_cpp_entity_name(text)
                base.display_name = base.name
                base.qualified_name = base.name
                base.type = TypeInfo.from_spelling(base.name)
                base.access = pending_access or default_access
                base.is_virtual_base = pending_virtual
                record.add_child(base)
                pending_access, pending_virtual = None, False

    def _build_enum(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        anchor: Optional[SyntaxNode] = None,
    ) -> Node:
        anchor = anchor or syntax
        name_node = syntax.child_by_field_name("name")
        body = syntax.child_by_field_name("body")
        base = syntax.child_by_field_name("base")

        node = self._new_node(NodeKind.ENUM_DECL, syntax, anchor, name_node)
        node.name = normalize_cpp_entity_name(self._text(name_node)) if name_node else ""
        node.display_name = node.name
        node.is_anonymous = name_node is None
        node.qualified_name = scope.qualify(node.name) if node.name else ""
        node.is_scoped_enum = any(c.type in ("class", "struct") for c in syntax.children)
        node.underlying_type = _normalize(self._text(base))
        node.is_definition = body is not None
        node.access = access if scope.record_name else AccessSpecifier.INVALID
        node.type = TypeInfo.from_spelling(node.qualified_name or node.name)
        if node.name:
            node.usr = make_usr(scope.usr, USR_ENUM, node.name)
            constant_scope_usr = node.usr
        else:
            constant_scope_usr = make_usr(scope.usr, f"{USR_ENUM}a", str(syntax.start_point[0] + 1))

        header_end = body.start_byte if body is not None else syntax.end_byte
        self._attach_documentation(node, anchor, self._slice(anchor.start_byte, header_end))
        parent.add_child(node)

        if body is None:
            return node

        known: Dict[str, int] = {}
        next_value = 0
        constant_prefix = node.qualified_name if node.name else scope.qualify("")
        for child in body.named_children:
            if child.type != "enumerator":
                continue
            constant_name_node = child.child_by_field_name("name")
            value_node = child.child_by_field_name("value")
            constant = self._new_node(NodeKind.ENUM_CONSTANT_DECL, child, child, constant_name_node)
            constant.name = _normalize(self._text(constant_name_node))
            constant.display_name = constant.name
            constant.qualified_name = (
                f"{constant_prefix}::{constant.name}" if constant_prefix else constant.name
            )
            constant.usr = make_member_usr(constant_scope_usr, constant.name)
            constant.type = TypeInfo.from_spelling(node.qualified_name or node.underlying_type or "int")
            if value_node is not None:
                constant.default_value = _normalize(self._text(value_node))
                evaluated = evaluate_enum_value(constant.default_value, known)
                if evaluated is None:
                    logger.debug(
                        "Cannot evaluate enumerator %s = %s; using %d",
                        constant.qualified_name,
                        constant.default_value,
                        next_value,
                    )
                else:
                    next_value = evaluated
            constant.enum_value = next_value
            known[constant.name] = next_value
            next_value += 1
            self._attach_documentation(constant, child, self._text(child), allow_trailing=True)
            node.add_child(constant)
        return node

    def _build_typedef(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        anchor: SyntaxNode,
    ) -> None:
        type_node = syntax.child_by_field_name("type")
        declarators = syntax.children_by_field_name("declarator")
        infos = [self._unwrap_declarator(d) for d in declarators]

        if type_node is not None and type_node.child_by_field_name("body") is not None:
            first_name = _normalize(self._text(infos[0].name_node)) if infos else ""
            if type_node.type in RECORD_SPECIFIERS:
                self._build_record(type_node, parent, scope, access, anchor=anchor, typedef_name=first_name)
            elif type_node.type == ENUM_SPECIFIER:
                self._build_enum(type_node, parent, scope, access, anchor=anchor)

        base = self._base_type_spelling(syntax, type_node)
        for info in infos:
            if info.is_function_pointer:
                spelling = self._function_pointer_spelling(base, info)
            else:
                spelling = _compose_spelling(base, info.pointer_suffix, info.array_suffix)
            node = self._new_node(NodeKind.TYPEDEF_DECL, syntax, anchor, info.name_node)
            node.name = _normalize(self._text(info.name_node))
            node.display_name = node.name
            node.qualified_name = scope.qualify(node.name)
            node.underlying_type = spelling
            node.type = TypeInfo.from_spelling(spelling)
            node.is_definition = True
            node.access = access if scope.record_name else AccessSpecifier.INVALID
            node.usr = make_usr(scope.usr, USR_TYPEDEF, node.name) if node.name else ""
            self._attach_documentation(node, anchor, self._text(syntax))
            parent.add_child(node)

    def _build_type_alias(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        template: Optional[SyntaxNode],
        anchor: SyntaxNode,
    ) -> None:
        name_node = syntax.child_by_field_name("name")
        type_node = syntax.child_by_field_name("type")
        node = self._new_node(NodeKind.TYPE_ALIAS_DECL, syntax, anchor, name_node)
        node.name = _normalize(self._text(name_node))
        node.display_name = node.name
        node.qualified_name = scope.qualify(node.name)
        node.underlying_type = _normalize(self._text(type_node))
        node.type = TypeInfo.from_spelling(node.underlying_type)
        node.is_definition = True
        node.is_template = template is not None and bool(template.named_children)
        node.access = access if scope.record_name else AccessSpecifier.INVALID
        node.usr = make_usr(scope.usr, USR_TYPE_ALIAS, node.name) if node.name else ""
        self._attach_documentation(node, anchor, self._text(syntax))
        parent.add_child(node)
        self._add_template_parameters(node, template)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _build_declaration(
        self,
        syntax: SyntaxNode,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        template: Optional[SyntaxNode],
        anchor: SyntaxNode,
    ) -> None:
        type_node = syntax.child_by_field_name("type")
        declarators = syntax.children_by_field_name("declarator")

        if type_node is not None and (type_node.type in RECORD_SPECIFIERS or type_node.type == ENUM_SPECIFIER):
            if type_node.child_by_field_name("body") is not None or not declarators:
                self._visit(type_node, parent, scope, access, template, anchor=anchor)
                template = None

        for declarator in declarators:
            info = self._unwrap_declarator(declarator)
            if info.function is not None and not info.is_function_pointer:
                self._build_callable(syntax, info, parent, scope, access, template, anchor)
            else:
                self._build_variable(syntax, info, parent, scope, access, template, anchor)

    def _parameter_infos(self, parameter_list: Optional[SyntaxNode]) -> Tuple[List[_ParameterInfo], bool]:
        if parameter_list is None:
            return [], False
        infos: List[_ParameterInfo] = []
        variadic = False
        for child in parameter_list.children:
            if child.type in ("...", "variadic_parameter"):
                variadic = True
                continue
            if child.type not in PARAMETER_NODES:
                continue
            type_node = child.child_by_field_name("type")
            info = self._unwrap_declarator(child.child_by_field_name("declarator"))
            base = self._base_type_spelling(child, type_node)
            if info.is_function_pointer:
                spelling = self._function_pointer_spelling(base, info)
            else:
                spelling = _compose_spelling(base, info.pointer_suffix, info.array_suffix)
            is_pack = child.type == "variadic_parameter_declaration"
            if is_pack:
                spelling = f"{spelling}..."
            if spelling == "void" and info.name_node is None and len(parameter_list.named_children) == 1:
                continue
            default = child.child_by_field_name("default_value")
            infos.append(_ParameterInfo(
                syntax=child,
                name=_normalize(self._text(info.name_node)),
                spelling=spelling,
                name_node=info.name_node,
                default_value=_normalize(self._text(default)),
                is_pack=is_pack,
            ))
        return infos, variadic

    def _callable_kind(
        self,
        name: str,
        name_node: SyntaxNode,
        record_name: str,
        in_record: bool,
        template: Optional[SyntaxNode],
    ) -> NodeKind:
        if template is not None and template.named_children:
            return NodeKind.FUNCTION_TEMPLATE
        if not in_record:
            return NodeKind.FUNCTION_DECL
        if name_node.type == "destructor_name" or name.startswith("~"):
            return NodeKind.DESTRUCTOR_DECL
        if name_node.type == "operator_cast" or (
            _CONVERSION_NAME_RE.match(name) and not name.startswith(("operator new", "operator delete"))
        ):
            return NodeKind.CONVERSION_DECL
        if _strip_template_args(name) == _strip_template_args(record_name):
            return NodeKind.CONSTRUCTOR_DECL
        return NodeKind.METHOD_DECL

    def _build_callable(
        self,
        syntax: SyntaxNode,
        info: _DeclaratorInfo,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        template: Optional[SyntaxNode],
        anchor: SyntaxNode,
    ) -> None:
        function = info.function
        name_node = info.name_node or function
        parameters = function.child_by_field_name("parameters")

        if name_node.type == "operator_cast":
            raw_name = self._slice(name_node.start_byte, function.start_byte)
        else:
            raw_name = self._text(name_node).split("(")[0]
        full_name = normalize_cpp_entity_name(raw_name)

        components = split_qualified_name(full_name) if name_node.type == "qualified_identifier" else [full_name]
        if len(components) > 1:
            owner_usr, in_record = self._resolve_scope(scope, components[:-1])
            record_name = _strip_template_args(components[-2]) if in_record else ""
            lexically_in_record = False
        else:
            owner_usr = scope.usr
            in_record = bool(scope.record_name)
            record_name = scope.record_name
            lexically_in_record = in_record
        name = components[-1] if components else full_name

        kind = self._callable_kind(name, name_node, record_name, in_record, template)
        params, variadic = self._parameter_infos(parameters)

        body = syntax.child_by_field_name("body")
        tail_end = body.start_byte if body is not None and body.type in _BODY_NODES else syntax.end_byte
        post_start = parameters.end_byte if parameters is not None else function.end_byte
        tail = self._slice(post_start, tail_end)
        qualifier_text = _INITIALIZER_COLON_RE.split(tail.split("->")[0], maxsplit=1)[0]
        trailing = _keywords(qualifier_text)
        first_part = syntax.child_by_field_name("type") or syntax.child_by_field_name("declarator") or function
        leading = _keywords(self._slice(syntax.start_byte, first_part.start_byte))

        node = self._new_node(kind, syntax, anchor, name_node)
        node.name = name
        node.qualified_name = scope.qualify(full_name)
        node.is_template = kind == NodeKind.FUNCTION_TEMPLATE
        node.is_template_specialization = template is not None and not template.named_children
        node.is_definition = syntax.type in FUNCTION_DEFINITION_NODES
        node.is_const_method = "const" in trailing
        node.is_override = "override" in trailing
        node.is_final = "final" in trailing
        node.is_noexcept = "noexcept" in trailing and not _NOEXCEPT_FALSE_RE.search(qualifier_text)
        node.is_pure_virtual = bool(_PURE_RE.search(tail))
        node.is_deleted = bool(_DELETED_RE.search(tail))
        node.is_defaulted = bool(_DEFAULTED_RE.search(tail))
        node.is_virtual = "virtual" in leading or node.is_pure_virtual or node.is_override
        node.is_inline = "inline" in leading
        node.is_explicit = "explicit" in leading
        node.is_constexpr = bool(leading & {"constexpr", "consteval"})
        node.is_static = "static" in leading
        node.storage_class = _storage_class(leading)
        node.is_variadic = variadic
        node.access = access if lexically_in_record else AccessSpecifier.INVALID

        if kind in (NodeKind.CONSTRUCTOR_DECL, NodeKind.DESTRUCTOR_DECL):
            return_spelling = "void"
        elif kind == NodeKind.CONVERSION_DECL:
            return_spelling = normalize_cpp_entity_name(name[len("operator"):])
        else:
            return_spelling = _compose_spelling(
                self._base_type_spelling(syntax, syntax.child_by_field_name("type")),
                info.pointer_suffix,
            )
            trailing_return = next(
                (c for c in function.named_children if c.type == "trailing_return_type"), None
            )
            if trailing_return is not None:
                return_spelling = _normalize(self._text(trailing_return)).lstrip("->").strip()
        node.return_type = TypeInfo.from_spelling(return_spelling)

        param_spellings = [p.spelling for p in params] + (["..."] if variadic else [])
        function_spelling = f"{return_spelling} ({', '.join(param_spellings)})".strip()
        if node.is_const_method:
            function_spelling += " const"
        if node.is_noexcept:
            function_spelling += " noexcept"
        node.type = TypeInfo(spelling=function_spelling)
        node.display_name = f"{name}({', '.join(param_spellings)})"
        node.usr = make_callable_usr(
            owner_usr,
            name,
            param_spellings,
            is_const=node.is_const_method,
            is_template=node.is_template,
        )

        header = self._slice(anchor.start_byte, parameters.start_byte if parameters is not None else function.end_byte)
        self._attach_documentation(node, anchor, header + self._slice(post_start, tail_end), allow_trailing=True)
        parent.add_child(node)
        self._add_template_parameters(node, template)

        for param in params:
            self._add_parameter(node, param)

    def _add_parameter(self, owner: Node, param: _ParameterInfo) -> None:
        node = self._new_node(NodeKind.PARAMETER_DECL, param.syntax, param.syntax, param.name_node)
        node.name = param.name
        node.display_name = param.name
        node.qualified_name = param.name
        node.type = TypeInfo.from_spelling(param.spelling)
        node.is_variadic = param.is_pack
        node.is_definition = True
        if param.default_value:
            node.has_default_value = True
            node.default_value = param.default_value
        node.usr = make_member_usr(owner.usr, param.name)
        annotations = extract_attribute_annotations(self._text(param.syntax))
        if annotations:
            node.add_tags(parse_tags(annotations))
        owner.add_child(node)

    def _build_variable(
        self,
        syntax: SyntaxNode,
        info: _DeclaratorInfo,
        parent: Node,
        scope: _Scope,
        access: AccessSpecifier,
        template: Optional[SyntaxNode],
        anchor: SyntaxNode,
    ) -> None:
        type_node = syntax.child_by_field_name("type")
        first_part = type_node or syntax.child_by_field_name("declarator") or syntax
        leading = _keywords(self._slice(syntax.start_byte, first_part.start_byte))
        storage = _storage_class(leading)

        full_name = normalize_cpp_entity_name(self._text(info.name_node))
        components = split_qualified_name(full_name) or [""]
        if len(components) > 1:
            owner_usr, _ = self._resolve_scope(scope, components[:-1])
            lexically_in_record = False
        else:
            owner_usr = scope.usr
            lexically_in_record = bool(scope.record_name)
        name = components[-1]

        is_field = lexically_in_record and storage != StorageClass.STATIC
        kind = NodeKind.FIELD_DECL if is_field else NodeKind.VARIABLE_DECL

        base = self._base_type_spelling(syntax, type_node)
        if info.is_function_pointer:
            spelling = self._function_pointer_spelling(base, info)
        else:
            spelling = _compose_spelling(base, info.pointer_suffix, info.array_suffix)

        node = self._new_node(kind, syntax, anchor, info.name_node)
        node.name = name
        node.display_name = name
        node.qualified_name = scope.qualify(full_name) if name else ""
        node.type = TypeInfo.from_spelling(spelling)
        node.storage_class = storage
        node.is_static = storage == StorageClass.STATIC
        node.is_constexpr = "constexpr" in leading
        node.is_inline = "inline" in leading
        node.is_template = template is not None and bool(template.named_children)
        node.access = access if lexically_in_record else AccessSpecifier.INVALID

        value = info.value if info.value is not None else syntax.child_by_field_name("default_value")
        if value is not None:
            node.has_default_value = True
            node.default_value = _normalize(self._text(value)).lstrip("=").strip()

        for child in syntax.children:
            if child.type == "bitfield_clause":
                node.is_bitfield = True
                width = _normalize(self._text(child)).lstrip(":").strip()
                node.bitfield_width = int(width) if width.isdigit() else 0

        if kind == NodeKind.FIELD_DECL:
            node.usr = make_usr(owner_usr, USR_FIELD, name) if name else ""
        else:
            node.is_definition = storage != StorageClass.EXTERN and not lexically_in_record
            node.usr = make_usr(owner_usr, USR_VARIABLE, name) if name else ""

        self._attach_documentation(node, anchor, self._text(syntax), allow_trailing=True)
        parent.add_child(node)
        self._add_template_parameters(node, template)

    # ------------------------------------------------------------------
    # Miscellaneous declarations
    # ------------------------------------------------------------------

    def _build_friend(self, syntax: SyntaxNode, parent: Node, access: AccessSpecifier, anchor: SyntaxNode) -> None:
        text = _normalize(self._text(syntax)).rstrip(";").strip()
        if text.startswith("friend"):
            text = text[len("friend"):].strip()
        if "{" in text:
            text = text.split("{", 1)[0].strip()
        node = self._new_node(NodeKind.FRIEND_DECL, syntax, anchor)
        node.name = text
        node.display_name = text
        node.access = access
        self._attach_documentation(node, anchor, self._text(syntax))
        parent.add_child(node)

    def _build_static_assert(self, syntax: SyntaxNode, parent: Node) -> None:
        node = self._new_node(NodeKind.STATIC_ASSERT_DECL, syntax, syntax)
        node.display_name = _normalize(self._text(syntax)).rstrip(";").strip()
        parent.add_child(node)


def build_translation_unit(tree: Tree, source_bytes: bytes, file_path: str = "") -> Node:
    """Build the declaration tree for one parsed translation unit.

    Args:
        tree: Syntax tree returned by ``extraction.parser``.
        source_bytes: The bytes the tree was parsed from.
        file_path: Path recorded in every node location.

    Returns:
        A ``translation_unit`` node owning all top-level declarations.
    """
    return TreeBuilder(source_bytes, file_path).build(tree)
