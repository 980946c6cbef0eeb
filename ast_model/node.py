"""Declaration tree model.

Nodes are created exclusively through ``create_node`` and form a strict
top-down ownership tree: a parent owns its ordered children, a child only
keeps a weak back-reference to its parent for upward lookup.
"""

from __future__ import annotations

import weakref
from typing import Callable, Iterable, Iterator, Optional

from ast_model.kinds import (
    METHOD_KINDS,
    AccessSpecifier,
    NodeKind,
    StorageClass,
    is_callable_kind,
    is_record_kind,
    is_type_declaration_kind,
    kind_to_string,
)
from ast_model.source import SourceLocation, SourceRange
from ast_model.tags import Tag
from ast_model.type_info import TypeInfo

NodePredicate = Callable[["Node"], bool]

_FACTORY_KEY = object()

# Plain value attributes populated by the front-end; all of them hold
# immutable values, so copying a node copies them by assignment.
POPULATED_FIELDS = (
    "usr",
    "name",
    "qualified_name",
    "display_name",
    "mangled_name",
    "location",
    "extent",
    "type",
    "return_type",
    "access",
    "storage_class",
    "is_definition",
    "is_virtual",
    "is_pure_virtual",
    "is_override",
    "is_final",
    "is_static",
    "is_const_method",
    "is_inline",
    "is_explicit",
    "is_constexpr",
    "is_noexcept",
    "is_deleted",
    "is_defaulted",
    "is_anonymous",
    "is_scoped_enum",
    "is_template",
    "is_template_specialization",
    "is_variadic",
    "is_bitfield",
    "is_virtual_base",
    "has_default_value",
    "bitfield_width",
    "enum_value",
    "default_value",
    "underlying_type",
    "comment",
    "brief_comment",
)


class Node:
    """One parsed declaration.

    Do not instantiate directly; use ``create_node(kind)``.
    """

    def __init__(self, kind: NodeKind, _key: object = None):
        if _key is not _FACTORY_KEY:
            raise TypeError("Node objects must be created with create_node()")
        self._kind = kind
        self._tags: list[Tag] = []
        self._children: list[Node] = []
        self._parent_ref: Optional[weakref.ref] = None

        self.usr = ""
        self.name = ""
        self.qualified_name = ""
        self.display_name = ""
        self.mangled_name = ""
        self.location = SourceLocation()
        self.extent = SourceRange()
        self.type = TypeInfo()
        self.return_type = TypeInfo()
        self.access = AccessSpecifier.INVALID
        self.storage_class = StorageClass.NONE

        self.is_definition = False
        self.is_virtual = False
        self.is_pure_virtual = False
        self.is_override = False
        self.is_final = False
        self.is_static = False
        self.is_const_method = False
        self.is_inline = False
        self.is_explicit = False
        self.is_constexpr = False
        self.is_noexcept = False
        self.is_deleted = False
        self.is_defaulted = False
        self.is_anonymous = False
        self.is_scoped_enum = False
        self.is_template = False
        self.is_template_specialization = False
        self.is_variadic = False
        self.is_bitfield = False
        self.is_virtual_base = False
        self.has_default_value = False

        self.bitfield_width = 0
        self.enum_value = 0
        self.default_value = ""
        self.underlying_type = ""
        self.comment = ""
        self.brief_comment = ""

    # ------------------------------------------------------------------
    # Identity and classification
    # ------------------------------------------------------------------

    @property
    def kind(self) -> NodeKind:
        return self._kind

    @property
    def kind_name(self) -> str:
        return kind_to_string(self._kind)

    def is_type_declaration(self) -> bool:
        return is_type_declaration_kind(self._kind)

    def is_record_declaration(self) -> bool:
        return is_record_kind(self._kind)

    def is_callable(self) -> bool:
        return is_callable_kind(self._kind)

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    @property
    def tags(self) -> tuple[Tag, ...]:
        return tuple(self._tags)

    def add_tag(self, tag: Tag) -> None:
        self._tags.append(tag)

    def add_tags(self, tags: Iterable[Tag]) -> None:
        self._tags.extend(tags)

    def set_tags(self, tags: Iterable[Tag]) -> None:
        self._tags = list(tags)

    def has_tag(self, name: str) -> bool:
        return any(tag.name == name for tag in self._tags)

    def has_tags(self, names: Iterable[str]) -> bool:
        """True when at least one of ``names`` is present."""
        wanted = set(names)
        return any(tag.name in wanted for tag in self._tags)

    def find_tag(self, name: str) -> Optional[Tag]:
        for tag in self._tags:
            if tag.name == name:
                return tag
        return None

    def find_tags(self, names: Iterable[str]) -> list[Tag]:
        wanted = set(names)
        return [tag for tag in self._tags if tag.name in wanted]

    def ancestor_tags(self) -> list[Tag]:
        """Tags of all ancestors, nearest ancestor first."""
        collected: list[Tag] = []
        current = self.parent
        while current is not None:
            collected.extend(current._tags)
            current = current.parent
        return collected

    def all_tags(self) -> list[Tag]:
        return list(self._tags) + self.ancestor_tags()

    # ------------------------------------------------------------------
    # Structure
    # ------------------------------------------------------------------

    @property
    def parent(self) -> Optional[Node]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def children(self) -> tuple[Node, ...]:
        return tuple(self._children)

    def add_child(self, child: Optional[Node]) -> Optional[Node]:
        """Append ``child`` and point its parent reference here.

        A child that is still attached elsewhere is detached from its old
        parent first. ``None`` is ignored.
        """
        if child is None:
            return None
        previous = child.parent
        if previous is not None:
            previous.remove_child(child)
        self._children.append(child)
        child._parent_ref = weakref.ref(self)
        return child

    def remove_child(self, child: Optional[Node]) -> bool:
        """Detach the first occurrence of ``child`` (identity comparison)."""
        if child is None:
            return False
        for index, existing in enumerate(self._children):
            if existing is child:
                del self._children[index]
                child._parent_ref = None
                return True
        return False

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def find_child(self, predicate: NodePredicate) -> Optional[Node]:
        for child in self._children:
            if predicate(child):
                return child
        return None

    def find_children(self, predicate: NodePredicate) -> list[Node]:
        return [child for child in self._children if predicate(child)]

    def iter_descendants(
        self,
        predicate: Optional[NodePredicate] = None,
    ) -> Iterator[Node]:
        """Yield descendants in pre-order, parents before their children.

        Traversal continues into the subtree of every node whether or not
        it matched. The root itself is not yielded.
        """
        stack = list(reversed(self._children))
        while stack:
            node = stack.pop()
            if predicate is None or predicate(node):
                yield node
            stack.extend(reversed(node._children))

    def find_descendants(self, predicate: NodePredicate) -> list[Node]:
        return list(self.iter_descendants(predicate))

    def children_by_kind(self, kind: NodeKind) -> list[Node]:
        return [child for child in self._children if child._kind == kind]

    def find_child_by_name(self, name: str) -> Optional[Node]:
        return self.find_child(lambda child: child.name == name)

    # ------------------------------------------------------------------
    # Tag queries over direct children
    # ------------------------------------------------------------------

    def children_with_tag(self, name: str) -> list[Node]:
        return self.find_children(lambda child: child.has_tag(name))

    def children_with_any_tag(self, names: Iterable[str]) -> list[Node]:
        wanted = list(names)
        if not wanted:
            return []
        return self.find_children(lambda child: child.has_tags(wanted))

    def children_without_tag(self, name: str) -> list[Node]:
        return self.find_children(lambda child: not child.has_tag(name))

    def children_without_any_tag(self, names: Iterable[str]) -> list[Node]:
        wanted = list(names)
        return self.find_children(lambda child: not child.has_tags(wanted))

    def find_child_with_tag(self, name: str) -> Optional[Node]:
        return self.find_child(lambda child: child.has_tag(name))

    def find_child_with_any_tag(self, names: Iterable[str]) -> Optional[Node]:
        wanted = list(names)
        if not wanted:
            return None
        return self.find_child(lambda child: child.has_tags(wanted))

    def find_child_without_tag(self, name: str) -> Optional[Node]:
        return self.find_child(lambda child: not child.has_tag(name))

    def find_child_without_any_tag(self, names: Iterable[str]) -> Optional[Node]:
        wanted = list(names)
        return self.find_child(lambda child: not child.has_tags(wanted))

    # ------------------------------------------------------------------
    # Record / callable helpers
    # ------------------------------------------------------------------

    def bases(self) -> list[Node]:
        return self.children_by_kind(NodeKind.BASE_SPECIFIER)

    def methods(self) -> list[Node]:
        return self.find_children(lambda child: child._kind in METHOD_KINDS)

    def fields(self) -> list[Node]:
        return self.children_by_kind(NodeKind.FIELD_DECL)

    def parameters(self) -> list[Node]:
        return self.children_by_kind(NodeKind.PARAMETER_DECL)

    def enum_constants(self) -> list[Node]:
        return self.children_by_kind(NodeKind.ENUM_CONSTANT_DECL)

    def __repr__(self) -> str:
        label = self.qualified_name or self.name
        return f"<Node {self.kind_name} {label!r} usr={self.usr!r}>"


def create_node(kind: NodeKind = NodeKind.UNKNOWN) -> Node:
    """Create a detached node of ``kind`` with every field at its default."""
    return Node(kind, _key=_FACTORY_KEY)
