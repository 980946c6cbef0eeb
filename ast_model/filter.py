"""Kind/tag driven selection of type declarations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional

from ast_model.kinds import NodeKind, parse_kind_name
from ast_model.node import Node
from core.startup_config import ConfigValidationError

logger = logging.getLogger(__name__)


class NodeInclusion(str, Enum):
    """How related nodes should be pulled in by a consumer."""

    EXCLUDE = "exclude"
    INCLUDE = "include"
    INCLUDE_RECURSIVELY = "include_recursively"


@dataclass(frozen=True)
class FilterConfig:
    """Immutable selection rules for a ``NodeFilter``.

    An empty ``allowed_kinds`` admits every type-declaration kind. The two
    inclusion settings are carried for consumers; matching ignores them.
    """

    allowed_kinds: tuple[NodeKind, ...] = ()
    grab_tag_names: tuple[str, ...] = ()
    avoid_tag_names: tuple[str, ...] = ()
    child_node_inclusion: NodeInclusion = NodeInclusion.EXCLUDE
    parent_node_inclusion: NodeInclusion = NodeInclusion.EXCLUDE

    def __post_init__(self) -> None:
        object.__setattr__(self, "allowed_kinds", tuple(self.allowed_kinds))
        object.__setattr__(self, "grab_tag_names", tuple(self.grab_tag_names))
        object.__setattr__(self, "avoid_tag_names", tuple(self.avoid_tag_names))

    @classmethod
    def from_mapping(
        cls,
        payload: Optional[Mapping[str, Any]],
        strict: bool = False,
    ) -> FilterConfig:
        """Build a config from a manifest ``filter`` section.

        Recognized keys: ``allowed_kinds``, ``grab_tags``, ``avoid_tags``,
        ``child_node_inclusion`` and ``parent_node_inclusion``.

        Args:
            payload: Mapping loaded from YAML/JSON, or None for defaults.
            strict: Raise on unknown kind or inclusion names instead of
                logging a warning and skipping them.

        Raises:
            ConfigValidationError: In strict mode, on unknown names or
                malformed list values.
        """
        if not payload:
            return cls()

        kinds: list[NodeKind] = []
        for raw_kind in _string_list(payload.get("allowed_kinds"), "allowed_kinds", strict):
            try:
                kinds.append(parse_kind_name(raw_kind))
            except ValueError as exc:
                if strict:
                    raise ConfigValidationError(str(exc)) from exc
                logger.warning("%s; ignoring entry", exc)

        return cls(
            allowed_kinds=tuple(kinds),
            grab_tag_names=tuple(_string_list(payload.get("grab_tags"), "grab_tags", strict)),
            avoid_tag_names=tuple(_string_list(payload.get("avoid_tags"), "avoid_tags", strict)),
            child_node_inclusion=_parse_inclusion(
                payload.get("child_node_inclusion"), "child_node_inclusion", strict
            ),
            parent_node_inclusion=_parse_inclusion(
                payload.get("parent_node_inclusion"), "parent_node_inclusion", strict
            ),
        )


def _string_list(raw: Any, key: str, strict: bool) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        return [raw]
    if not isinstance(raw, (list, tuple)):
        msg = f"filter.{key} must be a list of strings"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; using empty list", msg)
        return []
    return [str(item) for item in raw]


def _parse_inclusion(raw: Any, key: str, strict: bool) -> NodeInclusion:
    if raw is None:
        return NodeInclusion.EXCLUDE
    try:
        return NodeInclusion(str(raw).strip().lower())
    except ValueError as exc:
        msg = f"filter.{key} has unknown value {raw!r}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; using 'exclude'", msg)
        return NodeInclusion.EXCLUDE


class NodeFilter:
    """Ordered, USR-deduplicated collection of matching type declarations.

    Nodes are held by reference; the filter never copies or owns them.
    """

    def __init__(self, config: Optional[FilterConfig] = None):
        self._config = config if config is not None else FilterConfig()
        self._types: list[Node] = []

    @property
    def config(self) -> FilterConfig:
        return self._config

    @property
    def types(self) -> tuple[Node, ...]:
        return tuple(self._types)

    def get_config(self) -> FilterConfig:
        return self._config

    def get_types(self) -> tuple[Node, ...]:
        return self.types

    def is_valid_type(self, node: Optional[Node]) -> bool:
        if node is None or not node.is_type_declaration():
            return False
        return self.matches_config(node)

    def matches_config(self, node: Node) -> bool:
        """Apply the kind allow-list and the tag grab/avoid rules."""
        config = self._config
        if config.allowed_kinds and node.kind not in config.allowed_kinds:
            return False
        if node.tags:
            if config.avoid_tag_names and node.has_tags(config.avoid_tag_names):
                return False
            if config.grab_tag_names and not node.has_tags(config.grab_tag_names):
                return False
            return True
        return not config.grab_tag_names

    def contains(self, node: Optional[Node]) -> bool:
        if node is None:
            return False
        return any(held.usr == node.usr for held in self._types)

    def add(self, node: Optional[Node]) -> bool:
        if not self.is_valid_type(node):
            return False
        if self.contains(node):
            return False
        self._types.append(node)
        return True

    def add_all(self, nodes: Iterable[Node]) -> int:
        """Add each node in order; returns how many were accepted."""
        return sum(1 for node in nodes if self.add(node))

    def remove(self, node: Optional[Node]) -> bool:
        if node is None:
            return False
        kept = [held for held in self._types if held.usr != node.usr]
        removed = len(kept) != len(self._types)
        self._types[:] = kept
        return removed

    def clear(self) -> NodeFilter:
        self._types.clear()
        return self

    def clean(self) -> NodeFilter:
        """Drop held nodes that no longer satisfy the configuration."""
        kept = [node for node in self._types if self.matches_config(node)]
        dropped = len(self._types) - len(kept)
        if dropped:
            logger.debug("Filter clean dropped %d nodes", dropped)
        self._types[:] = kept
        return self

    def size(self) -> int:
        return len(self._types)

    def empty(self) -> bool:
        return not self._types

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[Node]:
        return iter(self._types)

    def __contains__(self, node: object) -> bool:
        return isinstance(node, Node) and self.contains(node)
