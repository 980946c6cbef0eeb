"""Tests for kind/tag based type selection."""

import unittest

from ast_model.filter import FilterConfig, NodeFilter, NodeInclusion
from ast_model.kinds import NodeKind
from ast_model.node import Node, create_node
from ast_model.tags import Tag
from core.startup_config import ConfigValidationError


def _type(kind: NodeKind, name: str, *tags: str) -> Node:
    node = create_node(kind)
    node.name = name
    node.usr = f"c:@{kind.value}@{name}"
    node.add_tags(Tag(t) for t in tags)
    return node


class TestFilterConfig(unittest.TestCase):
    """Test FilterConfig construction and mapping validation."""

    def test_defaults(self) -> None:
        """Test the default filter configuration."""
        config = FilterConfig()
        self.assertEqual(config.allowed_kinds, ())
        self.assertEqual(config.child_node_inclusion, NodeInclusion.EXCLUDE)
        self.assertEqual(config.parent_node_inclusion, NodeInclusion.EXCLUDE)

    def test_lists_are_frozen_to_tuples(self) -> None:
        """Test that list arguments are stored as tuples."""
        config = FilterConfig(grab_tag_names=["a"], allowed_kinds=[NodeKind.CLASS_DECL])
        self.assertEqual(config.grab_tag_names, ("a",))
        self.assertEqual(config.allowed_kinds, (NodeKind.CLASS_DECL,))

    def test_from_mapping(self) -> None:
        """Test building a config from a manifest section."""
        config = FilterConfig.from_mapping(
            {
                "allowed_kinds": ["struct_decl", "ENUM_DECL"],
                "grab_tags": "serialize",
                "avoid_tags": ["skip"],
                "child_node_inclusion": "include_recursively",
            }
        )
        self.assertEqual(config.allowed_kinds, (NodeKind.STRUCT_DECL, NodeKind.ENUM_DECL))
        self.assertEqual(config.grab_tag_names, ("serialize",))
        self.assertEqual(config.avoid_tag_names, ("skip",))
        self.assertEqual(config.child_node_inclusion, NodeInclusion.INCLUDE_RECURSIVELY)

    def test_from_mapping_none_is_default(self) -> None:
        """Test that a missing section gives the default config."""
        self.assertEqual(FilterConfig.from_mapping(None), FilterConfig())

    def test_unknown_names_non_strict_are_dropped(self) -> None:
        """Test that unknown kind names are skipped in lenient mode."""
        config = FilterConfig.from_mapping(
            {"allowed_kinds": ["struct_decl", "gizmo"], "parent_node_inclusion": "sometimes"}
        )
        self.assertEqual(config.allowed_kinds, (NodeKind.STRUCT_DECL,))
        self.assertEqual(config.parent_node_inclusion, NodeInclusion.EXCLUDE)

    def test_unknown_names_strict_raise(self) -> None:
        """Test that unknown kind names raise in strict mode."""
        with self.assertRaises(ConfigValidationError):
            FilterConfig.from_mapping({"allowed_kinds": ["gizmo"]}, strict=True)
        with self.assertRaises(ConfigValidationError):
            FilterConfig.from_mapping({"child_node_inclusion": "maybe"}, strict=True)
        with self.assertRaises(ConfigValidationError):
            FilterConfig.from_mapping({"grab_tags": {"a": 1}}, strict=True)


class TestNodeFilterMatching(unittest.TestCase):
    """Test which nodes a filter accepts."""

    def test_non_type_declarations_are_rejected(self) -> None:
        """Test that only type declarations are accepted."""
        nf = NodeFilter()
        self.assertFalse(nf.add(None))
        self.assertFalse(nf.add(_type(NodeKind.FUNCTION_DECL, "f")))
        self.assertFalse(nf.add(_type(NodeKind.FIELD_DECL, "x")))
        self.assertTrue(nf.empty())

    def test_default_config_accepts_all_type_kinds(self) -> None:
        """Test that the default config accepts every type kind."""
        nf = NodeFilter()
        for kind in (
            NodeKind.CLASS_DECL,
            NodeKind.STRUCT_DECL,
            NodeKind.UNION_DECL,
            NodeKind.ENUM_DECL,
            NodeKind.TYPEDEF_DECL,
            NodeKind.TYPE_ALIAS_DECL,
        ):
            self.assertTrue(nf.add(_type(kind, "T")), kind)
        self.assertEqual(nf.size(), 6)

    def test_allowed_kinds_rejects_other_kinds(self) -> None:
        """Test filtering by allowed kinds."""
        nf = NodeFilter(FilterConfig(allowed_kinds=(NodeKind.CLASS_DECL,)))
        self.assertFalse(nf.add(_type(NodeKind.STRUCT_DECL, "S")))
        self.assertTrue(nf.add(_type(NodeKind.CLASS_DECL, "C")))

    def test_grab_tags_require_a_match(self) -> None:
        """Test that grab tags require at least one match."""
        nf = NodeFilter(FilterConfig(grab_tag_names=("serialize",)))
        self.assertFalse(nf.add(_type(NodeKind.STRUCT_DECL, "Plain")))
        self.assertFalse(nf.add(_type(NodeKind.STRUCT_DECL, "Other", "api")))
        self.assertTrue(nf.add(_type(NodeKind.STRUCT_DECL, "Tagged", "serialize")))

    def test_avoid_tags_win_over_grab_tags(self) -> None:
        """Test that an avoid tag rejects even with a grab tag."""
        nf = NodeFilter(FilterConfig(grab_tag_names=("serialize",), avoid_tag_names=("skip",)))
        self.assertFalse(nf.add(_type(NodeKind.STRUCT_DECL, "Both", "serialize", "skip")))

    def test_avoid_only_config(self) -> None:
        """Test a config with avoid tags only."""
        nf = NodeFilter(FilterConfig(avoid_tag_names=("skip",)))
        self.assertTrue(nf.add(_type(NodeKind.STRUCT_DECL, "Plain")))
        self.assertTrue(nf.add(_type(NodeKind.STRUCT_DECL, "Other", "api")))
        self.assertFalse(nf.add(_type(NodeKind.STRUCT_DECL, "Skipped", "skip")))


class TestNodeFilterCollection(unittest.TestCase):
    """Test the ordered, de-duplicated selection."""

    def test_duplicates_by_usr_are_rejected(self) -> None:
        """Test that a second node with the same USR is rejected."""
        nf = NodeFilter()
        first = _type(NodeKind.STRUCT_DECL, "S")
        second = _type(NodeKind.STRUCT_DECL, "S")
        self.assertTrue(nf.add(first))
        self.assertFalse(nf.add(second))
        self.assertTrue(nf.contains(second))
        self.assertIn(second, nf)
        self.assertEqual(nf.get_types(), (first,))

    def test_add_all_preserves_order(self) -> None:
        """Test that bulk adds keep insertion order."""
        nf = NodeFilter()
        nodes = [_type(NodeKind.STRUCT_DECL, n) for n in ("A", "B", "C")]
        self.assertEqual(nf.add_all(nodes + [nodes[0]]), 3)
        self.assertEqual([n.name for n in nf], ["A", "B", "C"])
        self.assertEqual(len(nf), 3)

    def test_remove(self) -> None:
        """Test removal by USR."""
        nf = NodeFilter()
        node = _type(NodeKind.STRUCT_DECL, "S")
        nf.add(node)
        snapshot = nf.types
        self.assertTrue(nf.remove(node))
        self.assertFalse(nf.remove(node))
        self.assertFalse(nf.remove(None))
        self.assertEqual(nf.types, ())
        self.assertEqual(snapshot, (node,))

    def test_types_is_read_only(self) -> None:
        """Test that callers cannot grow the selection through types."""
        nf = NodeFilter()
        nf.add(_type(NodeKind.STRUCT_DECL, "S"))
        self.assertIsInstance(nf.types, tuple)
        with self.assertRaises(AttributeError):
            nf.types.append(_type(NodeKind.STRUCT_DECL, "T"))
        self.assertEqual(len(nf), 1)

    def test_clear_and_clean_chain(self) -> None:
        """Test that clear and clean return the filter."""
        nf = NodeFilter(FilterConfig(avoid_tag_names=("skip",)))
        node = _type(NodeKind.STRUCT_DECL, "S")
        nf.add(node)
        node.add_tag(Tag("skip"))
        self.assertIs(nf.clean(), nf)
        self.assertTrue(nf.empty())
        nf.add(_type(NodeKind.STRUCT_DECL, "T"))
        self.assertEqual(nf.clear().size(), 0)

    def test_config_accessors(self) -> None:
        """Test the config property and getter."""
        config = FilterConfig(grab_tag_names=("a",))
        nf = NodeFilter(config)
        self.assertIs(nf.config, config)
        self.assertIs(nf.get_config(), config)


if __name__ == "__main__":
    unittest.main()
