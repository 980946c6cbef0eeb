"""Tests for USR-keyed merging of translation-unit trees."""

import unittest

from ast_model.kinds import NodeKind
from ast_model.merge import deep_copy_node, index_by_usr, merge_all, merge_trees
from ast_model.node import Node, create_node
from ast_model.tags import Tag


def _tu(*children: Node) -> Node:
    root = create_node(NodeKind.TRANSLATION_UNIT)
    for child in children:
        root.add_child(child)
    return root


def _decl(kind: NodeKind, name: str, usr: str = "", *tags: str) -> Node:
    node = create_node(kind)
    node.name = name
    node.usr = usr
    node.add_tags(Tag(t) for t in tags)
    return node


class TestDeepCopy(unittest.TestCase):
    """Test deep copying of subtrees."""

    def test_copy_is_independent_and_detached(self) -> None:
        """Test that a copy shares no nodes and has no parent."""
        root = _tu()
        record = root.add_child(_decl(NodeKind.STRUCT_DECL, "S", "c:@S@S", "serialize"))
        field = record.add_child(_decl(NodeKind.FIELD_DECL, "x", "c:@S@S@FI@x"))
        field.is_bitfield = True
        field.bitfield_width = 3

        copy = deep_copy_node(record)
        self.assertIsNot(copy, record)
        self.assertIsNone(copy.parent)
        self.assertEqual(copy.usr, "c:@S@S")
        self.assertEqual(copy.tags, record.tags)
        self.assertEqual(len(copy.children), 1)
        copied_field = copy.children[0]
        self.assertIsNot(copied_field, field)
        self.assertIs(copied_field.parent, copy)
        self.assertEqual(copied_field.bitfield_width, 3)

        copy.add_tag(Tag("extra"))
        self.assertFalse(record.has_tag("extra"))


class TestMergeTrees(unittest.TestCase):
    """Test merging two translation units."""

    def test_none_sides(self) -> None:
        """Test that a missing side returns the other tree."""
        a = _tu()
        self.assertIs(merge_trees(a, None), a)
        self.assertIs(merge_trees(None, a), a)
        self.assertIsNone(merge_trees(None, None))

    def test_same_usr_is_merged_once(self) -> None:
        """Test that a USR shared by both trees appears once."""
        a = _tu(_decl(NodeKind.FUNCTION_DECL, "foo", "c:@F@foo#"))
        b = _tu(_decl(NodeKind.FUNCTION_DECL, "foo", "c:@F@foo#"))
        merged = merge_trees(a, b)
        self.assertEqual(len(merged.find_descendants(lambda n: n.name == "foo")), 1)

    def test_a_wins_conflicts(self) -> None:
        """Test that the first tree's declaration is kept."""
        a = _tu(_decl(NodeKind.STRUCT_DECL, "S", "c:@S@S", "from_a"))
        b_record = _decl(NodeKind.STRUCT_DECL, "S", "c:@S@S", "from_b")
        b_record.add_child(_decl(NodeKind.FIELD_DECL, "extra", "c:@S@S@FI@extra"))
        merged = merge_trees(a, _tu(b_record))
        self.assertEqual(len(merged.children), 1)
        winner = merged.children[0]
        self.assertTrue(winner.has_tag("from_a"))
        self.assertFalse(winner.has_tag("from_b"))
        self.assertEqual(winner.children, ())

    def test_order_and_empty_usr(self) -> None:
        """Test output order and that USR-less nodes are always copied."""
        a = _tu(_decl(NodeKind.STRUCT_DECL, "A", "c:@S@A"), _decl(NodeKind.STATIC_ASSERT_DECL, ""))
        b = _tu(
            _decl(NodeKind.STATIC_ASSERT_DECL, ""),
            _decl(NodeKind.STRUCT_DECL, "B", "c:@S@B"),
        )
        merged = merge_trees(a, b)
        kinds = [(c.kind, c.name) for c in merged.children]
        self.assertEqual(
            kinds,
            [
                (NodeKind.STRUCT_DECL, "A"),
                (NodeKind.STATIC_ASSERT_DECL, ""),
                (NodeKind.STATIC_ASSERT_DECL, ""),
                (NodeKind.STRUCT_DECL, "B"),
            ],
        )

    def test_inputs_are_not_modified(self) -> None:
        """Test that neither input tree is changed."""
        a_child = _decl(NodeKind.STRUCT_DECL, "A", "c:@S@A")
        a = _tu(a_child)
        b = _tu(_decl(NodeKind.STRUCT_DECL, "B", "c:@S@B"))
        merged = merge_trees(a, b)
        self.assertEqual(len(a.children), 1)
        self.assertEqual(len(b.children), 1)
        self.assertIs(a_child.parent, a)
        self.assertIsNot(merged.children[0], a_child)
        self.assertEqual(merged.kind, NodeKind.TRANSLATION_UNIT)

    def test_same_usr_siblings_in_b_are_kept(self) -> None:
        """Test that a forward declaration and its definition in B both survive."""
        forward = _decl(NodeKind.STRUCT_DECL, "Foo", "c:@S@Foo")
        definition = _decl(NodeKind.STRUCT_DECL, "Foo", "c:@S@Foo")
        definition.is_definition = True
        definition.add_child(_decl(NodeKind.FIELD_DECL, "x", "c:@S@Foo@FI@x"))
        a = _tu(_decl(NodeKind.STRUCT_DECL, "Other", "c:@S@Other"))

        merged = merge_trees(a, _tu(forward, definition))

        foos = [c for c in merged.children if c.usr == "c:@S@Foo"]
        self.assertEqual(len(foos), 2)
        self.assertFalse(foos[0].is_definition)
        self.assertTrue(foos[1].is_definition)
        self.assertEqual([f.name for f in foos[1].fields()], ["x"])

    def test_merge_with_itself(self) -> None:
        """Test that merging a tree with itself keeps named nodes once and doubles USR-less ones."""
        t = _tu(
            _decl(NodeKind.STRUCT_DECL, "S", "c:@S@S"),
            _decl(NodeKind.FUNCTION_DECL, "f", "c:@F@f#"),
            _decl(NodeKind.STATIC_ASSERT_DECL, ""),
        )
        merged = merge_trees(t, t)
        usrs = [c.usr for c in merged.children]
        self.assertEqual(usrs.count("c:@S@S"), 1)
        self.assertEqual(usrs.count("c:@F@f#"), 1)
        self.assertEqual(usrs.count(""), 2)
        self.assertEqual(len(t.children), 3)

    def test_nested_usr_in_a_suppresses_top_level_b(self) -> None:
        """Test that nested USRs of the first tree block second-tree duplicates."""
        ns = _decl(NodeKind.NAMESPACE_DECL, "ns", "c:@N@ns")
        ns.add_child(_decl(NodeKind.STRUCT_DECL, "S", "c:@N@ns@S@S"))
        b = _tu(_decl(NodeKind.STRUCT_DECL, "S", "c:@N@ns@S@S"))
        merged = merge_trees(_tu(ns), b)
        self.assertEqual(len(merged.children), 1)


class TestMergeAll(unittest.TestCase):
    """Test folding many trees and the USR index."""

    def test_earliest_tree_wins(self) -> None:
        """Test that the earliest tree wins across a fold."""
        trees = [
            None,
            _tu(_decl(NodeKind.STRUCT_DECL, "S", "c:@S@S", "first")),
            _tu(_decl(NodeKind.STRUCT_DECL, "S", "c:@S@S", "second")),
            _tu(_decl(NodeKind.STRUCT_DECL, "T", "c:@S@T")),
        ]
        merged = merge_all(trees)
        self.assertEqual([c.name for c in merged.children], ["S", "T"])
        self.assertTrue(merged.children[0].has_tag("first"))

    def test_empty_input(self) -> None:
        """Test folding an empty sequence."""
        self.assertIsNone(merge_all([]))

    def test_index_by_usr(self) -> None:
        """Test that the index skips empty USRs."""
        root = _tu(_decl(NodeKind.STRUCT_DECL, "S", "c:@S@S"), _decl(NodeKind.STATIC_ASSERT_DECL, ""))
        index = index_by_usr(root)
        self.assertEqual(list(index), ["c:@S@S"])


if __name__ == "__main__":
    unittest.main()
