"""
Unit tests for parser.py

Tests tree-sitter parser initialization, byte parsing, and file parsing.
"""

import unittest
from pathlib import Path

from extraction.parser import (
    count_error_nodes,
    create_parser,
    parse_bytes,
    parse_file,
    to_source_bytes,
)


class TestParserInitialization(unittest.TestCase):
    """Test parser creation and initialization."""

    def test_create_parser(self):
        """Test that create_parser returns a parser with a language set."""
        parser = create_parser()
        self.assertIsNotNone(parser)
        self.assertIsNotNone(parser.language)


class TestSourceBytes(unittest.TestCase):
    """Test source text normalization."""

    def test_str_is_encoded(self):
        """Test that text is encoded as UTF-8."""
        self.assertEqual(to_source_bytes("int x;"), b"int x;")

    def test_bytes_pass_through(self):
        """Test that bytes are returned unchanged."""
        self.assertEqual(to_source_bytes(b"int x;"), b"int x;")

    def test_other_types_rejected(self):
        """Test that other source types raise TypeError."""
        with self.assertRaises(TypeError):
            to_source_bytes(42)


class TestParseBytes(unittest.TestCase):
    """Test parsing raw bytes of C++ code."""

    def test_parse_class(self):
        """Test parsing a class definition."""
        tree = parse_bytes(b"class Foo {\npublic:\n    void bar();\n};\n")
        self.assertEqual(tree.root_node.type, "translation_unit")
        self.assertFalse(tree.root_node.has_error)
        self.assertEqual(count_error_nodes(tree), 0)

    def test_parse_empty(self):
        """Test parsing empty source."""
        tree = parse_bytes(b"")
        self.assertEqual(tree.root_node.type, "translation_unit")
        self.assertEqual(len(tree.root_node.children), 0)

    def test_parse_invalid_type(self):
        """Test that parse_bytes raises TypeError for non-bytes input."""
        with self.assertRaises(TypeError):
            parse_bytes("not bytes")

    def test_parse_with_errors(self):
        """Syntax errors still produce a tree and are counted."""
        tree = parse_bytes(b"void broken() { int x = 10;")
        self.assertEqual(tree.root_node.type, "translation_unit")
        self.assertTrue(tree.root_node.has_error)
        self.assertGreater(count_error_nodes(tree), 0)


class TestParseFile(unittest.TestCase):
    """Test parsing C++ files from disk."""

    def setUp(self):
        self.fixtures_dir = Path(__file__).parent / "fixtures"

    def test_parse_header(self):
        """Test parsing a fixture header from disk."""
        file_path = self.fixtures_dir / "person.hpp"
        tree, source_bytes = parse_file(str(file_path))
        self.assertEqual(tree.root_node.type, "translation_unit")
        self.assertFalse(tree.root_node.has_error)
        self.assertEqual(source_bytes, file_path.read_bytes())

    def test_parse_broken_syntax_file(self):
        """Test parsing a file with syntax errors."""
        tree, _ = parse_file(str(self.fixtures_dir / "broken_syntax.cpp"))
        self.assertTrue(tree.root_node.has_error)

    def test_parse_nonexistent_file(self):
        """Test that a missing file raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            parse_file(str(self.fixtures_dir / "nonexistent.cpp"))


if __name__ == "__main__":
    unittest.main()
