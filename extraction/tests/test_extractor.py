"""
Integration tests for extractor.py

Tests file discovery, per-file parsing and the parse-and-merge pipeline.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path

from ast_model.kinds import NodeKind
from extraction.extractor import (
    ExtractionStats,
    discover_cpp_files,
    import_files,
    parse_and_merge,
    parse_source,
    parse_translation_unit,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class TestExtractionStats(unittest.TestCase):
    """Test ExtractionStats class."""

    def test_creation(self):
        """Test default ExtractionStats values."""
        stats = ExtractionStats()
        self.assertEqual(stats.files_processed, 0)
        self.assertEqual(stats.files_failed, 0)
        self.assertEqual(stats.nodes_built, 0)
        self.assertEqual(stats.parse_errors, 0)

    def test_to_dict(self):
        """Test conversion of stats to a dictionary."""
        stats = ExtractionStats()
        stats.files_processed = 5
        stats.nodes_built = 20
        result = stats.to_dict()
        self.assertEqual(result["files_processed"], 5)
        self.assertEqual(result["nodes_built"], 20)

    def test_str_representation(self):
        """Test the one-line stats summary."""
        stats = ExtractionStats()
        stats.files_processed = 3
        self.assertIn("processed=3", str(stats))


class TestParseTranslationUnit(unittest.TestCase):
    """Test building a tree for a single file."""

    def test_person_header(self):
        """Test parsing the person fixture header."""
        root = parse_translation_unit(str(FIXTURES_DIR / "person.hpp"))
        self.assertEqual(root.kind, NodeKind.TRANSLATION_UNIT)
        person = root.find_descendants(lambda n: n.name == "Person")[0]
        self.assertEqual(person.kind, NodeKind.STRUCT_DECL)
        self.assertEqual(person.qualified_name, "app::Person")
        self.assertTrue(person.has_tag("serialize"))
        self.assertEqual(person.brief_comment, "A person record.")
        age = person.find_child_by_name("age")
        self.assertEqual(age.find_tag("range").args, ("0", "150"))
        self.assertTrue(person.location.file.endswith("person.hpp"))

    def test_missing_file_raises(self):
        """Test that a missing file raises FileNotFoundError."""
        with self.assertRaises(FileNotFoundError):
            parse_translation_unit(str(FIXTURES_DIR / "missing.hpp"))

    def test_non_cpp_file_raises(self):
        """Test that a non C/C++ file is rejected."""
        handle = tempfile.NamedTemporaryFile(mode="w", suffix=".txt", delete=False)
        handle.write("hello")
        handle.close()
        self.addCleanup(os.unlink, handle.name)
        with self.assertRaises(ValueError):
            parse_translation_unit(handle.name)

    def test_parse_source_accepts_text(self):
        """Test parsing an in-memory string."""
        root = parse_source("struct A {};")
        self.assertEqual(root.children[0].name, "A")
        self.assertEqual(root.children[0].location.file, "<memory>")


class TestDiscovery(unittest.TestCase):
    """Test discovering and importing files."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.temp_dir)
        root = Path(self.temp_dir)
        (root / "src").mkdir()
        (root / "build").mkdir()
        (root / ".hidden").mkdir()
        (root / "a.hpp").write_text("struct A {};")
        (root / "src" / "b.cpp").write_text("int b;")
        (root / "build" / "gen.cpp").write_text("int g;")
        (root / ".hidden" / "h.hpp").write_text("int h;")
        (root / "notes.txt").write_text("not code")

    def test_discover_skips_build_and_hidden(self):
        """Test that build and hidden directories are skipped."""
        files = discover_cpp_files(self.temp_dir)
        names = sorted(os.path.basename(f) for f in files)
        self.assertEqual(names, ["a.hpp", "b.cpp"])
        self.assertEqual(files, sorted(files))

    def test_import_single_file(self):
        """Test importing one explicit file."""
        path = os.path.join(self.temp_dir, "a.hpp")
        self.assertEqual(import_files(path), [os.path.abspath(path)])

    def test_import_directory(self):
        """Test importing every source under a directory."""
        self.assertEqual(len(import_files(self.temp_dir)), 2)

    def test_import_wildcard(self):
        """Test importing through a wildcard pattern."""
        files = import_files(os.path.join(self.temp_dir, "**", "*.cpp"))
        names = sorted(os.path.basename(f) for f in files)
        self.assertIn("b.cpp", names)
        self.assertIn("gen.cpp", names)

    def test_import_no_match(self):
        """Test that an unmatched pattern yields no files."""
        self.assertEqual(import_files(os.path.join(self.temp_dir, "*.zzz")), [])


class TestParseAndMerge(unittest.TestCase):
    """Test merging several translation units."""

    def test_first_file_wins_conflicts(self):
        """Test that the earliest file wins USR conflicts."""
        paths = [str(FIXTURES_DIR / "api_a.hpp"), str(FIXTURES_DIR / "api_b.hpp")]
        merged, stats = parse_and_merge(paths)
        self.assertEqual(stats.files_processed, 2)
        self.assertEqual(stats.files_failed, 0)

        foos = merged.find_descendants(lambda n: n.name == "foo")
        self.assertEqual(len(foos), 1)
        self.assertTrue(foos[0].has_tag("api"))
        self.assertFalse(foos[0].has_tag("deprecated_api"))

        shared = [c for c in merged.children if c.name == "Shared"]
        self.assertEqual(len(shared), 1)
        self.assertEqual([f.name for f in shared[0].fields()], ["from_a"])
        self.assertTrue(any(c.name == "OnlyInB" for c in merged.children))
        self.assertEqual(stats.top_level_declarations, len(merged.children))

    def test_failures_are_counted(self):
        """Test that failing files are counted and skipped."""
        paths = [str(FIXTURES_DIR / "missing.hpp"), str(FIXTURES_DIR / "api_a.hpp")]
        merged, stats = parse_and_merge(paths)
        self.assertEqual(stats.files_failed, 1)
        self.assertEqual(stats.files_processed, 1)
        self.assertIsNotNone(merged)

    def test_stop_on_first_error(self):
        """Test that failures propagate when not continuing."""
        with self.assertRaises(FileNotFoundError):
            parse_and_merge([str(FIXTURES_DIR / "missing.hpp")], continue_on_error=False)

    def test_syntax_errors_are_tolerated(self):
        """Test that syntax errors are counted but still parsed."""
        merged, stats = parse_and_merge([str(FIXTURES_DIR / "broken_syntax.cpp")])
        self.assertEqual(stats.files_processed, 1)
        self.assertGreater(stats.parse_errors, 0)
        self.assertTrue(any(c.name == "Fine" for c in merged.children))

    def test_nothing_parsed(self):
        """Test the result when no file parses."""
        merged, stats = parse_and_merge([])
        self.assertIsNone(merged)
        self.assertEqual(stats.files_processed, 0)


if __name__ == "__main__":
    unittest.main()
