"""
Unit tests for tags.py

Tests tag name/argument parsing, quoting rules and the Tag value type.
"""

import unittest

from ast_model.tags import Tag, parse_tag, parse_tags, split_tag_arguments


class TestTagNames(unittest.TestCase):
    """Test how the tag name is read."""

    def test_bare_name_has_no_arguments(self):
        """Test that a tag without parentheses carries no arguments."""
        tag = parse_tag("serialize")
        self.assertEqual(tag, Tag("serialize"))
        self.assertEqual(tag.args, ())

    def test_name_is_trimmed(self):
        """Test that whitespace around the name is dropped."""
        self.assertEqual(parse_tag("  reflect  ").name, "reflect")
        self.assertEqual(parse_tag("  range (1)").name, "range")


class TestTagArguments(unittest.TestCase):
    """Test argument splitting inside the parentheses."""

    def test_arguments_are_split_and_trimmed(self):
        """Test comma splitting with trimmed slices."""
        tag = parse_tag("validate(0, 100)")
        self.assertEqual(tag.name, "validate")
        self.assertEqual(tag.args, ("0", "100"))
        self.assertEqual(tag.get_args_combined(), "0, 100")

    def test_empty_argument_list_yields_no_arguments(self):
        """Test that empty or blank parentheses give zero arguments."""
        self.assertEqual(parse_tag("name()").args, ())
        self.assertEqual(parse_tag("name(   )").args, ())

    def test_commas_inside_quotes_do_not_split(self):
        """Test that quoted commas stay inside one argument."""
        tag = parse_tag('doc("a, b", \'c, d\', e)')
        self.assertEqual(tag.args, ('"a, b"', "'c, d'", "e"))

    def test_mismatched_quote_kinds_stay_open(self):
        """Test that a region only closes on its own quote character."""
        self.assertEqual(parse_tag("x(\"it's, fine\", y)").args, ("\"it's, fine\"", "y"))

    def test_escaped_quote_does_not_close_region(self):
        """Test that a backslash-escaped quote keeps the region open."""
        tag = parse_tag(r'msg("say \"hi, there\"", 2)')
        self.assertEqual(tag.args, (r'"say \"hi, there\""', "2"))

    def test_unterminated_quote_swallows_rest(self):
        """Test that an unclosed quote keeps every later comma."""
        self.assertEqual(parse_tag('x("a, b)').args, ('"a, b',))

    def test_missing_close_paren_uses_rest_of_text(self):
        """Test parsing when the final parenthesis is missing."""
        self.assertEqual(parse_tag("range(1, 2").args, ("1", "2"))

    def test_inner_parentheses_are_kept(self):
        """Test that nested parentheses end at the last closing one."""
        self.assertEqual(parse_tag("call(f(1), 2)").args, ("f(1)", "2"))

    def test_empty_middle_slice_is_kept(self):
        """Test that only a trailing empty slice is dropped."""
        self.assertEqual(split_tag_arguments("a,,b"), ["a", "", "b"])
        self.assertEqual(split_tag_arguments("a, "), ["a"])


class TestTagValue(unittest.TestCase):
    """Test the Tag value type and batch parsing."""

    def test_get_full_and_str(self):
        """Test the canonical text form of a tag."""
        tag = parse_tag("range(1,2)")
        self.assertEqual(tag.get_full(), "range(1, 2)")
        self.assertEqual(str(tag), "range(1, 2)")
        self.assertEqual(Tag("flag").get_full(), "flag()")

    def test_tag_parse_classmethod_matches_function(self):
        """Test that Tag.parse delegates to parse_tag."""
        self.assertEqual(Tag.parse("a(b)"), parse_tag("a(b)"))

    def test_parse_tags_skips_blank_entries(self):
        """Test that blank annotation strings produce no tags."""
        tags = parse_tags(["serialize", "  ", "", "range(1, 2)"])
        self.assertEqual([t.name for t in tags], ["serialize", "range"])

    def test_tags_are_immutable(self):
        """Test that tag fields cannot be reassigned."""
        tag = Tag("a")
        with self.assertRaises(AttributeError):
            tag.name = "b"


if __name__ == "__main__":
    unittest.main()
