"""
Tests for the gemtext to Markdown converter.
"""

import unittest

from gemfreely.converters import (
    ConversionResult,
    GemtextParser,
    gemtext_to_markdown,
)
from gemfreely.converters.common import alt_text_to_fence_lang


def convert(text, base_url=None):
    return gemtext_to_markdown(text, base_url).text


class TestGemtextToMarkdown(unittest.TestCase):
    """Test gemtext to Markdown conversion, line by line."""

    def test_headings(self):
        self.assertEqual(convert("# One"), "# One")
        self.assertEqual(convert("## Two"), "## Two")
        self.assertEqual(convert("### Three"), "### Three")

    def test_heading_without_space(self):
        self.assertEqual(convert("#Title"), "# Title")

    def test_text_lines_become_separate_paragraphs(self):
        self.assertEqual(convert("one\ntwo"), "one\n\ntwo")

    def test_existing_blank_lines_not_doubled(self):
        self.assertEqual(convert("one\n\ntwo"), "one\n\ntwo")

    def test_list_items_grouped(self):
        self.assertEqual(convert("* a\n* b"), "- a\n- b")

    def test_text_before_list_separated(self):
        self.assertEqual(convert("intro\n* a\n* b"), "intro\n\n- a\n- b")

    def test_quote_lines_kept_apart(self):
        self.assertEqual(convert("> q1\n>q2"), "> q1\n>\n> q2")

    def test_quote_then_text_separated(self):
        self.assertEqual(convert("> q\nafter"), "> q\n\nafter")

    def test_empty_quote_line(self):
        self.assertEqual(convert(">"), ">")

    def test_ordered_list_marker_escaped(self):
        self.assertEqual(convert("1. not a list"), "1\\. not a list")
        self.assertEqual(convert("2) nor this"), "2\\) nor this")

    def test_bullet_markers_escaped(self):
        self.assertEqual(
            convert("- not a list\n+ nor this"), "\\- not a list\n\n\\+ nor this"
        )

    def test_indented_text_not_code(self):
        self.assertEqual(convert("    not code"), "&nbsp;&nbsp;&nbsp;&nbsp;not code")
        self.assertEqual(convert("\tnot code"), "&nbsp;&nbsp;&nbsp;&nbsp;not code")

    def test_block_openers_escaped(self):
        self.assertEqual(convert("---"), "\\---")
        self.assertEqual(convert("~~~"), "\\~~~")
        self.assertEqual(convert("<div>"), "\\<div>")
        self.assertEqual(convert("[1]: gemini://x/"), "\\[1]: gemini://x/")

    def test_plain_text_untouched(self):
        for line in ("2024 was a year", "-dash", "*stars*", "[1] footnote", "a < b"):
            self.assertEqual(convert(line), line)

    def test_list_and_quote_content_escaped(self):
        self.assertEqual(convert("* 1. first"), "- 1\\. first")
        self.assertEqual(convert("> - dash"), "> \\- dash")
        self.assertEqual(convert("> # hash"), "> \\# hash")

    def test_list_then_quote_separated(self):
        self.assertEqual(convert("* a\n> q"), "- a\n\n> q")

    def test_link_with_label(self):
        self.assertEqual(
            convert("=> gemini://example.org/a.gmi A post"),
            "[A post](gemini://example.org/a.gmi)",
        )

    def test_link_without_label(self):
        self.assertEqual(
            convert("=> gemini://example.org/a.gmi"),
            "<gemini://example.org/a.gmi>",
        )

    def test_consecutive_links_are_paragraphs(self):
        self.assertEqual(
            convert("=> a.gmi A\n=> b.gmi B"),
            "[A](a.gmi)\n\n[B](b.gmi)",
        )

    def test_relative_link_resolved_against_base(self):
        self.assertEqual(
            convert("=> other.gmi Other", "gemini://example.org/gemlog/post.gmi"),
            "[Other](gemini://example.org/gemlog/other.gmi)",
        )

    def test_relative_link_kept_without_base(self):
        self.assertEqual(convert("=> other.gmi Other"), "[Other](other.gmi)")

    def test_label_brackets_escaped(self):
        self.assertEqual(convert("=> a.gmi [draft] A"), r"[\[draft\] A](a.gmi)")

    def test_url_with_parenthesis_wrapped(self):
        self.assertEqual(
            convert("=> https://en.wikipedia.org/wiki/Gemini_(protocol) Wiki"),
            "[Wiki](<https://en.wikipedia.org/wiki/Gemini_(protocol)>)",
        )

    def test_preformatted_block_verbatim(self):
        source = "```python\n# not a heading\n* not a list\n  indented\n```"
        self.assertEqual(
            convert(source),
            "```python\n# not a heading\n* not a list\n  indented\n```",
        )

    def test_descriptive_alt_text_dropped(self):
        self.assertEqual(convert("``` ASCII art of a cat\n=^.^=\n```"), "```\n=^.^=\n```")

    def test_preformatted_block_separated_from_text(self):
        self.assertEqual(
            convert("intro\n```\ncode\n```\nafter"),
            "intro\n\n```\ncode\n```\n\nafter",
        )

    def test_unterminated_preformatted_block_closed(self):
        result = gemtext_to_markdown("```\ncode")
        self.assertEqual(result.text, "```\ncode\n```")
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("Unterminated", result.warnings[0])

    def test_trailing_newline_preserved(self):
        self.assertEqual(convert("a\n"), "a\n")

    def test_leading_blank_line_preserved(self):
        self.assertEqual(convert("\nBODY\n"), "\nBODY\n")

    def test_empty_input(self):
        self.assertEqual(convert(""), "")

    def test_full_post(self):
        source = (
            "# Hello world\n"
            "First paragraph.\n"
            "Second paragraph.\n"
            "## Links\n"
            "* one\n"
            "* two\n"
            "=> /about.gmi About\n"
        )
        expected = (
            "# Hello world\n"
            "\n"
            "First paragraph.\n"
            "\n"
            "Second paragraph.\n"
            "\n"
            "## Links\n"
            "\n"
            "- one\n"
            "- two\n"
            "\n"
            "[About](gemini://example.org/about.gmi)\n"
        )
        self.assertEqual(convert(source, "gemini://example.org/gemlog/hello.gmi"), expected)

    def test_result_metadata(self):
        result = gemtext_to_markdown("text")
        self.assertIsInstance(result, ConversionResult)
        self.assertEqual(result.source_format, "gemtext")
        self.assertEqual(result.target_format, "markdown")
        self.assertTrue(result.converted)
        self.assertEqual(result.warnings, [])

    def test_parser_resets_warnings(self):
        parser = GemtextParser()
        parser.parse("```\nunterminated")
        self.assertEqual(parser.parse("fine").warnings, [])

    def test_deterministic(self):
        source = "# T\ntext\n=> a.gmi A\n```\nx\n```\n"
        self.assertEqual(convert(source), convert(source))


class TestAltTextToFenceLang(unittest.TestCase):
    def test_known_language(self):
        self.assertEqual(alt_text_to_fence_lang("python"), "python")

    def test_case_insensitive(self):
        self.assertEqual(alt_text_to_fence_lang("Rust"), "rust")

    def test_aliases(self):
        self.assertEqual(alt_text_to_fence_lang("sh"), "bash")
        self.assertEqual(alt_text_to_fence_lang("js"), "javascript")

    def test_first_word_only(self):
        self.assertEqual(alt_text_to_fence_lang(" go example program"), "go")

    def test_description(self):
        self.assertEqual(alt_text_to_fence_lang("ASCII art of a cat"), "")

    def test_empty(self):
        self.assertEqual(alt_text_to_fence_lang(""), "")
