"""Gemtext to Markdown conversion, one line at a time."""

import re

from ..urls import resolve_url
from .common import ConversionResult, alt_text_to_fence_lang

_HEADING = re.compile(r"^(#{1,3})[ \t]*(.*)$")
_LINK = re.compile(r"^=>[ \t]*(\S+)(?:[ \t]+(.*))?$")
_LIST_ITEM = re.compile(r"^\*[ \t]+(.*)$")
_QUOTE = re.compile(r"^>[ \t]?(.*)$")

# Line starts that open a Markdown block: bullet, rule, heading, quote,
# fence, HTML block or link reference definition.
_BLOCK_OPENER = re.compile(
    r"^(?:[-+*](?=[ \t]|$)"
    r"|(?P<rule>[-*_])[ \t]*(?P=rule)[ \t]*(?P=rule)"
    r"|#{1,6}(?=[ \t]|$)"
    r"|>"
    r"|```|~~~"
    r"|<[A-Za-z/!?]"
    r"|\[[^\]]*\]:)"
)
_ORDERED_ITEM = re.compile(r"^(\d{1,9})(?=[.)](?:[ \t]|$))")

# Line kinds that Markdown would merge with their neighbours unless
# separated by a blank line.
_PARAGRAPH_KINDS = frozenset({"text", "link", "heading", "pre"})


def escape_line_start(text: str) -> str:
    """Keep *text* from being read as Markdown block syntax.

    Leading whitespace becomes non-breaking spaces so it is not taken as
    an indented code block, and a list, heading, rule, quote or fence
    marker at the start gets a backslash.
    """
    stripped = text.lstrip(" \t")
    indent = text[: len(text) - len(stripped)]

    match = _ORDERED_ITEM.match(stripped)
    if match:
        stripped = f"{match.group(1)}\\{stripped[match.end(1):]}"
    elif _BLOCK_OPENER.match(stripped):
        stripped = "\\" + stripped

    return "&nbsp;" * len(indent.expandtabs(4)) + stripped


class GemtextParser:
    """Parser for converting gemtext to Markdown.

    Gemtext is strictly line oriented, so every source line maps to one
    output line (plus blank separators).  Text is escaped so Markdown never
    reads it as a list, heading or code block.  Inside preformatted blocks
    lines are copied verbatim.
    """

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url
        self.warnings: list[str] = []

    def parse(self, gemtext: str) -> ConversionResult:
        """
        Parse gemtext and convert it to Markdown.

        Args:
            gemtext: Gemtext formatted text

        Returns:
            ConversionResult with Markdown text and warnings about lossy conversions
        """
        self.warnings = []
        output: list[str] = []
        previous: str | None = None
        preformatted = False

        for line in gemtext.splitlines():
            if preformatted:
                if line.startswith("```"):
                    output.append("```")
                    preformatted = False
                    previous = "pre"
                else:
                    output.append(line)
                continue

            if line.startswith("```"):
                self._separate(output, previous, "pre")
                output.append("```" + alt_text_to_fence_lang(line[3:]))
                preformatted = True
                continue

            kind, converted = self._convert_line(line)
            self._separate(output, previous, kind)
            output.append(converted)
            previous = kind

        if preformatted:
            output.append("```")
            self.warnings.append(
                "Unterminated preformatted block - closed at end of document"
            )

        text = "\n".join(output)
        if gemtext.endswith("\n") and output:
            text += "\n"

        return ConversionResult(
            text=text,
            source_format="gemtext",
            target_format="markdown",
            converted=True,
            warnings=self.warnings,
        )

    @staticmethod
    def _separate(output: list[str], previous: str | None, kind: str) -> None:
        """Insert a blank line when *kind* would run into the previous line."""
        if previous is None or previous == "blank" or kind == "blank":
            return
        if previous == kind == "quote":
            # one quote line per paragraph inside the same blockquote
            output.append(">")
            return
        if previous == kind and kind not in _PARAGRAPH_KINDS:
            return
        output.append("")

    def _convert_line(self, line: str) -> tuple[str, str]:
        """Return the line kind and its Markdown rendering."""
        if not line.strip():
            return "blank", ""

        match = _HEADING.match(line)
        if match:
            return "heading", f"{match.group(1)} {match.group(2).strip()}".rstrip()

        match = _LINK.match(line)
        if match:
            return "link", self._convert_link(match.group(1), match.group(2))

        match = _LIST_ITEM.match(line)
        if match:
            return "list", f"- {escape_line_start(match.group(1))}"

        match = _QUOTE.match(line)
        if match:
            return "quote", f"> {escape_line_start(match.group(1))}".rstrip()

        return "text", escape_line_start(line)

    def _convert_link(self, target: str, label: str | None) -> str:
        url = resolve_url(self.base_url, target) if self.base_url else target
        if " " in url or ")" in url:
            url = f"<{url}>"
        label = (label or "").strip()
        if not label:
            return url if url.startswith("<") else f"<{url}>"
        label = label.replace("[", r"\[").replace("]", r"\]")
        return f"[{label}]({url})"


def gemtext_to_markdown(
    gemtext: str, base_url: str | None = None
) -> ConversionResult:
    """
    Convert gemtext to Markdown.

    Args:
        gemtext: Gemtext formatted text
        base_url: URL of the document; relative links are resolved against it

    Returns:
        ConversionResult with Markdown text and warnings about lossy conversions
    """
    parser = GemtextParser(base_url)
    return parser.parse(gemtext)
