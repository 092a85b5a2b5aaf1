"""Common types and utilities for format conversion."""

from dataclasses import dataclass, field

# =============================================================================
# Preformatted Block Language Mapping
# =============================================================================
#
# Gemtext preformatted blocks carry free-form "alt text" after the opening
# toggle line, e.g. ```python or ``` ASCII art of a cat.  Markdown fences
# only take a language identifier, so alt text is kept as the fence info
# string only when its first word names a language.
#
# Gemtext: ```sh
# Markdown: ```bash
# =============================================================================

# Alt-text word -> canonical Markdown fence language
_ALT_TEXT_ALIASES: dict[str, str] = {
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "console": "bash",
    "js": "javascript",
    "ts": "typescript",
    "c++": "cpp",
    "py": "python",
    "rs": "rust",
    "plaintext": "text",
    "plain": "text",
    "gemtext": "gemini",
}

# Languages that pass through unchanged
_FENCE_LANGUAGES: frozenset[str] = frozenset(
    {
        "bash",
        "c",
        "cpp",
        "css",
        "diff",
        "elixir",
        "gemini",
        "go",
        "haskell",
        "html",
        "ini",
        "java",
        "javascript",
        "json",
        "kotlin",
        "lisp",
        "lua",
        "makefile",
        "markdown",
        "nix",
        "perl",
        "php",
        "python",
        "ruby",
        "rust",
        "scheme",
        "sql",
        "swift",
        "text",
        "toml",
        "typescript",
        "xml",
        "yaml",
        "zig",
    }
)


def alt_text_to_fence_lang(alt_text: str) -> str:
    """
    Convert gemtext preformatted alt text to a Markdown fence language.

    Args:
        alt_text: Text following the opening ``` toggle line.

    Returns:
        Canonical language identifier, or an empty string when the alt
        text is a description rather than a language.

    Examples:
        >>> alt_text_to_fence_lang("sh")
        'bash'
        >>> alt_text_to_fence_lang("Python")
        'python'
        >>> alt_text_to_fence_lang("ASCII art of a cat")
        ''
    """
    words = alt_text.split()
    if not words:
        return ""

    word = words[0].lower()
    if word in _ALT_TEXT_ALIASES:
        return _ALT_TEXT_ALIASES[word]
    if word in _FENCE_LANGUAGES:
        return word
    return ""


@dataclass
class ConversionResult:
    """Result of format conversion with metadata and warnings.

    Attributes:
        text: Converted text output
        source_format: Format of input text ('gemtext')
        target_format: Format of output text ('markdown')
        converted: True if conversion performed
        warnings: List of warnings about lossy conversions
    """

    text: str
    source_format: str = "unknown"
    target_format: str = "unknown"
    converted: bool = False
    warnings: list[str] = field(default_factory=list)
