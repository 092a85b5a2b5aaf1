"""Format conversion from gemtext to Markdown and body trimming."""

from .common import ConversionResult, alt_text_to_fence_lang
from .gemtext_to_markdown import GemtextParser, gemtext_to_markdown
from .markers import strip_after, strip_before, trim_body

__all__ = [
    "ConversionResult",
    "GemtextParser",
    "alt_text_to_fence_lang",
    "gemtext_to_markdown",
    "strip_after",
    "strip_before",
    "trim_body",
]
