"""Turn a feed entry into blog-ready content.

The transformation is a pure function of the entry and the
``TransformConfig``: trim the body between the configured markers, then
convert the remaining gemtext to Markdown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..converters import gemtext_to_markdown, trim_body
from ..feed.models import FeedEntry
from .models import TransformedContent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformConfig:
    """Body trimming options.

    Attributes:
        strip_before_marker: Drop everything up to and including the first
            occurrence of this text.
        strip_after_marker: Drop everything from the last occurrence of
            this text onward.
    """

    strip_before_marker: str | None = None
    strip_after_marker: str | None = None


class ContentTransformer:
    """Trim and convert entry bodies."""

    def __init__(self, config: TransformConfig | None = None) -> None:
        self.config = config or TransformConfig()

    def trim(self, body: str) -> str:
        """Apply the configured markers to *body*; absent markers are ignored."""
        return trim_body(
            body,
            before=self.config.strip_before_marker,
            after=self.config.strip_after_marker,
        )

    def transform(self, entry: FeedEntry) -> TransformedContent:
        """Return the blog title and Markdown body for *entry*.

        Raises:
            ValueError: If the entry body has not been loaded.
        """
        if entry.body is None:
            raise ValueError(f"Entry {entry.sync_key} has no body loaded")

        result = gemtext_to_markdown(self.trim(entry.body), base_url=entry.url or None)
        for warning in result.warnings:
            logger.debug("%s: %s", entry.sync_key, warning)

        return TransformedContent(title=entry.title, body=result.text)
