"""Dialect detection and dispatch for feed parsing.

Both dialects funnel into the same ``Feed``/``FeedEntry`` models.  The
parser for a document is picked from ``_PARSERS`` by dialect, either the
one the caller declared or the one detected from the MIME type and,
failing that, from the content itself.
"""

from __future__ import annotations

import logging
from typing import Callable

from ..errors import UnsupportedDialect
from .atom import DEFAULT_DATE_FORMAT, parse_atom
from .fetch import FeedDocument
from .gemfeed import looks_like_gemfeed, parse_gemfeed
from .models import Feed, FeedDialect, FeedEntry

logger = logging.getLogger(__name__)

_ATOM_MIME_TYPES = frozenset(
    {
        "application/atom+xml",
        "application/rss+xml",
        "application/xml",
        "text/xml",
    }
)
_GEMTEXT_MIME_TYPES = frozenset({"text/gemini"})


def detect_dialect(document: FeedDocument) -> FeedDialect:
    """Work out which dialect *document* is written in.

    The declared MIME type decides when it is conclusive; otherwise the
    content is sniffed: XML markup means Atom, a dated gemtext link line
    means Gemfeed.

    Raises:
        UnsupportedDialect: If neither check is conclusive.
    """
    if document.mime_type in _ATOM_MIME_TYPES:
        return FeedDialect.ATOM
    if document.mime_type in _GEMTEXT_MIME_TYPES:
        return FeedDialect.GEMFEED

    text = document.text().lstrip("\ufeff \t\r\n")
    if text.startswith("<"):
        return FeedDialect.ATOM
    if looks_like_gemfeed(text):
        return FeedDialect.GEMFEED

    raise UnsupportedDialect(
        f"Cannot tell the dialect of {document.url} "
        f"(mime type {document.mime_type or 'unknown'}); "
        "declare it with --dialect atom or --dialect gemfeed"
    )


def _parse_atom_document(document: FeedDocument, date_format: str) -> Feed:
    return parse_atom(document.content, document.url, date_format)


def _parse_gemfeed_document(document: FeedDocument, date_format: str) -> Feed:
    return parse_gemfeed(document.text(), document.url)


_PARSERS: dict[FeedDialect, Callable[[FeedDocument, str], Feed]] = {
    FeedDialect.ATOM: _parse_atom_document,
    FeedDialect.GEMFEED: _parse_gemfeed_document,
}


def parse_feed(
    document: FeedDocument,
    dialect: FeedDialect | str = "auto",
    date_format: str = DEFAULT_DATE_FORMAT,
) -> Feed:
    """Parse a fetched feed document into a ``Feed``.

    Args:
        document: The fetched document.
        dialect: ``"auto"`` to detect, or the dialect to parse as.
        date_format: Fallback ``strftime`` format for Atom dates.

    Returns:
        ``Feed`` with entries in feed order and unique sync keys.

    Raises:
        UnsupportedDialect: If ``auto`` detection is inconclusive.
        MalformedFeed: If the document is not valid in its dialect.
        ValueError: If *dialect* names no known dialect.
    """
    if dialect == "auto":
        selected = detect_dialect(document)
        logger.debug("Detected %s dialect for %s", selected.value, document.url)
    else:
        selected = FeedDialect(dialect)

    feed = _PARSERS[selected](document, date_format)
    entries = dedupe_entries(feed.entries)
    logger.info(
        "Parsed %s feed '%s': %d entries", selected.value, feed.title, len(entries)
    )
    return feed.model_copy(update={"entries": entries})


def dedupe_entries(entries: list[FeedEntry]) -> list[FeedEntry]:
    """Drop entries whose sync key was already seen, keeping the first.

    Two links differing only in query string or fragment normalise to one
    key; publishing both would create duplicate posts.
    """
    seen: set[str] = set()
    unique: list[FeedEntry] = []
    for entry in entries:
        if entry.sync_key in seen:
            logger.warning(
                "Dropping duplicate feed entry %r (%s)",
                entry.title,
                entry.sync_key,
            )
            continue
        seen.add(entry.sync_key)
        unique.append(entry)
    return unique
