"""Atom feed parsing with feedparser.

Gemini Atom feeds usually announce posts without inline content, so an
entry body is only taken from the feed when it is gemtext or plain text;
otherwise it is left unset and loaded from the post URL later.
"""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any

import feedparser

from ..errors import MalformedFeed
from ..urls import link_slug, resolve_url
from .models import Feed, FeedDialect, FeedEntry

logger = logging.getLogger(__name__)

DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"

_INLINE_BODY_TYPES = frozenset({"text/gemini", "text/plain", "text"})


def parse_atom(
    content: bytes | str,
    feed_url: str,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> Feed:
    """Parse an Atom document into a ``Feed``.

    Args:
        content: Raw feed document.
        feed_url: URL the feed was fetched from; relative entry links are
            resolved against it.
        date_format: ``strftime`` format tried for dates feedparser could
            not parse itself.

    Returns:
        ``Feed`` with entries in document order.  Entries with neither an
        id nor a link are dropped with a warning.

    Raises:
        MalformedFeed: If the document is not a syndication feed.
    """
    parsed = feedparser.parse(content)

    if not parsed.get("version"):
        reason = parsed.get("bozo_exception") or "unrecognised document"
        raise MalformedFeed(f"Not a valid Atom feed: {reason}")

    if parsed.get("bozo"):
        logger.debug(
            "Atom feed %s parsed with recoverable errors: %s",
            feed_url,
            parsed.get("bozo_exception"),
        )

    entries: list[FeedEntry] = []
    for raw_entry in parsed.entries:
        entry = _entry_from_atom(raw_entry, feed_url, date_format)
        if entry is not None:
            entries.append(entry)

    return Feed(
        url=feed_url,
        title=parsed.feed.get("title", ""),
        dialect=FeedDialect.ATOM,
        entries=entries,
    )


def _entry_from_atom(
    raw_entry: Any, feed_url: str, date_format: str
) -> FeedEntry | None:
    link = _alternate_link(raw_entry)
    url = resolve_url(feed_url, link) if link else ""
    source_id = (raw_entry.get("id") or "").strip() or url

    if not source_id:
        logger.warning(
            "Dropping Atom entry %r: no id or link",
            raw_entry.get("title", ""),
        )
        return None

    published = _entry_datetime(raw_entry, "published", date_format)
    updated = _entry_datetime(raw_entry, "updated", date_format)

    return FeedEntry(
        source_id=source_id,
        title=raw_entry.get("title", ""),
        url=url,
        slug=link_slug(url) if url else "",
        published=published or updated,
        updated=updated,
        body=_inline_body(raw_entry),
        dialect=FeedDialect.ATOM,
    )


def _alternate_link(raw_entry: Any) -> str:
    for link in raw_entry.get("links", []):
        if link.get("rel", "alternate") == "alternate" and link.get("href"):
            return link["href"]
    return raw_entry.get("link", "")


def _inline_body(raw_entry: Any) -> str | None:
    for content in raw_entry.get("content", []):
        content_type = (content.get("type") or "").lower()
        if content_type in _INLINE_BODY_TYPES and content.get("value"):
            return content["value"]
    return None


def _entry_datetime(
    raw_entry: Any, field: str, date_format: str
) -> datetime | None:
    """Return *field* as an aware UTC datetime, or ``None``.

    feedparser's own parse (``<field>_parsed``, a UTC struct_time) wins;
    the raw string is retried with *date_format* when that failed.
    """
    parsed: time.struct_time | None = raw_entry.get(f"{field}_parsed")
    if parsed is not None:
        return datetime(*parsed[:6], tzinfo=timezone.utc)

    raw = raw_entry.get(field)
    if not raw:
        return None
    try:
        value = datetime.strptime(raw, date_format)
    except ValueError:
        logger.debug("Unparseable Atom %s date %r", field, raw)
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
