"""Gemfeed (gemtext link-list) parsing.

A Gemfeed is an ordinary gemtext page whose level-1 heading is the feed
title and whose posts are link lines labelled with an ISO date::

    # My Gemlog

    => 2024-03-05-hello.gmi 2024-03-05 - Hello world

Only dated link lines are entries; everything else on the page is
ignored.  Gemfeeds carry no identifiers, so the normalised post link is
the entry's source id.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone

from ..errors import MalformedFeed
from ..urls import link_slug, normalize_link, resolve_url
from .models import Feed, FeedDialect, FeedEntry

logger = logging.getLogger(__name__)

_LINK_LINE = re.compile(r"^=>[ \t]*(\S+)(?:[ \t]+(.*))?$")
_DATED_LABEL = re.compile(r"^(\d{4}-\d{2}-\d{2})(?:[ \t]*[-:\u2013\u2014][ \t]*|[ \t]+|$)(.*)$")
_TITLE_HEADING = re.compile(r"^#(?!#)[ \t]*(.*)$")


def _content_lines(text: str):
    """Yield lines of *text* that are outside preformatted blocks."""
    preformatted = False
    for line in text.splitlines():
        if line.startswith("```"):
            preformatted = not preformatted
            continue
        if not preformatted:
            yield line


def is_gemfeed_link(line: str) -> bool:
    """Return ``True`` if *line* is a link line with a dated label."""
    match = _LINK_LINE.match(line)
    if match is None or not match.group(2):
        return False
    return _DATED_LABEL.match(match.group(2).strip()) is not None


def looks_like_gemfeed(text: str) -> bool:
    """Sniff whether *text* is a Gemfeed (contains a dated link line)."""
    return any(is_gemfeed_link(line) for line in _content_lines(text))


def parse_gemfeed(text: str, feed_url: str) -> Feed:
    """Parse a Gemfeed page into a ``Feed``.

    Args:
        text: Decoded gemtext of the feed page.
        feed_url: URL the page was fetched from; relative post links are
            resolved against it.

    Returns:
        ``Feed`` with entries in page order.  Links that cannot be
        resolved into an absolute URL are dropped with a warning.

    Raises:
        MalformedFeed: If the page has no level-1 heading title.
    """
    title: str | None = None
    entries: list[FeedEntry] = []

    for line in _content_lines(text):
        if title is None:
            heading = _TITLE_HEADING.match(line)
            if heading is not None:
                title = heading.group(1).strip()
                continue

        if not is_gemfeed_link(line):
            continue

        entry = _entry_from_link(line, feed_url)
        if entry is not None:
            entries.append(entry)

    if title is None:
        raise MalformedFeed("Not a valid Gemfeed: missing title heading")

    return Feed(
        url=feed_url,
        title=title,
        dialect=FeedDialect.GEMFEED,
        entries=entries,
    )


def _entry_from_link(line: str, feed_url: str) -> FeedEntry | None:
    link_match = _LINK_LINE.match(line)
    if link_match is None:
        return None
    target, label = link_match.group(1), (link_match.group(2) or "").strip()

    dated = _DATED_LABEL.match(label)
    if dated is None:
        return None
    date_text, title = dated.group(1), dated.group(2).strip()

    try:
        url = resolve_url(feed_url, target)
        source_id = normalize_link(url)
    except ValueError as exc:
        logger.warning("Dropping Gemfeed entry %r: %s", line, exc)
        return None

    return FeedEntry(
        source_id=source_id,
        title=title,
        url=url,
        slug=link_slug(url),
        published=_gemfeed_date(date_text),
        dialect=FeedDialect.GEMFEED,
    )


def _gemfeed_date(date_text: str) -> datetime | None:
    """Gemfeed dates carry no time; by convention they mean 12:00 UTC."""
    try:
        day = datetime.strptime(date_text, "%Y-%m-%d")
    except ValueError:
        logger.debug("Ignoring invalid Gemfeed date %r", date_text)
        return None
    return day.replace(hour=12, tzinfo=timezone.utc)
