"""Pydantic models for parsed gemlog feeds.

- ``FeedDialect``: The two supported source feed formats.
- ``FeedEntry``: One normalised gemlog post.
- ``Feed``: An ordered collection of entries.

All models are frozen (immutable); a loaded body produces a new entry.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class FeedDialect(str, Enum):
    """Source feed formats."""

    ATOM = "atom"
    GEMFEED = "gemfeed"


class FeedEntry(BaseModel):
    """A single gemlog post as announced by the feed.

    Attributes:
        source_id: Stable identifier, unique within the feed.  The Atom
            entry id (falling back to its link) or, for Gemfeeds, the
            normalised post link.
        title: Post title, may be empty.
        url: Absolute URL of the post, used to load its body.
        slug: File stem of the post link, requested as the blog slug.
        published: Publish time, when the feed states or implies one.
        updated: Last update time (Atom only).
        body: Gemtext body, ``None`` until loaded.
        dialect: Dialect of the feed the entry came from.
    """

    source_id: str
    title: str = ""
    url: str = ""
    slug: str = ""
    published: datetime | None = None
    updated: datetime | None = None
    body: str | None = None
    dialect: FeedDialect

    model_config = {"frozen": True}

    @property
    def sync_key(self) -> str:
        """Key embedded in the blog post that marks it as this entry's copy."""
        return self.source_id

    def with_body(self, body: str) -> FeedEntry:
        """Return a copy of this entry carrying *body*."""
        return self.model_copy(update={"body": body})


class Feed(BaseModel):
    """A parsed gemlog feed.

    Attributes:
        url: URL the feed was fetched from.
        title: Feed title.
        dialect: Dialect the document was parsed as.
        entries: Entries in the feed's own order.
    """

    url: str
    title: str = ""
    dialect: FeedDialect
    entries: list[FeedEntry] = []

    model_config = {"frozen": True}

    @property
    def sync_keys(self) -> list[str]:
        return [entry.sync_key for entry in self.entries]
