"""Freshness checks: is the remote copy of an entry already current?

- ``ContentHashCheck``: Compare the digest recorded on the post with the
  digest of the freshly transformed entry (default).
- ``TimestampCheck``: Compare the entry's ``updated`` time with the post's
  last modification; entries without one fall back to hashing.
- ``AlwaysUpdateCheck``: Never current; every known entry is re-published.

The ``create_freshness_check()`` factory maps config strings to checks.
"""

from __future__ import annotations

import logging
from typing import Callable, Protocol

from ..feed.models import FeedEntry
from .models import RemotePost, TransformedContent

logger = logging.getLogger(__name__)

ContentProvider = Callable[[], TransformedContent]


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


class FreshnessCheck(Protocol):
    """Protocol that all freshness checks must satisfy."""

    def is_current(
        self,
        entry: FeedEntry,
        remote: RemotePost,
        content: ContentProvider,
    ) -> bool:
        """Decide whether *remote* already reflects *entry*.

        Args:
            entry: The feed entry.
            remote: Its canonical remote post.
            content: Returns the entry's transformed content; only called
                when the check needs it.

        Returns:
            ``True`` if the post needs no update.
        """
        ...  # pragma: no cover


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


class ContentHashCheck:
    """Current when the recorded digest matches the transformed content."""

    def is_current(
        self,
        entry: FeedEntry,
        remote: RemotePost,
        content: ContentProvider,
    ) -> bool:
        if remote.content_hash is None:
            return False
        return remote.content_hash == content().digest


class TimestampCheck:
    """Current when the post was modified no earlier than the entry."""

    def __init__(self) -> None:
        self._fallback = ContentHashCheck()

    def is_current(
        self,
        entry: FeedEntry,
        remote: RemotePost,
        content: ContentProvider,
    ) -> bool:
        if entry.updated is None:
            logger.debug(
                "%s has no update time; comparing content instead",
                entry.sync_key,
            )
            return self._fallback.is_current(entry, remote, content)
        if remote.updated is None:
            return False
        return remote.updated >= entry.updated


class AlwaysUpdateCheck:
    """Never current."""

    def is_current(
        self,
        entry: FeedEntry,
        remote: RemotePost,
        content: ContentProvider,
    ) -> bool:
        return False


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------

_STRATEGY_MAP: dict[str, type] = {
    "content-hash": ContentHashCheck,
    "timestamp": TimestampCheck,
    "always-update": AlwaysUpdateCheck,
}


def create_freshness_check(strategy: str) -> FreshnessCheck:
    """Create a freshness check for the given strategy string.

    Args:
        strategy: One of ``"content-hash"``, ``"timestamp"``,
            ``"always-update"``.

    Raises:
        ValueError: If the strategy string is not recognised.
    """
    cls = _STRATEGY_MAP.get(strategy)
    if cls is None:
        raise ValueError(
            f"Unknown freshness check: '{strategy}'. Valid checks: {sorted(_STRATEGY_MAP.keys())}"
        )
    return cls()  # type: ignore[return-value]
