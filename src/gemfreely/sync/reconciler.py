"""Per-entry reconciliation against the remote post index.

For one entry the reconciler decides:

1. Not in the index -> ``create``.
2. In the index -> ``update`` the canonical post, or ``skip``
   (``up_to_date``) when the freshness check says it is current.
3. Non-canonical posts sharing the entry's sync key are listed on the
   decision as ``duplicate_post_ids``; they are reported, never touched.

There is exactly one decision per entry.  Reconciling one entry reads
the shared index only and keeps no state between entries, so entries can
be reconciled concurrently.
"""

from __future__ import annotations

import functools
import logging

from ..feed.models import FeedEntry
from .freshness import ContentHashCheck, ContentProvider, FreshnessCheck
from .index import RemotePostIndex
from .models import SkipReason, SyncAction, SyncDecision

logger = logging.getLogger(__name__)


class Reconciler:
    """Decide what to do with each feed entry.

    Args:
        index: Remote post index built for this run.
        freshness: Check deciding whether a known post is current.
    """

    def __init__(
        self,
        index: RemotePostIndex,
        freshness: FreshnessCheck | None = None,
    ) -> None:
        self.index = index
        self.freshness = freshness or ContentHashCheck()

    def reconcile(
        self, entry: FeedEntry, content_provider: ContentProvider
    ) -> SyncDecision:
        """Return the decision for *entry*.

        Args:
            entry: The feed entry.
            content_provider: Produces the entry's transformed content.
                Called at most once, and only when the decision needs it.
        """
        content = functools.cache(content_provider)
        key = entry.sync_key
        remote = self.index.get(key)
        duplicates = tuple(post.post_id for post in self.index.duplicates(key))

        if remote is None:
            decision = SyncDecision(
                action=SyncAction.CREATE, entry=entry, content=content()
            )
        elif self.freshness.is_current(entry, remote, content):
            decision = SyncDecision(
                action=SyncAction.SKIP,
                entry=entry,
                remote_post_id=remote.post_id,
                reason=SkipReason.UP_TO_DATE,
                duplicate_post_ids=duplicates,
            )
        else:
            decision = SyncDecision(
                action=SyncAction.UPDATE,
                entry=entry,
                remote_post_id=remote.post_id,
                content=content(),
                duplicate_post_ids=duplicates,
            )

        if duplicates:
            logger.warning(
                "%s: leaving duplicate posts %s untouched",
                key,
                ", ".join(duplicates),
            )
        logger.debug("%s -> %s", key, decision.action.value)
        return decision
