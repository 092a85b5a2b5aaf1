"""Sync engine that orchestrates a full gemlog-to-blog run.

The ``SyncEngine`` ties together the feed parser, the remote post index,
the reconciler, the transformer and the publish executor.  It:

1. Fetches and parses the feed.
2. Verifies the access token.
3. Builds the remote post index once.
4. Reconciles each entry, transforming its content only when needed.
5. Executes (or, in a dry run, previews) each decision.
6. Builds and returns a ``SyncReport``.

Steps 1-3 are fatal: their errors propagate and nothing is published.
Error handling in steps 4-5 is per entry: a failing entry is recorded
as a failed outcome and the run continues.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from ..config_schema import SyncProfileConfig
from ..core.async_utils import run_bounded, run_sync
from ..core.client import WriteFreelyClient
from ..errors import MalformedFeed
from ..feed import Feed, FeedEntry, FeedFetcher, parse_feed
from .executor import PublishExecutor, failed_outcome
from .freshness import create_freshness_check
from .index import RemotePostIndex
from .models import SyncDecision, SyncOutcome, SyncReport, TransformedContent
from .reconciler import Reconciler
from .transformer import ContentTransformer, TransformConfig

logger = logging.getLogger(__name__)

# (decision, outcome); decision is None when reconciling failed
EntryResult = tuple[SyncDecision | None, SyncOutcome]


class SyncEngine:
    """Sync one gemlog feed into one WriteFreely collection.

    Args:
        client: Authenticated WriteFreely client.
        fetcher: Fetcher for the feed and entry bodies.
        profile: The sync profile configuration.
        collection: Target collection alias.
        max_parallel: Entries processed concurrently by ``run_async``.
    """

    def __init__(
        self,
        client: WriteFreelyClient,
        fetcher: FeedFetcher,
        profile: SyncProfileConfig,
        collection: str,
        max_parallel: int = 1,
    ) -> None:
        self.client = client
        self.fetcher = fetcher
        self.profile = profile
        self.collection = collection
        self.max_parallel = max_parallel

        self.transformer = ContentTransformer(
            TransformConfig(
                strip_before_marker=profile.strip_before_marker,
                strip_after_marker=profile.strip_after_marker,
            )
        )
        self.freshness = create_freshness_check(profile.freshness)
        self.executor = PublishExecutor(client, collection)

    # ------------------------------------------------------------------
    # Main entry points
    # ------------------------------------------------------------------

    def run(self, dry_run: bool = False) -> SyncReport:
        """Execute a full sync run, one entry at a time.

        Args:
            dry_run: If ``True``, compute decisions but publish nothing.

        Returns:
            A ``SyncReport`` summarising what was (or would be) done.

        Raises:
            GemfreelyError: If the feed, the token or the index cannot be
                loaded.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        feed, reconciler = self._prepare()

        results = [
            self._sync_entry(entry, reconciler, dry_run) for entry in feed.entries
        ]
        return self._report(feed, results, dry_run, started_at)

    async def run_async(self, dry_run: bool = False) -> SyncReport:
        """Execute a full sync run with up to ``max_parallel`` entries in flight.

        Outcomes keep feed order.  Same failure semantics as ``run``.
        """
        started_at = datetime.now(timezone.utc).isoformat()
        feed, reconciler = await run_sync(self._prepare)

        semaphore = asyncio.Semaphore(self.max_parallel)
        results = await asyncio.gather(
            *(
                run_bounded(semaphore, self._sync_entry, entry, reconciler, dry_run)
                for entry in feed.entries
            )
        )
        return self._report(feed, results, dry_run, started_at)

    # ------------------------------------------------------------------
    # Fatal setup
    # ------------------------------------------------------------------

    def _prepare(self) -> tuple[Feed, Reconciler]:
        feed = self._load_feed()

        username = self.client.get_authenticated_user()
        logger.info("Authenticated as '%s'", username)

        index = RemotePostIndex.build(self.client, self.collection)
        return feed, Reconciler(index, self.freshness)

    def _load_feed(self) -> Feed:
        document = self.fetcher.fetch(self.profile.feed_url)
        return parse_feed(document, self.profile.dialect, self.profile.date_format)

    # ------------------------------------------------------------------
    # Per-entry sync
    # ------------------------------------------------------------------

    def _sync_entry(
        self, entry: FeedEntry, reconciler: Reconciler, dry_run: bool
    ) -> EntryResult:
        try:
            decision = reconciler.reconcile(entry, lambda: self._transform(entry))
        except Exception as exc:
            logger.error("Error reconciling %s: %s", entry.sync_key, exc)
            return None, failed_outcome(entry.sync_key, exc, entry.title)

        try:
            if dry_run:
                outcome = self.executor.preview(decision)
            else:
                outcome = self.executor.execute(decision)
        except Exception as exc:
            logger.error(
                "Error executing %s for %s: %s",
                decision.action.value,
                entry.sync_key,
                exc,
            )
            outcome = failed_outcome(decision, exc)
        return decision, outcome

    def _transform(self, entry: FeedEntry) -> TransformedContent:
        """Load the entry body if the feed did not carry it, then transform."""
        if entry.body is None:
            if not entry.url:
                raise MalformedFeed(f"Entry {entry.sync_key} has no body and no URL")
            logger.debug("Loading body of %s from %s", entry.sync_key, entry.url)
            entry = entry.with_body(self.fetcher.fetch_text(entry.url))
        return self.transformer.transform(entry)

    def _report(
        self,
        feed: Feed,
        results: list[EntryResult],
        dry_run: bool,
        started_at: str,
    ) -> SyncReport:
        decisions = [decision for decision, _ in results if decision is not None]
        outcomes = [outcome for _, outcome in results]

        report = SyncReport(
            collection=self.collection,
            feed_url=feed.url,
            dry_run=dry_run,
            decisions=decisions,
            outcomes=outcomes,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc).isoformat(),
        )
        logger.info("Sync finished: %s", report.counts())
        return report
