"""Gemlog-to-WriteFreely sync engine.

Architecture
------------
The blog is the only record of what has been synced.  Every published
post carries a sync marker naming the feed entry it came from and the
digest of its content, so each run rebuilds its view of the remote side
from the collection itself and no local state is kept.

Modules:

- ``engine``      -- ``SyncEngine``: orchestrates a full sync run.
- ``index``       -- ``RemotePostIndex``: sync key -> canonical post.
- ``reconciler``  -- ``Reconciler``: create / update / skip per entry.
- ``freshness``   -- Freshness checks (content-hash, timestamp,
  always-update).
- ``transformer`` -- ``ContentTransformer``: marker trimming and gemtext
  to Markdown.
- ``executor``    -- ``PublishExecutor``: applies decisions to the blog.
- ``synckey``     -- Sync marker encoding and content hashing.
- ``models``      -- ``SyncAction``, ``SyncDecision``, ``SyncOutcome``,
  ``SyncReport`` and friends.
- ``reporter``    -- Human-readable and JSON report formatting.

Usage example
-------------
::

    from gemfreely.config_schema import SyncProfileConfig
    from gemfreely.feed import FeedFetcher
    from gemfreely.sync import SyncEngine, format_sync_report

    profile = SyncProfileConfig(
        feed_url="gemini://example.org/gemlog/",
        strip_before_marker="---",
    )

    engine = SyncEngine(
        client=wf_client,            # WriteFreelyClient instance
        fetcher=FeedFetcher(),
        profile=profile,
        collection="my-blog",
    )

    # Dry-run first to preview changes
    preview = engine.run(dry_run=True)
    print(format_sync_report(preview))

    # Execute the sync
    report = engine.run(dry_run=False)
    print(format_sync_report(report))
"""

from .engine import SyncEngine
from .executor import PublishExecutor
from .freshness import create_freshness_check
from .index import RemotePostIndex
from .models import (
    OutcomeKind,
    RemotePost,
    SkipReason,
    SyncAction,
    SyncDecision,
    SyncOutcome,
    SyncReport,
    TransformedContent,
)
from .reconciler import Reconciler
from .reporter import (
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)
from .transformer import ContentTransformer, TransformConfig

__all__ = [
    "ContentTransformer",
    "OutcomeKind",
    "PublishExecutor",
    "Reconciler",
    "RemotePost",
    "RemotePostIndex",
    "SkipReason",
    "SyncAction",
    "SyncDecision",
    "SyncEngine",
    "SyncOutcome",
    "SyncReport",
    "TransformConfig",
    "TransformedContent",
    "create_freshness_check",
    "format_dry_run_preview",
    "format_sync_report",
    "report_to_json",
]
