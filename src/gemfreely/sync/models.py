"""Pydantic models for the gemlog-to-blog sync engine.

Defines the data contracts used across all sync modules:

- ``SyncAction``: What the reconciler decided for an entry.
- ``SkipReason``: Why an entry or a duplicate post is left alone.
- ``OutcomeKind``: What actually happened when a decision was executed.
- ``TransformedContent``: Blog-ready title and Markdown body.
- ``RemotePost``: A blog post that carries a sync marker.
- ``SyncDecision``: One reconciler decision.
- ``SyncOutcome``: Result of executing one decision.
- ``SyncReport``: Aggregate results for a full sync run.

All models are frozen (immutable); nothing outlives a run.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from ..errors import ErrorKind
from ..feed.models import FeedEntry
from .synckey import content_hash


class SyncAction(str, Enum):
    """Possible reconciler decisions for a feed entry."""

    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


class SkipReason(str, Enum):
    """Why a decision is a skip."""

    UP_TO_DATE = "up_to_date"
    DUPLICATE_REMOTE = "duplicate_remote"


class OutcomeKind(str, Enum):
    """Result categories of executing a decision."""

    PUBLISHED = "published"
    UPDATED = "updated"
    SKIPPED = "skipped"
    FAILED = "failed"


class TransformedContent(BaseModel):
    """Blog-ready content derived from a feed entry.

    Attributes:
        title: Post title.
        body: Markdown body without the sync marker.
    """

    title: str
    body: str

    model_config = {"frozen": True}

    @property
    def digest(self) -> str:
        """Normalised SHA-256 of title and body."""
        return content_hash(self.title, self.body)


class RemotePost(BaseModel):
    """A blog post previously published by gemfreely.

    Attributes:
        post_id: WriteFreely post id.
        sync_key: Sync key recovered from the post's marker.
        slug: Post slug.
        title: Post title.
        created: Creation time.
        updated: Last modification time.
        content_hash: Digest recorded in the marker, or computed from the
            marker-stripped post when the marker carries none.
    """

    post_id: str
    sync_key: str
    slug: str = ""
    title: str = ""
    created: datetime | None = None
    updated: datetime | None = None
    content_hash: str | None = None

    model_config = {"frozen": True}


class SyncDecision(BaseModel):
    """One decision about one feed entry.

    Attributes:
        action: Create, update or skip.
        entry: The feed entry the decision is about.
        remote_post_id: Canonical post to update or skip.
        reason: Skip reason (skip decisions only).
        content: Transformed content when the action publishes.
        duplicate_post_ids: Non-canonical posts with the same sync key.
            They are reported and never modified.
    """

    action: SyncAction
    entry: FeedEntry
    remote_post_id: str | None = None
    reason: SkipReason | None = None
    content: TransformedContent | None = None
    duplicate_post_ids: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @property
    def sync_key(self) -> str:
        return self.entry.sync_key


class SyncOutcome(BaseModel):
    """Result of executing (or previewing) one decision.

    Attributes:
        kind: Published, updated, skipped or failed.
        sync_key: Sync key of the entry.
        title: Entry title, for reports.
        remote_post_id: Post that was created, updated or skipped.
        reason: Skip reason (skipped outcomes only).
        error_kind: Failure category (failed outcomes only).
        error: Failure message (failed outcomes only).
        duplicate_post_ids: Duplicate posts left untouched for this entry.
    """

    kind: OutcomeKind
    sync_key: str
    title: str = ""
    remote_post_id: str | None = None
    reason: SkipReason | None = None
    error_kind: ErrorKind | None = None
    error: str | None = None
    duplicate_post_ids: tuple[str, ...] = ()

    model_config = {"frozen": True}


class SyncReport(BaseModel):
    """Aggregate report for a full sync run.

    Attributes:
        collection: Alias of the blog collection synced to.
        feed_url: URL of the source feed.
        dry_run: Whether this was a dry run (nothing published).
        decisions: Reconciler decisions, one per reconciled entry, in feed order.
        outcomes: Outcomes, one per entry, in feed order.
        started_at: ISO 8601 timestamp when the run started.
        completed_at: ISO 8601 timestamp when the run completed.
    """

    collection: str
    feed_url: str
    dry_run: bool = False
    decisions: list[SyncDecision] = []
    outcomes: list[SyncOutcome] = []
    started_at: str
    completed_at: str | None = None

    model_config = {"frozen": True}

    def _of_kind(self, kind: OutcomeKind) -> list[SyncOutcome]:
        return [o for o in self.outcomes if o.kind == kind]

    @property
    def published(self) -> list[SyncOutcome]:
        """Outcomes where a new post was (or would be) created."""
        return self._of_kind(OutcomeKind.PUBLISHED)

    @property
    def updated(self) -> list[SyncOutcome]:
        """Outcomes where an existing post was (or would be) updated."""
        return self._of_kind(OutcomeKind.UPDATED)

    @property
    def skipped(self) -> list[SyncOutcome]:
        """Outcomes that were left alone."""
        return self._of_kind(OutcomeKind.SKIPPED)

    @property
    def failed(self) -> list[SyncOutcome]:
        """Outcomes that failed."""
        return self._of_kind(OutcomeKind.FAILED)

    @property
    def failures(self) -> list[tuple[str, ErrorKind]]:
        """``(sync_key, error_kind)`` for every failed outcome."""
        return [
            (o.sync_key, o.error_kind or ErrorKind.INTERNAL)
            for o in self.failed
        ]

    @property
    def duplicates(self) -> list[tuple[str, str]]:
        """``(sync_key, post_id)`` for every duplicate post left untouched."""
        return [
            (o.sync_key, post_id)
            for o in self.outcomes
            for post_id in o.duplicate_post_ids
        ]

    @property
    def succeeded(self) -> bool:
        """True when no entry failed."""
        return not self.failed

    def counts(self) -> dict[str, int]:
        return {
            "published": len(self.published),
            "updated": len(self.updated),
            "skipped": len(self.skipped),
            "failed": len(self.failed),
        }
