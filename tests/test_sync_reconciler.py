"""Tests for the per-entry reconciler."""

from datetime import datetime, timezone

import pytest

from gemfreely.sync.freshness import AlwaysUpdateCheck, TimestampCheck
from gemfreely.sync.index import RemotePostIndex
from gemfreely.sync.models import (
    RemotePost,
    SkipReason,
    SyncAction,
    TransformedContent,
)
from gemfreely.sync.reconciler import Reconciler

KEY = "gemini://example.org/gemlog/hello.gmi"
CONTENT = TransformedContent(title="Hello", body="# Hello\n\nFirst post.\n")
T1 = datetime(2024, 1, 1, tzinfo=timezone.utc)
T2 = datetime(2024, 2, 1, tzinfo=timezone.utc)


class CountingProvider:
    """Content provider that records how often it is called."""

    def __init__(self, content=CONTENT):
        self.content = content
        self.calls = 0

    def __call__(self):
        self.calls += 1
        return self.content


def _remote(post_id="p1", digest=CONTENT.digest, updated=T2):
    return RemotePost(post_id=post_id, sync_key=KEY, updated=updated, content_hash=digest)


class TestReconcile:
    def test_unknown_entry_created(self, make_entry):
        provider = CountingProvider()
        decision = Reconciler(RemotePostIndex()).reconcile(make_entry(KEY), provider)

        assert decision.action == SyncAction.CREATE
        assert decision.content == CONTENT
        assert decision.remote_post_id is None
        assert decision.duplicate_post_ids == ()
        assert provider.calls == 1

    def test_current_entry_skipped(self, make_entry):
        index = RemotePostIndex([_remote()])
        decision = Reconciler(index).reconcile(make_entry(KEY), CountingProvider())

        assert decision.action == SyncAction.SKIP
        assert decision.reason == SkipReason.UP_TO_DATE
        assert decision.remote_post_id == "p1"
        assert decision.content is None

    def test_changed_entry_updated(self, make_entry):
        index = RemotePostIndex([_remote(digest="0" * 64)])
        provider = CountingProvider()
        decision = Reconciler(index).reconcile(make_entry(KEY), provider)

        assert decision.action == SyncAction.UPDATE
        assert decision.remote_post_id == "p1"
        assert decision.content == CONTENT
        assert provider.calls == 1

    def test_duplicates_carried_on_single_decision(self, make_entry):
        index = RemotePostIndex(
            [_remote("old", updated=T1), _remote("new", digest="0" * 64, updated=T2)]
        )
        decision = Reconciler(index).reconcile(make_entry(KEY), CountingProvider())

        assert decision.action == SyncAction.UPDATE
        assert decision.remote_post_id == "new"
        assert decision.duplicate_post_ids == ("old",)

    def test_duplicates_on_up_to_date_skip(self, make_entry, caplog):
        index = RemotePostIndex(
            [_remote("a", updated=T1), _remote("b", updated=T2), _remote("c", updated=T1)]
        )
        with caplog.at_level("WARNING", logger="gemfreely.sync.reconciler"):
            decision = Reconciler(index).reconcile(make_entry(KEY), CountingProvider())

        assert decision.action == SyncAction.SKIP
        assert decision.reason == SkipReason.UP_TO_DATE
        assert decision.remote_post_id == "b"
        assert sorted(decision.duplicate_post_ids) == ["a", "c"]
        assert "duplicate posts" in caplog.text

    def test_timestamp_skip_needs_no_content(self, make_entry):
        index = RemotePostIndex([_remote(updated=T2)])
        provider = CountingProvider()
        decision = Reconciler(index, TimestampCheck()).reconcile(
            make_entry(KEY, updated=T1), provider
        )

        assert decision.action == SyncAction.SKIP
        assert provider.calls == 0

    def test_always_update(self, make_entry):
        index = RemotePostIndex([_remote()])
        decision = Reconciler(index, AlwaysUpdateCheck()).reconcile(
            make_entry(KEY), CountingProvider()
        )
        assert decision.action == SyncAction.UPDATE

    def test_content_computed_once(self, make_entry):
        index = RemotePostIndex([_remote(digest="0" * 64)])
        provider = CountingProvider()
        Reconciler(index).reconcile(make_entry(KEY), provider)
        assert provider.calls == 1

    def test_provider_error_propagates(self, make_entry):
        def broken():
            raise ValueError("no body")

        with pytest.raises(ValueError, match="no body"):
            Reconciler(RemotePostIndex()).reconcile(make_entry(KEY), broken)
