"""Apply reconciler decisions to the blog.

Create and update bodies get the sync marker appended, so the next run
recognises the post.  Nothing is retried: a failed publish is reported
and the next run decides again from the blog's actual state.
"""

from __future__ import annotations

import logging

from ..core.client import WriteFreelyClient
from ..errors import GemfreelyError, error_kind
from .models import OutcomeKind, SyncAction, SyncDecision, SyncOutcome
from .synckey import embed_sync_marker

logger = logging.getLogger(__name__)


class PublishExecutor:
    """Execute decisions against one WriteFreely collection.

    Args:
        client: Authenticated WriteFreely client.
        alias: Target collection alias.
    """

    def __init__(self, client: WriteFreelyClient, alias: str) -> None:
        self.client = client
        self.alias = alias

    def execute(self, decision: SyncDecision) -> SyncOutcome:
        """Carry out *decision*.

        Transport and auth failures become a ``failed`` outcome; anything
        else propagates to the caller.
        """
        try:
            match decision.action:
                case SyncAction.CREATE:
                    return self._create(decision)
                case SyncAction.UPDATE:
                    return self._update(decision)
                case _:
                    return self._skip(decision)
        except GemfreelyError as exc:
            logger.error(
                "Failed to %s %s: %s", decision.action.value, decision.sync_key, exc
            )
            return failed_outcome(decision, exc)

    def preview(self, decision: SyncDecision) -> SyncOutcome:
        """Return the outcome *decision* would have, without publishing."""
        match decision.action:
            case SyncAction.CREATE:
                kind = OutcomeKind.PUBLISHED
            case SyncAction.UPDATE:
                kind = OutcomeKind.UPDATED
            case _:
                return self._skip(decision)
        return _outcome(decision, kind)

    def _body(self, decision: SyncDecision) -> tuple[str, str]:
        content = decision.content
        if content is None:
            raise ValueError(
                f"{decision.action.value} decision for {decision.sync_key} has no content"
            )
        body = embed_sync_marker(content.body, decision.sync_key, content.digest)
        return content.title, body

    def _create(self, decision: SyncDecision) -> SyncOutcome:
        title, body = self._body(decision)
        entry = decision.entry
        post = self.client.create_post(
            self.alias,
            title,
            body,
            slug=entry.slug or None,
            created=entry.published,
        )
        post_id = str(post["id"])
        logger.info("Published %s as post %s", entry.sync_key, post_id)
        return _outcome(decision, OutcomeKind.PUBLISHED, remote_post_id=post_id)

    def _update(self, decision: SyncDecision) -> SyncOutcome:
        title, body = self._body(decision)
        post_id = decision.remote_post_id
        if not post_id:
            raise ValueError(f"Update decision for {decision.sync_key} has no post id")
        self.client.update_post(post_id, title, body)
        logger.info("Updated post %s from %s", post_id, decision.sync_key)
        return _outcome(decision, OutcomeKind.UPDATED)

    @staticmethod
    def _skip(decision: SyncDecision) -> SyncOutcome:
        return _outcome(decision, OutcomeKind.SKIPPED, reason=decision.reason)


def _outcome(decision: SyncDecision, kind: OutcomeKind, **fields) -> SyncOutcome:
    fields.setdefault("remote_post_id", decision.remote_post_id)
    return SyncOutcome(
        kind=kind,
        sync_key=decision.sync_key,
        title=decision.entry.title,
        duplicate_post_ids=decision.duplicate_post_ids,
        **fields,
    )


def failed_outcome(
    decision_or_key: SyncDecision | str, exc: BaseException, title: str = ""
) -> SyncOutcome:
    """Build a ``failed`` outcome for *exc*."""
    fields = {
        "error_kind": error_kind(exc),
        "error": str(exc) or exc.__class__.__name__,
    }
    if isinstance(decision_or_key, SyncDecision):
        return _outcome(decision_or_key, OutcomeKind.FAILED, **fields)
    return SyncOutcome(
        kind=OutcomeKind.FAILED, sync_key=decision_or_key, title=title, **fields
    )
