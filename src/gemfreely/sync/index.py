"""Index of blog posts already published from the feed.

Built once per run from the collection's posts and then only read.
Posts are keyed by the sync key recovered from their sync marker; posts
without a marker were not published by gemfreely and are ignored.

When several posts carry the same key (a previous run was interrupted
between publishing and reporting, or a post was copied by hand) the most
recently updated one is canonical and the rest are recorded as
duplicates.  Duplicates are reported, never deleted.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from ..core.client import WriteFreelyClient, parse_timestamp
from .models import RemotePost
from .synckey import content_hash, decode_sync_marker, strip_sync_marker

logger = logging.getLogger(__name__)

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def remote_post_from_api(data: dict[str, Any]) -> RemotePost | None:
    """Build a ``RemotePost`` from a WriteFreely post object.

    Returns ``None`` when the post has no id or carries no sync marker.
    """
    post_id = data.get("id")
    body = data.get("body") or ""
    marker = decode_sync_marker(body)
    if not post_id or marker is None:
        return None

    title = data.get("title") or ""
    digest = marker.content_hash or content_hash(title, strip_sync_marker(body))

    return RemotePost(
        post_id=str(post_id),
        sync_key=marker.sync_key,
        slug=data.get("slug") or "",
        title=title,
        created=parse_timestamp(data.get("created")),
        updated=parse_timestamp(data.get("updated")),
        content_hash=digest,
    )


def _recency(post: RemotePost) -> tuple[datetime, datetime, str]:
    """Sort key: latest updated, then latest created, then greatest id."""
    return (post.updated or _OLDEST, post.created or _OLDEST, post.post_id)


class RemotePostIndex:
    """Read-only map from sync key to the canonical remote post."""

    def __init__(self, posts: Iterable[RemotePost] = ()) -> None:
        groups: dict[str, list[RemotePost]] = defaultdict(list)
        for post in posts:
            groups[post.sync_key].append(post)

        canonical: dict[str, RemotePost] = {}
        duplicates: dict[str, tuple[RemotePost, ...]] = {}
        for key, group in groups.items():
            ordered = sorted(group, key=_recency, reverse=True)
            canonical[key] = ordered[0]
            if len(ordered) > 1:
                duplicates[key] = tuple(ordered[1:])
                logger.warning(
                    "Sync key %s has %d posts; using %s, ignoring %s",
                    key,
                    len(ordered),
                    ordered[0].post_id,
                    ", ".join(p.post_id for p in ordered[1:]),
                )

        self._canonical: Mapping[str, RemotePost] = MappingProxyType(canonical)
        self._duplicates: Mapping[str, tuple[RemotePost, ...]] = MappingProxyType(
            duplicates
        )

    @classmethod
    def build(cls, client: WriteFreelyClient, alias: str) -> RemotePostIndex:
        """Page through collection *alias* and index its synced posts.

        Raises:
            TransportError: If listing the collection fails.
            AuthError: If the token is rejected.
        """
        posts: list[RemotePost] = []
        total = 0
        for data in client.iter_collection_posts(alias):
            total += 1
            post = remote_post_from_api(data)
            if post is not None:
                posts.append(post)

        index = cls(posts)
        logger.info(
            "Indexed collection '%s': %d posts, %d synced entries",
            alias,
            total,
            len(index),
        )
        return index

    def get(self, sync_key: str) -> RemotePost | None:
        """Return the canonical post for *sync_key*, or ``None``."""
        return self._canonical.get(sync_key)

    def duplicates(self, sync_key: str) -> tuple[RemotePost, ...]:
        """Return the non-canonical posts for *sync_key*."""
        return self._duplicates.get(sync_key, ())

    def __contains__(self, sync_key: object) -> bool:
        return sync_key in self._canonical

    def __len__(self) -> int:
        return len(self._canonical)

    def __iter__(self) -> Iterator[str]:
        return iter(self._canonical)
