"""Sync markers: the link between a blog post and its gemlog entry.

Every post gemfreely publishes ends with an HTML comment that WriteFreely
does not render::

    <!-- gemfreely:sync key=gemini%3A%2F%2Fexample.org%2Fhello.gmi hash=3f5a... -->

``key`` is the entry's percent-encoded sync key; ``hash`` is the digest of
the content that was published.  The remote blog is the only record of
what was synced, so the index is rebuilt from these markers every run.
"""

from __future__ import annotations

import hashlib
import re
from typing import NamedTuple
from urllib.parse import quote, unquote

SYNC_MARKER_TAG = "gemfreely:sync"

_MARKER_PATTERN = re.compile(
    r"<!--[ \t]*gemfreely:sync[ \t]+key=(?P<key>\S+?)"
    r"(?:[ \t]+hash=(?P<hash>[0-9a-f]{64}))?[ \t]*-->"
)


class SyncMarker(NamedTuple):
    """Decoded sync marker."""

    sync_key: str
    content_hash: str | None


def content_hash(title: str, body: str) -> str:
    """Compute a normalised SHA-256 hex digest of a post.

    Normalisation steps (applied in order):

    1. Strip BOM (``\\ufeff``).
    2. Replace ``\\r\\n`` with ``\\n``.
    3. Right-strip each line.
    4. Strip trailing empty lines.

    Title and body are joined by a newline and encoded as UTF-8.
    """
    text = f"{title}\n{body}".lstrip("\ufeff")
    text = text.replace("\r\n", "\n")
    lines = [line.rstrip() for line in text.split("\n")]
    while lines and lines[-1] == "":
        lines.pop()
    normalised = "\n".join(lines)
    return hashlib.sha256(normalised.encode("utf-8")).hexdigest()


def encode_sync_marker(sync_key: str, digest: str) -> str:
    """Return the marker comment for *sync_key* and *digest*."""
    return f"<!-- {SYNC_MARKER_TAG} key={quote(sync_key, safe='')} hash={digest} -->"


def embed_sync_marker(body: str, sync_key: str, digest: str) -> str:
    """Append the sync marker to *body* after a blank line."""
    return f"{body.rstrip()}\n\n{encode_sync_marker(sync_key, digest)}\n"


def decode_sync_marker(body: str) -> SyncMarker | None:
    """Recover the sync marker from a post body.

    The last marker wins when a body carries several (e.g. a post that
    was edited by hand after being copied).  Returns ``None`` when the
    post carries no marker, i.e. was not published by gemfreely.
    """
    matches = list(_MARKER_PATTERN.finditer(body or ""))
    if not matches:
        return None
    match = matches[-1]
    key = unquote(match.group("key"))
    if not key:
        return None
    return SyncMarker(sync_key=key, content_hash=match.group("hash"))


def strip_sync_marker(body: str) -> str:
    """Remove every sync marker (and the whitespace before it) from *body*."""
    stripped = _MARKER_PATTERN.sub("", body or "")
    return stripped.rstrip() + "\n" if stripped.strip() else ""
