"""URL helpers that understand the ``gemini://`` scheme."""

from urllib import parse as urlparse

# hierarchical scheme urljoin knows, used as a stand-in for ones it does not
_JOIN_SCHEME = "http"

DEFAULT_PORTS: dict[str, int] = {
    "gemini": 1965,
    "http": 80,
    "https": 443,
}


def resolve_url(base: str, link: str) -> str:
    """Resolve *link* against *base*, ``gemini://`` included.

    ``urljoin`` ignores relative references for schemes it does not list
    in ``uses_relative``.  For those the base is joined under a stand-in
    scheme and its own scheme is put back afterwards.
    """
    link = link.strip()
    scheme, colon, rest = base.partition(":")
    if not colon or scheme.lower() in urlparse.uses_relative:
        return urlparse.urljoin(base, link)
    if urlparse.urlsplit(link).scheme:
        return link

    joined = urlparse.urljoin(f"{_JOIN_SCHEME}:{rest}", link)
    return scheme + joined[len(_JOIN_SCHEME):]


def normalize_link(url: str) -> str:
    """Reduce *url* to scheme, host, non-default port and path.

    Query strings and fragments are dropped and scheme and host are
    lowercased, so links that differ only in those parts normalize to the
    same string.

    Raises:
        ValueError: If *url* is not absolute or has an invalid port.
    """
    parts = urlparse.urlsplit(url.strip())
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if not scheme or not host:
        raise ValueError(f"Not an absolute URL: {url!r}")

    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{port}"

    return urlparse.urlunsplit((scheme, netloc, parts.path or "/", "", ""))


def link_slug(url: str) -> str:
    """Return the file stem of the last path segment of *url*.

    ``gemini://host/posts/2024-01-01-hello.gmi`` -> ``2024-01-01-hello``.
    Returns an empty string when the path has no usable segment.
    """
    path = urlparse.urlsplit(url).path.rstrip("/")
    segment = path.rsplit("/", 1)[-1]
    stem, dot, _ext = segment.rpartition(".")
    if dot and stem:
        return stem
    return segment
