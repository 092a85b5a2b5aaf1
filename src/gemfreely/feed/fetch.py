"""Feed and post fetching over Gemini or HTTP(S).

``FeedFetcher`` returns raw bytes plus the MIME type the server declared,
which the parser uses for dialect detection.  Text decoding honours a
declared charset and otherwise falls back to charset-normalizer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

import requests
from charset_normalizer import from_bytes

from .. import __version__
from ..core.gemini import GeminiClient
from ..errors import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeedDocument:
    """A fetched document.

    Attributes:
        url: Final URL (after redirects).
        content: Raw response body.
        mime_type: Declared MIME type, lowercased, without parameters.
        charset: Declared charset, if any.
    """

    url: str
    content: bytes
    mime_type: str | None = None
    charset: str | None = None

    def text(self) -> str:
        charset = self.charset
        if charset is None and self.mime_type == "text/gemini":
            charset = "utf-8"
        return decode_document(self.content, charset)


def decode_document(raw: bytes, charset: str | None = None) -> str:
    """Decode *raw* using *charset*, or detect the encoding.

    Without a usable declared charset, valid UTF-8 is taken as UTF-8;
    charset-normalizer only guesses for bytes that do not decode as
    UTF-8.  Undetectable input is decoded as UTF-8 with replacement.
    """
    if not raw:
        return ""

    if charset:
        try:
            return raw.decode(charset)
        except (LookupError, UnicodeDecodeError):
            logger.debug(
                "Declared charset %r failed, detecting encoding", charset
            )

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    result = from_bytes(raw).best()
    if result is None:
        return raw.decode("utf-8", errors="replace")
    return str(result)


class FeedFetcher:
    """Fetch documents from ``gemini://``, ``http://`` or ``https://`` URLs.

    Args:
        timeout: Read timeout in seconds for every request.
        insecure: Skip TLS verification for HTTP(S) fetches.
    """

    def __init__(self, timeout: float = 30.0, insecure: bool = False) -> None:
        self.timeout = timeout
        self.insecure = insecure
        self.gemini = GeminiClient(timeout=timeout)

    def fetch(self, url: str) -> FeedDocument:
        """Fetch *url* and return the raw document.

        Raises:
            TransportError: On network failure, timeout, error status, or
                an unsupported URL scheme.
        """
        scheme = urlsplit(url).scheme.lower()
        logger.debug("Fetching %s", url)

        if scheme == "gemini":
            response = self.gemini.fetch(url)
            return FeedDocument(
                url=response.url,
                content=response.body,
                mime_type=response.mime_type,
                charset=response.charset,
            )
        if scheme in ("http", "https"):
            return self._fetch_http(url)

        raise TransportError(f"Unsupported URL scheme '{scheme}' in {url}")

    def fetch_text(self, url: str) -> str:
        """Fetch *url* and return its decoded text."""
        return self.fetch(url).text()

    def _fetch_http(self, url: str) -> FeedDocument:
        try:
            response = requests.get(
                url,
                timeout=(10, self.timeout),
                verify=not self.insecure,
                headers={"User-Agent": f"gemfreely/{__version__}"},
            )
        except requests.Timeout as exc:
            raise TransportError(f"GET {url} timed out") from exc
        except requests.RequestException as exc:
            raise TransportError(f"GET {url} failed: {exc}") from exc

        if response.status_code >= 400:
            raise TransportError(
                f"GET {url} failed ({response.status_code})",
                status=response.status_code,
            )

        content_type = response.headers.get("Content-Type", "")
        mime_type, _, params = content_type.partition(";")
        charset = None
        for param in params.split(";"):
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                charset = value.strip().strip('"')

        return FeedDocument(
            url=response.url or url,
            content=response.content,
            mime_type=mime_type.strip().lower() or None,
            charset=charset,
        )
