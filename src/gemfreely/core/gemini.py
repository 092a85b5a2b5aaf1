"""Minimal Gemini protocol client used to fetch gemlog feeds and posts.

Gemini servers overwhelmingly use self-signed certificates (trust on first
use), so certificates are not verified.  Only what a feed fetch needs is
implemented: one request per connection, ``2x`` success, ``3x`` redirects.
"""

import logging
import socket
import ssl
from dataclasses import dataclass
from urllib.parse import urlsplit

from ..errors import AuthError, TransportError
from ..urls import resolve_url

logger = logging.getLogger(__name__)

GEMINI_PORT = 1965
MAX_REDIRECTS = 5
MAX_RESPONSE_BYTES = 16 * 1024 * 1024


@dataclass(frozen=True)
class GeminiResponse:
    """A successful Gemini response.

    Attributes:
        status: Two-digit status code (``2x``).
        meta: Response header meta; the MIME type for success responses.
        body: Raw response body.
        url: Final URL after redirects.
    """

    status: int
    meta: str
    body: bytes
    url: str

    @property
    def mime_type(self) -> str:
        return self.meta.split(";", 1)[0].strip().lower() or "text/gemini"

    @property
    def charset(self) -> str | None:
        for param in self.meta.split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip('"')
        return None


class GeminiClient:
    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout
        self._context = self._create_context()

    @staticmethod
    def _create_context() -> ssl.SSLContext:
        context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
        return context

    def fetch(self, url: str) -> GeminiResponse:
        """
        Fetch *url*, following up to ``MAX_REDIRECTS`` redirects.

        Raises:
            TransportError: On network failure, timeout, a malformed
                header, too many redirects, or a non-success status.
            AuthError: If the server demands a client certificate.
        """
        current = url
        for _ in range(MAX_REDIRECTS + 1):
            status, meta, body = self._request(current)
            category = status // 10

            if category == 2:
                return GeminiResponse(
                    status=status, meta=meta, body=body, url=current
                )
            if category == 3:
                target = resolve_url(current, meta)
                logger.debug("Gemini redirect %s -> %s", current, target)
                current = target
                continue
            if category == 6:
                raise AuthError(
                    f"{current} requires a client certificate ({status} {meta})"
                )
            raise TransportError(
                f"Gemini request for {current} failed: {status} {meta}",
                status=status,
            )

        raise TransportError(
            f"Too many redirects fetching {url} (limit {MAX_REDIRECTS})"
        )

    def _request(self, url: str) -> tuple[int, str, bytes]:
        """
        Send a single request and return ``(status, meta, body)``.
        """
        parts = urlsplit(url)
        if parts.scheme != "gemini" or not parts.hostname:
            raise TransportError(f"Not a gemini:// URL: {url}")
        host = parts.hostname
        port = parts.port or GEMINI_PORT

        try:
            with socket.create_connection(
                (host, port), timeout=self.timeout
            ) as sock:
                with self._context.wrap_socket(
                    sock, server_hostname=host
                ) as tls:
                    tls.sendall(f"{url}\r\n".encode("utf-8"))
                    raw = self._read_all(tls)
        except TimeoutError as exc:
            raise TransportError(f"Gemini request for {url} timed out") from exc
        except (OSError, ssl.SSLError) as exc:
            raise TransportError(
                f"Gemini request for {url} failed: {exc}"
            ) from exc

        header, sep, body = raw.partition(b"\r\n")
        if not sep or len(header) > 1029:
            raise TransportError(f"Malformed Gemini response header from {url}")

        status_text, _, meta = header.decode("utf-8", errors="replace").partition(" ")
        if len(status_text) != 2 or not status_text.isdigit():
            raise TransportError(
                f"Malformed Gemini status {status_text!r} from {url}"
            )
        return int(status_text), meta.strip(), body

    @staticmethod
    def _read_all(tls: ssl.SSLSocket) -> bytes:
        chunks: list[bytes] = []
        size = 0
        while True:
            try:
                chunk = tls.recv(65536)
            except (ssl.SSLZeroReturnError, ssl.SSLEOFError):
                # Many capsules close without close_notify
                break
            if not chunk:
                break
            chunks.append(chunk)
            size += len(chunk)
            if size > MAX_RESPONSE_BYTES:
                raise TransportError(
                    f"Gemini response exceeds {MAX_RESPONSE_BYTES} bytes"
                )
        return b"".join(chunks)
