import logging
import threading
from datetime import datetime, timezone
from typing import Any, Iterator

import requests

from .. import __version__
from ..config import Config
from ..errors import AuthError, TransportError

logger = logging.getLogger(__name__)

# WriteFreely returns at most this many posts per collection page.
POSTS_PER_PAGE = 10


class WriteFreelyClient:
    """Thin wrapper around the WriteFreely JSON API.

    Every response is unwrapped from WriteFreely's ``{"code", "data"}``
    envelope.  Network failures, timeouts and error statuses are raised as
    ``TransportError``; rejected credentials as ``AuthError``.  No call is
    retried.
    """

    def __init__(self, config: Config):
        self.config = config
        self.access_token: str | None = config.access_token or None
        self._thread_local = threading.local()
        self.api_url = self._get_api_url()

    @property
    def session(self) -> requests.Session:
        """The current thread's session."""
        return self._get_session()

    def _get_api_url(self) -> str:
        return f"{self.config.wf_url.rstrip('/')}/api"

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.verify = not self.config.insecure
        session.headers.update(
            {
                "Accept": "application/json",
                "User-Agent": f"gemfreely/{__version__}",
            }
        )
        return session

    def _request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        authenticated: bool = True,
    ) -> Any:
        """
        Make a request to the WriteFreely API and return the ``data`` payload.
        """
        headers = {}
        if authenticated and self.access_token:
            headers["Authorization"] = f"Token {self.access_token}"

        url = f"{self.api_url}{path}"
        try:
            response = self._get_session().request(
                method,
                url,
                json=json_body,
                params=params,
                headers=headers,
                timeout=(10, self.config.timeout),
            )
        except requests.Timeout as exc:
            raise TransportError(f"{method} {path} timed out") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        status = response.status_code
        if status in (401, 403):
            raise AuthError(
                f"{method} {path} rejected ({status}): {self._error_message(response)}"
            )
        if status >= 400:
            raise TransportError(
                f"{method} {path} failed ({status}): {self._error_message(response)}",
                status=status,
            )
        if status == 204 or not response.content:
            return None

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(
                f"{method} {path} returned a non-JSON response", status=status
            ) from exc

        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return response.reason or "unknown error"
        if isinstance(payload, dict):
            return str(payload.get("error_msg") or response.reason)
        return response.reason or "unknown error"

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self, username: str, password: str) -> str:
        """
        Exchange username and password for an access token.

        The token is kept on the client for subsequent calls.

        Raises:
            AuthError: If the credentials are rejected.
        """
        try:
            data = self._request(
                "POST",
                "/auth/login",
                json_body={"alias": username, "pass": password},
                authenticated=False,
            )
        except TransportError as exc:
            if exc.status == 404:
                raise AuthError(f"No WriteFreely user named '{username}'") from exc
            raise

        token = (data or {}).get("access_token")
        if not token:
            raise AuthError("Login succeeded but no access token was returned")
        self.access_token = token
        return token

    def logout(self) -> None:
        """
        Invalidate the current access token.
        """
        if not self.access_token:
            raise AuthError("No access token to revoke")
        self._request("DELETE", "/auth/me")
        self.access_token = None

    def get_authenticated_user(self) -> str:
        """
        Return the username the access token belongs to.

        Used as the token check at the start of every sync run.
        """
        if not self.access_token:
            raise AuthError("WriteFreely access token required")
        data = self._request("GET", "/me")
        return str((data or {}).get("username", ""))

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def iter_collection_posts(self, alias: str) -> Iterator[dict[str, Any]]:
        """
        Yield every post in collection *alias*, newest page first.

        Pages are requested until an empty page is returned or the
        collection's ``total_posts`` has been reached.
        """
        page = 1
        seen = 0
        while True:
            data = self._request(
                "GET", f"/collections/{alias}/posts", params={"page": page}
            )
            posts = (data or {}).get("posts") or []
            if not posts:
                return
            yield from posts
            seen += len(posts)

            total = (data or {}).get("total_posts")
            if total is not None and seen >= int(total):
                return
            page += 1

    def list_collection_posts(self, alias: str) -> list[dict[str, Any]]:
        """
        Return every post in collection *alias*.
        """
        return list(self.iter_collection_posts(alias))

    def create_post(
        self,
        alias: str,
        title: str,
        body: str,
        slug: str | None = None,
        created: datetime | None = None,
    ) -> dict[str, Any]:
        """
        Create a post in collection *alias*.

        Args:
            alias: Target collection alias.
            title: Post title (may be empty).
            body: Markdown body.
            slug: Requested URL slug; WriteFreely derives one when omitted.
            created: Original publish time, kept so the blog shows the
                gemlog date rather than the sync date.

        Returns:
            The created post object (contains ``id``).
        """
        payload: dict[str, Any] = {"title": title, "body": body}
        if slug:
            payload["slug"] = slug
        if created is not None:
            payload["created"] = format_timestamp(created)

        data = self._request(
            "POST", f"/collections/{alias}/posts", json_body=payload
        )
        if not isinstance(data, dict) or not data.get("id"):
            raise TransportError("Create post response did not include a post id")
        return data

    def update_post(
        self, post_id: str, title: str, body: str
    ) -> dict[str, Any]:
        """
        Replace the title and body of an existing post.

        Returns:
            The updated post object.
        """
        data = self._request(
            "POST",
            f"/posts/{post_id}",
            json_body={"title": title, "body": body},
        )
        return data if isinstance(data, dict) else {"id": post_id}


def format_timestamp(value: datetime) -> str:
    """Format *value* the way WriteFreely expects (UTC, second precision)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a WriteFreely timestamp, returning ``None`` when absent or invalid."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logger.debug("Unparseable WriteFreely timestamp: %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
