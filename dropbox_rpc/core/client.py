"""
Core HTTP client for the Dropbox RPC API.

Handles request construction, response classification, RPC execution and
cursor pagination. The HTTP transport is injected; a urllib-based default
is provided.
"""

import json
import logging
import os
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field, fields
from dataclasses import replace as dataclass_replace
from typing import IO, Any, Protocol, TypeVar

from dropbox_rpc.core.types import CursorPage

logger = logging.getLogger(__name__)

# Configuration
LIBRARY_VERSION = "0.1.0"
DEFAULT_BASE_URL = "https://api.dropbox.com/"
DEFAULT_CONTENT_URL = "https://api-content.dropbox.com/"
DEFAULT_USER_AGENT = f"dropbox-rpc/{LIBRARY_VERSION}"
DEFAULT_TIMEOUT = 60

JSON_MEDIA_TYPE = "application/json; charset=utf-8"

T = TypeVar("T")


# =============================================================================
# Errors
# =============================================================================


class DropboxError(Exception):
    """Base error class for client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class TransportError(DropboxError):
    """Network-level failure raised by a transport (connection, redirect loop)."""


class URLParseError(DropboxError):
    """A request URL could not be parsed."""


class SerializationError(DropboxError):
    """JSON encoding or decoding failed."""

    def __init__(self, message: str, response: "Response | None" = None, details: dict | None = None):
        super().__init__(message, details)
        self.response = response


class RemoteError(DropboxError):
    """The API answered with a non-2xx status and a reason."""

    def __init__(self, reason: str, status: int = 0, response: "Response | None" = None):
        super().__init__(reason)
        self.reason = reason
        self.status = status
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


class UnexpectedError(DropboxError):
    """The API answered with a non-2xx status and no usable error body."""

    def __init__(self, status: int = 0, response: "Response | None" = None):
        super().__init__("unexpected error")
        self.status = status
        self.response = response

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        return result


# =============================================================================
# Configuration
# =============================================================================


def _with_trailing_slash(url: str) -> str:
    return url if url.endswith("/") else f"{url}/"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable client settings. Use replace() to derive a modified copy."""

    base_url: str = DEFAULT_BASE_URL
    content_url: str = DEFAULT_CONTENT_URL
    user_agent: str = DEFAULT_USER_AGENT
    locale: str = ""
    timeout: int = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", _with_trailing_slash(self.base_url))
        object.__setattr__(self, "content_url", _with_trailing_slash(self.content_url))

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build a config from defaults, environment variables and overrides.

        Explicit overrides win over DROPBOX_* environment variables. Only None
        means "not given"; an empty user_agent is kept and disables the header.
        """
        values: dict[str, Any] = {}
        env_names = {
            "base_url": "DROPBOX_BASE_URL",
            "content_url": "DROPBOX_CONTENT_URL",
            "user_agent": "DROPBOX_USER_AGENT",
            "locale": "DROPBOX_LOCALE",
        }
        for name, env_name in env_names.items():
            if env_name in os.environ:
                values[name] = os.environ[env_name]
        return cls(**values).replace(**overrides)

    def replace(self, **overrides: Any) -> "ClientConfig":
        """Return a copy with the given non-None fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return dataclass_replace(self, **changes)


# =============================================================================
# Request / Response envelopes
# =============================================================================


@dataclass
class Request:
    """An outbound RPC request. Built fresh for every call."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None

    def json(self) -> Any:
        """Decode the JSON payload (None when there is no body)."""
        if self.body is None:
            return None
        return json.loads(self.body)


class Response:
    """
    A received HTTP response.

    The body is a binary file-like object owned by whoever holds the
    response; use it as a context manager to guarantee release.
    """

    def __init__(
        self,
        status: int,
        headers: Mapping[str, str] | None = None,
        body: IO[bytes] | None = None,
        url: str = "",
    ):
        self.status = status
        self.headers = None if headers is None else {k.lower(): v for k, v in headers.items()}
        self.body = body
        self.url = url
        self.closed = False

    def header(self, name: str) -> str | None:
        """Case-insensitive header lookup."""
        if self.headers is None:
            return None
        return self.headers.get(name.lower())

    def read(self) -> bytes:
        """Read the whole body. Read failures propagate as OSError."""
        if self.body is None:
            return b""
        return self.body.read()

    def close(self) -> None:
        """Release the body. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        if self.body is not None:
            self.body.close()

    def __enter__(self) -> "Response":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Response [{self.status}]>"


class Transport(Protocol):
    """Anything that can send a Request and return a Response."""

    def send(self, request: Request) -> Response: ...


class UrllibTransport:
    """
    Default transport built on urllib.request.

    Non-2xx answers are returned as responses so the caller can classify
    them. Connection failures and redirect loops raise TransportError.
    """

    def __init__(
        self,
        timeout: int = DEFAULT_TIMEOUT,
        bearer_token: str | None = None,
        opener: urllib.request.OpenerDirector | None = None,
    ):
        self.timeout = timeout
        self.bearer_token = bearer_token
        self._opener = opener or urllib.request.build_opener()

    def send(self, request: Request) -> Response:
        headers = dict(request.headers)
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"

        req = urllib.request.Request(request.url, data=request.body, headers=headers, method=request.method)
        try:
            raw = self._opener.open(req, timeout=self.timeout)
        except urllib.error.HTTPError as e:
            if str(e.msg).startswith(urllib.request.HTTPRedirectHandler.inf_msg):
                e.close()
                raise TransportError(f"Redirect loop: {e.msg}", details={"url": request.url}) from e
            return Response(e.code, dict(e.headers.items()) if e.headers else {}, e, url=request.url)
        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}", details={"url": request.url}) from e
        except TimeoutError as e:
            raise TransportError(
                f"Request timed out after {self.timeout} seconds", details={"url": request.url}
            ) from e

        return Response(raw.status, dict(raw.headers.items()), raw, url=raw.geturl())


# =============================================================================
# Response classification
# =============================================================================


def check_content_type(response: Response, prefix: str) -> bool:
    """Check whether the trimmed Content-Type header starts with prefix."""
    if response.headers is None:
        return False
    content_type = (response.header("Content-Type") or "").strip()
    return content_type.startswith(prefix)


def check_response(response: Response) -> None:
    """
    Raise the API error carried by a non-2xx response.

    Does not release the body.

    Raises:
        RemoteError: JSON or plain text error body
        UnexpectedError: any other or missing content type
        SerializationError: malformed JSON error body

    """
    status = response.status
    if 200 <= status <= 299:
        return

    if check_content_type(response, "application/json"):
        try:
            data = json.loads(response.read())
        except ValueError as e:
            raise SerializationError(f"Invalid JSON error body: {e}", response=response) from e
        if not isinstance(data, dict):
            raise SerializationError("JSON error body is not an object", response=response)
        reason = data.get("reason", "")
        if not isinstance(reason, str):
            raise SerializationError("JSON error reason is not a string", response=response)
        logger.debug("API error %s: %s", status, reason)
        raise RemoteError(reason, status=status, response=response)

    if check_content_type(response, "text/plain"):
        # surrogateescape keeps non-UTF-8 bytes recoverable
        text = response.read().decode("utf-8", errors="surrogateescape")
        logger.debug("API error %s: %s", status, text)
        raise RemoteError(text, status=status, response=response)

    logger.debug("API error %s with unrecognized content type %r", status, response.header("Content-Type"))
    raise UnexpectedError(status=status, response=response)


# =============================================================================
# Client
# =============================================================================


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class APIClient:
    """
    Low-level RPC client for the Dropbox API.

    Handles:
    - Request construction against the configured base URL
    - Sending through an injected transport
    - Error classification and JSON decoding
    - Cursor pagination
    """

    def __init__(
        self,
        transport: Transport | None = None,
        config: ClientConfig | None = None,
        **overrides: Any,
    ):
        """
        Initialize the API client.

        Args:
            transport: Authenticated transport (defaults to UrllibTransport)
            config: Base configuration (defaults to ClientConfig.from_env())
            **overrides: Config fields to override (base_url, user_agent, ...)

        """
        base = config if config is not None else ClientConfig.from_env()
        self._config = base.replace(**overrides)
        self.transport = transport or UrllibTransport(timeout=self._config.timeout)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @config.setter
    def config(self, value: ClientConfig) -> None:
        self._config = value

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._config = self._config.replace(base_url=value)

    @property
    def content_url(self) -> str:
        return self._config.content_url

    @content_url.setter
    def content_url(self, value: str) -> None:
        self._config = self._config.replace(content_url=value)

    @property
    def user_agent(self) -> str:
        return self._config.user_agent

    @user_agent.setter
    def user_agent(self, value: str) -> None:
        self._config = self._config.replace(user_agent=value)

    @property
    def locale(self) -> str:
        return self._config.locale

    @locale.setter
    def locale(self, value: str) -> None:
        self._config = self._config.replace(locale=value)

    # =========================================================================
    # Request building
    # =========================================================================

    def _build_url(self, url: str, base_url: str) -> str:
        """Resolve url against base_url."""
        if any(ord(c) <= 0x20 or ord(c) == 0x7F for c in url):
            raise URLParseError(f"Invalid URL {url!r}: contains whitespace or control characters")
        try:
            urllib.parse.urlsplit(url)
            resolved = urllib.parse.urljoin(base_url, url)
            urllib.parse.urlsplit(resolved)
        except ValueError as e:
            raise URLParseError(f"Invalid URL {url!r}: {e}") from e
        return resolved

    def new_rpc_request(self, method: str, url: str, body: Any = None) -> Request:
        """
        Build an RPC style request.

        Args:
            method: HTTP method
            url: URL, resolved against base_url when relative. Relative URLs
                should not start with a slash.
            body: JSON-serializable value, or None for no payload

        Raises:
            URLParseError: If url is malformed
            SerializationError: If body cannot be encoded as JSON

        """
        config = self._config
        resolved = self._build_url(url, config.base_url)

        payload = None
        if body is not None:
            try:
                payload = json.dumps(body, separators=(",", ":"), allow_nan=False, default=_json_default)
            except (TypeError, ValueError) as e:
                raise SerializationError(f"Cannot encode request body: {e}") from e

        headers = {
            "Accept": JSON_MEDIA_TYPE,
            "Content-Type": JSON_MEDIA_TYPE,
        }
        if config.user_agent:
            headers["User-Agent"] = config.user_agent
        if config.locale:
            headers["Dropbox-API-User-Locale"] = config.locale

        return Request(
            method=method.upper(),
            url=resolved,
            headers=headers,
            body=payload.encode("utf-8") if payload is not None else None,
        )

    # =========================================================================
    # Execution
    # =========================================================================

    def do_rpc(
        self,
        request: Request,
        parser: Callable[[Any], T] | None = None,
    ) -> tuple[T | None, Response]:
        """
        Send a request and decode its JSON response.

        Args:
            request: Request built with new_rpc_request()
            parser: Optional function applied to the decoded JSON body

        Returns:
            (parsed value or None, response). The response body is already
            released when this returns.

        Raises:
            RemoteError, UnexpectedError: On non-2xx responses
            SerializationError: If the success body cannot be decoded
            TransportError: Propagated unchanged from the transport

        """
        logger.debug("%s %s", request.method, request.url)
        response = self.transport.send(request)

        with response:
            check_response(response)

            if parser is None:
                return None, response

            try:
                data = json.loads(response.read())
            except ValueError as e:
                raise SerializationError(f"Invalid JSON response: {e}", response=response) from e
            try:
                return parser(data), response
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                raise SerializationError(f"Unexpected response shape: {e!r}", response=response) from e

    def rpc(
        self,
        path: str,
        body: Any = None,
        parser: Callable[[Any], T] | None = None,
    ) -> tuple[T | None, Response]:
        """POST an RPC request to path and decode the response."""
        request = self.new_rpc_request("POST", path, body)
        return self.do_rpc(request, parser)

    # =========================================================================
    # Pagination
    # =========================================================================

    def iter_pages(self, fetch_page: Callable[[str], CursorPage[T]]) -> Iterator[CursorPage[T]]:
        """
        Follow a continuation cursor until the server reports no more pages.

        Args:
            fetch_page: Fetches one page given a cursor ("" for the first page)

        Yields:
            Each page in server order

        """
        cursor = ""
        pages = 0
        while True:
            page = fetch_page(cursor)
            pages += 1
            logger.debug("Fetched page %d with %d items (has_more=%s)", pages, len(page.data), page.has_more)
            yield page

            cursor = page.next_cursor
            if not cursor:
                break

    def paginate(self, fetch_page: Callable[[str], CursorPage[T]]) -> Iterator[T]:
        """Iterate through the items of all pages."""
        for page in self.iter_pages(fetch_page):
            yield from page.data

    def paginate_all(self, fetch_page: Callable[[str], CursorPage[T]]) -> tuple[list[T], Response | None]:
        """
        Fetch the items of all pages.

        Any failure aborts the listing and propagates; items fetched so far
        are discarded.

        Returns:
            (all items in order, response of the last page)

        """
        items: list[T] = []
        response = None
        for page in self.iter_pages(fetch_page):
            items.extend(page.data)
            response = page.response
        return items, response
