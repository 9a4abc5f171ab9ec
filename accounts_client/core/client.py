"""
Core HTTP client for the accounts API.

Handles configuration, authentication headers, request building,
response classification and the default transport.
"""

import http.client
import json
import logging
import os
import urllib.parse
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Protocol, TypeVar

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_TIMEOUT = 10

# Any status below 400 counts as success
BELOW_400 = range(0, 400)

T = TypeVar("T")


class AccountsError(Exception):
    """Base error class for accounts client errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for structured output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(AccountsError):
    """Malformed base URL or missing client configuration."""


class ValidationError(AccountsError):
    """Validation error for local input issues, raised before any request is sent."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class TransportError(AccountsError):
    """The request could not be delivered or the connection failed."""


class ServerError(AccountsError):
    """Server answered with a status outside the accepted range."""

    def __init__(self, message: str, status: int, body: str = ""):
        super().__init__(f"{message} (status {status}): {body}")
        self.status = status
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for structured output."""
        result = super().to_dict()
        result["status"] = self.status
        result["body"] = self.body
        return result


class DecodeError(AccountsError):
    """Response body could not be decoded into the expected type."""


@dataclass(frozen=True)
class ClientConfig:
    """Immutable connection settings shared by every operation."""

    base_url: str
    token: str
    api_key: str
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, env_file: str | os.PathLike | None = None) -> "ClientConfig":
        """
        Build a config from ACCOUNTS_* environment variables.

        Args:
            env_file: Optional .env file loaded before reading the environment.
                Variables already set in the process take precedence.

        Raises:
            ConfigurationError: If ACCOUNTS_BASE_URL is missing or
                ACCOUNTS_TIMEOUT is not a number

        """
        if env_file is not None:
            load_dotenv(env_file)

        base_url = os.environ.get("ACCOUNTS_BASE_URL")
        if not base_url:
            raise ConfigurationError("ACCOUNTS_BASE_URL environment variable not set")

        raw_timeout = os.environ.get("ACCOUNTS_TIMEOUT")
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError:
            raise ConfigurationError(f"ACCOUNTS_TIMEOUT must be a number, got {raw_timeout!r}")

        return cls(
            base_url=base_url,
            token=os.environ.get("ACCOUNTS_TOKEN", ""),
            api_key=os.environ.get("ACCOUNTS_API_KEY", ""),
            timeout=timeout,
        )


@dataclass(frozen=True)
class PreparedRequest:
    """A fully addressed and authenticated request, ready for a transport."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass(frozen=True)
class Response:
    """Raw response with its body already read in full."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class Transport(Protocol):
    """Executes a prepared request exactly once."""

    def send(self, request: PreparedRequest, timeout: float) -> Response: ...


class HTTPTransport:
    """
    Default transport built on http.client.

    Header names go on the wire exactly as given, which keeps the
    per-endpoint API key casing intact. A new connection is opened for
    every request, so one instance can be shared between threads.
    """

    def send(self, request: PreparedRequest, timeout: float) -> Response:
        parts = urllib.parse.urlsplit(request.url)
        target = parts.path or "/"
        if parts.query:
            target = f"{target}?{parts.query}"

        connection: http.client.HTTPConnection | None = None
        try:
            if parts.scheme == "https":
                connection = http.client.HTTPSConnection(parts.hostname, parts.port, timeout=timeout)
            else:
                connection = http.client.HTTPConnection(parts.hostname, parts.port, timeout=timeout)
            connection.request(request.method, target, body=request.body, headers=request.headers)
            response = connection.getresponse()
            body = response.read()
            return Response(status=response.status, headers=dict(response.getheaders()), body=body)

        except TimeoutError as e:
            raise TransportError(f"Request timed out after {timeout} seconds") from e

        except (OSError, http.client.HTTPException) as e:
            raise TransportError(f"Connection error: {e}") from e

        except ValueError as e:
            # Bad header values or URLs that cannot be encoded
            raise TransportError(f"Could not send request: {e}") from e

        finally:
            if connection is not None:
                connection.close()


def _is_printable_ascii(text: str) -> bool:
    return all(33 <= ord(ch) <= 126 for ch in text)


class APIClient:
    """
    Low-level HTTP client for the accounts API.

    Handles:
    - Base URL parsing and path building
    - Bearer token and API key headers
    - Status classification and JSON decoding
    """

    def __init__(self, config: ClientConfig, transport: Transport | None = None):
        self.config = config
        self.transport = transport or HTTPTransport()

    def _base_parts(self) -> urllib.parse.SplitResult:
        """Parse the configured base URL, rejecting anything unusable."""
        base_url = self.config.base_url
        if not _is_printable_ascii(base_url):
            raise ConfigurationError(f"Invalid base URL {base_url!r}: whitespace, control or non-ASCII characters")
        try:
            parts = urllib.parse.urlsplit(base_url)
            # Accessing port validates it
            parts.port
        except ValueError as e:
            raise ConfigurationError(f"Invalid base URL {base_url!r}: {e}") from e

        if parts.scheme not in ("http", "https") or not parts.hostname:
            raise ConfigurationError(f"Invalid base URL {base_url!r}: expected http(s)://host[/path]")
        return parts

    def build_url(self, path: str, path_params: Mapping[str, Any] | None = None) -> str:
        """
        Build full URL from a path template.

        Args:
            path: Path relative to the base URL, e.g. /business/{business_id}
            path_params: Values substituted into the template, each escaped
                as a single path segment

        """
        parts = self._base_parts()
        escaped = {key: urllib.parse.quote(str(value), safe="") for key, value in (path_params or {}).items()}
        full_path = parts.path.rstrip("/") + path.format(**escaped)
        return urllib.parse.urlunsplit((parts.scheme, parts.netloc, full_path, "", ""))

    def build_headers(self, api_key_header: str | None = None) -> dict[str, str]:
        """Standard headers, plus the API key under the endpoint's own header name."""
        for name, value in (("token", self.config.token), ("api_key", self.config.api_key)):
            if any(ch in value for ch in "\r\n\0"):
                raise ConfigurationError(f"Invalid {name}: line breaks or NUL characters are not allowed")
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.token}",
        }
        if api_key_header:
            headers[api_key_header] = self.config.api_key
        return headers

    def build_request(
        self,
        method: str,
        path: str,
        path_params: Mapping[str, Any] | None = None,
        data: Any = None,
        api_key_header: str | None = None,
    ) -> PreparedRequest:
        """Produce a fully addressed, authenticated request."""
        url = self.build_url(path, path_params)
        body = json.dumps(data).encode("utf-8") if data is not None else None
        return PreparedRequest(
            method=method,
            url=url,
            headers=self.build_headers(api_key_header),
            body=body,
        )

    def request(
        self,
        method: str,
        path: str,
        *,
        path_params: Mapping[str, Any] | None = None,
        data: Any = None,
        api_key_header: str | None = None,
        expected: int | range = HTTPStatus.OK,
        action: str = "request",
    ) -> Response:
        """
        Send a request and check its status.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Path template relative to the base URL
            path_params: Identifiers substituted into the path
            data: JSON-serializable request body
            api_key_header: Header name carrying the API key, if the endpoint takes one
            expected: Exact success status, or a range of accepted statuses
            action: Short description used in error messages

        Returns:
            The raw response, body fully read

        Raises:
            ConfigurationError: If the base URL is malformed
            TransportError: On connection failures or timeouts
            ServerError: If the status is not accepted

        """
        prepared = self.build_request(method, path, path_params, data, api_key_header)

        logger.debug("%s %s", prepared.method, prepared.url)
        try:
            response = self.transport.send(prepared, self.config.timeout)
        except TransportError as e:
            logger.debug("%s %s failed: %s", prepared.method, prepared.url, e.message)
            raise
        logger.debug("%s %s -> %d", prepared.method, prepared.url, response.status)

        return self.check_status(response, expected, action)

    @staticmethod
    def check_status(response: Response, expected: int | range, action: str = "request") -> Response:
        """Raise ServerError unless the response status is accepted."""
        if isinstance(expected, range):
            accepted = response.status in expected
        else:
            accepted = response.status == expected

        if not accepted:
            logger.debug("Failed to %s: server returned status %d", action, response.status)
            raise ServerError(f"Failed to {action}", status=response.status, body=response.text)
        return response

    @staticmethod
    def decode(response: Response, parser: Callable[[Any], T]) -> T:
        """
        Decode a JSON response body with the given parser.

        Raises:
            DecodeError: If the body is not JSON or does not fit the parser

        """
        try:
            payload = json.loads(response.body.decode("utf-8"))
        except ValueError as e:
            raise DecodeError(f"Invalid JSON response: {e}", details={"body": response.text}) from e

        try:
            return parser(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise DecodeError(f"Unexpected response payload: {e!r}", details={"body": response.text}) from e

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, **kwargs: Any) -> Response:
        """Make a GET request."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Response:
        """Make a POST request."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Response:
        """Make a PUT request."""
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> Response:
        """Make a DELETE request."""
        return self.request("DELETE", path, **kwargs)
