"""Coverage artifact server client.

Usage:
    client   = CoverageClient(url="https://coverage.example.com", token="xxx")
    data     = client.get_json("/artifacts/api/coverage.json")
    packages = client.get_packages("/artifacts/api/coverage.json")
"""

import warnings
from typing import Any

import requests

from gocov_report.models import ModelError, Package, packages_from_json


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class CoverageClientError(Exception):
    """Base exception for all client errors."""


class AuthenticationError(CoverageClientError):
    """Raised on HTTP 401/403 - missing, invalid or expired token."""


class NotFoundError(CoverageClientError):
    """Raised on HTTP 404 - coverage document not found."""


class NetworkError(CoverageClientError):
    """Raised on connection timeout or unreachable server."""


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CoverageClient:
    """Thin wrapper around a server publishing gocov JSON documents."""

    def __init__(self, url: str, token: str | None = None, timeout: int = 30) -> None:
        self.base_url = url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def get_json(self, endpoint: str) -> Any:
        """Perform a GET request and return the parsed JSON response.

        Raises:
            AuthenticationError: HTTP 401 or 403
            NotFoundError:       HTTP 404
            CoverageClientError: Any other non-2xx response or a non-JSON body
            NetworkError:        Timeout or connection failure
        """
        return self._request(endpoint)

    def get_packages(self, endpoint: str) -> list[Package]:
        """Fetch a coverage document and return its packages.

        Emits a warning when the document holds no packages, which usually
        means the instrumented run produced nothing.

        Raises:
            ModelError: if the document is not a valid coverage document.
        """
        data = self._request(endpoint)
        try:
            packages = packages_from_json(data)
        except ModelError as exc:
            raise ModelError(f"{self.base_url}{endpoint}: {exc}") from exc

        if not packages:
            warnings.warn(
                f"Coverage document '{endpoint}' contains no packages.",
                UserWarning,
                stacklevel=2,
            )
        return packages

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _request(self, endpoint: str) -> Any:
        if not endpoint.startswith("/"):
            endpoint = "/" + endpoint
        url = f"{self.base_url}{endpoint}"
        try:
            response = self._session.get(url, timeout=self._timeout)
        except requests.exceptions.Timeout as exc:
            raise NetworkError(
                f"Request timed out after {self._timeout}s while contacting '{url}'"
            ) from exc
        except requests.exceptions.ConnectionError as exc:
            raise NetworkError(
                f"Unable to reach coverage server at '{self.base_url}'"
            ) from exc

        if response.status_code in (401, 403):
            raise AuthenticationError(
                "Authentication failed - check that your token is valid and not expired."
            )
        if response.status_code == 404:
            raise NotFoundError(
                f"Resource not found: {url}"
            )
        if not response.ok:
            raise CoverageClientError(
                f"Unexpected response {response.status_code} from {url}: {response.text[:200]}"
            )

        try:
            return response.json()
        except ValueError as exc:
            raise CoverageClientError(f"Response from {url} is not valid JSON") from exc
