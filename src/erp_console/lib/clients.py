"""
HTTP client for the remote ERP API.

Provides singleton access to an ApiClient wrapping one requests.Session
configured with the API base URL and JSON headers. All paths passed to
the client are relative to that base URL.

Environment variables used:
- ERP_API_BASE_URL: API root, e.g. https://host/api
- ERP_API_TIMEOUT: Per-request timeout in seconds
"""

import functools
from typing import Any, Mapping

import requests

from erp_console import __version__, config
from erp_console.lib import logs

LOG = logs.logger(__file__)


class ApiError(Exception):
    """
    Raised when the API answers with a non-2xx status or cannot be reached.

    Attributes:
        status: HTTP status code, or None for connection failures.
        detail: Server supplied ``detail`` message when present.
    """

    def __init__(self, message: str, status: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status = status
        self.detail = detail

    @property
    def user_message(self) -> str:
        """Return the message shown to the user in alerts."""
        return self.detail or str(self)


class ApiClient:
    """
    Thin JSON client over a requests.Session.

    Attributes:
        base_url: API root without trailing slash.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 20.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers["Content-Type"] = "application/json"
        self._session.headers["User-Agent"] = f"erp-console/{__version__}"

    def get(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self._request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self._request("PUT", path, json=json)

    def patch(self, path: str, json: Any = None) -> Any:
        return self._request("PATCH", path, json=json)

    def delete(self, path: str) -> Any:
        return self._request("DELETE", path)

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """
        Issue a request and decode the JSON body.

        Args:
            method: HTTP verb.
            path: Path relative to the base URL.
            **kwargs: Passed through to requests (params, json).

        Returns:
            Decoded JSON body, or None for empty responses.

        Raises:
            ApiError: On connection failures and non-2xx responses.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOG.error("%s %s failed: %s", method, path, exc)
            raise ApiError(f"{method} {path} failed: {exc}") from exc

        if not resp.ok:
            detail = _error_detail(resp)
            LOG.warning("%s %s -> %s %s", method, path, resp.status_code, detail or "")
            raise ApiError(
                f"{method} {path} returned {resp.status_code}",
                status=resp.status_code,
                detail=detail,
            )

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as exc:
            LOG.warning("%s %s -> %s with a non-JSON body", method, path, resp.status_code)
            raise ApiError(f"{method} {path} returned invalid JSON", status=resp.status_code) from exc


def _error_detail(resp: requests.Response) -> str | None:
    """Extract the FastAPI style ``detail`` message from an error response."""
    try:
        body = resp.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        detail = body.get("detail")
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return str(detail)
    return None


def unwrap_list(payload: Any) -> list:
    """
    Extract a record list from an API payload.

    The API answers either with a bare list or with ``{"data": [...]}``.
    Anything else is treated as an empty result.
    """
    if isinstance(payload, dict):
        payload = payload.get("data")
    return payload if isinstance(payload, list) else []


@functools.cache
def api_client() -> ApiClient:
    """
    Return the process-wide ApiClient.

    Returns:
        ApiClient configured from ERP_API_BASE_URL and ERP_API_TIMEOUT.
    """
    LOG.info("API base URL: %s", config.API_BASE_URL)
    return ApiClient(config.API_BASE_URL, timeout=config.API_TIMEOUT)
