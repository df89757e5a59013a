"""Async HTTP client for the Portfolio CMS API.

Provides PortfolioApiClient with:
- Cookie-preserving httpx.AsyncClient (the refresh token travels as a cookie)
- Bearer authentication with a single refresh-and-retry on HTTP 401
- Retry with exponential backoff on GET transport errors via tenacity
- Structured logging via structlog

Exception hierarchy:
- ApiError: non-2xx response (status_code + server message)
- SessionExpiredError: the session could not be refreshed
"""

from typing import Any, Optional

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

REFRESH_ENDPOINT = "/auth/refresh"
LOGIN_ENDPOINT = "/auth/login"
# A 401 from these means bad credentials, not an expired access token
NO_REFRESH_ENDPOINTS = {REFRESH_ENDPOINT, LOGIN_ENDPOINT, "/auth/signup"}
SESSION_EXPIRED_MESSAGE = "Session expired. Please login again."
DEFAULT_ERROR_MESSAGE = "API request failed"


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------
class ApiError(Exception):
    """Raised for any non-2xx API response."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class SessionExpiredError(ApiError):
    """Raised when the access token cannot be refreshed."""

    def __init__(self, message: str = SESSION_EXPIRED_MESSAGE) -> None:
        super().__init__(401, message)


def error_message(response: httpx.Response) -> str:
    """Best human-readable message from an error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or DEFAULT_ERROR_MESSAGE
    if isinstance(body, dict):
        for key in ("message", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    # JSON without a usable message is never shown raw
    return DEFAULT_ERROR_MESSAGE


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------
class PortfolioApiClient:
    """Thin JSON client used by the admin tooling.

    Usage::

        async with PortfolioApiClient("http://localhost:8000/api/v1") as api:
            await api.login("me@example.com", "secret")
            projects = await api.get("/projects", {"page": 1})
    """

    MAX_RETRIES: int = 3
    TIMEOUT_SECONDS: float = 30.0

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_backoff: float = 0.5,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.retry_backoff = retry_backoff
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self.log = structlog.get_logger().bind(client="portfolio_api")

    async def __aenter__(self) -> "PortfolioApiClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.TIMEOUT_SECONDS),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "HTTP client not initialized. Use 'async with PortfolioApiClient(...)'."
            )
        return self._client

    # ------------------------------------------------------------------
    # Public verbs
    # ------------------------------------------------------------------
    async def get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> Any:
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        return await self._call("GET", endpoint, params=clean)

    async def post(self, endpoint: str, data: Any = None) -> Any:
        return await self._call("POST", endpoint, json=data)

    async def patch(self, endpoint: str, data: Any = None) -> Any:
        return await self._call("PATCH", endpoint, json=data)

    async def put(self, endpoint: str, data: Any = None) -> Any:
        return await self._call("PUT", endpoint, json=data)

    async def delete(self, endpoint: str) -> None:
        await self._call("DELETE", endpoint)
        return None

    async def upload(
        self,
        endpoint: str,
        file: tuple[str, bytes, str],
        fields: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Multipart upload; *file* is ``(filename, content, mimetype)``."""
        data = {k: str(v) for k, v in (fields or {}).items() if v is not None}
        return await self._call("POST", endpoint, files={"file": file}, data=data)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------
    async def login(self, email: str, password: str) -> dict[str, Any]:
        body = await self.post(LOGIN_ENDPOINT, {"email": email, "password": password})
        self.access_token = body["access_token"]
        self.log.info("logged_in", user_id=body.get("user", {}).get("id"))
        return body

    async def logout(self) -> None:
        try:
            await self.post("/auth/logout")
        finally:
            self.access_token = None
            self.client.cookies.clear()

    async def refresh_session(self) -> str:
        """Exchange the refresh cookie for a new access token."""
        try:
            response = await self.client.post(
                REFRESH_ENDPOINT, json={"s_id": self.access_token}
            )
            response.raise_for_status()
            token = response.json()["access_token"]
            if not isinstance(token, str) or not token:
                raise ValueError("refresh response carried no access token")
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            self.log.warning("session_refresh_failed", error=str(exc))
            self.access_token = None
            raise SessionExpiredError() from exc
        self.access_token = token
        self.log.debug("session_refreshed")
        return self.access_token

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _headers(self) -> dict[str, str]:
        if self.access_token:
            return {"Authorization": f"Bearer {self.access_token}"}
        return {}

    async def _send(self, method: str, endpoint: str, **kwargs: Any) -> httpx.Response:
        if method != "GET":
            return await self.client.request(
                method, endpoint, headers=self._headers(), **kwargs
            )
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
            stop=stop_after_attempt(self.MAX_RETRIES),
            wait=wait_exponential(multiplier=self.retry_backoff, max=10),
            reraise=True,
        ):
            with attempt:
                self.log.debug(
                    "http_request",
                    method=method,
                    endpoint=endpoint,
                    attempt=attempt.retry_state.attempt_number,
                )
                return await self.client.request(
                    method, endpoint, headers=self._headers(), **kwargs
                )
        raise ApiError(0, DEFAULT_ERROR_MESSAGE)  # pragma: no cover

    async def _call(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        response = await self._send(method, endpoint, **kwargs)

        if response.status_code == 401 and endpoint not in NO_REFRESH_ENDPOINTS:
            await self.refresh_session()
            response = await self._send(method, endpoint, **kwargs)
            if response.status_code == 401:
                self.access_token = None
                raise SessionExpiredError()

        if response.status_code >= 400:
            message = error_message(response)
            self.log.info(
                "api_error", method=method, endpoint=endpoint, status=response.status_code
            )
            raise ApiError(response.status_code, message)

        if method == "DELETE" or not response.content:
            return None
        return response.json()
