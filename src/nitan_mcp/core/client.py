from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urljoin

import httpx

from .auth import AuthMode, LoginCredentials, NoAuth, auth_headers
from .errors import (
    ForumClientError,
    ForumHTTPError,
    ForumNetworkError,
    ForumTimeoutError,
    ForumUnclassifiedError,
)

# Desktop Edge on Windows; the upstream site filters obvious bot user agents.
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36 Edg/141.0.0.0"
)

BASE_HEADERS: Dict[str, str] = {
    "Accept": "application/json, text/javascript, */*; q=0.01",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "User-Agent": USER_AGENT,
    "X-Requested-With": "XMLHttpRequest",
}

# A comma followed by a space is part of an Expires date, not a separator.
_COOKIE_SPLIT_RE = re.compile(r",(?=[^ ])")


@dataclass(frozen=True)
class RetryConfig:
    max_attempts: int = 3  # total attempts, first one included
    backoff_base_seconds: float = 0.25  # 0.25, 0.5, 1.0...
    retry_statuses: frozenset[int] = frozenset({429})
    retry_server_errors: bool = True

    def should_retry(self, status_code: int) -> bool:
        if status_code in self.retry_statuses:
            return True
        return self.retry_server_errors and status_code >= 500


@dataclass
class _CacheEntry:
    value: Any
    expires_at: float


async def _backoff(delay: float) -> None:
    await asyncio.sleep(delay)


def parse_set_cookie(header_value: str) -> Dict[str, str]:
    """Extract name/value pairs from a (possibly combined) Set-Cookie value."""
    cookies: Dict[str, str] = {}
    for fragment in _COOKIE_SPLIT_RE.split(header_value):
        pair = fragment.split(";", 1)[0].strip()
        name, sep, value = pair.partition("=")
        name = name.strip()
        if not sep or not name:
            continue
        cookies[name] = value.strip()
    return cookies


class ForumClient:
    """
    Async HTTP client bound to a single forum origin.
    - Browser-like headers, Referer once a request has completed
    - Session cookies harvested from responses and replayed
    - Per-attempt timeout composed with an optional caller cancel event
    - Retries 429/5xx with exponential backoff
    - Optional TTL cache for GET payloads (get_cached only)
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 15.0,
        auth: Optional[AuthMode] = None,
        login: Optional[LoginCredentials] = None,
        retry: Optional[RetryConfig] = None,
        logger: Optional[logging.Logger] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").rstrip("/")
        if not base_url:
            raise ValueError("base_url must be provided.")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be greater than zero.")

        self.base_url = base_url
        self.timeout_seconds = timeout_seconds
        self.auth: AuthMode = auth if auth is not None else NoAuth()
        # Stored for a future login flow; never submitted.
        self.login = login
        self.retry = retry if retry is not None else RetryConfig()
        self.log = logger or logging.getLogger("nitan_mcp.client")

        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            timeout=timeout_seconds, follow_redirects=True
        )

        self._cookies: Dict[str, str] = {}
        self._cache: Dict[str, _CacheEntry] = {}
        self._last_url: Optional[str] = None

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "ForumClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    @property
    def cookies(self) -> Dict[str, str]:
        return dict(self._cookies)

    @property
    def last_url(self) -> Optional[str]:
        return self._last_url

    def resolve_url(self, path: str) -> str:
        return urljoin(self.base_url + "/", path)

    # --- Public operations ------------------------------------------------- #

    async def get(self, path: str, *, cancel: Optional[asyncio.Event] = None) -> Any:
        return await self.request("GET", path, cancel=cancel)

    async def get_cached(
        self,
        path: str,
        ttl_seconds: float,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> Any:
        url = self.resolve_url(path)
        now = time.monotonic()
        entry = self._cache.get(url)
        if entry is not None and now < entry.expires_at:
            self.log.debug("forum.cache_hit", extra={"url": url})
            return entry.value

        value = await self.request("GET", path, cancel=cancel)
        self._cache[url] = _CacheEntry(value=value, expires_at=now + ttl_seconds)
        return value

    async def post(
        self, path: str, body: Any, *, cancel: Optional[asyncio.Event] = None
    ) -> Any:
        return await self.request("POST", path, body=body, cancel=cancel)

    async def request(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Any:
        """
        Core request method.
        - Each attempt gets a fresh timeout window
        - Retries ForumHTTPError for 429/5xx up to RetryConfig.max_attempts
        - Raises ForumTimeoutError / ForumNetworkError / ForumUnclassifiedError
          on the first occurrence
        - Returns decoded JSON for application/json responses, text otherwise
        """
        method = method.upper()
        url = self.resolve_url(path)
        delay = self.retry.backoff_base_seconds
        attempt = 1

        while True:
            try:
                return await self._send_once(method, url, body, cancel)
            except ForumClientError as exc:
                status = getattr(exc, "status_code", None)
                if (
                    status is not None
                    and attempt < self.retry.max_attempts
                    and self.retry.should_retry(status)
                ):
                    self.log.info(
                        "forum.retry",
                        extra={
                            "method": method,
                            "url": url,
                            "status": status,
                            "attempt": attempt,
                            "delay_ms": int(delay * 1000),
                        },
                    )
                    await _backoff(delay)
                    delay *= 2
                    attempt += 1
                    continue

                if attempt > 1:
                    self.log.error(
                        "forum.retries_exhausted",
                        extra={"method": method, "url": url, "attempt": attempt},
                    )
                raise

    # --- Internals --------------------------------------------------------- #

    def _build_headers(self, *, has_body: bool) -> Dict[str, str]:
        headers = dict(BASE_HEADERS)
        if self._last_url:
            headers["Referer"] = self.base_url + "/"
        if self._cookies:
            headers["Cookie"] = "; ".join(
                f"{name}={value}" for name, value in self._cookies.items()
            )
        headers.update(auth_headers(self.auth))
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    def _ingest_cookies(self, resp: httpx.Response) -> None:
        for raw in resp.headers.get_list("set-cookie"):
            for name, value in parse_set_cookie(raw).items():
                self._cookies[name] = value
                self.log.debug("forum.cookie_stored", extra={"cookie": name})
        # self._cookies is the only cookie store replayed on requests; an
        # injected client keeps its own jar
        if self._owns_http:
            self.http.cookies.clear()

    async def _attempt(self, method: str, url: str, body: Any) -> Any:
        headers = self._build_headers(has_body=body is not None)
        content = json.dumps(body) if body is not None else None

        start = time.perf_counter()
        resp = await self.http.request(method, url, headers=headers, content=content)
        self.log.debug(
            "forum.request",
            extra={
                "method": method,
                "url": url,
                "status": resp.status_code,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )

        self._ingest_cookies(resp)
        self._last_url = url

        if not resp.is_success:
            raise self._to_http_error(resp, method=method, url=url)
        return self._decode(resp)

    async def _send_once(
        self,
        method: str,
        url: str,
        body: Any,
        cancel: Optional[asyncio.Event],
    ) -> Any:
        try:
            return await self._with_deadline(
                self._attempt(method, url, body), cancel, method=method, url=url
            )
        except ForumHTTPError as exc:
            self.log.error(
                "forum.http_error",
                extra={"method": method, "url": url, "status": exc.status_code},
            )
            raise
        except ForumClientError as exc:
            self.log.error(
                "forum.request_failed",
                extra={"method": method, "url": url, "error": str(exc)},
            )
            raise
        except httpx.TimeoutException as exc:
            err = ForumTimeoutError(
                method=method, url=url, timeout_seconds=self.timeout_seconds
            )
            self.log.error("forum.timeout", extra={"method": method, "url": url})
            raise err from exc
        except httpx.TransportError as exc:
            err = ForumNetworkError(
                method=method, url=url, detail=f"{type(exc).__name__}: {exc}"
            )
            self.log.error(
                "forum.network_error",
                extra={"method": method, "url": url, "error": str(err)},
            )
            raise err from exc
        except Exception as exc:
            self.log.error(
                "forum.request_failed",
                extra={
                    "method": method,
                    "url": url,
                    "error": f"{type(exc).__name__}: {exc}",
                },
            )
            raise ForumUnclassifiedError(
                error_type=type(exc).__name__, message=str(exc)
            ) from exc

    async def _with_deadline(
        self,
        coro,
        cancel: Optional[asyncio.Event],
        *,
        method: str,
        url: str,
    ) -> Any:
        """Run one attempt until it settles, the deadline passes or `cancel` fires."""
        task = asyncio.ensure_future(coro)
        waiters = {task}
        watcher: Optional[asyncio.Future] = None
        if cancel is not None:
            watcher = asyncio.ensure_future(cancel.wait())
            waiters.add(watcher)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=self.timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if watcher is not None:
                watcher.cancel()

        if task in done:
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

        if cancel is not None and cancel.is_set():
            raise ForumUnclassifiedError(
                error_type="CancelledError",
                message=f"Request cancelled by caller for {method} {url}",
            )
        raise ForumTimeoutError(
            method=method, url=url, timeout_seconds=self.timeout_seconds
        )

    def _decode(self, resp: httpx.Response) -> Any:
        ctype = resp.headers.get("content-type", "")
        if "application/json" in ctype:
            return resp.json()
        return resp.text

    def _to_http_error(
        self, resp: httpx.Response, *, method: str, url: str
    ) -> ForumHTTPError:
        text = resp.text or ""
        # Best effort: keep the raw text when the body isn't JSON.
        try:
            body: Any = json.loads(text)
        except ValueError:
            body = text

        message = f"HTTP {resp.status_code} {resp.reason_phrase}".strip()
        if isinstance(body, dict) and isinstance(body.get("errors"), list):
            details = "; ".join(str(e) for e in body["errors"] if e)
            if details:
                message = f"{message} - {details}"

        return ForumHTTPError(
            status_code=resp.status_code,
            method=method,
            url=url,
            message=message,
            body=body,
        )


__all__ = [
    "ForumClient",
    "RetryConfig",
    "USER_AGENT",
    "BASE_HEADERS",
    "parse_set_cookie",
]
