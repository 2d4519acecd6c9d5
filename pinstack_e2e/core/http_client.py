"""
JSON client for the Pinstack gateway.

Features:
- Credentials are per call: ``token=`` on every request, no shared auth state
- trust_env=False (ignore system proxies by default)
- 429 responses retried with exponential backoff and jitter
- Non-2xx responses raised as ApiError with a classified ErrorKind
"""

from __future__ import annotations

import json as jsonlib
import time
from datetime import timedelta
from typing import Any, Callable, Dict, Mapping, Optional, Union

import httpx
from loguru import logger

from pinstack_e2e.core.config import Settings
from pinstack_e2e.core.exceptions import ApiError, ErrorKind, TransportError


DEFAULT_TIMEOUT_SEC = 10.0

Params = Optional[Mapping[str, Union[str, int]]]


class GatewayClient:
    """Wrapper around ``httpx.Client`` bound to the gateway base URL."""

    def __init__(
        self,
        base_url: str,
        timeout: Union[float, timedelta] = DEFAULT_TIMEOUT_SEC,
        log: Any = None,
        *,
        max_retries: int = 3,
        retry_delay: float = 0.5,
        transport: Optional[httpx.BaseTransport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if isinstance(timeout, timedelta):
            timeout = timeout.total_seconds()
        self.base_url = base_url.rstrip("/")
        self.log = log or logger
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay
        self._sleep = sleep
        self.client = httpx.Client(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout or DEFAULT_TIMEOUT_SEC),
            trust_env=False,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        log: Any = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "GatewayClient":
        return cls(
            settings.api.base_url,
            settings.api.timeout,
            log,
            max_retries=settings.api.max_retries,
            retry_delay=settings.api.retry_delay,
            transport=transport,
        )

    @staticmethod
    def _headers(token: Optional[str]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(
        self,
        method: str,
        path: str,
        token: Optional[str],
        params: Params,
        json: Any,
    ) -> httpx.Response:
        content = None
        if json is not None:
            try:
                content = jsonlib.dumps(json).encode("utf-8")
            except (TypeError, ValueError) as e:
                self.log.error(f"Failed to encode request body for {method} {path}: {e}")
                raise TransportError(ErrorKind.REQUEST_ENCODE, f"failed to marshal JSON: {e}", path=path) from e

        try:
            request = self.client.build_request(
                method,
                path,
                params=params,
                content=content,
                headers=self._headers(token),
            )
        except httpx.InvalidURL as e:
            self.log.error(f"Invalid URL for {method} {path}: {e}")
            raise TransportError(ErrorKind.INVALID_URL, f"invalid URL: {e}", path=path) from e

        try:
            return self.client.send(request)
        except httpx.UnsupportedProtocol as e:
            self.log.error(f"Invalid URL for {method} {path}: {e}")
            raise TransportError(ErrorKind.INVALID_URL, f"invalid URL: {e}", path=path) from e
        except httpx.TransportError as e:
            self.log.error(f"Request {method} {path} failed: {e}")
            raise TransportError(ErrorKind.REQUEST_FAILED, f"request failed: {e}", path=path) from e

    def request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        params: Params = None,
        json: Any = None,
    ) -> Any:
        """Issue one call and return the decoded JSON body (``None`` when empty)."""
        response = None
        for attempt in range(self.max_retries):
            response = self._send(method, path, token, params, json)
            if response.status_code == 429 and attempt < self.max_retries - 1:
                # Exponential backoff with jitter
                delay = self.retry_delay * (2 ** attempt) + (time.time() % 0.1)
                self.log.warning(
                    f"Rate limited on {method} {path}, retrying in {delay:.2f}s "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                self._sleep(delay)
                continue
            break
        return self._decode(method, path, response)

    def _decode(self, method: str, path: str, response: httpx.Response) -> Any:
        if response.status_code >= 400:
            message = response.reason_phrase or f"HTTP {response.status_code}"
            body: Dict[str, Any] = {}
            try:
                parsed = response.json()
            except ValueError:
                self.log.debug(f"Non-JSON error body from {method} {path}: {response.text[:200]!r}")
            else:
                if isinstance(parsed, dict):
                    body = parsed
                    message = str(parsed.get("message") or message)
            error = ApiError(response.status_code, message, path=path, body=body)
            self.log.warning(f"API error on {method} {path}: {error} (kind={error.kind.value})")
            raise error

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            self.log.error(f"Failed to decode response from {method} {path}: {e}")
            raise TransportError(ErrorKind.RESPONSE_DECODE, f"failed to unmarshal JSON: {e}", path=path) from e

    def get(self, path: str, *, token: Optional[str] = None, params: Params = None) -> Any:
        return self.request("GET", path, token=token, params=params)

    def post(self, path: str, json: Any = None, *, token: Optional[str] = None) -> Any:
        return self.request("POST", path, token=token, json=json)

    def put(self, path: str, json: Any = None, *, token: Optional[str] = None) -> Any:
        return self.request("PUT", path, token=token, json=json)

    def delete(self, path: str, *, token: Optional[str] = None) -> Any:
        return self.request("DELETE", path, token=token)

    def health(self) -> bool:
        """True when the gateway answers at all, whatever the status."""
        try:
            self.client.get("/", headers=self._headers(None))
        except httpx.HTTPError as e:
            self.log.debug(f"Gateway at {self.base_url} not reachable: {e}")
            return False
        return True

    def close(self) -> None:
        """Close the client connection."""
        self.client.close()

    def __enter__(self) -> "GatewayClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
