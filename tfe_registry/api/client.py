"""
HTTP transport for the registry API.
Wraps a requests session with authentication, JSON:API bodies, retry for idempotent reads,
a circuit breaker, and context-driven cancellation and deadlines.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any
from urllib.parse import urljoin

import requests

from tfe_registry.api.circuit_breaker import CircuitBreaker
from tfe_registry.api.retry import RetryPolicy
from tfe_registry.context import Context
from tfe_registry.errors import (
    DeadlineExceeded,
    DecodeError,
    OperationCancelled,
    RemoteError,
    remote_error_for_status,
)

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "https://app.terraform.io"
DEFAULT_BASE_PATH = "/api/v2/"
JSONAPI_MEDIA_TYPE = "application/vnd.api+json"
USER_AGENT = "tfe-registry-client/0.1.0"

# Only reads are retried; a mutating request is sent exactly once.
_IDEMPOTENT_METHODS = frozenset({"GET", "HEAD"})


def _is_transient(e: Exception) -> bool:
    """Connection problems, timeouts, throttling and 5xx may succeed on a later attempt."""
    if isinstance(e, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(e, RemoteError) and e.status_code is not None:
        return e.status_code == 429 or e.status_code >= 500
    return False


def _is_service_failure(e: Exception) -> bool:
    """What trips the circuit: the service being unreachable or broken, not a 4xx answer."""
    if isinstance(e, (requests.ConnectionError, requests.Timeout)):
        return True
    return isinstance(e, RemoteError) and (e.status_code or 0) >= 500


def _error_message(response: requests.Response, errors: list[dict[str, Any]]) -> str:
    parts = []
    for err in errors:
        text = err.get("detail") or err.get("title")
        if text:
            parts.append(str(text))
    if parts:
        return "; ".join(parts)
    return f"{response.status_code} {response.reason or 'error'}".strip()


class RegistryAPIClient:
    """
    Transport used by the registry operations.
    One request(...) call is one HTTP exchange, except that reads may be retried.
    """

    def __init__(
        self,
        token: str,
        address: str = DEFAULT_ADDRESS,
        base_path: str = DEFAULT_BASE_PATH,
        timeout_sec: float = 30.0,
        retry_max: int = 3,
        retry_delay_sec: float = 1.0,
        circuit_breaker_failure_threshold: int = 5,
        circuit_breaker_recovery_timeout_sec: float = 60.0,
        session: requests.Session | None = None,
    ) -> None:
        """
        Args:
            token: API token sent as a bearer credential
            address: Registry service address (scheme and host)
            base_path: API prefix joined to address
            timeout_sec: Per-request timeout; capped by the context deadline
            retry_max: Maximum retries for idempotent requests
            retry_delay_sec: Initial retry delay (exponential backoff)
            circuit_breaker_failure_threshold: Failures before opening circuit
            circuit_breaker_recovery_timeout_sec: Seconds before retry after circuit open
            session: Optional preconfigured requests session
        """
        if not token:
            raise ValueError("token is required")
        self._base_url = urljoin(address.rstrip("/") + "/", base_path.lstrip("/"))
        if not self._base_url.endswith("/"):
            self._base_url += "/"
        self._timeout = timeout_sec

        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": JSONAPI_MEDIA_TYPE,
                "Accept": JSONAPI_MEDIA_TYPE,
                "User-Agent": USER_AGENT,
            }
        )

        self._retry_policy = RetryPolicy(
            max_retries=retry_max,
            initial_delay_sec=retry_delay_sec,
        )
        self._circuit_breaker = CircuitBreaker(
            failure_threshold=circuit_breaker_failure_threshold,
            recovery_timeout_sec=circuit_breaker_recovery_timeout_sec,
            name="registry_circuit",
            is_failure=_is_service_failure,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def request(
        self,
        ctx: Context,
        method: str,
        path: str,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any] | None:
        """
        Perform one API exchange.

        Args:
            ctx: Caller context; checked before sending and after the response
            method: HTTP method (GET, POST, ...)
            path: Path relative to the API base, already escaped
            body: Optional JSON:API document

        Returns:
            Decoded JSON document, or None for an empty (e.g. 204) response

        Raises:
            OperationCancelled / DeadlineExceeded: context cancelled or expired
            RemoteError (and subclasses): non-2xx response
            DecodeError: response body is not JSON
            requests.RequestException: network failure
        """
        ctx.check()
        method = method.upper()
        url = urljoin(self._base_url, path)
        request_id = str(uuid.uuid4())

        def _do_request() -> dict[str, Any] | None:
            ctx.check()
            return self._send(ctx, method, url, body, request_id)

        def _guarded() -> dict[str, Any] | None:
            return self._circuit_breaker.call(_do_request)

        logger.debug("%s %s (request %s)", method, url, request_id)
        if method in _IDEMPOTENT_METHODS:
            return self._retry_policy.execute(
                _guarded, ctx=ctx, should_retry=_is_transient
            )
        return _guarded()

    def _send(
        self,
        ctx: Context,
        method: str,
        url: str,
        body: dict[str, Any] | None,
        request_id: str,
    ) -> dict[str, Any] | None:
        timeout = self._timeout
        remaining = ctx.remaining()
        if remaining is not None:
            # Deadline may pass after the caller's check; never send a zero timeout.
            if remaining <= 0:
                ctx.check()
                raise DeadlineExceeded("context deadline exceeded")
            timeout = min(timeout, remaining)

        try:
            response = self._session.request(
                method=method,
                url=url,
                json=body,
                timeout=timeout,
                headers={"X-Request-ID": request_id},
            )
        except requests.Timeout as e:
            if ctx.expired():
                raise DeadlineExceeded("context deadline exceeded") from e
            raise

        if ctx.cancelled:
            raise OperationCancelled("context cancelled")

        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            errors = self._error_objects(response)
            err = remote_error_for_status(
                response.status_code, _error_message(response, errors), errors
            )
            logger.debug(
                "%s %s failed with %d: %s", method, url, response.status_code, err
            )
            raise err from e

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"invalid JSON in response to {method} {url}") from e

    @staticmethod
    def _error_objects(response: requests.Response) -> list[dict[str, Any]]:
        try:
            data = response.json()
        except ValueError:
            return []
        if isinstance(data, dict) and isinstance(data.get("errors"), list):
            return [e for e in data["errors"] if isinstance(e, dict)]
        return []

    def close(self) -> None:
        """Close the client and cleanup resources."""
        self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
