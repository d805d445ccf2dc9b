"""Thin async client for the marketplace backend's JSON API.

Responses come wrapped as ``{"data": ..., "message": ...}`` on success and
``{"message": ..., "errors": [...]}`` on failure. A 2xx body that carries
an application-level ``statusCode`` of 400 or more is a failure too.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from mart.domain.exceptions import RemoteError, RemoteUnavailable, Unauthorized
from mart.domain.model.context import CallerContext

logger = logging.getLogger(__name__)


def http_retry():
    """Retry policy for idempotent reads only; writes are never retried."""
    return retry(
        reraise=True,
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.3, min=0.3, max=3),
        retry=retry_if_exception_type(RemoteUnavailable),
    )


class ApiClient:

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Verbs ----------------------------------------------------------------

    @http_retry()
    async def get(
        self, path: str, ctx: CallerContext, params: dict[str, str] | None = None
    ) -> Any:
        return await self._request("GET", path, ctx, params=params)

    async def post(self, path: str, ctx: CallerContext, payload: dict) -> Any:
        return await self._request("POST", path, ctx, json=payload)

    async def put(self, path: str, ctx: CallerContext, payload: dict) -> Any:
        return await self._request("PUT", path, ctx, json=payload)

    async def delete(self, path: str, ctx: CallerContext) -> Any:
        return await self._request("DELETE", path, ctx)

    # --- Internal helpers -----------------------------------------------------

    async def _request(self, method: str, path: str, ctx: CallerContext, **kwargs) -> Any:
        headers = ctx.authorization_header
        logger.debug("%s %s", method, path)
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteUnavailable(f"{method} {path} timed out") from exc
        except httpx.TransportError as exc:
            raise RemoteUnavailable(f"{method} {path} failed: {exc}") from exc
        except httpx.RequestError as exc:
            # redirect loops, undecodable bodies: the backend answered badly
            raise RemoteError(f"{method} {path} failed: {exc}") from exc
        return unwrap(response)


def unwrap(response: httpx.Response) -> Any:
    """Return the ``data`` of a successful envelope or raise."""
    try:
        body = response.json()
    except ValueError:
        body = None

    status = response.status_code
    if isinstance(body, dict) and isinstance(body.get("statusCode"), int):
        status = max(status, body["statusCode"])

    if status in (401, 403):
        raise Unauthorized(_error_message(body, status))
    if status >= 400:
        message = _error_message(body, status)
        logger.info("Backend answered %d: %s", status, message)
        raise RemoteError(message, status_code=status)

    if isinstance(body, dict) and "data" in body:
        return body["data"]
    return body


def _error_message(body: Any, status: int) -> str:
    if isinstance(body, dict):
        if body.get("message"):
            return str(body["message"])
        errors = body.get("errors") or []
        messages = [
            str(e.get("defaultMessage") or e.get("message"))
            for e in errors
            if isinstance(e, dict) and (e.get("defaultMessage") or e.get("message"))
        ]
        if messages:
            return ", ".join(messages)
    return f"Request failed with status {status}"
