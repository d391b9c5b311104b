"""Outbound HTTP helpers shared by the source clients."""

from __future__ import annotations

import functools
import inspect
import logging
import os
from typing import Any, Awaitable, Callable

import anyio.to_thread
import requests

from errors import ErrorKind, ToolError

REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "60"))
USER_AGENT = "MCP-Search-Tool/1.0.0"

LOGGER = logging.getLogger(__name__)


def send_request(
    method: str,
    url: str,
    *,
    service: str,
    headers: dict[str, str] | None = None,
    params: Any = None,
    json_payload: dict[str, Any] | None = None,
) -> requests.Response:
    """Send one request and turn transport or status failures into ToolErrors.

    No retries: a failed call surfaces immediately.
    """
    LOGGER.debug("%s %s %s", service, method, url)
    try:
        response = requests.request(
            method=method,
            url=url,
            headers=headers,
            params=params,
            json=json_payload,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as exc:
        raise ToolError(f"{service} request failed: {exc}", ErrorKind.UPSTREAM_HTTP) from exc

    if not response.ok:
        raise ToolError(
            f"{service} API error: {response.status_code} {response.reason}",
            ErrorKind.UPSTREAM_HTTP,
        )
    return response


def decode_json(response: requests.Response, service: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise ToolError(f"{service} returned invalid JSON: {exc}", ErrorKind.UPSTREAM_API) from exc


def in_worker_thread(fn: Callable[..., str]) -> Callable[..., Awaitable[str]]:
    """Wrap a blocking tool body as a coroutine that runs it on a worker thread.

    The wrapper carries the body's resolved signature, so the tool schema is
    built from the original parameters.
    """

    @functools.wraps(fn)
    async def tool(*args: Any, **kwargs: Any) -> str:
        return await anyio.to_thread.run_sync(functools.partial(fn, *args, **kwargs))

    tool.__signature__ = inspect.signature(fn, eval_str=True)
    return tool
