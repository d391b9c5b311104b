import asyncio
import inspect
import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import ErrorKind, ToolError
from upstream import in_worker_thread, send_request


def test_send_request_raises_on_error_status() -> None:
    resp = MagicMock()
    resp.ok = False
    resp.status_code = 503
    resp.reason = "Service Unavailable"

    with patch("upstream.requests.request", return_value=resp):
        with pytest.raises(ToolError) as info:
            send_request("GET", "https://example.org", service="Example")

    assert str(info.value) == "Example API error: 503 Service Unavailable"
    assert info.value.kind is ErrorKind.UPSTREAM_HTTP


def test_send_request_wraps_transport_failures() -> None:
    with patch("upstream.requests.request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(ToolError, match="Example request failed: refused"):
            send_request("GET", "https://example.org", service="Example")


def lookup(name: str, limit: int = 3) -> str:
    return f"{name}:{limit}:{threading.current_thread() is threading.main_thread()}"


def test_in_worker_thread_runs_body_off_the_calling_thread() -> None:
    tool = in_worker_thread(lookup)

    assert inspect.iscoroutinefunction(tool)
    assert asyncio.run(tool("x", limit=5)) == "x:5:False"


def test_in_worker_thread_keeps_resolved_signature() -> None:
    signature = inspect.signature(in_worker_thread(lookup))

    assert list(signature.parameters) == ["name", "limit"]
    assert signature.parameters["limit"].annotation is int
    assert signature.parameters["limit"].default == 3
