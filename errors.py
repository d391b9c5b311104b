"""Typed tool errors and their flattening into text results."""

from __future__ import annotations

import logging
from enum import Enum

LOGGER = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    UPSTREAM_HTTP = "upstream_http"
    UPSTREAM_API = "upstream_api"
    CONFIGURATION = "configuration"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    EXTERNAL_COMMAND = "external_command"


class ToolError(RuntimeError):
    """A failure inside a tool, tagged with what went wrong."""

    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message)
        self.kind = kind


def error_text(action: str, exc: BaseException) -> str:
    """Render a failure as the text result callers expect.

    Tools never raise across the protocol boundary; the caller inspects the
    returned text for the ``Error <action>:`` prefix instead.
    """
    kind = exc.kind.value if isinstance(exc, ToolError) else type(exc).__name__
    LOGGER.warning("Tool failed while %s (%s): %s", action, kind, exc)
    return f"Error {action}: {exc}"
