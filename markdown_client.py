"""URL-to-markdown conversion through the pure.md proxy."""

from __future__ import annotations

import logging
import re
from typing import Annotated
from urllib.parse import urlparse

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from errors import error_text
from result_sink import save_result
from upstream import in_worker_thread, send_request

PURE_MD_BASE_URL = "https://pure.md/"

LOGGER = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^a-zA-Z0-9\-._]")


def page_name(url: str) -> str:
    """Filesystem-safe name for a page: host (sans www.) plus dashed path."""
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.hostname:
        return _UNSAFE_CHARS_RE.sub("_", url)

    hostname = re.sub(r"^www\.", "", parsed.hostname)
    path = parsed.path.rstrip("/").replace("/", "-")
    return _UNSAFE_CHARS_RE.sub("_", f"{hostname}{path}")


def fetch_markdown(url: str) -> str:
    response = send_request("GET", f"{PURE_MD_BASE_URL}{url}", service="pure.md")
    return response.text


def get_markdown(
    url: Annotated[str, Field(description="The URL to scrape and convert to markdown")],
) -> str:
    try:
        LOGGER.info("Fetching markdown for %s", url)
        markdown = fetch_markdown(url)
        filepath = save_result("markdown", page_name(url), markdown)
        if filepath:
            return f"Saved to: {filepath}\n\n{markdown}"
        return markdown
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("scraping URL", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(get_markdown),
        name="get-markdown",
        description=(
            "Get markdown content from a URL. Use this tool for URLs containing documentation and "
            "code examples where precise information is needed."
        ),
    )
