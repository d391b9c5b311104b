"""Entrypoint for the research tool server (MCP over stdio)."""

from __future__ import annotations

import argparse
import logging
import sys
from functools import partial
from typing import Callable

from mcp.server.fastmcp import FastMCP

import arxiv_client
import github_client
import markdown_client
import openalex_client
import perplexity_client
import reddit_client
import research_strategy
import scholar_client
from config import enabled_tool_groups, load_environment, log_level
from research_strategy import ResearchSession

SERVER_NAME = "research"

LOGGER = logging.getLogger(__name__)


def tool_groups(session: ResearchSession | None = None) -> dict[str, Callable[[FastMCP], None]]:
    """Registrar per tool group, keyed by group name.

    Registration order is the order tools are listed to callers.
    """
    return {
        "perplexity": perplexity_client.register,
        "scholar": scholar_client.register,
        "markdown": markdown_client.register,
        "github": github_client.register,
        "arxiv": arxiv_client.register,
        "openalex": openalex_client.register,
        "reddit": reddit_client.register,
        "research-strategy": partial(research_strategy.register, session=session or ResearchSession()),
    }


TOOL_GROUPS = tuple(tool_groups())


def build_server(enabled: list[str] | None = None, session: ResearchSession | None = None) -> FastMCP:
    """Create the server and register the allowed tool groups.

    ``enabled`` of None registers every group. Unknown names are logged and
    otherwise ignored.
    """
    server = FastMCP(SERVER_NAME)
    allowed = set(enabled) if enabled is not None else set(TOOL_GROUPS)

    for name in sorted(allowed - set(TOOL_GROUPS)):
        LOGGER.warning('Unknown tool "%s" in ENABLED_TOOLS', name)

    for name, register in tool_groups(session).items():
        if name not in allowed:
            continue
        register(server)
        LOGGER.info("Registered %s tools", name)

    return server


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Serve research API tools over MCP stdio")
    parser.add_argument(
        "--tools",
        default=None,
        help="Comma-separated tool groups to register; overrides ENABLED_TOOLS",
    )
    parser.add_argument(
        "--list-groups",
        action="store_true",
        help="Print the available tool groups and exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Load configuration and serve until stdin closes."""
    load_environment()
    # stdout carries the protocol; logs go to stderr.
    logging.basicConfig(level=log_level(), format="%(asctime)s %(levelname)s %(message)s", stream=sys.stderr)
    args = parse_args(argv)

    if args.list_groups:
        for name in TOOL_GROUPS:
            print(name)
        return

    if args.tools is not None:
        enabled = [name.strip() for name in args.tools.split(",") if name.strip()] or None
    else:
        enabled = enabled_tool_groups()

    server = build_server(enabled)
    LOGGER.info("Research tool server starting on stdio")
    server.run()


if __name__ == "__main__":
    main()
