import asyncio
import logging
import time
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from main import TOOL_GROUPS, build_server, parse_args, tool_groups
from research_strategy import ResearchSession

EMPTY_FEED = "<feed><opensearch:totalResults>0</opensearch:totalResults></feed>"

EXPECTED_GROUP_TOOLS = {
    "perplexity": {"perplexity-search"},
    "scholar": {"google-scholar-search"},
    "markdown": {"get-markdown"},
    "github": {
        "github-search-repositories",
        "github-search-code",
        "github-search-issues",
        "github-search-users",
        "github-get-repository",
    },
    "arxiv": {"arxiv-search", "arxiv-get-paper", "arxiv-search-by-author", "arxiv-search-by-category"},
    "openalex": {
        "openalex-search-works",
        "openalex-search-authors",
        "openalex-search-institutions",
        "openalex-search-concepts",
        "openalex-search-sources",
        "openalex-search-publishers",
        "openalex-search-funders",
        "openalex-get-work-by-id",
        "openalex-autocomplete",
    },
    "reddit": {"reddit-get-post", "reddit-search-posts"},
    "research-strategy": {"get-research-strategy"},
}


def _tool_names(enabled: list[str] | None) -> set[str]:
    server = build_server(enabled)
    return {tool.name for tool in asyncio.run(server.list_tools())}


def test_tool_groups_in_registration_order() -> None:
    assert list(TOOL_GROUPS) == list(EXPECTED_GROUP_TOOLS)


def test_all_groups_registered_by_default() -> None:
    assert _tool_names(None) == set().union(*EXPECTED_GROUP_TOOLS.values())


def test_allow_list_limits_registration() -> None:
    assert _tool_names(["arxiv", "research-strategy"]) == (
        EXPECTED_GROUP_TOOLS["arxiv"] | EXPECTED_GROUP_TOOLS["research-strategy"]
    )


def test_unknown_group_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        names = _tool_names(["reddit", "myspace"])

    assert names == EXPECTED_GROUP_TOOLS["reddit"]
    assert 'Unknown tool "myspace" in ENABLED_TOOLS' in caplog.text


def test_tool_schemas_expose_enums() -> None:
    server = build_server(["reddit"])
    tools = {tool.name: tool for tool in asyncio.run(server.list_tools())}

    schema = tools["reddit-search-posts"].inputSchema
    assert schema["required"] == ["query"]
    assert set(schema["properties"]) == {"query", "subreddit", "sort", "time", "limit"}


def test_parse_args() -> None:
    args = parse_args(["--tools", "github,arxiv"])

    assert args.tools == "github,arxiv"
    assert args.list_groups is False


def _call_text(result) -> str:
    # Newer FastMCP releases return (content, structured) from call_tool.
    content = result[0] if isinstance(result, tuple) else result
    return content[0].text


def test_every_registrar_takes_only_the_server() -> None:
    server = MagicMock()

    for register in tool_groups(ResearchSession()).values():
        register(server)

    assert server.add_tool.call_count == sum(len(names) for names in EXPECTED_GROUP_TOOLS.values())


def test_session_is_bound_to_strategy_tool(tmp_path: Path) -> None:
    session = ResearchSession()
    server = build_server(["research-strategy"], session=session)

    arguments = {"research_type": "market", "depth": 1, "step_number": 1, "research_directory": str(tmp_path)}
    asyncio.run(server.call_tool("get-research-strategy", arguments))

    assert session.directory == tmp_path


def test_tool_calls_run_concurrently() -> None:
    calls = []

    def slow_request(**kwargs) -> MagicMock:
        calls.append(kwargs["params"]["search_query"])
        time.sleep(0.5)
        resp = MagicMock()
        resp.ok = True
        resp.status_code = 200
        resp.text = EMPTY_FEED
        return resp

    server = build_server(["arxiv"])

    async def call_both():
        return await asyncio.gather(
            server.call_tool("arxiv-search", {"query": "a"}),
            server.call_tool("arxiv-search", {"query": "b"}),
        )

    with patch("upstream.requests.request", side_effect=slow_request):
        started = time.monotonic()
        results = asyncio.run(call_both())
        elapsed = time.monotonic() - started

    assert sorted(calls) == ["a", "b"]
    assert elapsed < 0.9
    assert all(not _call_text(result).startswith("Error") for result in results)
