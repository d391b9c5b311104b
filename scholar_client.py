"""Google Scholar search through SerpAPI."""

from __future__ import annotations

import logging
from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from config import require_env
from errors import ErrorKind, ToolError, error_text
from result_sink import save_result
from upstream import decode_json, in_worker_thread, send_request

SERPAPI_URL = "https://serpapi.com/search"

LOGGER = logging.getLogger(__name__)


def build_params(
    api_key: str,
    query: str,
    year_start: int | None = None,
    year_end: int | None = None,
    num_results: int = 10,
    cites: str | None = None,
) -> dict[str, str]:
    params = {
        "engine": "google_scholar",
        "api_key": api_key,
        "num": str(min(max(num_results, 1), 20)),
    }
    # A citation lookup replaces the free-text query.
    if cites:
        params["cites"] = cites
    else:
        params["q"] = query
    if year_start:
        params["as_ylo"] = str(year_start)
    if year_end:
        params["as_yhi"] = str(year_end)
    return params


def search_scholar(params: dict[str, str]) -> dict[str, Any]:
    response = send_request("GET", SERPAPI_URL, service="SerpAPI", params=params)
    data = decode_json(response, "SerpAPI")
    if data.get("error"):
        raise ToolError(f"SerpAPI error: {data['error']}", ErrorKind.UPSTREAM_API)
    return data


def format_scholar_results(
    data: dict[str, Any],
    query: str,
    year_start: int | None = None,
    year_end: int | None = None,
) -> str:
    result = f"# Google Scholar Search Results\n\nQuery: {query}\n"
    if year_start or year_end:
        result += f"Year range: {year_start or 'any'} - {year_end or 'any'}\n"

    total = (data.get("search_information") or {}).get("total_results") or "unknown"
    result += f"\nFound {total} results\n\n"

    papers = data.get("organic_results") or []
    if not papers:
        result += "No results found.\n"
    for index, paper in enumerate(papers, start=1):
        result += f"## {index}. {paper.get('title')}\n"
        if paper.get("link"):
            result += f"**Link:** {paper['link']}\n"
        if paper.get("snippet"):
            result += f"**Abstract:** {paper['snippet']}\n"
        summary = (paper.get("publication_info") or {}).get("summary")
        if summary:
            result += f"**Publication:** {summary}\n"
        inline_links = paper.get("inline_links") or {}
        cited_by = (inline_links.get("cited_by") or {}).get("total")
        if cited_by:
            result += f"**Cited by:** {cited_by} papers\n"
        versions = (inline_links.get("versions") or {}).get("total")
        if versions:
            result += f"**Versions:** {versions}\n"
        result += "\n"

    related = data.get("related_searches") or []
    if related:
        result += "\n## Related Searches\n"
        for search in related:
            result += f"- {search.get('query')}\n"

    return result


def google_scholar_search(
    query: Annotated[
        str,
        Field(description="Search query for academic papers. You can use helpers like 'author:' or 'source:'"),
    ],
    year_start: Annotated[int | None, Field(description="Start year for publication date range")] = None,
    year_end: Annotated[int | None, Field(description="End year for publication date range")] = None,
    num_results: Annotated[int, Field(description="Number of results to return (1-20, default 10)")] = 10,
    cites: Annotated[str | None, Field(description="Search for papers that cite this specific paper ID")] = None,
) -> str:
    try:
        api_key = require_env("SERP_API_KEY")
        params = build_params(api_key, query, year_start, year_end, num_results, cites)
        LOGGER.info("Searching Google Scholar: %s", query)
        data = search_scholar(params)
        result = format_scholar_results(data, query, year_start, year_end)
        save_result("scholar", "search", result)
        return result
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching Google Scholar", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(google_scholar_search),
        name="google-scholar-search",
        description=(
            "Search academic papers and citations using Google Scholar. Use this tool for finding "
            "current research on a topic."
        ),
    )
