"""Perplexity API client for web-grounded research questions."""

from __future__ import annotations

import logging
import os
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from config import require_env
from errors import ErrorKind, ToolError, error_text
from result_sink import save_result
from upstream import decode_json, in_worker_thread, send_request

PERPLEXITY_API_URL = "https://api.perplexity.ai/chat/completions"
PERPLEXITY_MODEL = os.getenv("PERPLEXITY_MODEL", "sonar-pro")
PERPLEXITY_TEMPERATURE = float(os.getenv("PERPLEXITY_TEMPERATURE", "0.1"))

LOGGER = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a meticulous research assistant.
Answer the question using current, verifiable web sources.
Prefer primary sources, give concrete numbers and dates where they exist,
and say plainly when the evidence is thin or conflicting."""

PerplexityModel = Literal["sonar", "sonar-pro", "sonar-reasoning", "sonar-reasoning-pro", "sonar-deep-research"]
RecencyFilter = Literal["hour", "day", "week", "month", "year"]


def ask_perplexity(query: str, model: str | None = None, search_recency: str | None = None) -> dict[str, Any]:
    """Send one question to Perplexity and return the decoded response body."""
    api_key = require_env("PERPLEXITY_API_KEY")

    payload: dict[str, Any] = {
        "model": model or PERPLEXITY_MODEL,
        "temperature": PERPLEXITY_TEMPERATURE,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": query},
        ],
    }
    if search_recency:
        payload["search_recency_filter"] = search_recency

    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }

    LOGGER.info("Querying Perplexity model=%s: %s", payload["model"], query)
    response = send_request(
        "POST",
        PERPLEXITY_API_URL,
        service="Perplexity",
        headers=headers,
        json_payload=payload,
    )
    body = decode_json(response, "Perplexity")
    if isinstance(body, dict) and body.get("error"):
        raise ToolError(f"Perplexity API error: {body['error']}", ErrorKind.UPSTREAM_API)
    return body


def extract_answer(body: Any) -> str:
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ToolError(f"Unexpected Perplexity response shape: {body}", ErrorKind.UPSTREAM_API) from exc
    if not content:
        raise ToolError("Perplexity returned an empty response", ErrorKind.UPSTREAM_API)
    return content


def extract_citations(body: dict[str, Any]) -> list[str]:
    """Citation URLs, from ``citations`` or the newer ``search_results`` block."""
    citations = body.get("citations")
    if isinstance(citations, list) and citations:
        return [str(url) for url in citations]

    urls: list[str] = []
    for result in body.get("search_results") or []:
        if isinstance(result, dict) and result.get("url"):
            urls.append(result["url"])
    return urls


def format_answer(query: str, answer: str, citations: list[str], model: str) -> str:
    result = f"# Perplexity Search Results\n\n**Query:** {query}\n**Model:** {model}\n\n{answer}\n"
    if citations:
        result += "\n## Sources\n"
        for index, url in enumerate(citations, start=1):
            result += f"{index}. {url}\n"
    return result


def perplexity_search(
    query: Annotated[str, Field(description="Question or search query to research on the web")],
    model: Annotated[
        PerplexityModel | None,
        Field(description="Perplexity model to use (default: sonar-pro)"),
    ] = None,
    search_recency: Annotated[
        RecencyFilter | None,
        Field(description="Only use sources published within this window"),
    ] = None,
) -> str:
    try:
        body = ask_perplexity(query, model=model, search_recency=search_recency)
        result = format_answer(
            query,
            extract_answer(body),
            extract_citations(body),
            body.get("model") or model or PERPLEXITY_MODEL,
        )
        filepath = save_result("perplexity", "search", result)
        if filepath:
            result += f"\n---\n*Results saved to: {filepath}*"
        return result
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("querying Perplexity", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(perplexity_search),
        name="perplexity-search",
        description=(
            "Search the web and get a sourced answer using Perplexity. Use this tool for current "
            "events, market data and questions that need up-to-date web sources."
        ),
    )
