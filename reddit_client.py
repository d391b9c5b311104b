"""Reddit posts and search through the public JSON endpoints."""

from __future__ import annotations

import logging
import re
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from errors import ErrorKind, ToolError, error_text
from rate_limit import RateLimiter
from result_sink import save_result
from upstream import USER_AGENT, decode_json, in_worker_thread, send_request

REDDIT_BASE_URL = "https://www.reddit.com"
MAX_PREVIEW_CHARS = 200

LOGGER = logging.getLogger(__name__)

RATE_LIMITER = RateLimiter(min_interval_seconds=1.0)

HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "application/json",
}

_POST_ID_PATTERNS = (
    re.compile(r"reddit\.com/r/[^/]+/comments/([a-zA-Z0-9]+)"),
    re.compile(r"redd\.it/([a-zA-Z0-9]+)"),
    re.compile(r"^([a-zA-Z0-9]+)$"),
)

_HTML_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#x27;": "'",
    "&#x2F;": "/",
    "&#39;": "'",
    "&nbsp;": " ",
}
_ENTITY_RE = re.compile(r"&[#\w]+;")

_SKIPPED_BODIES = {"[deleted]", "[removed]"}


def extract_post_id(url: str) -> str | None:
    for pattern in _POST_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def decode_html(text: str) -> str:
    """Decode the handful of entities Reddit escapes; unknown ones pass through."""
    return _ENTITY_RE.sub(lambda match: _HTML_ENTITIES.get(match.group(0), match.group(0)), text)


def _is_external_link(url: str | None) -> bool:
    return bool(url) and "reddit.com" not in url


def format_post_content(post: dict[str, Any], comments: list[dict[str, Any]]) -> str:
    result = f"<post>\n<title>{decode_html(post.get('title') or '')}</title>\n"

    if post.get("selftext"):
        result += f"<content>{decode_html(post['selftext'])}</content>\n"
    elif _is_external_link(post.get("url")):
        result += f"<content>Link: {post['url']}</content>\n"

    if comments:
        result += "<comments>\n"
        for comment in comments:
            body = comment.get("body")
            if body and body not in _SKIPPED_BODIES:
                result += f"<comment>{decode_html(body)}</comment>\n"
        result += "</comments>\n"

    return result + "</post>"


def split_post_listing(data: Any, max_comments: int) -> tuple[dict[str, Any], list[dict[str, Any]]]:
    """Pull the post and its top-level comments out of the two-listing response."""
    if not isinstance(data, list) or len(data) < 2:
        raise ToolError("Invalid response format from Reddit API", ErrorKind.UPSTREAM_API)

    post_children = (data[0].get("data") or {}).get("children") or []
    if not post_children or post_children[0].get("kind") != "t3":
        raise ToolError("Post not found or not accessible", ErrorKind.NOT_FOUND)

    comments = [
        child["data"]
        for child in (data[1].get("data") or {}).get("children") or []
        if child.get("kind") == "t1" and (child.get("data") or {}).get("body")
    ]
    return post_children[0]["data"], comments[:max_comments]


def reddit_get_post(
    url: Annotated[
        str,
        Field(description="Reddit post URL (reddit.com/r/subreddit/comments/postid/...) or just the post ID"),
    ],
    max_comments: Annotated[
        int,
        Field(description="Maximum number of top-level comments to fetch (default: 25, max: 100)"),
    ] = 25,
) -> str:
    try:
        post_id = extract_post_id(url)
        if not post_id:
            raise ToolError("Invalid Reddit URL or post ID format", ErrorKind.INVALID_INPUT)
        max_comments = min(max(max_comments, 1), 100)

        RATE_LIMITER.wait()
        LOGGER.info("Fetching Reddit post %s", post_id)
        response = send_request(
            "GET",
            f"{REDDIT_BASE_URL}/comments/{post_id}.json",
            service="Reddit",
            headers=HEADERS,
            params={"limit": str(max_comments)},
        )
        post, comments = split_post_listing(decode_json(response, "Reddit"), max_comments)

        result = format_post_content(post, comments)
        filepath = save_result("reddit", "post", result)
        if filepath:
            result += f"\n\n<!-- Results saved to: {filepath} -->"
        return result
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("fetching Reddit post", exc)


def search_params(query: str, subreddit: str | None, sort: str, time: str, limit: int) -> dict[str, str]:
    params = {
        "q": f"{query} subreddit:{subreddit}" if subreddit else query,
        "sort": sort,
        "limit": str(limit),
        "type": "link",
    }
    # The time window only applies to top-sorted results.
    if sort == "top" and time:
        params["t"] = time
    return params


def _preview(selftext: str) -> str:
    if len(selftext) > MAX_PREVIEW_CHARS:
        return decode_html(selftext[:MAX_PREVIEW_CHARS]) + "..."
    return decode_html(selftext)


def format_search_results(
    posts: list[dict[str, Any]],
    query: str,
    subreddit: str | None,
    sort: str,
    time: str,
) -> str:
    result = f"<search_results>\n<query>{query}</query>\n"
    if subreddit:
        result += f"<subreddit>r/{subreddit}</subreddit>\n"
    result += f"<sort>{sort}</sort>\n"
    if sort == "top":
        result += f"<time>{time}</time>\n"
    result += f"<count>{len(posts)}</count>\n<posts>\n"

    for child in posts:
        post = child.get("data") or {}
        result += "<post>\n"
        result += f"<title>{decode_html(post.get('title') or '')}</title>\n"
        result += f"<subreddit>r/{post.get('subreddit')}</subreddit>\n"
        result += f"<author>u/{post.get('author')}</author>\n"
        result += f"<score>{post.get('score')}</score>\n"
        result += f"<comments>{post.get('num_comments')}</comments>\n"
        result += f"<url>https://reddit.com{post.get('permalink', '')}</url>\n"
        if post.get("selftext"):
            result += f"<content>{_preview(post['selftext'])}</content>\n"
        elif _is_external_link(post.get("url")):
            result += f"<link>{post['url']}</link>\n"
        result += "</post>\n"

    return result + "</posts>\n</search_results>"


def reddit_search_posts(
    query: Annotated[str, Field(description="Search query for Reddit posts")],
    subreddit: Annotated[
        str | None,
        Field(description="Limit search to specific subreddit (without r/ prefix)"),
    ] = None,
    sort: Annotated[
        Literal["relevance", "hot", "top", "new", "comments"],
        Field(description="Sort order (default: relevance)"),
    ] = "relevance",
    time: Annotated[
        Literal["all", "year", "month", "week", "day", "hour"],
        Field(description="Time filter for 'top' sort (default: all)"),
    ] = "all",
    limit: Annotated[int, Field(description="Number of results to return (default: 10, max: 25)")] = 10,
) -> str:
    try:
        limit = min(max(limit, 1), 25)

        RATE_LIMITER.wait()
        LOGGER.info("Searching Reddit: %s", query)
        response = send_request(
            "GET",
            f"{REDDIT_BASE_URL}/search.json",
            service="Reddit",
            headers=HEADERS,
            params=search_params(query, subreddit, sort, time, limit),
        )
        data = decode_json(response, "Reddit")
        posts = ((data or {}).get("data") or {}).get("children") or []

        result = format_search_results(posts, query, subreddit, sort, time)
        filepath = save_result("reddit", "search", result)
        if filepath:
            result += f"\n\n<!-- Results saved to: {filepath} -->"
        return result
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching Reddit", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(reddit_get_post),
        name="reddit-get-post",
        description=(
            "Get a Reddit post with top-level comments formatted in XML/markdown structure. Returns "
            "post content and comments in <post><title>title</title><content>content</content>"
            "<comments><comment>text</comment></comments></post> format."
        ),
    )
    server.add_tool(
        in_worker_thread(reddit_search_posts),
        name="reddit-search-posts",
        description=(
            "Search Reddit posts using Reddit's search API and return results with basic post information."
        ),
    )
