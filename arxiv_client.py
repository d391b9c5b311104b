"""arXiv search and paper retrieval tools."""

from __future__ import annotations

import logging
import re
import subprocess
from datetime import date
from pathlib import Path
from typing import Annotated, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from arxiv_feed import extract_text, is_error_feed, parse_feed
from config import scratch_dir
from errors import ErrorKind, ToolError, error_text
from models import FeedEntry, FeedResponse
from result_sink import save_result, timestamp_slug
from upstream import in_worker_thread, send_request

ARXIV_API_URL = "http://export.arxiv.org/api/query"
ARXIV_SOURCE_URL = "https://arxiv.org/src/{arxiv_id}"
MAX_RESULTS_LIMIT = 2000
MAX_INLINE_CONTENT_CHARS = 20_000

LOGGER = logging.getLogger(__name__)

SortBy = Literal["relevance", "lastUpdatedDate", "submittedDate"]
SortOrder = Literal["ascending", "descending"]

_ID_URL_PREFIX_RE = re.compile(r"^(https?://)?arxiv\.org/(abs/)?")


def call_arxiv_api(params: dict[str, str]) -> FeedResponse:
    response = send_request("GET", ARXIV_API_URL, service="arXiv", params=params)
    body = response.text
    if is_error_feed(body):
        message = extract_text(body, "summary") or "Unknown error"
        raise ToolError(f"arXiv API error: {message}", ErrorKind.UPSTREAM_API)
    return parse_feed(body)


def build_query_params(
    search_query: str,
    max_results: int,
    sort_by: str,
    sort_order: str,
    start: int = 0,
) -> dict[str, str]:
    if max_results > MAX_RESULTS_LIMIT:
        raise ToolError(f"max_results cannot exceed {MAX_RESULTS_LIMIT}", ErrorKind.INVALID_INPUT)
    if start < 0:
        raise ToolError("start must be >= 0", ErrorKind.INVALID_INPUT)

    params = {
        "search_query": search_query,
        "start": str(start),
        "max_results": str(max_results),
    }
    # arXiv sorts by relevance unless told otherwise.
    if sort_by != "relevance":
        params["sortBy"] = sort_by
        params["sortOrder"] = sort_order
    return params


def submitted_date_bound(value: str) -> str:
    """YYYY-MM-DD -> YYYYMMDD0000, the submittedDate range format."""
    try:
        parsed = date.fromisoformat(value)
    except ValueError as exc:
        raise ToolError("Invalid date format. Expected YYYY-MM-DD", ErrorKind.INVALID_INPUT) from exc
    return f"{parsed:%Y%m%d}0000"


def category_query(category: str, date_from: str | None = None, date_to: str | None = None) -> str:
    query = f"cat:{category}"
    if date_from or date_to:
        lower = submitted_date_bound(date_from) if date_from else "*"
        upper = submitted_date_bound(date_to) if date_to else "*"
        query += f" AND submittedDate:[{lower} TO {upper}]"
    return query


def author_query(author_name: str) -> str:
    return "au:" + re.sub(r"\s+", "_", author_name.lower())


def _display_date(raw: str) -> str:
    try:
        return date.fromisoformat(raw[:10]).isoformat()
    except ValueError:
        return raw


def format_entry(entry: FeedEntry, index: int) -> str:
    result = f"## {index}. {entry.title}\n\n"
    result += f"**arXiv ID:** {entry.entry_id}\n"
    result += f"**Authors:** {', '.join(entry.authors)}\n"
    result += f"**Primary Category:** {entry.primary_category}\n"
    if len(entry.categories) > 1:
        result += f"**All Categories:** {', '.join(entry.categories)}\n"
    result += f"**Published:** {_display_date(entry.published)}\n"
    if entry.updated != entry.published:
        result += f"**Updated:** {_display_date(entry.updated)}\n"

    result += f"\n**Abstract:**\n{entry.summary}\n\n"

    if entry.comment:
        result += f"**Comment:** {entry.comment}\n"
    if entry.journal_ref:
        result += f"**Journal Reference:** {entry.journal_ref}\n"

    result += "**Links:**\n"
    result += f"- [Abstract]({entry.links.abstract})\n"
    result += f"- [PDF]({entry.links.pdf})\n"
    if entry.links.doi:
        result += f"- [DOI]({entry.links.doi})\n"
    return result + "\n---\n\n"


def format_arxiv_results(response: FeedResponse, query: str | None = None, search_type: str | None = None) -> str:
    result = "# arXiv Search Results\n\n"
    if query:
        result += f"**Query:** {query}\n"
    if search_type:
        result += f"**Search Type:** {search_type}\n"

    result += f"**Total Results:** {response.total_results}\n"
    result += (
        f"**Showing:** {response.start_index + 1}-{response.start_index + response.items_per_page} "
        f"of {response.total_results}\n\n"
    )

    if not response.entries:
        return result + "No results found.\n"

    for index, entry in enumerate(response.entries, start=1):
        result += format_entry(entry, index)
    return result


def _run_command(args: list[str]) -> None:
    try:
        subprocess.run(args, check=True, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise ToolError(f"{args[0]} is not installed", ErrorKind.EXTERNAL_COMMAND) from exc
    except subprocess.CalledProcessError as exc:
        detail = (exc.stderr or "").strip() or f"exit status {exc.returncode}"
        raise ToolError(f"{args[0]} failed: {detail}", ErrorKind.EXTERNAL_COMMAND) from exc


def find_main_tex_file(extract_dir: Path) -> Path | None:
    """main.tex when present, otherwise the first .tex file by name."""
    main_tex = extract_dir / "main.tex"
    if main_tex.is_file():
        return main_tex
    tex_files = sorted(path for path in extract_dir.glob("*.tex") if path.is_file())
    return tex_files[0] if tex_files else None


def convert_latex_to_markdown(tex_path: Path, output_path: Path) -> None:
    _run_command(["pandoc", str(tex_path), "-f", "latex", "-t", "markdown", "-o", str(output_path)])


def download_latex_source(arxiv_id: str) -> tuple[Path, Path | None]:
    """Download and unpack a paper's source archive, converting its main .tex file.

    Returns the extraction directory and the markdown path (None when the
    archive holds no .tex file).
    """
    tmp_dir = scratch_dir()
    tmp_dir.mkdir(parents=True, exist_ok=True)

    stem = f"arxiv-{re.sub(r'[/.]', '-', arxiv_id)}-{timestamp_slug()}"
    extract_dir = tmp_dir / stem
    tar_path = tmp_dir / f"{stem}.tar.gz"

    LOGGER.info("Downloading LaTeX source for %s", arxiv_id)
    response = send_request("GET", ARXIV_SOURCE_URL.format(arxiv_id=arxiv_id), service="arXiv source")
    tar_path.write_bytes(response.content)

    extract_dir.mkdir(parents=True, exist_ok=True)
    try:
        _run_command(["tar", "-xzf", str(tar_path), "-C", str(extract_dir)])
    finally:
        tar_path.unlink(missing_ok=True)

    main_tex = find_main_tex_file(extract_dir)
    if main_tex is None:
        LOGGER.warning("No .tex file found in source archive for %s", arxiv_id)
        return extract_dir, None

    markdown_path = extract_dir / "paper.md"
    convert_latex_to_markdown(main_tex, markdown_path)
    return extract_dir, markdown_path


def clean_arxiv_id(arxiv_id: str) -> str:
    return _ID_URL_PREFIX_RE.sub("", arxiv_id.strip())


def _saved_results(formatted: str, label: str) -> str:
    filepath = save_result("arxiv", label, formatted)
    if filepath:
        return f"Saved to: {filepath}\n\n{formatted}"
    return formatted


def arxiv_search(
    query: Annotated[
        str,
        Field(
            description=(
                "Search query (can use ti: for title, au: for author, cat: for category, abs: for "
                "abstract, all: for all fields, etc. Supports Boolean operators AND, OR, ANDNOT and "
                "parentheses for grouping)"
            )
        ),
    ],
    max_results: Annotated[int, Field(description="Maximum number of results to return (default 10, max 2000)")] = 10,
    sort_by: Annotated[SortBy, Field(description="Sort order (default: relevance)")] = "relevance",
    sort_order: Annotated[SortOrder, Field(description="Sort direction (default: descending)")] = "descending",
    start: Annotated[int, Field(description="Starting index for pagination (default 0)")] = 0,
) -> str:
    try:
        params = build_query_params(query, max_results, sort_by, sort_order, start)
        LOGGER.info("Searching arXiv: %s", query)
        response = call_arxiv_api(params)
        return _saved_results(format_arxiv_results(response, query, "General Search"), "search")
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching arXiv", exc)


def describe_paper(
    arxiv_id: str,
    paper: FeedEntry,
    extract_dir: Path,
    markdown_path: Path | None,
    include_content: bool,
) -> str:
    result = f"Successfully downloaded arXiv paper {arxiv_id}\n\nLaTeX source extracted to: {extract_dir}"
    if markdown_path:
        result += f"\nMarkdown conversion saved to: {markdown_path}"

    result += (
        f"\n\nPaper details:\n- Title: {paper.title}\n- Authors: {', '.join(paper.authors)}"
        f"\n- Abstract: {paper.summary}"
    )
    result += f"\n\nLinks:\n- [Abstract]({paper.links.abstract})\n- [PDF]({paper.links.pdf})"
    if paper.links.doi:
        result += f"\n- [DOI]({paper.links.doi})"

    if include_content and markdown_path:
        try:
            content = markdown_path.read_text(encoding="utf-8")
        except OSError as exc:
            return result + f"\n\n**Note: Could not read paper content from markdown file: {exc}**"

        if len(content) > MAX_INLINE_CONTENT_CHARS:
            result += (
                "\n\n## Paper Content (Truncated)\n\n**Note: Content was truncated as it exceeded "
                "20,000 characters. Full content is available in the saved markdown file.**\n\n"
                f"{content[:MAX_INLINE_CONTENT_CHARS]}"
            )
        else:
            result += f"\n\n## Paper Content\n\n{content}"
    return result


def arxiv_get_paper(
    arxiv_id: Annotated[
        str,
        Field(description="arXiv paper ID (e.g., '1706.03762', 'cs.AI/0001001', or with version like '1706.03762v1')"),
    ],
    include_content: Annotated[
        bool,
        Field(description="Whether to include the paper's markdown content in the response (default: true)"),
    ] = True,
) -> str:
    try:
        clean_id = clean_arxiv_id(arxiv_id)
        response = call_arxiv_api({"id_list": clean_id})
        if not response.entries:
            raise ToolError(f"No paper found with ID: {clean_id}", ErrorKind.NOT_FOUND)

        extract_dir, markdown_path = download_latex_source(clean_id)
        return describe_paper(clean_id, response.entries[0], extract_dir, markdown_path, include_content)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("retrieving arXiv paper", exc)


def arxiv_search_by_author(
    author_name: Annotated[str, Field(description="Author name to search for (e.g., 'John Smith' or 'Smith')")],
    max_results: Annotated[int, Field(description="Maximum number of results to return (default 10, max 2000)")] = 10,
    sort_by: Annotated[SortBy, Field(description="Sort order (default: lastUpdatedDate)")] = "lastUpdatedDate",
    sort_order: Annotated[SortOrder, Field(description="Sort direction (default: descending)")] = "descending",
) -> str:
    try:
        params = build_query_params(author_query(author_name), max_results, sort_by, sort_order)
        LOGGER.info("Searching arXiv by author: %s", author_name)
        response = call_arxiv_api(params)
        label = "author-" + re.sub(r"\s+", "-", author_name).lower()
        return _saved_results(format_arxiv_results(response, author_name, "Author Search"), label)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching by author", exc)


def arxiv_search_by_category(
    category: Annotated[
        str,
        Field(description="arXiv category (e.g., 'cs.AI', 'math.CO', 'physics.gen-ph', 'hep-th', 'quant-ph')"),
    ],
    max_results: Annotated[int, Field(description="Maximum number of results to return (default 10, max 2000)")] = 10,
    date_from: Annotated[
        str | None,
        Field(description="Start date in YYYY-MM-DD format for filtering by submission date"),
    ] = None,
    date_to: Annotated[
        str | None,
        Field(description="End date in YYYY-MM-DD format for filtering by submission date"),
    ] = None,
    sort_by: Annotated[SortBy, Field(description="Sort order (default: submittedDate)")] = "submittedDate",
    sort_order: Annotated[SortOrder, Field(description="Sort direction (default: descending)")] = "descending",
) -> str:
    try:
        params = build_query_params(category_query(category, date_from, date_to), max_results, sort_by, sort_order)
        LOGGER.info("Searching arXiv by category: %s", category)
        response = call_arxiv_api(params)

        description = f"Category: {category}"
        if date_from or date_to:
            description += f" | Date range: {date_from or 'any'} to {date_to or 'any'}"

        label = "category-" + re.sub(r"[/.]", "-", category)
        return _saved_results(format_arxiv_results(response, description, "Category Search"), label)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching by category", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(arxiv_search),
        name="arxiv-search",
        description="Search arXiv preprints using the arXiv API with advanced query syntax",
    )
    server.add_tool(
        in_worker_thread(arxiv_get_paper),
        name="arxiv-get-paper",
        description="Get detailed information about a specific arXiv paper by ID and download the LaTeX source",
    )
    server.add_tool(
        in_worker_thread(arxiv_search_by_author),
        name="arxiv-search-by-author",
        description="Search arXiv papers by author name",
    )
    server.add_tool(
        in_worker_thread(arxiv_search_by_category),
        name="arxiv-search-by-category",
        description="Search arXiv papers by subject category with optional date filtering",
    )
