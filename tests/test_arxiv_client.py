import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import arxiv_client
from arxiv_client import (
    arxiv_get_paper,
    arxiv_search,
    arxiv_search_by_author,
    arxiv_search_by_category,
    author_query,
    build_query_params,
    category_query,
    clean_arxiv_id,
    describe_paper,
    find_main_tex_file,
    format_arxiv_results,
)
from arxiv_feed import parse_feed
from errors import ErrorKind, ToolError

FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <opensearch:totalResults>1</opensearch:totalResults>
  <opensearch:startIndex>0</opensearch:startIndex>
  <opensearch:itemsPerPage>1</opensearch:itemsPerPage>
  <entry>
    <id>http://arxiv.org/abs/1706.03762v7</id>
    <updated>2023-08-02T00:41:18Z</updated>
    <published>2017-06-12T17:57:34Z</published>
    <title>Attention Is All
      You Need</title>
    <summary>The dominant sequence transduction models.</summary>
    <author><name>Ashish Vaswani</name></author>
    <author><name>Noam Shazeer</name></author>
    <arxiv:comment>15 pages, 5 figures</arxiv:comment>
    <link href="http://arxiv.org/abs/1706.03762v7" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/1706.03762v7" rel="related" type="application/pdf"/>
    <arxiv:primary_category term="cs.CL"/>
    <category term="cs.CL"/>
    <category term="cs.LG"/>
  </entry>
</feed>
"""

ERROR_FEED = """<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/api/errors#incorrect_id_format_for_x</id>
    <title>Error</title>
    <summary>incorrect id format for x</summary>
  </entry>
</feed>
"""

EMPTY_FEED = "<feed><opensearch:totalResults>0</opensearch:totalResults></feed>"


def _mock_resp(text: str = "", content: bytes = b"") -> MagicMock:
    mock = MagicMock()
    mock.ok = True
    mock.text = text
    mock.content = content
    return mock


def test_build_query_params_omits_sort_for_relevance() -> None:
    params = build_query_params("all:electron", 10, "relevance", "descending")

    assert params == {"search_query": "all:electron", "start": "0", "max_results": "10"}


def test_build_query_params_includes_sort() -> None:
    params = build_query_params("cat:cs.AI", 5, "submittedDate", "ascending", start=20)

    assert params["sortBy"] == "submittedDate"
    assert params["sortOrder"] == "ascending"
    assert params["start"] == "20"


@pytest.mark.parametrize(
    ("max_results", "start", "message"),
    [(2001, 0, "max_results cannot exceed 2000"), (10, -1, "start must be >= 0")],
)
def test_build_query_params_rejects_bad_input(max_results: int, start: int, message: str) -> None:
    with pytest.raises(ToolError) as excinfo:
        build_query_params("q", max_results, "relevance", "descending", start)

    assert excinfo.value.kind is ErrorKind.INVALID_INPUT
    assert str(excinfo.value) == message


def test_category_query_date_bounds() -> None:
    assert category_query("cs.AI") == "cat:cs.AI"
    assert category_query("cs.AI", "2024-01-01", "2024-02-15") == (
        "cat:cs.AI AND submittedDate:[202401010000 TO 202402150000]"
    )
    assert category_query("hep-th", date_to="2024-02-15") == "cat:hep-th AND submittedDate:[* TO 202402150000]"


def test_category_query_rejects_bad_date() -> None:
    with pytest.raises(ToolError) as excinfo:
        category_query("cs.AI", "01/02/2024")

    assert excinfo.value.kind is ErrorKind.INVALID_INPUT


def test_author_query_lowercases_and_joins() -> None:
    assert author_query("Geoffrey  Hinton") == "au:geoffrey_hinton"


def test_clean_arxiv_id_strips_urls() -> None:
    assert clean_arxiv_id("https://arxiv.org/abs/1706.03762v1") == "1706.03762v1"
    assert clean_arxiv_id(" cs.AI/0001001 ") == "cs.AI/0001001"


def test_format_arxiv_results_renders_entry() -> None:
    text = format_arxiv_results(parse_feed(FEED), "attention", "General Search")

    assert "**Query:** attention\n**Search Type:** General Search\n" in text
    assert "**Showing:** 1-1 of 1\n" in text
    assert "## 1. Attention Is All You Need\n" in text
    assert "**arXiv ID:** 1706.03762v7\n" in text
    assert "**Authors:** Ashish Vaswani, Noam Shazeer\n" in text
    assert "**All Categories:** cs.CL, cs.LG\n" in text
    assert "**Published:** 2017-06-12\n**Updated:** 2023-08-02\n" in text
    assert "**Comment:** 15 pages, 5 figures\n" in text
    assert "- [PDF](http://arxiv.org/pdf/1706.03762v7)\n" in text
    assert "[DOI]" not in text


def test_format_arxiv_results_empty() -> None:
    assert format_arxiv_results(parse_feed(EMPTY_FEED)).endswith("No results found.\n")


def test_arxiv_search_success_saves_result(scratch: Path) -> None:
    with patch("upstream.requests.request", return_value=_mock_resp(FEED)) as mock_request:
        text = arxiv_search("ti:attention", max_results=1)

    assert mock_request.call_args.kwargs["url"] == "http://export.arxiv.org/api/query"
    saved = list(scratch.glob("arxiv-search-*.md"))
    assert len(saved) == 1
    assert text.startswith(f"Saved to: {saved[0]}\n\n# arXiv Search Results")


def test_arxiv_search_error_feed() -> None:
    with patch("upstream.requests.request", return_value=_mock_resp(ERROR_FEED)):
        text = arxiv_search("id:x")

    assert text == "Error searching arXiv: arXiv API error: incorrect id format for x"


def test_arxiv_search_invalid_input_is_error_text() -> None:
    assert arxiv_search("q", max_results=5000) == "Error searching arXiv: max_results cannot exceed 2000"


def test_arxiv_search_by_author_label(scratch: Path) -> None:
    with patch("upstream.requests.request", return_value=_mock_resp(FEED)) as mock_request:
        text = arxiv_search_by_author("Ashish Vaswani")

    params = mock_request.call_args.kwargs["params"]
    assert params["search_query"] == "au:ashish_vaswani"
    assert params["sortBy"] == "lastUpdatedDate"
    assert "**Search Type:** Author Search" in text
    assert len(list(scratch.glob("arxiv-author-ashish-vaswani-*.md"))) == 1


def test_arxiv_search_by_category_with_dates(scratch: Path) -> None:
    with patch("upstream.requests.request", return_value=_mock_resp(FEED)) as mock_request:
        text = arxiv_search_by_category("physics.gen-ph", date_from="2024-01-01")

    params = mock_request.call_args.kwargs["params"]
    assert params["search_query"] == "cat:physics.gen-ph AND submittedDate:[202401010000 TO *]"
    assert "**Query:** Category: physics.gen-ph | Date range: 2024-01-01 to any" in text
    assert len(list(scratch.glob("arxiv-category-physics-gen-ph-*.md"))) == 1


def test_find_main_tex_file(tmp_path: Path) -> None:
    assert find_main_tex_file(tmp_path) is None

    (tmp_path / "b.tex").write_text("b")
    (tmp_path / "a.tex").write_text("a")
    assert find_main_tex_file(tmp_path) == tmp_path / "a.tex"

    (tmp_path / "main.tex").write_text("main")
    assert find_main_tex_file(tmp_path) == tmp_path / "main.tex"


def test_describe_paper_truncates_long_content(tmp_path: Path) -> None:
    paper = parse_feed(FEED).entries[0]
    markdown = tmp_path / "paper.md"
    markdown.write_text("x" * 20_050, encoding="utf-8")

    text = describe_paper("1706.03762v7", paper, tmp_path, markdown, include_content=True)

    assert text.startswith("Successfully downloaded arXiv paper 1706.03762v7\n\nLaTeX source extracted to: ")
    assert "## Paper Content (Truncated)" in text
    assert text.endswith("x" * 20_000)
    assert "x" * 20_001 not in text


def test_describe_paper_without_content(tmp_path: Path) -> None:
    paper = parse_feed(FEED).entries[0]

    text = describe_paper("1706.03762v7", paper, tmp_path, None, include_content=True)

    assert "Markdown conversion saved to" not in text
    assert "## Paper Content" not in text
    assert "- Title: Attention Is All You Need" in text


def test_arxiv_get_paper_downloads_and_converts(scratch: Path) -> None:
    responses = [_mock_resp(FEED), _mock_resp(content=b"archive-bytes")]
    commands: list[list[str]] = []

    def fake_run(args: list[str], **kwargs: object) -> subprocess.CompletedProcess:
        commands.append(args)
        if args[0] == "tar":
            (Path(args[-1]) / "main.tex").write_text("\\section{Intro}")
        else:
            Path(args[-1]).write_text("# Intro\n", encoding="utf-8")
        return subprocess.CompletedProcess(args, 0)

    with patch("upstream.requests.request", side_effect=responses) as mock_request, patch(
        "arxiv_client.subprocess.run", side_effect=fake_run
    ):
        text = arxiv_get_paper("https://arxiv.org/abs/1706.03762v7")

    assert mock_request.call_args_list[0].kwargs["params"] == {"id_list": "1706.03762v7"}
    assert mock_request.call_args_list[1].kwargs["url"] == "https://arxiv.org/src/1706.03762v7"
    assert [command[0] for command in commands] == ["tar", "pandoc"]
    assert "## Paper Content\n\n# Intro\n" in text
    assert list(scratch.glob("*.tar.gz")) == []


def test_arxiv_get_paper_not_found() -> None:
    with patch("upstream.requests.request", return_value=_mock_resp(EMPTY_FEED)):
        text = arxiv_get_paper("9999.99999")

    assert text == "Error retrieving arXiv paper: No paper found with ID: 9999.99999"


def test_missing_external_command_is_typed() -> None:
    with patch("arxiv_client.subprocess.run", side_effect=FileNotFoundError("pandoc")):
        with pytest.raises(ToolError) as excinfo:
            arxiv_client.convert_latex_to_markdown(Path("in.tex"), Path("out.md"))

    assert excinfo.value.kind is ErrorKind.EXTERNAL_COMMAND
    assert str(excinfo.value) == "pandoc is not installed"
