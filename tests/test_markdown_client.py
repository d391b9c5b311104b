from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

from markdown_client import get_markdown, page_name


def test_page_name_uses_host_and_dashed_path() -> None:
    assert page_name("https://www.example.com/docs/getting-started/") == "example.com-docs-getting-started"
    assert page_name("https://docs.python.org/3/library/re.html?x=1") == "docs.python.org-3-library-re.html"


def test_page_name_sanitises_unparseable_input() -> None:
    assert page_name("not a url/with spaces") == "not_a_url_with_spaces"


def test_get_markdown_fetches_through_proxy_and_saves(scratch: Path) -> None:
    response = MagicMock(ok=True, text="# Title\n\nBody")

    with patch("upstream.requests.request", return_value=response) as mock_request:
        text = get_markdown("https://example.com/page")

    assert mock_request.call_args.kwargs["url"] == "https://pure.md/https://example.com/page"
    saved = list(scratch.glob("markdown-example.com-page-*.md"))
    assert len(saved) == 1
    assert text == f"Saved to: {saved[0]}\n\n# Title\n\nBody"


def test_get_markdown_failure_is_error_text() -> None:
    with patch("upstream.requests.request", side_effect=requests.Timeout("timed out")):
        text = get_markdown("https://example.com/page")

    assert text == "Error scraping URL: pure.md request failed: timed out"
