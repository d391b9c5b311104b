from unittest.mock import MagicMock, patch

import pytest

from scholar_client import build_params, format_scholar_results, google_scholar_search


def _mock_resp(payload: dict) -> MagicMock:
    mock = MagicMock()
    mock.ok = True
    mock.json.return_value = payload
    return mock


SERP_PAYLOAD = {
    "search_information": {"total_results": 1234},
    "organic_results": [
        {
            "title": "Attention Is All You Need",
            "link": "https://arxiv.org/abs/1706.03762",
            "snippet": "The dominant sequence transduction models...",
            "publication_info": {"summary": "A Vaswani, N Shazeer - NeurIPS, 2017"},
            "inline_links": {"cited_by": {"total": 100000}, "versions": {"total": 12}},
        }
    ],
    "related_searches": [{"query": "transformer architecture"}],
}


def test_build_params_clamps_num_and_sets_year_range() -> None:
    params = build_params("key", "transformers", year_start=2017, year_end=2020, num_results=50)

    assert params == {
        "engine": "google_scholar",
        "api_key": "key",
        "num": "20",
        "q": "transformers",
        "as_ylo": "2017",
        "as_yhi": "2020",
    }
    assert build_params("key", "x", num_results=0)["num"] == "1"


def test_build_params_cites_replaces_query() -> None:
    params = build_params("key", "ignored", cites="1234567890")

    assert params["cites"] == "1234567890"
    assert "q" not in params


def test_format_scholar_results() -> None:
    text = format_scholar_results(SERP_PAYLOAD, "transformers", year_start=2017)

    assert text.startswith("# Google Scholar Search Results\n\nQuery: transformers\nYear range: 2017 - any\n")
    assert "Found 1234 results" in text
    assert "## 1. Attention Is All You Need\n**Link:** https://arxiv.org/abs/1706.03762\n" in text
    assert "**Cited by:** 100000 papers\n**Versions:** 12\n" in text
    assert "## Related Searches\n- transformer architecture\n" in text


def test_format_scholar_results_empty() -> None:
    text = format_scholar_results({}, "nothing")

    assert "Found unknown results" in text
    assert "No results found." in text


def test_google_scholar_search_success(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SERP_API_KEY", "serp-test")

    with patch("upstream.requests.request", return_value=_mock_resp(SERP_PAYLOAD)) as mock_request:
        text = google_scholar_search("transformers", num_results=5)

    assert "Attention Is All You Need" in text
    kwargs = mock_request.call_args.kwargs
    assert kwargs["url"] == "https://serpapi.com/search"
    assert kwargs["params"]["api_key"] == "serp-test"
    assert kwargs["params"]["num"] == "5"


def test_google_scholar_search_api_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SERP_API_KEY", "serp-test")

    with patch("upstream.requests.request", return_value=_mock_resp({"error": "Invalid API key."})):
        text = google_scholar_search("transformers")

    assert text == "Error searching Google Scholar: SerpAPI error: Invalid API key."


def test_google_scholar_search_missing_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SERP_API_KEY", raising=False)

    assert google_scholar_search("x") == (
        "Error searching Google Scholar: SERP_API_KEY not found in environment variables"
    )
