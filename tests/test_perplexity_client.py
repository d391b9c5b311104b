from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from errors import ErrorKind, ToolError
from perplexity_client import ask_perplexity, extract_answer, extract_citations, format_answer, perplexity_search


def _mock_resp(payload: dict, ok: bool = True, status: int = 200) -> MagicMock:
    mock = MagicMock()
    mock.ok = ok
    mock.status_code = status
    mock.reason = "OK" if ok else "Unauthorized"
    mock.json.return_value = payload
    return mock


COMPLETION = {
    "model": "sonar-pro",
    "choices": [{"message": {"content": "Rust 1.80 shipped in July 2024."}}],
    "citations": ["https://blog.rust-lang.org/", "https://github.com/rust-lang/rust"],
}


def test_extract_citations_prefers_citations_then_search_results() -> None:
    assert extract_citations(COMPLETION) == ["https://blog.rust-lang.org/", "https://github.com/rust-lang/rust"]
    assert extract_citations({"search_results": [{"url": "https://a.example"}, {"title": "no url"}]}) == [
        "https://a.example"
    ]
    assert extract_citations({}) == []


def test_extract_answer_rejects_unexpected_shape() -> None:
    with pytest.raises(ToolError) as excinfo:
        extract_answer({"choices": []})

    assert excinfo.value.kind is ErrorKind.UPSTREAM_API


def test_format_answer_lists_sources() -> None:
    text = format_answer("When did Rust 1.80 ship?", "July 2024.", ["https://a.example"], "sonar")

    assert text.startswith("# Perplexity Search Results\n\n**Query:** When did Rust 1.80 ship?\n**Model:** sonar\n")
    assert "\n## Sources\n1. https://a.example\n" in text


def test_ask_perplexity_sends_bearer_and_recency(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")

    with patch("upstream.requests.request", return_value=_mock_resp(COMPLETION)) as mock_request:
        body = ask_perplexity("rust release", model="sonar", search_recency="week")

    assert body == COMPLETION
    kwargs = mock_request.call_args.kwargs
    assert kwargs["method"] == "POST"
    assert kwargs["url"] == "https://api.perplexity.ai/chat/completions"
    assert kwargs["headers"]["Authorization"] == "Bearer pplx-test"
    assert kwargs["json"]["model"] == "sonar"
    assert kwargs["json"]["search_recency_filter"] == "week"
    assert kwargs["json"]["messages"][-1] == {"role": "user", "content": "rust release"}
    assert kwargs["timeout"] > 0


def test_ask_perplexity_api_error_field(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")

    with patch("upstream.requests.request", return_value=_mock_resp({"error": "quota exceeded"})):
        with pytest.raises(ToolError) as excinfo:
            ask_perplexity("anything")

    assert excinfo.value.kind is ErrorKind.UPSTREAM_API


def test_perplexity_search_saves_and_reports_path(monkeypatch: pytest.MonkeyPatch, scratch: Path) -> None:
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")

    with patch("upstream.requests.request", return_value=_mock_resp(COMPLETION)):
        text = perplexity_search("When did Rust 1.80 ship?")

    assert "Rust 1.80 shipped in July 2024." in text
    assert "*Results saved to: " in text
    saved = list(scratch.glob("perplexity-search-*.md"))
    assert len(saved) == 1


def test_perplexity_search_without_key_returns_error_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PERPLEXITY_API_KEY", raising=False)

    text = perplexity_search("anything")

    assert text == "Error querying Perplexity: PERPLEXITY_API_KEY not found in environment variables"


def test_perplexity_search_http_failure_returns_error_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")

    with patch("upstream.requests.request", side_effect=requests.ConnectionError("connection refused")):
        text = perplexity_search("anything")

    assert text == "Error querying Perplexity: Perplexity request failed: connection refused"


def test_perplexity_search_bad_status_returns_error_text(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PERPLEXITY_API_KEY", "pplx-test")

    with patch("upstream.requests.request", return_value=_mock_resp({}, ok=False, status=401)):
        text = perplexity_search("anything")

    assert text == "Error querying Perplexity: Perplexity API error: 401 Unauthorized"
