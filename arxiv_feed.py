"""arXiv Atom feed parsing.

The export API returns a fixed, narrow subset of Atom. Fields are pulled out
with tag-level regular expressions rather than a general XML parser; every
extraction degrades to an empty value instead of raising, so a malformed
entry still yields a FeedEntry.
"""

from __future__ import annotations

import re

from models import FeedEntry, FeedLinks, FeedResponse

ABS_URL_PREFIX = "http://arxiv.org/abs/"

_ENTRY_RE = re.compile(r"<entry[^>]*>[\s\S]*?</entry>", re.IGNORECASE)
_AUTHOR_RE = re.compile(r"<author[^>]*>[\s\S]*?</author>", re.IGNORECASE)
_LINK_RE = re.compile(r"<link[^>]*/>", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")


def _element_pattern(tag: str) -> re.Pattern[str]:
    name = re.escape(tag)
    return re.compile(rf"<{name}[^>]*>([\s\S]*?)</{name}>", re.IGNORECASE)


def extract_text(xml: str, tag: str) -> str:
    """Text content of the first <tag> element, or '' when absent."""
    match = _element_pattern(tag).search(xml)
    return match.group(1).strip() if match else ""


def extract_all(xml: str, tag: str) -> list[str]:
    """Text content of every <tag> element, in document order."""
    return [match.strip() for match in _element_pattern(tag).findall(xml)]


def extract_attribute(xml: str, tag: str, attribute: str) -> list[str]:
    """Every value of attribute on <tag> opening tags, in document order."""
    pattern = re.compile(
        rf'<{re.escape(tag)}[^>]*{re.escape(attribute)}="([^"]*)"[^>]*>',
        re.IGNORECASE,
    )
    return pattern.findall(xml)


def _normalize_whitespace(value: str) -> str:
    return _WHITESPACE_RE.sub(" ", value).strip()


def _to_int(raw: str) -> int:
    # Leading-integer parse: "25 results" -> 25, "" or "n/a" -> 0.
    match = _LEADING_INT_RE.match(raw)
    return int(match.group(1)) if match else 0


def _attr(element: str, name: str) -> str:
    match = re.search(rf'{name}="([^"]*)"', element)
    return match.group(1) if match else ""


def _parse_links(entry_xml: str) -> FeedLinks:
    abstract = ""
    pdf = ""
    doi = ""
    for link in _LINK_RE.findall(entry_xml):
        href = _attr(link, "href")
        rel = _attr(link, "rel")
        title = _attr(link, "title")

        if rel == "alternate":
            abstract = abstract or href
        elif rel == "related" and title == "pdf":
            pdf = pdf or href
        elif rel == "related" and title == "doi":
            doi = doi or href

    return FeedLinks(abstract=abstract, pdf=pdf, doi=doi or None)


def parse_entry(entry_xml: str) -> FeedEntry:
    categories = tuple(dict.fromkeys(extract_attribute(entry_xml, "category", "term")))
    explicit_primary = extract_attribute(entry_xml, "arxiv:primary_category", "term")
    primary = (explicit_primary[0] if explicit_primary else "") or (categories[0] if categories else "")

    authors = tuple(
        extract_text(author_xml, "name") for author_xml in _AUTHOR_RE.findall(entry_xml)
    )

    return FeedEntry(
        entry_id=extract_text(entry_xml, "id").replace(ABS_URL_PREFIX, "", 1),
        title=_normalize_whitespace(extract_text(entry_xml, "title")),
        authors=authors,
        summary=_normalize_whitespace(extract_text(entry_xml, "summary")),
        published=extract_text(entry_xml, "published"),
        updated=extract_text(entry_xml, "updated"),
        categories=categories,
        primary_category=primary,
        links=_parse_links(entry_xml),
        comment=extract_text(entry_xml, "arxiv:comment") or None,
        journal_ref=extract_text(entry_xml, "arxiv:journal_ref") or None,
    )


def parse_feed(xml: str) -> FeedResponse:
    """Parse an arXiv API response body. Pure; never raises on malformed input."""
    return FeedResponse(
        total_results=_to_int(extract_text(xml, "opensearch:totalResults")),
        start_index=_to_int(extract_text(xml, "opensearch:startIndex")),
        items_per_page=_to_int(extract_text(xml, "opensearch:itemsPerPage")),
        entries=tuple(parse_entry(block) for block in _ENTRY_RE.findall(xml)),
    )


def is_error_feed(xml: str) -> bool:
    """True when the body is an arXiv API error report rather than results."""
    return "<title>Error</title>" in xml or "http://arxiv.org/api/errors" in xml
