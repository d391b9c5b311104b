"""Shared typed models for the research tools."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class FeedLinks:
    """Abstract, PDF and optional DOI links of one arXiv entry."""

    abstract: str = ""
    pdf: str = ""
    doi: str | None = None


@dataclass(frozen=True, slots=True)
class FeedEntry:
    """One parsed arXiv feed entry."""

    entry_id: str
    title: str
    authors: tuple[str, ...]
    summary: str
    published: str
    updated: str
    categories: tuple[str, ...]
    primary_category: str
    links: FeedLinks
    comment: str | None = None
    journal_ref: str | None = None


@dataclass(frozen=True, slots=True)
class FeedResponse:
    """Aggregate of one arXiv API call."""

    total_results: int
    start_index: int
    items_per_page: int
    entries: tuple[FeedEntry, ...]


@dataclass(frozen=True, slots=True)
class StrategyStep:
    """A single instructional step of the research strategy table."""

    research_type: str
    depth: int
    step_number: int
    text: str
