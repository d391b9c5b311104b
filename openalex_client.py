"""OpenAlex scholarly index: entity search, work lookup and autocomplete."""

from __future__ import annotations

import logging
import os
from typing import Annotated, Any, Callable, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from errors import error_text
from result_sink import save_json
from upstream import decode_json, in_worker_thread, send_request

OPENALEX_BASE_URL = "https://api.openalex.org"
MAX_PER_PAGE = 200
MAX_AUTOCOMPLETE = 25

LOGGER = logging.getLogger(__name__)

EntityType = Literal["works", "authors", "institutions", "sources", "concepts", "publishers", "funders"]


def make_openalex_request(endpoint: str, params: dict[str, Any]) -> dict[str, Any]:
    query = {key: str(value) for key, value in params.items() if value is not None}
    mailto = os.getenv("OPENALEX_MAILTO")
    if mailto:
        query["mailto"] = mailto
    response = send_request("GET", f"{OPENALEX_BASE_URL}{endpoint}", service="OpenAlex", params=query)
    return decode_json(response, "OpenAlex")


def _concept_scores(concepts: list[dict[str, Any]], limit: int = 3) -> str:
    return ", ".join(
        f"{concept.get('display_name')} ({(concept.get('score') or 0) * 100:.1f}%)" for concept in concepts[:limit]
    )


def _results_header(title: str, data: dict[str, Any]) -> str:
    meta = data.get("meta") or {}
    results = data.get("results") or []
    markdown = f"# OpenAlex {title} Search Results\n\n"
    markdown += f"**Total Results:** {meta.get('count') or 'Unknown'}\n"
    markdown += f"**Page:** {meta.get('page') or 1} ({len(results)} results shown)\n\n"
    return markdown


def format_work(work: dict[str, Any]) -> str:
    markdown = f"- **OpenAlex ID:** {work.get('id')}\n"
    if work.get("doi"):
        markdown += f"- **DOI:** {work['doi']}\n"
    markdown += f"- **Publication Year:** {work.get('publication_year') or 'Unknown'}\n"
    markdown += f"- **Type:** {work.get('type') or 'Unknown'}\n"
    markdown += f"- **Citations:** {work.get('cited_by_count') or 0}\n"
    authorships = work.get("authorships") or []
    if authorships:
        names = [(authorship.get("author") or {}).get("display_name") or "Unknown" for authorship in authorships]
        markdown += f"- **Authors:** {', '.join(names)}\n"
    source = (work.get("primary_location") or {}).get("source")
    if source:
        markdown += f"- **Source:** {source.get('display_name')}\n"
    if work.get("concepts"):
        markdown += f"- **Top Concepts:** {_concept_scores(work['concepts'])}\n"
    if work.get("abstract_inverted_index"):
        markdown += "- **Has Abstract:** Yes\n"
    return markdown


def format_author(author: dict[str, Any]) -> str:
    markdown = f"- **OpenAlex ID:** {author.get('id')}\n"
    if author.get("orcid"):
        markdown += f"- **ORCID:** {author['orcid']}\n"
    markdown += f"- **Works Count:** {author.get('works_count') or 0}\n"
    markdown += f"- **Cited By Count:** {author.get('cited_by_count') or 0}\n"
    stats = author.get("summary_stats") or {}
    if stats.get("h_index"):
        markdown += f"- **H-Index:** {stats['h_index']}\n"
    if stats.get("i10_index"):
        markdown += f"- **i10-Index:** {stats['i10_index']}\n"
    institutions = author.get("last_known_institutions") or []
    if institutions:
        markdown += f"- **Last Known Institutions:** {', '.join(inst.get('display_name', '') for inst in institutions)}\n"
    if author.get("concepts"):
        markdown += f"- **Top Research Areas:** {_concept_scores(author['concepts'])}\n"
    return markdown


def format_institution(institution: dict[str, Any]) -> str:
    markdown = f"- **OpenAlex ID:** {institution.get('id')}\n"
    if institution.get("ror"):
        markdown += f"- **ROR ID:** {institution['ror']}\n"
    if institution.get("country_code"):
        markdown += f"- **Country:** {institution['country_code']}\n"
    markdown += f"- **Type:** {institution.get('type') or 'Unknown'}\n"
    markdown += f"- **Works Count:** {institution.get('works_count') or 0}\n"
    markdown += f"- **Cited By Count:** {institution.get('cited_by_count') or 0}\n"
    if institution.get("homepage_url"):
        markdown += f"- **Homepage:** {institution['homepage_url']}\n"
    geo = institution.get("geo") or {}
    if geo.get("city") or geo.get("region"):
        place = [part for part in (geo.get("city"), geo.get("region"), geo.get("country")) if part]
        markdown += f"- **Location:** {', '.join(place)}\n"
    if institution.get("concepts"):
        markdown += f"- **Top Research Areas:** {_concept_scores(institution['concepts'])}\n"
    return markdown


def format_concept(concept: dict[str, Any]) -> str:
    level = concept.get("level")
    markdown = f"- **OpenAlex ID:** {concept.get('id')}\n"
    markdown += f"- **Level:** {level if level is not None else 'Unknown'}\n"
    markdown += f"- **Works Count:** {concept.get('works_count') or 0}\n"
    markdown += f"- **Cited By Count:** {concept.get('cited_by_count') or 0}\n"
    if concept.get("description"):
        markdown += f"- **Description:** {concept['description']}\n"
    ancestors = concept.get("ancestors") or []
    if ancestors:
        chain = " > ".join(ancestor.get("display_name", "") for ancestor in ancestors)
        markdown += f"- **Hierarchy:** {chain} > {concept.get('display_name')}\n"
    related = concept.get("related_concepts") or []
    if related:
        markdown += f"- **Related Concepts:** {', '.join(c.get('display_name', '') for c in related[:3])}\n"
    return markdown


def format_source(source: dict[str, Any]) -> str:
    markdown = f"- **OpenAlex ID:** {source.get('id')}\n"
    if source.get("issn_l"):
        markdown += f"- **ISSN-L:** {source['issn_l']}\n"
    if source.get("issn"):
        markdown += f"- **ISSNs:** {', '.join(source['issn'])}\n"
    markdown += f"- **Type:** {source.get('type') or 'Unknown'}\n"
    markdown += f"- **Works Count:** {source.get('works_count') or 0}\n"
    markdown += f"- **Cited By Count:** {source.get('cited_by_count') or 0}\n"
    if source.get("host_organization"):
        markdown += f"- **Publisher:** {source['host_organization']}\n"
    if source.get("homepage_url"):
        markdown += f"- **Homepage:** {source['homepage_url']}\n"
    return markdown


def format_publisher(publisher: dict[str, Any]) -> str:
    markdown = f"- **OpenAlex ID:** {publisher.get('id')}\n"
    if publisher.get("alternate_titles"):
        markdown += f"- **Alternate Names:** {', '.join(publisher['alternate_titles'])}\n"
    markdown += f"- **Sources Count:** {publisher.get('sources_count') or 0}\n"
    markdown += f"- **Works Count:** {publisher.get('works_count') or 0}\n"
    if publisher.get("country_codes"):
        markdown += f"- **Countries:** {', '.join(publisher['country_codes'])}\n"
    if publisher.get("homepage_url"):
        markdown += f"- **Homepage:** {publisher['homepage_url']}\n"
    return markdown


def format_funder(funder: dict[str, Any]) -> str:
    markdown = f"- **OpenAlex ID:** {funder.get('id')}\n"
    if funder.get("alternate_titles"):
        markdown += f"- **Alternate Names:** {', '.join(funder['alternate_titles'])}\n"
    if funder.get("country_code"):
        markdown += f"- **Country:** {funder['country_code']}\n"
    markdown += f"- **Grants Count:** {funder.get('grants_count') or 0}\n"
    markdown += f"- **Works Count:** {funder.get('works_count') or 0}\n"
    if funder.get("description"):
        markdown += f"- **Description:** {funder['description']}\n"
    if funder.get("homepage_url"):
        markdown += f"- **Homepage:** {funder['homepage_url']}\n"
    return markdown


# entity -> (heading title, untitled placeholder, title key, per-item formatter)
ENTITY_FORMATS: dict[str, tuple[str, str, str, Callable[[dict[str, Any]], str]]] = {
    "works": ("Works", "Untitled", "title", format_work),
    "authors": ("Authors", "Unknown Author", "display_name", format_author),
    "institutions": ("Institutions", "Unknown Institution", "display_name", format_institution),
    "concepts": ("Concepts", "Unknown Concept", "display_name", format_concept),
    "sources": ("Sources", "Unknown Source", "display_name", format_source),
    "publishers": ("Publishers", "Unknown Publisher", "display_name", format_publisher),
    "funders": ("Funders", "Unknown Funder", "display_name", format_funder),
}


def format_search_results(entity: str, data: dict[str, Any]) -> str:
    title, placeholder, title_key, format_item = ENTITY_FORMATS[entity]
    results = data.get("results") or []
    if not results:
        return f"# OpenAlex {title} Search Results\n\nNo results found."

    markdown = _results_header(title, data)
    for index, item in enumerate(results, start=1):
        markdown += f"## {index}. {item.get(title_key) or placeholder}\n\n"
        markdown += format_item(item)
        markdown += "\n"
    return markdown


def search_entities(
    entity: str,
    query: str,
    filter: str | None = None,
    limit: int = 10,
    sort: str | None = None,
) -> str:
    params = {
        "search": query,
        "per_page": min(max(limit, 1), MAX_PER_PAGE),
        "filter": filter or None,
        "sort": sort or None,
    }
    LOGGER.info("Searching OpenAlex %s: %s", entity, query)
    data = make_openalex_request(f"/{entity}", params)
    markdown = format_search_results(entity, data)
    filepath = save_json("openalex", f"{entity}-search", data)
    if filepath:
        markdown += f"\n\n---\n*Full results saved to: {filepath}*"
    return markdown


QueryParam = Annotated[str, Field(description="Search query")]
FilterParam = Annotated[
    str | None,
    Field(description="Additional OpenAlex filters (e.g., 'publication_year:2023', 'type:journal')"),
]
LimitParam = Annotated[int, Field(description="Number of results to return (default 10, max 200)")]


def openalex_search_works(
    query: QueryParam,
    filter: FilterParam = None,
    limit: LimitParam = 10,
    sort: Annotated[
        str | None,
        Field(description="Sort order (e.g., 'cited_by_count:desc', 'publication_date:desc')"),
    ] = None,
) -> str:
    try:
        return search_entities("works", query, filter, limit, sort)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex works", exc)


def openalex_search_authors(query: QueryParam, filter: FilterParam = None, limit: LimitParam = 10) -> str:
    try:
        return search_entities("authors", query, filter, limit)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex authors", exc)


def openalex_search_institutions(query: QueryParam, filter: FilterParam = None, limit: LimitParam = 10) -> str:
    try:
        return search_entities("institutions", query, filter, limit)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex institutions", exc)


def openalex_search_concepts(query: QueryParam, filter: FilterParam = None, limit: LimitParam = 10) -> str:
    try:
        return search_entities("concepts", query, filter, limit)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex concepts", exc)


def openalex_search_sources(query: QueryParam, filter: FilterParam = None, limit: LimitParam = 10) -> str:
    try:
        return search_entities("sources", query, filter, limit)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex sources", exc)


def openalex_search_publishers(query: QueryParam, filter: FilterParam = None, limit: LimitParam = 10) -> str:
    try:
        return search_entities("publishers", query, filter, limit)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex publishers", exc)


def openalex_search_funders(query: QueryParam, filter: FilterParam = None, limit: LimitParam = 10) -> str:
    try:
        return search_entities("funders", query, filter, limit)
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching OpenAlex funders", exc)


def is_openalex_id(identifier: str) -> bool:
    return identifier.startswith("W") or "openalex.org" in identifier


def fetch_work(identifier: str) -> dict[str, Any] | None:
    """Look a work up by OpenAlex ID/URL, or by DOI through the works filter."""
    if is_openalex_id(identifier):
        work_id = identifier.replace("https://openalex.org/", "")
        return make_openalex_request(f"/works/{work_id}", {})

    data = make_openalex_request("/works", {"filter": f"doi:{identifier}"})
    results = data.get("results") or []
    return results[0] if results else None


def format_work_details(work: dict[str, Any]) -> str:
    markdown = "# OpenAlex Work Details\n\n"
    markdown += f"## {work.get('title') or 'Untitled'}\n\n"
    markdown += f"- **OpenAlex ID:** {work.get('id')}\n"
    if work.get("doi"):
        markdown += f"- **DOI:** {work['doi']}\n"
    markdown += f"- **Publication Year:** {work.get('publication_year') or 'Unknown'}\n"
    markdown += f"- **Type:** {work.get('type') or 'Unknown'}\n"
    markdown += f"- **Citations:** {work.get('cited_by_count') or 0}\n"

    authorships = work.get("authorships") or []
    if authorships:
        markdown += "\n### Authors\n"
        for index, authorship in enumerate(authorships, start=1):
            markdown += f"{index}. **{(authorship.get('author') or {}).get('display_name') or 'Unknown'}**"
            institutions = authorship.get("institutions") or []
            if institutions:
                markdown += f" ({', '.join(inst.get('display_name', '') for inst in institutions)})"
            markdown += "\n"

    source = (work.get("primary_location") or {}).get("source")
    if source:
        markdown += "\n### Publication Venue\n"
        markdown += f"- **Source:** {source.get('display_name')}\n"
        if source.get("host_organization"):
            markdown += f"- **Publisher:** {source['host_organization']}\n"

    concepts = work.get("concepts") or []
    if concepts:
        markdown += "\n### Concepts/Topics\n"
        for concept in concepts[:10]:
            markdown += f"- {concept.get('display_name')} ({(concept.get('score') or 0) * 100:.1f}%)\n"

    mesh_terms = work.get("mesh") or []
    if mesh_terms:
        markdown += "\n### MeSH Terms\n"
        for mesh in mesh_terms[:10]:
            markdown += f"- {mesh.get('descriptor_name')}\n"

    grants = work.get("grants") or []
    if grants:
        markdown += "\n### Funding\n"
        for grant in grants:
            markdown += f"- **{grant.get('funder_display_name')}**"
            if grant.get("award_id"):
                markdown += f" (Award: {grant['award_id']})"
            markdown += "\n"

    if work.get("abstract_inverted_index"):
        markdown += "\n### Abstract Available\nYes (inverted index format)\n"
    return markdown


def openalex_get_work_by_id(
    id: Annotated[str, Field(description="OpenAlex ID (e.g., 'W1234567890') or DOI")],
) -> str:
    try:
        LOGGER.info("Fetching OpenAlex work %s", id)
        work = fetch_work(id)
        if not work:
            return f"No work found with ID: {id}"

        markdown = format_work_details(work)
        filepath = save_json("openalex", "work-details", work)
        if filepath:
            markdown += f"\n\n---\n*Full details saved to: {filepath}*"
        return markdown
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("retrieving work details", exc)


def format_autocomplete(entity_type: str, query: str, data: dict[str, Any]) -> str:
    results = data.get("results") or []
    markdown = f"# OpenAlex Autocomplete - {entity_type.capitalize()}\n\n"
    markdown += f'**Query:** "{query}"\n'
    markdown += f"**Results:** {len(results)}\n\n"

    if not results:
        return markdown + "No suggestions found."

    for index, item in enumerate(results, start=1):
        markdown += f"{index}. **{item.get('display_name')}**\n"
        markdown += f"   - ID: {item.get('id')}\n"
        if item.get("cited_by_count") is not None:
            markdown += f"   - Citations: {item['cited_by_count']}\n"
        if item.get("works_count") is not None:
            markdown += f"   - Works: {item['works_count']}\n"
        markdown += "\n"
    return markdown


def openalex_autocomplete(
    entity_type: Annotated[EntityType, Field(description="Type of entity to search")],
    query: Annotated[str, Field(description="Query string for autocomplete")],
    limit: Annotated[int, Field(description="Number of suggestions to return (default 10, max 25)")] = 10,
) -> str:
    try:
        # Backed by a narrow search; the select keeps the payload small.
        data = make_openalex_request(
            f"/{entity_type}",
            {
                "search": query,
                "per_page": min(max(limit, 1), MAX_AUTOCOMPLETE),
                "select": "id,display_name,cited_by_count,works_count",
            },
        )
        markdown = format_autocomplete(entity_type, query, data)
        filepath = save_json("openalex", f"autocomplete-{entity_type}", data)
        if filepath:
            markdown += f"\n---\n*Full results saved to: {filepath}*"
        return markdown
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("getting autocomplete suggestions", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(openalex_search_works),
        name="openalex-search-works",
        description="Search academic works (papers, articles) using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_search_authors),
        name="openalex-search-authors",
        description="Search authors using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_search_institutions),
        name="openalex-search-institutions",
        description="Search institutions using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_search_concepts),
        name="openalex-search-concepts",
        description="Search concepts/topics using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_search_sources),
        name="openalex-search-sources",
        description="Search sources (journals, conferences) using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_search_publishers),
        name="openalex-search-publishers",
        description="Search publishers using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_search_funders),
        name="openalex-search-funders",
        description="Search funders using OpenAlex API",
    )
    server.add_tool(
        in_worker_thread(openalex_get_work_by_id),
        name="openalex-get-work-by-id",
        description="Get a specific work by OpenAlex ID or DOI",
    )
    server.add_tool(
        in_worker_thread(openalex_autocomplete),
        name="openalex-autocomplete",
        description="Get autocomplete suggestions for any OpenAlex entity type",
    )
