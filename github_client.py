"""GitHub search tools over the GraphQL and REST APIs."""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from config import require_env
from errors import ErrorKind, ToolError, error_text
from rate_limit import RateLimiter
from result_sink import save_result
from upstream import USER_AGENT, decode_json, in_worker_thread, send_request

GITHUB_GRAPHQL_ENDPOINT = "https://api.github.com/graphql"
GITHUB_CODE_SEARCH_URL = "https://api.github.com/search/code"
MAX_README_CHARS = 2000
MAX_BODY_PREVIEW_CHARS = 200

LOGGER = logging.getLogger(__name__)

# Shared by every GitHub tool in this process; one call per second.
RATE_LIMITER = RateLimiter(min_interval_seconds=1.0)

SIMPLE_QUERY_HINT = (
    "Use 2-3 core keywords max. GitHub uses AND logic - too many terms will return zero results."
)

SEARCH_REPOSITORIES_QUERY = """
query SearchRepositories($searchQuery: String!, $first: Int!) {
  search(query: $searchQuery, type: REPOSITORY, first: $first) {
    repositoryCount
    nodes {
      ... on Repository {
        nameWithOwner
        description
        url
        stargazerCount
        forkCount
        updatedAt
        primaryLanguage { name }
        licenseInfo { key name }
        repositoryTopics(first: 10) { nodes { topic { name } } }
        isArchived
        isFork
        isPrivate
      }
    }
  }
}
"""

SEARCH_ISSUES_QUERY = """
query SearchIssues($searchQuery: String!, $first: Int!) {
  search(query: $searchQuery, type: ISSUE, first: $first) {
    issueCount
    nodes {
      ... on Issue {
        title
        number
        url
        state
        updatedAt
        closedAt
        body
        author { login }
        assignees(first: 5) { nodes { login } }
        labels(first: 10) { nodes { name } }
        repository { nameWithOwner }
        comments { totalCount }
      }
      ... on PullRequest {
        title
        number
        url
        state
        updatedAt
        closedAt
        mergedAt
        merged
        mergeable
        body
        author { login }
        assignees(first: 5) { nodes { login } }
        labels(first: 10) { nodes { name } }
        repository { nameWithOwner }
        comments { totalCount }
        additions
        deletions
        changedFiles
      }
    }
  }
}
"""

SEARCH_USERS_QUERY = """
query SearchUsers($searchQuery: String!, $first: Int!) {
  search(query: $searchQuery, type: USER, first: $first) {
    userCount
    nodes {
      ... on User {
        login
        name
        bio
        location
        email
        url
        avatarUrl
        websiteUrl
        twitterUsername
        company
        updatedAt
        followers { totalCount }
        following { totalCount }
        repositories(ownerAffiliations: OWNER) { totalCount }
        starredRepositories { totalCount }
        gists { totalCount }
        organizations(first: 5) { nodes { login name } }
        topRepositories(first: 5, orderBy: {field: STARGAZERS, direction: DESC}) {
          nodes { name stargazerCount primaryLanguage { name } }
        }
      }
    }
  }
}
"""

_REPOSITORY_TOPICS_FRAGMENT = "repositoryTopics(first: 20) { nodes { topic { name } } }"
_REPOSITORY_LANGUAGES_FRAGMENT = """
    languages(first: 10, orderBy: {field: SIZE, direction: DESC}) {
      totalSize
      edges { size node { name } }
    }"""
_REPOSITORY_README_FRAGMENT = """
    object(expression: "HEAD:README.md") { ... on Blob { text } }
    readmeObject: object(expression: "HEAD:README") { ... on Blob { text } }"""


def repository_query(include_readme: bool, include_languages: bool, include_topics: bool) -> str:
    optional = "".join(
        fragment
        for enabled, fragment in (
            (include_topics, _REPOSITORY_TOPICS_FRAGMENT),
            (include_languages, _REPOSITORY_LANGUAGES_FRAGMENT),
            (include_readme, _REPOSITORY_README_FRAGMENT),
        )
        if enabled
    )
    return f"""
query GetRepository($owner: String!, $name: String!) {{
  repository(owner: $owner, name: $name) {{
    nameWithOwner
    description
    url
    homepageUrl
    stargazerCount
    forkCount
    watchers {{ totalCount }}
    issues(states: OPEN) {{ totalCount }}
    pullRequests(states: OPEN) {{ totalCount }}
    releases {{ totalCount }}
    updatedAt
    primaryLanguage {{ name }}
    licenseInfo {{ key name }}
    defaultBranchRef {{ name }}
    isArchived
    isFork
    isPrivate
    isMirror
    isTemplate
    hasIssuesEnabled
    hasProjectsEnabled
    hasWikiEnabled
    hasDiscussionsEnabled
    diskUsage
    collaborators(first: 10) {{ totalCount nodes {{ login name }} }}
    vulnerability: vulnerabilityAlerts(first: 1) {{ totalCount }}
    {optional}
  }}
}}
"""


def _auth_headers(accept: str | None = None) -> dict[str, str]:
    token = require_env("GITHUB_TOKEN")
    headers = {
        "Authorization": f"Bearer {token}",
        "User-Agent": USER_AGENT,
    }
    if accept:
        headers["Accept"] = accept
    return headers


def make_graphql_request(query: str, variables: dict[str, Any]) -> dict[str, Any]:
    headers = _auth_headers()
    headers["Content-Type"] = "application/json"

    RATE_LIMITER.wait()
    response = send_request(
        "POST",
        GITHUB_GRAPHQL_ENDPOINT,
        service="GitHub",
        headers=headers,
        json_payload={"query": query, "variables": variables},
    )
    body = decode_json(response, "GitHub")
    if body.get("errors"):
        raise ToolError(f"GraphQL errors: {json.dumps(body['errors'])}", ErrorKind.UPSTREAM_API)
    return body.get("data") or {}


def build_search_query(base_query: str, filters: dict[str, str | None]) -> str:
    """Append ``key:value`` qualifiers for every filter that is set."""
    search_query = base_query
    for key, value in filters.items():
        if value:
            search_query += f" {key}:{value}"
    return search_query


def _clamp_first(first: int) -> int:
    return min(max(first, 1), 100)


def _display_date(raw: str | None) -> str:
    if not raw:
        return ""
    try:
        return date.fromisoformat(raw[:10]).isoformat()
    except ValueError:
        return raw


def _with_saved_path(result: str, label: str) -> str:
    filepath = save_result("github", label, result)
    if filepath:
        result += f"\n---\n*Results saved to: {filepath}*"
    return result


def format_repositories(search: dict[str, Any], search_query: str) -> str:
    nodes = search.get("nodes") or []
    result = "# GitHub Repository Search Results\n\n"
    result += f"**Query:** {search_query}\n"
    result += f"**Total repositories found:** {search.get('repositoryCount', 0)}\n"
    result += f"**Results shown:** {len(nodes)}\n\n"

    if not nodes:
        return result + "No repositories found matching your search criteria.\n"

    for index, repo in enumerate(nodes, start=1):
        result += f"## {index}. {repo.get('nameWithOwner')}\n"
        result += f"**URL:** {repo.get('url')}\n"
        if repo.get("description"):
            result += f"**Description:** {repo['description']}\n"
        result += f"**Stars:** {repo.get('stargazerCount', 0)} | **Forks:** {repo.get('forkCount', 0)}\n"
        if repo.get("primaryLanguage"):
            result += f"**Primary Language:** {repo['primaryLanguage']['name']}\n"
        if repo.get("licenseInfo"):
            result += f"**License:** {repo['licenseInfo']['name']} ({repo['licenseInfo']['key']})\n"
        result += f"**Last Updated:** {_display_date(repo.get('updatedAt'))}\n"

        flags = [
            label
            for key, label in (("isArchived", "Archived"), ("isFork", "Fork"), ("isPrivate", "Private"))
            if repo.get(key)
        ]
        if flags:
            result += f"**Flags:** {', '.join(flags)}\n"

        topics = [node["topic"]["name"] for node in (repo.get("repositoryTopics") or {}).get("nodes", [])]
        if topics:
            result += f"**Topics:** {', '.join(topics)}\n"
        result += "\n"
    return result


def github_search_repositories(
    query: Annotated[
        str,
        Field(
            description=(
                "Simple search query for repositories. Use 2-3 core keywords max (e.g., 'latex "
                "converter' not 'latex markdown converter javascript typescript'). GitHub uses AND "
                "logic - too many terms will return zero results."
            )
        ),
    ],
    language: Annotated[
        str | None,
        Field(description="Filter by programming language (use this instead of including language names in query text)"),
    ] = None,
    stars: Annotated[str | None, Field(description="Filter by star count (e.g., '>100', '10..50')")] = None,
    created: Annotated[str | None, Field(description="Filter by creation date (e.g., '>2020-01-01')")] = None,
    pushed: Annotated[str | None, Field(description="Filter by last push date")] = None,
    license: Annotated[str | None, Field(description="Filter by license (e.g., 'mit', 'apache-2.0')")] = None,
    first: Annotated[int, Field(description="Number of results to return (default 10, max 100)")] = 10,
) -> str:
    try:
        search_query = build_search_query(
            query,
            {"language": language, "stars": stars, "created": created, "pushed": pushed, "license": license},
        )
        LOGGER.info("Searching GitHub repositories: %s", search_query)
        data = make_graphql_request(
            SEARCH_REPOSITORIES_QUERY,
            {"searchQuery": search_query, "first": _clamp_first(first)},
        )
        return _with_saved_path(format_repositories(data.get("search") or {}, search_query), "repository-search")
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching GitHub repositories", exc)


def format_code_matches(data: dict[str, Any], search_query: str) -> str:
    items = data.get("items") or []
    result = "# GitHub Code Search Results\n\n"
    result += f"**Query:** {search_query}\n"
    result += f"**Total code matches found:** {data.get('total_count', 0)}\n"
    result += f"**Results shown:** {len(items)}\n\n"

    if not items:
        return result + "No code matches found for your search criteria.\n"

    for index, match in enumerate(items, start=1):
        repository = match.get("repository") or {}
        result += f"## {index}. {repository.get('full_name')}\n"
        result += f"**File:** {match.get('path')}\n"
        result += f"**Repository URL:** {repository.get('html_url')}\n"
        result += f"**File URL:** {match.get('html_url')}\n\n"

        text_matches = match.get("text_matches") or []
        if text_matches:
            result += "**Code Snippets:**\n"
            for match_index, text_match in enumerate(text_matches, start=1):
                result += f"\n### Match {match_index}\n```\n{text_match.get('fragment', '')}\n```\n"
        result += "\n---\n\n"
    return result


def github_search_code(
    query: Annotated[str, Field(description=f"Simple code search query. {SIMPLE_QUERY_HINT}")],
    language: Annotated[
        str | None,
        Field(description="Filter by programming language (use this instead of including language names in query text)"),
    ] = None,
    repo: Annotated[str | None, Field(description="Filter by specific repository (owner/name)")] = None,
    path: Annotated[str | None, Field(description="Filter by file path")] = None,
    extension: Annotated[str | None, Field(description="Filter by file extension")] = None,
    first: Annotated[int, Field(description="Number of results to return (default 10, max 100)")] = 10,
) -> str:
    try:
        search_query = build_search_query(
            query,
            {
                "language": language,
                "repo": repo,
                "path": path,
                "extension": f".{extension.lstrip('.')}" if extension else None,
            },
        )
        # Code search is only available through REST.
        headers = _auth_headers(accept="application/vnd.github.v3.text-match+json")
        LOGGER.info("Searching GitHub code: %s", search_query)
        RATE_LIMITER.wait()
        response = send_request(
            "GET",
            GITHUB_CODE_SEARCH_URL,
            service="GitHub",
            headers=headers,
            params={"q": search_query, "per_page": str(_clamp_first(first))},
        )
        data = decode_json(response, "GitHub")
        return _with_saved_path(format_code_matches(data, search_query), "code-search")
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching GitHub code", exc)


def issue_filters(
    type_: str,
    state: str,
    repo: str | None,
    author: str | None,
    assignee: str | None,
) -> dict[str, str | None]:
    filters: dict[str, str | None] = {"repo": repo, "author": author, "assignee": assignee}
    if type_ == "issue":
        filters["is"] = "issue"
    elif type_ == "pr":
        filters["is"] = "pull-request"

    if state == "merged":
        filters["is"] = f"{filters['is']} merged" if filters.get("is") else "merged"
    elif state != "all":
        filters["state"] = state
    return filters


def format_issues(search: dict[str, Any], search_query: str) -> str:
    nodes = search.get("nodes") or []
    result = "# GitHub Issues/PRs Search Results\n\n"
    result += f"**Query:** {search_query}\n"
    result += f"**Total issues/PRs found:** {search.get('issueCount', 0)}\n"
    result += f"**Results shown:** {len(nodes)}\n\n"

    if not nodes:
        return result + "No issues or pull requests found matching your search criteria.\n"

    for index, item in enumerate(nodes, start=1):
        is_pr = "merged" in item
        result += f"## {index}. {'Pull Request' if is_pr else 'Issue'} #{item.get('number')}: {item.get('title')}\n"
        result += f"**Repository:** {(item.get('repository') or {}).get('nameWithOwner')}\n"
        result += f"**URL:** {item.get('url')}\n"
        result += f"**State:** {item.get('state')}"
        if is_pr and item.get("merged"):
            result += " (Merged)"
        result += "\n"
        result += f"**Author:** {(item.get('author') or {}).get('login') or 'Unknown'}\n"

        assignees = [node["login"] for node in (item.get("assignees") or {}).get("nodes", [])]
        if assignees:
            result += f"**Assignees:** {', '.join(assignees)}\n"

        result += f"**Updated:** {_display_date(item.get('updatedAt'))}\n"
        if item.get("closedAt"):
            result += f"**Closed:** {_display_date(item['closedAt'])}\n"
        if is_pr and item.get("mergedAt"):
            result += f"**Merged:** {_display_date(item['mergedAt'])}\n"

        result += f"**Comments:** {(item.get('comments') or {}).get('totalCount', 0)}\n"

        if is_pr:
            result += (
                f"**Changes:** +{item.get('additions', 0)}/-{item.get('deletions', 0)} "
                f"({item.get('changedFiles', 0)} files)\n"
            )
            mergeable = item.get("mergeable")
            if mergeable in (None, "UNKNOWN"):
                mergeable_text = "Unknown"
            else:
                mergeable_text = "Yes" if mergeable in (True, "MERGEABLE") else "No"
            result += f"**Mergeable:** {mergeable_text}\n"

        labels = [node["name"] for node in (item.get("labels") or {}).get("nodes", [])]
        if labels:
            result += f"**Labels:** {', '.join(labels)}\n"

        body = item.get("body") or ""
        if body:
            preview = body[:MAX_BODY_PREVIEW_CHARS] + "..." if len(body) > MAX_BODY_PREVIEW_CHARS else body
            result += f"**Description:** {preview}\n"

        result += "\n---\n\n"
    return result


def github_search_issues(
    query: Annotated[str, Field(description=f"Simple search query for issues/PRs. {SIMPLE_QUERY_HINT}")],
    type: Annotated[Literal["issue", "pr", "both"], Field(description="Filter by type (default: both)")] = "both",
    state: Annotated[
        Literal["open", "closed", "merged", "all"],
        Field(description="Filter by state (default: all)"),
    ] = "all",
    repo: Annotated[str | None, Field(description="Filter by specific repository (owner/name)")] = None,
    author: Annotated[str | None, Field(description="Filter by author username")] = None,
    assignee: Annotated[str | None, Field(description="Filter by assignee username")] = None,
    first: Annotated[int, Field(description="Number of results to return (default 10, max 100)")] = 10,
) -> str:
    try:
        search_query = build_search_query(query, issue_filters(type, state, repo, author, assignee))
        LOGGER.info("Searching GitHub issues: %s", search_query)
        data = make_graphql_request(SEARCH_ISSUES_QUERY, {"searchQuery": search_query, "first": _clamp_first(first)})
        return _with_saved_path(format_issues(data.get("search") or {}, search_query), "issues-search")
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching GitHub issues", exc)


def format_users(search: dict[str, Any], search_query: str) -> str:
    nodes = search.get("nodes") or []
    result = "# GitHub Users Search Results\n\n"
    result += f"**Query:** {search_query}\n"
    result += f"**Total users found:** {search.get('userCount', 0)}\n"
    result += f"**Results shown:** {len(nodes)}\n\n"

    if not nodes:
        return result + "No users found matching your search criteria.\n"

    for index, user in enumerate(nodes, start=1):
        result += f"## {index}. {user.get('login')}"
        if user.get("name"):
            result += f" ({user['name']})"
        result += "\n"
        result += f"**Profile URL:** {user.get('url')}\n"
        result += f"**Avatar:** {user.get('avatarUrl')}\n"

        for key, label in (
            ("bio", "Bio"),
            ("location", "Location"),
            ("company", "Company"),
            ("email", "Email"),
            ("websiteUrl", "Website"),
        ):
            if user.get(key):
                result += f"**{label}:** {user[key]}\n"
        if user.get("twitterUsername"):
            result += f"**Twitter:** @{user['twitterUsername']}\n"

        def total(key: str) -> int:
            return (user.get(key) or {}).get("totalCount", 0)

        result += "**Stats:**\n"
        result += f"- Followers: {total('followers')}\n"
        result += f"- Following: {total('following')}\n"
        result += f"- Public Repos: {total('repositories')}\n"
        result += f"- Starred Repos: {total('starredRepositories')}\n"
        result += f"- Gists: {total('gists')}\n"
        result += f"**Last Updated:** {_display_date(user.get('updatedAt'))}\n"

        organizations = (user.get("organizations") or {}).get("nodes", [])
        if organizations:
            result += "**Organizations:**\n"
            for org in organizations:
                result += f"- {org.get('name') or org['login']} (@{org['login']})\n"

        top_repositories = (user.get("topRepositories") or {}).get("nodes", [])
        if top_repositories:
            result += "**Top Repositories:**\n"
            for repo in top_repositories:
                result += f"- {repo['name']} (⭐ {repo.get('stargazerCount', 0)})"
                if repo.get("primaryLanguage"):
                    result += f" - {repo['primaryLanguage']['name']}"
                result += "\n"

        result += "\n---\n\n"
    return result


def github_search_users(
    query: Annotated[str, Field(description=f"Simple search query for users. {SIMPLE_QUERY_HINT}")],
    location: Annotated[str | None, Field(description="Filter by location")] = None,
    language: Annotated[
        str | None,
        Field(description="Filter by primary language (use this instead of including language names in query text)"),
    ] = None,
    followers: Annotated[str | None, Field(description="Filter by follower count (e.g., '>100')")] = None,
    repos: Annotated[str | None, Field(description="Filter by repository count (e.g., '>10')")] = None,
    first: Annotated[int, Field(description="Number of results to return (default 10, max 100)")] = 10,
) -> str:
    try:
        search_query = build_search_query(
            query,
            {"location": location, "language": language, "followers": followers, "repos": repos},
        )
        LOGGER.info("Searching GitHub users: %s", search_query)
        data = make_graphql_request(SEARCH_USERS_QUERY, {"searchQuery": search_query, "first": _clamp_first(first)})
        return _with_saved_path(format_users(data.get("search") or {}, search_query), "users-search")
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("searching GitHub users", exc)


def format_repository(repo: dict[str, Any], include_readme: bool, include_languages: bool, include_topics: bool) -> str:
    result = f"# {repo.get('nameWithOwner')}\n\n"
    if repo.get("description"):
        result += f"**Description:** {repo['description']}\n\n"

    result += "**Repository Details:**\n"
    result += f"- **URL:** {repo.get('url')}\n"
    if repo.get("homepageUrl"):
        result += f"- **Homepage:** {repo['homepageUrl']}\n"
    result += f"- **Default Branch:** {(repo.get('defaultBranchRef') or {}).get('name') or 'main'}\n"
    if repo.get("primaryLanguage"):
        result += f"- **Primary Language:** {repo['primaryLanguage']['name']}\n"
    if repo.get("licenseInfo"):
        result += f"- **License:** {repo['licenseInfo']['name']} ({repo['licenseInfo']['key']})\n"

    def total(key: str) -> int:
        return (repo.get(key) or {}).get("totalCount", 0)

    result += "\n**Statistics:**\n"
    result += f"- **Stars:** {repo.get('stargazerCount', 0)}\n"
    result += f"- **Forks:** {repo.get('forkCount', 0)}\n"
    result += f"- **Watchers:** {total('watchers')}\n"
    result += f"- **Open Issues:** {total('issues')}\n"
    result += f"- **Open PRs:** {total('pullRequests')}\n"
    result += f"- **Releases:** {total('releases')}\n"
    result += f"- **Collaborators:** {total('collaborators')}\n"
    if repo.get("diskUsage"):
        result += f"- **Size:** {repo['diskUsage'] / 1024:.2f} MB\n"
    if total("vulnerability") > 0:
        result += f"- **Security Alerts:** {total('vulnerability')}\n"

    result += f"\n**Last Updated:** {_display_date(repo.get('updatedAt'))}\n"

    features = [
        label
        for key, label in (
            ("hasIssuesEnabled", "Issues"),
            ("hasProjectsEnabled", "Projects"),
            ("hasWikiEnabled", "Wiki"),
            ("hasDiscussionsEnabled", "Discussions"),
        )
        if repo.get(key)
    ]
    if features:
        result += f"\n**Features Enabled:** {', '.join(features)}\n"

    flags = [
        label
        for key, label in (
            ("isArchived", "Archived"),
            ("isFork", "Fork"),
            ("isPrivate", "Private"),
            ("isMirror", "Mirror"),
            ("isTemplate", "Template"),
        )
        if repo.get(key)
    ]
    if flags:
        result += f"**Repository Flags:** {', '.join(flags)}\n"

    if include_topics:
        topics = [node["topic"]["name"] for node in (repo.get("repositoryTopics") or {}).get("nodes", [])]
        if topics:
            result += f"\n**Topics:** {', '.join(topics)}\n"

    languages = repo.get("languages")
    if include_languages and languages:
        result += "\n**Languages:**\n"
        total_bytes = languages.get("totalSize") or 0
        for edge in languages.get("edges", []):
            percentage = edge["size"] / total_bytes * 100 if total_bytes else 0.0
            result += f"- {edge['node']['name']}: {percentage:.1f}%\n"

    collaborators = (repo.get("collaborators") or {}).get("nodes", [])
    if collaborators:
        result += "\n**Recent Collaborators:**\n"
        for collaborator in collaborators:
            result += f"- {collaborator.get('name') or collaborator['login']} (@{collaborator['login']})\n"

    if include_readme:
        readme = (repo.get("object") or {}).get("text") or (repo.get("readmeObject") or {}).get("text")
        if readme:
            result += "\n## README\n\n"
            if len(readme) > MAX_README_CHARS:
                result += readme[:MAX_README_CHARS] + "\n\n... (truncated)"
            else:
                result += readme
    return result


def github_get_repository(
    owner: Annotated[str, Field(description="Repository owner username")],
    name: Annotated[str, Field(description="Repository name")],
    include_readme: Annotated[bool, Field(description="Include README content (default: false)")] = False,
    include_languages: Annotated[bool, Field(description="Include language statistics (default: true)")] = True,
    include_topics: Annotated[bool, Field(description="Include repository topics (default: true)")] = True,
) -> str:
    try:
        LOGGER.info("Fetching GitHub repository %s/%s", owner, name)
        data = make_graphql_request(
            repository_query(include_readme, include_languages, include_topics),
            {"owner": owner, "name": name},
        )
        repo = data.get("repository")
        if not repo:
            return f"Repository {owner}/{name} not found or not accessible."

        result = format_repository(repo, include_readme, include_languages, include_topics)
        filepath = save_result("github", "repository-details", result)
        if filepath:
            result += f"\n\n---\n*Results saved to: {filepath}*"
        return result
    except Exception as exc:  # flattened to text at the tool boundary
        return error_text("getting GitHub repository details", exc)


def register(server: FastMCP) -> None:
    server.add_tool(
        in_worker_thread(github_search_repositories),
        name="github-search-repositories",
        description=(
            "Search GitHub repositories using GraphQL API. Use simple, focused search terms - avoid "
            "combining too many keywords as GitHub uses AND logic. Use filters instead of including "
            "language names in the query text."
        ),
    )
    server.add_tool(
        in_worker_thread(github_search_code),
        name="github-search-code",
        description=(
            "Search code across GitHub repositories. Use simple, focused search terms - avoid "
            "combining too many keywords as GitHub uses AND logic. Use filters instead of including "
            "language names in the query text."
        ),
    )
    server.add_tool(
        in_worker_thread(github_search_issues),
        name="github-search-issues",
        description=(
            "Search GitHub issues and pull requests using GraphQL API. Use simple, focused search "
            "terms - avoid combining too many keywords as GitHub uses AND logic."
        ),
    )
    server.add_tool(
        in_worker_thread(github_search_users),
        name="github-search-users",
        description=(
            "Search GitHub users using GraphQL API. Use simple, focused search terms - avoid "
            "combining too many keywords as GitHub uses AND logic."
        ),
    )
    server.add_tool(
        in_worker_thread(github_get_repository),
        name="github-get-repository",
        description="Get detailed information about a specific GitHub repository",
    )
