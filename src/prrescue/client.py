from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from typing import Any

import httpx
from rich.console import Console

from .errors import (
    ApiError,
    AuthError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    RepoNotFoundError,
)
from .pagination import CursorPaginator, Page
from .queries import ACTIVITY_QUERY, PR_BY_NUMBER_QUERY

_GRAPHQL_URL = "https://api.github.com/graphql"
DEFAULT_PAGE_SIZE = 30
DEFAULT_MAX_PAGES = 6
CALLER_RETRY_DELAYS = (1, 5, 15)
_stderr = Console(stderr=True)
logger = logging.getLogger(__name__)


class GitHubClient:
    """GraphQL client for the GitHub API.

    Every request is attempted once unless ``retry_delays`` is given, in which
    case 5xx answers and timeouts are retried after sleeping each delay in turn.
    """

    def __init__(self, token: str, retry_delays: tuple[float, ...] = ()) -> None:
        self._retry_delays = tuple(retry_delays)
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
                "Content-Type": "application/json",
            },
            timeout=httpx.Timeout(30.0),
        )

    def __enter__(self) -> GitHubClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self._client.close()

    def execute(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        last_exc: Exception | None = None
        attempts = 0
        for delay in (*self._retry_delays, None):
            attempts += 1
            try:
                response = self._client.post(_GRAPHQL_URL, json=payload)
            except httpx.TimeoutException as exc:
                last_exc = exc
                if delay is not None:
                    time.sleep(delay)
                continue
            except httpx.RequestError as exc:
                raise NetworkError(str(exc)) from exc

            if response.status_code == 401:
                raise AuthError("GitHub token is invalid or missing required scopes.")
            if response.status_code >= 500:
                last_exc = ApiError(f"GitHub API returned HTTP {response.status_code}")
                if delay is not None:
                    time.sleep(delay)
                continue
            if response.status_code != 200:
                raise ApiError(f"GitHub API returned HTTP {response.status_code}: {response.text}")

            try:
                data = response.json()
            except ValueError as exc:
                raise MalformedResponseError("GitHub API returned a body that is not JSON.") from exc
            if not isinstance(data, dict):
                raise MalformedResponseError("GitHub API returned an unexpected JSON document.")

            if errors := data.get("errors"):
                first = errors[0] if isinstance(errors, list) else errors
                if not isinstance(first, dict):
                    raise ApiError(f"GitHub API returned an error: {first}")
                msg = str(first.get("message", "Unknown GraphQL error"))
                if "Could not resolve to a Repository" in msg or "NOT_FOUND" in str(first.get("type", "")):
                    raise RepoNotFoundError(msg)
                raise ApiError(msg)

            if rate_limit := (data.get("data") or {}).get("rateLimit"):
                remaining = rate_limit.get("remaining", 9999)
                if remaining == 0:
                    reset_at = rate_limit.get("resetAt", "unknown")
                    raise RateLimitError(f"GitHub rate limit exhausted. Resets at {reset_at}.")
                if remaining < 100:
                    _stderr.print(
                        f"[yellow]Warning:[/yellow] GitHub rate limit low: {remaining} requests remaining "
                        f"(resets at {rate_limit.get('resetAt', 'unknown')})"
                    )

            return data

        raise NetworkError(f"Request failed after {attempts} attempt(s): {last_exc}") from last_exc

    def fetch_pull_requests(
        self,
        owner: str,
        repo: str,
        query: str = ACTIVITY_QUERY,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> Iterator[dict[str, Any]]:
        """Yield raw pull request nodes, at most ``max_pages`` pages deep."""
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        variables: dict[str, Any] = {"owner": owner, "repo": repo, "first": page_size}

        def fetch_page(cursor: str | None) -> Page:
            if cursor:
                return self._fetch_page(owner, repo, query, {**variables, "after": cursor})
            return self._fetch_page(owner, repo, query, variables)

        paginator = CursorPaginator(fetch_page, max_pages)
        for page in paginator:
            yield from page.nodes
        logger.debug(
            "Scanned %d page(s) of %s/%s%s",
            paginator.pages_fetched,
            owner,
            repo,
            " (stopped at page ceiling)" if paginator.truncated else "",
        )

    def fetch_pull_request(self, owner: str, repo: str, number: int) -> dict[str, Any]:
        data = self.execute(PR_BY_NUMBER_QUERY, {"owner": owner, "repo": repo, "number": number})
        repo_data = (data.get("data") or {}).get("repository")
        if repo_data is None:
            raise RepoNotFoundError(f"Repository {owner}/{repo} not found.")
        node = repo_data.get("pullRequest")
        if node is None:
            raise RepoNotFoundError(f"Pull request #{number} not found in {owner}/{repo}.")
        return node

    def _fetch_page(self, owner: str, repo: str, query: str, variables: dict[str, Any]) -> Page:
        data = self.execute(query, variables)
        repo_data = (data.get("data") or {}).get("repository")
        if repo_data is None:
            raise RepoNotFoundError(f"Repository {owner}/{repo} not found.")
        try:
            prs_conn = repo_data["pullRequests"]
            page_info = prs_conn["pageInfo"]
            return Page(
                nodes=list(prs_conn["nodes"]),
                has_next_page=bool(page_info["hasNextPage"]),
                end_cursor=page_info.get("endCursor"),
            )
        except (KeyError, TypeError) as exc:
            raise MalformedResponseError(f"Unexpected pull request page shape: {exc!r}") from exc
