"""GitHub REST API repository for fetching a user's repositories."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from portfolio_repos.config.settings import Settings
from portfolio_repos.exceptions import UpstreamError
from portfolio_repos.repository.base_repository import RepositoryFetcher
from portfolio_repos.schema.repository import RepositorySummary, SortOrder

logger = logging.getLogger(__name__)


class GitHubRepository(RepositoryFetcher):
    """Repository for fetching repository listings from api.github.com."""

    def __init__(
        self, settings: Settings, client: Optional[httpx.AsyncClient] = None
    ) -> None:
        """Initialize GitHub repository."""
        self.settings = settings
        self.client = client or httpx.AsyncClient(
            base_url=self.settings.github_api_url,
            timeout=self.settings.github_timeout_seconds,
            headers=self._build_headers(),
            follow_redirects=True,
        )

    def _build_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "portfolio-repos",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.settings.github_token:
            headers["Authorization"] = f"Bearer {self.settings.github_token}"
        return headers

    async def close(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    def _build_request(
        self, username: str, sort: SortOrder, per_page: int
    ) -> tuple[str, dict[str, Any]]:
        """Build the endpoint path and query parameters for a sort order."""
        if sort == "stars":
            return "/search/repositories", {
                "q": f"user:{username}",
                "sort": "stars",
                "order": "desc",
                "per_page": per_page,
            }
        return f"/users/{quote(username, safe='')}/repos", {
            "sort": "updated",
            "per_page": per_page,
        }

    async def fetch_repositories(
        self, username: str, sort: SortOrder, per_page: int
    ) -> list[RepositorySummary]:
        """
        Fetch at most ``per_page`` repositories for ``username``.

        "updated" lists the user's repositories by most recent update,
        "stars" uses the search endpoint ordered by descending star count.
        No retries are attempted; any failure raises UpstreamError.
        """
        url, params = self._build_request(username, sort, per_page)
        try:
            response = await self.client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error(f"GitHub returned {status} for {sort} repos of {username}")
            raise UpstreamError(
                f"Failed to fetch repositories: {status}", status_code=status
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request for {sort} repos of {username} failed: {e}")
            raise UpstreamError(f"Failed to fetch repositories: {e}") from e
        except ValueError as e:
            raise UpstreamError("GitHub returned a non-JSON response") from e

        items = data.get("items") if sort == "stars" and isinstance(data, dict) else data
        if not isinstance(items, list):
            raise UpstreamError(f"Unexpected payload for {sort} repositories")

        try:
            return [RepositorySummary.model_validate(item) for item in items[:per_page]]
        except ValidationError as e:
            raise UpstreamError(f"Malformed repository in {sort} response: {e}") from e
