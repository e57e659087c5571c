"""Repository cache service: staleness checks, dual-sort refresh and stale fallback."""

import asyncio
import logging
from datetime import datetime, timezone

from portfolio_repos.exceptions import UpstreamError, ValidationError
from portfolio_repos.repository.base_repository import CacheStore, RepositoryFetcher
from portfolio_repos.schema.repository import (
    SORT_ORDERS,
    CacheDocument,
    RefreshResult,
    RepositoriesResult,
    RepositoryRequest,
    RepositorySummary,
    SortOrder,
)
from portfolio_repos.service.staleness import refresh_reasons

logger = logging.getLogger(__name__)

STALE_WARNING = "Using cached data due to fetch error"
UNAVAILABLE_ERROR = "Failed to fetch GitHub repositories and no cached data available"


def validate_request(username: object, sort: object = "updated") -> None:
    """Reject a missing username or unknown sort order before touching the cache."""
    if not isinstance(username, str) or not username.strip():
        raise ValidationError("GitHub username is required")
    if sort not in SORT_ORDERS:
        raise ValidationError(f"Invalid sort option: {sort}")


class RepositoryCacheService:
    """Serves a user's GitHub repositories from the cache document, refreshing when stale."""

    def __init__(self, cache_store: CacheStore, fetcher: RepositoryFetcher) -> None:
        """Initialize repository cache service."""
        self.cache_store = cache_store
        self.fetcher = fetcher

    async def _fetch_both(
        self, username: str, per_page: int
    ) -> tuple[list[RepositorySummary], list[RepositorySummary]]:
        """
        Fetch both sort orders concurrently.

        Both must succeed; the first failure cancels the other fetch and propagates.
        """
        tasks = [
            asyncio.create_task(self.fetcher.fetch_repositories(username, sort, per_page))
            for sort in SORT_ORDERS
        ]
        try:
            updated, starred = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return updated[:per_page], starred[:per_page]

    async def _refresh_document(
        self, username: str, previous: CacheDocument
    ) -> CacheDocument:
        updated, starred = await self._fetch_both(username, previous.page_size)
        document = CacheDocument(
            updated_list=updated,
            starred_list=starred,
            last_updated=datetime.now(timezone.utc),
            owning_username=username,
            refresh_interval_hours=previous.refresh_interval_hours,
            page_size=previous.page_size,
        )
        await self.cache_store.save(document)
        logger.info(
            f"Cached {len(updated)} updated and {len(starred)} starred repos for {username}"
        )
        return document

    async def get_repositories(
        self, username: str, sort: SortOrder = "updated", force: bool = False
    ) -> RepositoriesResult:
        """
        Get repositories for ``username`` ordered by ``sort``.

        Returns cached data while it is fresh. Otherwise refreshes both lists;
        if that fails, falls back to the previously loaded document when it
        belongs to the same user and has entries for ``sort``, and reports a
        hard failure (``error`` set) when it does not.
        """
        validate_request(username, sort)
        request = RepositoryRequest(username=username, sort=sort, force=force)

        # The fallback below uses this document, not a re-read after the failed refresh
        document = await self.cache_store.load()
        reasons = refresh_reasons(document, request)
        if not reasons:
            logger.info(f"Cache HIT: serving {sort} repos for {username}")
            return RepositoriesResult(
                repos=document.list_for(sort),
                last_updated=document.last_updated,
                from_cache=True,
            )

        logger.info(f"Cache MISS for {username} ({', '.join(reasons)}), refreshing")
        try:
            refreshed = await self._refresh_document(username, document)
        except UpstreamError as e:
            cached = document.list_for(sort)
            if document.owning_username == username and cached:
                logger.warning(
                    f"Serving stale {sort} repos for {username} after fetch error: {e}"
                )
                return RepositoriesResult(
                    repos=cached,
                    last_updated=document.last_updated,
                    from_cache=True,
                    warning=STALE_WARNING,
                )
            logger.error(f"No usable cache for {username} after fetch error: {e}")
            return RepositoriesResult(
                repos=[],
                last_updated=None,
                from_cache=False,
                error=UNAVAILABLE_ERROR,
            )

        return RepositoriesResult(
            repos=refreshed.list_for(sort),
            last_updated=refreshed.last_updated,
            from_cache=False,
        )

    async def refresh(self, username: str) -> RefreshResult:
        """
        Refresh both lists for ``username`` unconditionally.

        Unlike get_repositories there is no fallback: UpstreamError propagates.
        """
        validate_request(username)
        document = await self.cache_store.load()
        logger.info(f"Explicit refresh requested for {username}")
        refreshed = await self._refresh_document(username, document)
        return RefreshResult(last_updated=refreshed.last_updated)
