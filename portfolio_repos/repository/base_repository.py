"""Base interfaces for the cache store and the upstream fetcher."""

from typing import Protocol, runtime_checkable

from portfolio_repos.schema.repository import (
    CacheDocument,
    RepositorySummary,
    SortOrder,
)


@runtime_checkable
class CacheStore(Protocol):
    """Protocol for cache document storage implementations."""

    async def load(self) -> CacheDocument: ...

    async def save(self, document: CacheDocument) -> None: ...


@runtime_checkable
class RepositoryFetcher(Protocol):
    """Protocol for fetching repository summaries from the hosting API."""

    async def fetch_repositories(
        self, username: str, sort: SortOrder, per_page: int
    ) -> list[RepositorySummary]: ...
