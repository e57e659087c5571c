"""Repository and cache document schemas."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

SortOrder = Literal["updated", "stars"]

SORT_ORDERS: tuple[str, ...] = ("updated", "stars")

DEFAULT_REFRESH_INTERVAL_HOURS = 1.0
DEFAULT_PAGE_SIZE = 4
MAX_PAGE_SIZE = 100


class RepositorySummary(BaseModel):
    """Display-oriented projection of one GitHub repository."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., description="Numeric GitHub repository ID")
    name: str
    description: Optional[str] = None
    html_url: str = Field(..., description="Canonical repository URL")
    homepage: Optional[str] = None
    stargazers_count: int = Field(0, ge=0)
    forks_count: int = Field(0, ge=0)
    language: Optional[str] = None
    topics: list[str] = Field(default_factory=list)
    updated_at: str = Field(..., description="ISO-8601 timestamp of the last update")


class CacheDocument(BaseModel):
    """The single persisted cache document.

    Every field is required when decoding, so a file missing any of them
    is treated as corrupt rather than partially filled in.
    """

    model_config = ConfigDict(populate_by_name=True)

    updated_list: list[RepositorySummary] = Field(..., alias="updatedList")
    starred_list: list[RepositorySummary] = Field(..., alias="starredList")
    last_updated: Optional[datetime] = Field(..., alias="lastUpdated")
    owning_username: str = Field(..., alias="owningUsername")
    refresh_interval_hours: float = Field(..., ge=0, alias="refreshIntervalHours")
    page_size: int = Field(..., ge=1, le=MAX_PAGE_SIZE, alias="pageSize")

    @model_validator(mode="after")
    def check_list_lengths(self) -> "CacheDocument":
        if len(self.updated_list) > self.page_size or len(self.starred_list) > self.page_size:
            raise ValueError(f"cached lists exceed page size {self.page_size}")
        return self

    @classmethod
    def empty(
        cls,
        refresh_interval_hours: float = DEFAULT_REFRESH_INTERVAL_HOURS,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> "CacheDocument":
        """Build the document used before the first successful refresh."""
        return cls(
            updated_list=[],
            starred_list=[],
            last_updated=None,
            owning_username="",
            refresh_interval_hours=refresh_interval_hours,
            page_size=page_size,
        )

    def list_for(self, sort: SortOrder) -> list[RepositorySummary]:
        return self.starred_list if sort == "stars" else self.updated_list


class RepositoryRequest(BaseModel):
    """One inbound read request."""

    username: str
    sort: SortOrder = "updated"
    force: bool = False


class RepositoriesResult(BaseModel):
    """Outcome of a read request.

    A result with ``error`` set is a hard failure: nothing fresh could be
    fetched and no same-user cache was available to fall back on.
    """

    model_config = ConfigDict(populate_by_name=True)

    repos: list[RepositorySummary] = Field(default_factory=list)
    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")
    from_cache: bool = Field(False, alias="fromCache")
    warning: Optional[str] = None
    error: Optional[str] = None

    @property
    def is_hard_failure(self) -> bool:
        return self.error is not None

    def to_payload(self) -> dict[str, Any]:
        """Render the JSON body returned to the UI."""
        payload = self.model_dump(
            mode="json", by_alias=True, exclude={"warning", "error"}
        )
        if self.warning:
            payload["warning"] = self.warning
        if self.error:
            payload["error"] = self.error
        return payload


class RefreshResult(BaseModel):
    """Outcome of an explicit refresh."""

    model_config = ConfigDict(populate_by_name=True)

    last_updated: Optional[datetime] = Field(None, alias="lastUpdated")


class RefreshRequest(BaseModel):
    """POST body for the refresh action."""

    username: Optional[str] = None
    action: Optional[str] = None
