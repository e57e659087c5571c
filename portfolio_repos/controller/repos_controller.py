import logging

from litestar import Controller, get, post
from litestar.response import Response
from litestar.status_codes import (
    HTTP_200_OK,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from portfolio_repos.exceptions import PersistenceError, ValidationError
from portfolio_repos.schema.repository import RefreshRequest
from portfolio_repos.service.cache_service import RepositoryCacheService, validate_request

logger = logging.getLogger(__name__)


class RepositoriesController(Controller):
    """Controller for the cached GitHub repositories endpoint."""

    path = "/api/github-repos"

    @get("/")
    async def get_repositories(
        self,
        repository_service: RepositoryCacheService,
        username: str | None = None,
        sort: str = "updated",
        force: str = "false",
    ) -> Response:
        """
        Get a user's GitHub repositories, served from cache when fresh.

        Args:
            username: GitHub username
            sort: "updated" or "stars" (default: updated)
            force: "true" forces a refresh from GitHub; any other value does not

        Returns:
            Repositories with lastUpdated and fromCache flags; 503 when
            GitHub failed and no cached data exists for the user
        """
        try:
            result = await repository_service.get_repositories(
                username, sort, force == "true"
            )
        except PersistenceError as e:
            logger.error(f"Cache storage failure in get_repositories: {e}")
            return Response(
                content={
                    "error": "Internal server error",
                    "repos": [],
                    "lastUpdated": None,
                    "fromCache": False,
                },
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            )

        status_code = HTTP_503_SERVICE_UNAVAILABLE if result.is_hard_failure else HTTP_200_OK
        return Response(content=result.to_payload(), status_code=status_code)

    @post("/", status_code=HTTP_200_OK)
    async def refresh_repositories(
        self,
        data: RefreshRequest,
        repository_service: RepositoryCacheService,
    ) -> Response:
        """
        Refresh the cached repositories now.

        Unlike GET, a GitHub failure is reported instead of falling back to cache.
        """
        validate_request(data.username)
        if data.action != "refresh":
            raise ValidationError("Invalid action")

        result = await repository_service.refresh(data.username)
        return Response(
            content={
                "message": "GitHub repositories updated successfully",
                "lastUpdated": result.model_dump(mode="json")["last_updated"],
            },
            status_code=HTTP_200_OK,
        )
