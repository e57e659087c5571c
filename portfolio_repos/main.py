"""Main Litestar application."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from litestar import Litestar, Request, Response, get
from litestar.config.cors import CORSConfig
from litestar.datastructures import State
from litestar.di import Provide
from litestar.exceptions import NotFoundException
from litestar.openapi import OpenAPIConfig
from litestar.response import Redirect
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
)

from portfolio_repos.config.settings import Settings, get_settings
from portfolio_repos.controller.repos_controller import RepositoriesController
from portfolio_repos.exceptions import PersistenceError, UpstreamError, ValidationError
from portfolio_repos.repository.base_repository import CacheStore
from portfolio_repos.repository.file_repository import FileCacheStore
from portfolio_repos.repository.github_repository import GitHubRepository
from portfolio_repos.service.cache_service import RepositoryCacheService

logger = logging.getLogger(__name__)


async def get_cache_store(state: State) -> CacheStore:
    """Dependency: Get cache store instance from app state."""
    return state.cache_store


async def get_github_repository(state: State) -> GitHubRepository:
    """Dependency: Get GitHub repository instance from app state."""
    return state.github_repo


async def get_repository_service(
    cache_store: CacheStore,
    github_repo: GitHubRepository,
) -> RepositoryCacheService:
    """Dependency: Get repository cache service instance."""
    return RepositoryCacheService(cache_store, github_repo)


def not_found_handler(request: Request, exc: NotFoundException) -> Response:
    """Handle 404 errors with guidance towards the repositories endpoint."""
    return Response(
        content={
            "status_code": exc.status_code,
            "detail": exc.detail,
            "message": "Endpoint not found. Use /api/github-repos?username={username} to list repositories.",
            "documentation": f"{request.url.scheme}://{request.url.netloc}/docs",
        },
        status_code=exc.status_code,
    )


def validation_error_handler(request: Request, exc: ValidationError) -> Response:
    """Handle malformed requests (missing username, unknown sort or action)."""
    return Response(content={"error": str(exc)}, status_code=HTTP_400_BAD_REQUEST)


def upstream_error_handler(request: Request, exc: UpstreamError) -> Response:
    """Handle GitHub failures that were not recovered from cache."""
    logger.error(f"GitHub request failed for {request.url.path}: {exc}")
    return Response(
        content={
            "error": "Failed to refresh GitHub repositories",
            "detail": str(exc),
            "upstream_status": exc.status_code,
        },
        status_code=HTTP_502_BAD_GATEWAY,
    )


def persistence_error_handler(request: Request, exc: PersistenceError) -> Response:
    """Handle cache file failures."""
    logger.error(f"Cache storage failure for {request.url.path}: {exc}")
    return Response(
        content={"error": "Failed to access the repository cache"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
    )


@get("/", include_in_schema=False)
async def root_handler() -> Redirect:
    """Redirect root to API documentation."""
    return Redirect(path="/docs")


@asynccontextmanager
async def lifespan(app: Litestar):
    """Application lifespan context manager for initializing resources."""
    settings: Settings = app.state.settings

    logger.info(f"Using repository cache file at {settings.cache_path}")
    app.state.cache_store = FileCacheStore.from_settings(settings)
    app.state.github_repo = GitHubRepository(settings)

    try:
        yield
    finally:
        await app.state.github_repo.close()


def create_app(settings: Settings | None = None) -> Litestar:
    """Create and configure Litestar application."""
    settings = settings or get_settings()
    return Litestar(
        debug=settings.dev,
        route_handlers=[root_handler, RepositoriesController],
        dependencies={
            "cache_store": Provide(get_cache_store),
            "github_repo": Provide(get_github_repository),
            "repository_service": Provide(get_repository_service),
        },
        exception_handlers={
            NotFoundException: not_found_handler,
            ValidationError: validation_error_handler,
            UpstreamError: upstream_error_handler,
            PersistenceError: persistence_error_handler,
        },
        cors_config=CORSConfig(
            allow_origins=settings.cors_allow_origins,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["Content-Type"],
        ),
        openapi_config=OpenAPIConfig(
            title="Portfolio Repos - GitHub Repository Cache",
            version="0.1.0",
            path="/docs",
        ),
        state=State({"settings": settings}),
        lifespan=[lifespan],
    )


app = create_app()


if __name__ == "__main__":
    settings = get_settings()

    uvicorn.run(
        "portfolio_repos.main:app",
        reload=settings.dev,
        host=settings.server_host,
        port=settings.server_port,
        workers=settings.workers,
        log_level=settings.log_level,
    )
