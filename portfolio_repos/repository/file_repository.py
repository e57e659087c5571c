"""JSON file repository for the cache document."""

import logging
import os
import uuid
from contextlib import suppress
from pathlib import Path

from pydantic import ValidationError

from portfolio_repos.config.settings import Settings
from portfolio_repos.exceptions import PersistenceError
from portfolio_repos.repository.base_repository import CacheStore
from portfolio_repos.schema.repository import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_REFRESH_INTERVAL_HOURS,
    CacheDocument,
)

logger = logging.getLogger(__name__)


class FileCacheStore(CacheStore):
    """Stores the whole cache document in a single JSON file.

    Every save replaces the file wholesale; there are no field-level
    updates and no locking, so concurrent writers resolve as last write wins.
    """

    def __init__(
        self,
        path: Path | str,
        refresh_interval_hours: float = DEFAULT_REFRESH_INTERVAL_HOURS,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self.path = Path(path)
        self.refresh_interval_hours = refresh_interval_hours
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings) -> "FileCacheStore":
        return cls(
            settings.cache_path,
            refresh_interval_hours=settings.refresh_interval_hours,
            page_size=settings.repos_per_page,
        )

    def _default_document(self) -> CacheDocument:
        return CacheDocument.empty(
            refresh_interval_hours=self.refresh_interval_hours,
            page_size=self.page_size,
        )

    async def load(self) -> CacheDocument:
        """
        Read the cache document, creating it on first access.

        Unparseable or invalid content is treated as "never cached" and the
        default document is returned; the file is left as-is until the next save.
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            logger.info(f"Cache file {self.path} not found, initializing empty cache")
            document = self._default_document()
            self._write(document)
            return document
        except OSError as e:
            raise PersistenceError("Could not read cache file", self.path) from e

        try:
            return CacheDocument.model_validate_json(raw)
        except (ValidationError, ValueError, RecursionError) as e:
            logger.warning(f"Ignoring corrupt cache file {self.path}: {e}")
            return self._default_document()

    async def save(self, document: CacheDocument) -> None:
        self._write(document)

    def _write(self, document: CacheDocument) -> None:
        # Write to a sibling temp file first so readers never see a partial document
        tmp_path = self.path.with_name(f"{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                document.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
            )
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError("Could not write cache file", self.path) from e
        finally:
            with suppress(OSError):
                tmp_path.unlink(missing_ok=True)
