"""Decides when the cached repository lists must be refreshed."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from portfolio_repos.schema.repository import CacheDocument, RepositoryRequest


def refresh_reasons(
    document: CacheDocument,
    request: RepositoryRequest,
    now: Optional[datetime] = None,
) -> list[str]:
    """Return every condition that calls for a refresh; empty means fresh."""
    reasons = []
    if request.force:
        reasons.append("forced")

    if document.last_updated is None:
        reasons.append("never refreshed")
    else:
        now = now or datetime.now(timezone.utc)
        last_updated = document.last_updated
        if last_updated.tzinfo is None:
            last_updated = last_updated.replace(tzinfo=timezone.utc)
        interval = timedelta(hours=document.refresh_interval_hours)
        if now - last_updated >= interval:
            reasons.append("interval elapsed")

    if document.owning_username != request.username:
        reasons.append("different user")

    if not document.list_for(request.sort):
        reasons.append(f"no cached {request.sort} repos")
    return reasons


def needs_refresh(
    document: CacheDocument,
    request: RepositoryRequest,
    now: Optional[datetime] = None,
) -> bool:
    return bool(refresh_reasons(document, request, now))
