"""Shared dependencies for the operational endpoints.

The trigger endpoints are called by a scheduler, not by users, so the only
credential is a shared bearer secret (MATCH_CRON_SECRET).
"""

import secrets
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.core.config import settings
from haulmatch.core.database import get_db
from haulmatch.core.errors import ForbiddenError, UnauthorizedError
from haulmatch.services.matching_store import MatchingStore, SqlAlchemyMatchingStore

_BEARER_PREFIX = "bearer "


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.lower().startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


async def require_cron_secret(request: Request) -> None:
    """Verify the scheduler's bearer secret.

    An empty MATCH_CRON_SECRET disables the check (local development).

    Raises:
        UnauthorizedError: No bearer token was sent.
        ForbiddenError: The token does not match the secret.
    """
    expected = settings.match_cron_secret.get_secret_value()
    if not expected:
        return

    token = _bearer_token(request)
    if token is None:
        raise UnauthorizedError()
    if not secrets.compare_digest(token.encode(), expected.encode()):
        raise ForbiddenError("Invalid trigger secret")


async def get_matching_store(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MatchingStore:
    """Dependency that wraps the request session in a MatchingStore."""
    return SqlAlchemyMatchingStore(db)
