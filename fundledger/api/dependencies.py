"""Shared FastAPI dependencies."""

import logging

from fastapi import Depends, Header, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.services import get_async_session
from fundledger.services.auth_service import (
    AuthorizedMember,
    get_authorized_member,
    parse_identity_header,
    require_admin,
)
from fundledger.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


async def get_current_member(
    x_user_id: str | None = Header(None),  # noqa: B008
    x_org_id: str | None = Header(None),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> AuthorizedMember:
    """Resolve the caller from the identity gateway headers."""
    user_id = parse_identity_header(x_user_id, "X-User-Id")
    org_id = parse_identity_header(x_org_id, "X-Org-Id")
    return await get_authorized_member(session, user_id, org_id)


async def get_current_admin(
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
) -> AuthorizedMember:
    return require_admin(member)


def get_notifier() -> NotificationService:
    return NotificationService()


async def server_error(
    session: AsyncSession, endpoint: str, error: Exception
) -> HTTPException:
    """Log an unexpected failure, roll back the request's session and build the 500.

    Nothing flushed before the failure reaches the database, and the
    connection goes back to the pool without an open transaction.
    """
    logger.error(f"Error in {endpoint}: {error}", exc_info=True)
    try:
        await session.rollback()
    except SQLAlchemyError as rollback_error:
        logger.error(f"Rollback after {endpoint} failed: {rollback_error}")
    return HTTPException(status_code=500, detail="An unknown error occurred")


__all__ = ["get_current_member", "get_current_admin", "get_notifier", "server_error"]
