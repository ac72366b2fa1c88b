"""Authorization helpers for API endpoints.

Sign-in happens at the hosted identity provider; its gateway forwards the
caller's user id and organization id. These helpers resolve that pair to
an active membership and check roles.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fundledger.models.reimbursement_request import ReimbursementRequest
from fundledger.models.user import Membership, User
from fundledger.services.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)


@dataclass
class AuthorizedMember:
    """Encapsulates authorization context for a request."""

    user: User
    """The user making the request."""

    membership: Membership
    """The user's membership in the organization named by the request."""

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def org_id(self) -> int:
        return self.membership.org_id

    @property
    def is_admin(self) -> bool:
        return self.membership.is_admin


def parse_identity_header(value: str | None, name: str) -> int:
    """Parse a numeric identity header.

    Raises:
        UnauthorizedError: Header missing or not an integer
    """
    if value is None or not value.strip():
        raise UnauthorizedError(f"Missing {name} header")
    try:
        return int(value.strip())
    except ValueError as e:
        raise UnauthorizedError(f"Invalid {name} header") from e


async def get_authorized_member(
    session: AsyncSession, user_id: int, org_id: int
) -> AuthorizedMember:
    """Resolve an active user's membership in an organization.

    Raises:
        UnauthorizedError: Unknown or inactive user, or no membership in org
    """
    stmt = (
        select(Membership)
        .where(Membership.user_id == user_id, Membership.org_id == org_id)
        .options(selectinload(Membership.user))
    )
    result = await session.execute(stmt)
    membership = result.scalar_one_or_none()

    if membership is None or not membership.user.is_active:
        logger.warning(f"Rejected identity user={user_id} org={org_id}")
        raise UnauthorizedError("NOT_AUTHORIZED")

    return AuthorizedMember(user=membership.user, membership=membership)


def require_admin(member: AuthorizedMember) -> AuthorizedMember:
    """Raises ForbiddenError unless the member is ADMIN or SUPERADMIN."""
    if not member.is_admin:
        logger.warning(f"User {member.user_id} is not an admin of org {member.org_id}")
        raise ForbiddenError("Admin role required")
    return member


def authorize_request_access(member: AuthorizedMember, request: ReimbursementRequest) -> None:
    """Allow the requester or an admin to act on a reimbursement request.

    Raises:
        ForbiddenError: Member is neither the requester nor an admin
    """
    if member.is_admin or request.user_id == member.user_id:
        return
    raise ForbiddenError("Not allowed to access this reimbursement request")


__all__ = [
    "AuthorizedMember",
    "parse_identity_header",
    "get_authorized_member",
    "require_admin",
    "authorize_request_access",
]
