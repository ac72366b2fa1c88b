"""Reference data lookups scoped to an organization.

Every lookup table mixes rows owned by an organization with global
defaults (``org_id IS NULL``). Callers only ever ask for "what this
organization can see", so each getter returns the union.
"""

import logging
from typing import TypeVar

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.account_type import AccountType
from fundledger.models.transaction_category import TransactionCategory
from fundledger.models.transaction_item_method import TransactionItemMethod
from fundledger.models.transaction_item_type import TransactionItemType

logger = logging.getLogger(__name__)

ReferenceModel = TypeVar(
    "ReferenceModel",
    AccountType,
    TransactionCategory,
    TransactionItemMethod,
    TransactionItemType,
)


class ReferenceDataService:
    """Read organization-visible lookup rows."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session.

        Args:
            session: AsyncSession for database operations
        """
        self.session = session

    async def _visible_rows(self, model: type[ReferenceModel], org_id: int) -> list[ReferenceModel]:
        stmt = (
            select(model)
            .where(or_(model.org_id == org_id, model.org_id.is_(None)))
            .order_by(model.name, model.id)
        )
        result = await self.session.execute(stmt)
        rows = list(result.scalars().all())
        logger.debug("Loaded %d %s rows for org %s", len(rows), model.__tablename__, org_id)
        return rows

    async def get_item_types(self, org_id: int) -> list[TransactionItemType]:
        """Item types with their IN/OUT direction."""
        return await self._visible_rows(TransactionItemType, org_id)

    async def get_item_methods(self, org_id: int) -> list[TransactionItemMethod]:
        return await self._visible_rows(TransactionItemMethod, org_id)

    async def get_categories(self, org_id: int) -> list[TransactionCategory]:
        return await self._visible_rows(TransactionCategory, org_id)

    async def get_account_types(self, org_id: int) -> list[AccountType]:
        return await self._visible_rows(AccountType, org_id)

    async def is_visible(self, model: type[ReferenceModel], row_id: int, org_id: int) -> bool:
        """Check that a lookup row exists and is visible to the organization."""
        stmt = select(model.id).where(
            model.id == row_id,
            or_(model.org_id == org_id, model.org_id.is_(None)),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() is not None


__all__ = ["ReferenceDataService"]
