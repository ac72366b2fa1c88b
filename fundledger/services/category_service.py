"""Organization-owned transaction categories.

Global defaults (``org_id IS NULL``) are read-only; an organization adds,
renames and removes only its own rows. A category that transactions
already use cannot be removed.
"""

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.transaction import Transaction
from fundledger.models.transaction_category import TransactionCategory
from fundledger.services.audit_service import AuditService
from fundledger.services.errors import NotFoundError, ValidationFailure

logger = logging.getLogger(__name__)

MAX_CATEGORY_NAME_LENGTH = 100


def _validate_name(name: str | None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationFailure({"name": "Name is required."})
    if len(name) > MAX_CATEGORY_NAME_LENGTH:
        raise ValidationFailure(
            {"name": f"Name must be at most {MAX_CATEGORY_NAME_LENGTH} characters."}
        )
    return name


class CategoryService:
    """Manage the categories an organization owns."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_editable(self, org_id: int, category_id: int) -> TransactionCategory:
        stmt = select(TransactionCategory).where(TransactionCategory.id == category_id)
        category = (await self.session.execute(stmt)).scalar_one_or_none()
        if category is None or category.org_id not in (None, org_id):
            raise NotFoundError("Category", category_id)
        if category.org_id is None:
            raise ValidationFailure(
                {"category_id": "Default categories can't be changed."},
                message="Default categories can't be changed.",
            )
        return category

    async def count_transactions(self, category_id: int) -> int:
        stmt = select(func.count(Transaction.id)).where(Transaction.category_id == category_id)
        return (await self.session.execute(stmt)).scalar_one()

    async def list_categories(self, org_id: int) -> list[tuple[TransactionCategory, int]]:
        """Visible categories with the number of the organization's transactions in each.

        Most used first, as on the category settings screen.
        """
        usage = (
            select(Transaction.category_id, func.count(Transaction.id).label("uses"))
            .where(Transaction.org_id == org_id)
            .group_by(Transaction.category_id)
            .subquery()
        )
        uses = func.coalesce(usage.c.uses, 0)
        stmt = (
            select(TransactionCategory, uses)
            .outerjoin(usage, usage.c.category_id == TransactionCategory.id)
            .where(
                or_(TransactionCategory.org_id == org_id, TransactionCategory.org_id.is_(None))
            )
            .order_by(uses.desc(), TransactionCategory.name, TransactionCategory.id)
        )
        result = await self.session.execute(stmt)
        return [(category, count) for category, count in result.all()]

    async def create_category(
        self, org_id: int, name: str, actor_id: int | None = None
    ) -> TransactionCategory:
        """Add a category visible only to this organization.

        Raises:
            ValidationFailure: Blank or overlong name
        """
        name = _validate_name(name)
        try:
            category = TransactionCategory(name=name, org_id=org_id)
            self.session.add(category)
            await self.session.flush()
            AuditService.log(
                self.session,
                org_id,
                "transaction_category",
                category.id,
                "create",
                actor_id=actor_id,
                changes={"name": name},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Category {category.id} ({name!r}) created in org {org_id}")
        return category

    async def rename_category(
        self, org_id: int, category_id: int, name: str, actor_id: int | None = None
    ) -> TransactionCategory:
        """Rename one of the organization's own categories.

        Raises:
            NotFoundError: Category belongs to another organization
            ValidationFailure: Global default, or blank or overlong name
        """
        name = _validate_name(name)
        try:
            category = await self._get_editable(org_id, category_id)
            previous = category.name
            category.name = name
            AuditService.log(
                self.session,
                org_id,
                "transaction_category",
                category.id,
                "update",
                actor_id=actor_id,
                changes={"name": {"old": previous, "new": name}},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Category {category_id} renamed to {name!r}")
        return category

    async def delete_category(
        self, org_id: int, category_id: int, actor_id: int | None = None
    ) -> None:
        """Delete one of the organization's own, unused categories.

        Raises:
            NotFoundError: Category belongs to another organization
            ValidationFailure: Global default, or transactions use it
        """
        try:
            category = await self._get_editable(org_id, category_id)
            if await self.count_transactions(category.id):
                raise ValidationFailure(
                    {"category_id": "Category has transactions and can't be deleted."},
                    message="Category has transactions and can't be deleted.",
                )
            await self.session.delete(category)
            AuditService.log(
                self.session,
                org_id,
                "transaction_category",
                category_id,
                "delete",
                actor_id=actor_id,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Category {category_id} deleted from org {org_id}")


__all__ = ["MAX_CATEGORY_NAME_LENGTH", "CategoryService"]
