"""Unit tests for organization transaction categories."""

from datetime import date

import pytest
from sqlalchemy import select

from fundledger.constants import TransactionCategoryId, TransactionItemTypeId
from fundledger.models.transaction_category import TransactionCategory
from fundledger.services.category_service import CategoryService
from fundledger.services.errors import NotFoundError, ValidationFailure
from fundledger.services.reference_service import ReferenceDataService
from fundledger.services.transaction_service import TransactionItemInput, TransactionService


@pytest.fixture
def categories(session):
    return CategoryService(session)


async def post_in_category(session, ledger, category_id) -> None:
    await TransactionService(session).create_transaction(
        ledger.org_id,
        ledger.operating_id,
        date(2026, 2, 1),
        [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=1000)],
        category_id=category_id,
    )


class TestCreateCategory:
    """Tests for CategoryService.create_category."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_visible_only_to_owner(self, session, categories, ledger):
        category = await categories.create_category(ledger.org_id, " Youth Camp ")

        reference = ReferenceDataService(session)
        own = [c.name for c in await reference.get_categories(ledger.org_id)]
        other = [c.name for c in await reference.get_categories(ledger.other_org_id)]
        assert category.name == "Youth Camp"
        assert "Youth Camp" in own
        assert "Youth Camp" not in other

    @pytest.mark.unit
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,message",
        [
            ("   ", "Name is required."),
            ("x" * 101, "Name must be at most 100 characters."),
        ],
    )
    async def test_invalid_names(self, categories, ledger, name, message):
        with pytest.raises(ValidationFailure) as exc_info:
            await categories.create_category(ledger.org_id, name)

        assert exc_info.value.field_errors == {"name": message}


class TestRenameCategory:
    """Tests for CategoryService.rename_category."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rename_own(self, categories, ledger):
        category = await categories.create_category(ledger.org_id, "Youth Camp")

        renamed = await categories.rename_category(ledger.org_id, category.id, "Summer Camp")

        assert renamed.name == "Summer Camp"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_defaults_cannot_be_changed(self, session, categories, ledger):
        with pytest.raises(ValidationFailure) as exc_info:
            await categories.rename_category(
                ledger.org_id, TransactionCategoryId.DONATIONS, "Gifts"
            )

        assert exc_info.value.message == "Default categories can't be changed."
        default = await session.get(TransactionCategory, TransactionCategoryId.DONATIONS)
        assert default.name != "Gifts"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_other_org_category_not_found(self, categories, ledger):
        foreign = await categories.create_category(ledger.other_org_id, "Harbor Only")

        with pytest.raises(NotFoundError):
            await categories.rename_category(ledger.org_id, foreign.id, "Taken")


class TestDeleteCategory:
    """Tests for CategoryService.delete_category."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_unused(self, session, categories, ledger):
        category = await categories.create_category(ledger.org_id, "Youth Camp")

        await categories.delete_category(ledger.org_id, category.id)

        remaining = await session.execute(
            select(TransactionCategory).where(TransactionCategory.id == category.id)
        )
        assert remaining.scalar_one_or_none() is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_used_category_kept(self, session, categories, ledger):
        category = await categories.create_category(ledger.org_id, "Youth Camp")
        await post_in_category(session, ledger, category.id)

        with pytest.raises(ValidationFailure) as exc_info:
            await categories.delete_category(ledger.org_id, category.id)

        assert exc_info.value.message == "Category has transactions and can't be deleted."
        assert await categories.count_transactions(category.id) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_default_cannot_be_deleted(self, categories, ledger):
        with pytest.raises(ValidationFailure):
            await categories.delete_category(ledger.org_id, TransactionCategoryId.OTHER)


class TestListCategories:
    """Tests for CategoryService.list_categories."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_most_used_first_with_counts(self, session, categories, ledger):
        camp = await categories.create_category(ledger.org_id, "Youth Camp")
        await post_in_category(session, ledger, camp.id)
        await post_in_category(session, ledger, camp.id)
        await post_in_category(session, ledger, TransactionCategoryId.DONATIONS)

        rows = await categories.list_categories(ledger.org_id)

        assert [(c.name, n) for c, n in rows[:2]] == [("Youth Camp", 2), ("Donations", 1)]
        assert all(n == 0 for _, n in rows[2:])
        assert all(c.org_id in (None, ledger.org_id) for c, _ in rows)
