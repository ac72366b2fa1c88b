"""Unit tests for simple postings and transaction maintenance."""

from datetime import date

import pytest
from sqlalchemy import func, select

from fundledger.constants import (
    TransactionCategoryId,
    TransactionItemMethodId,
    TransactionItemTypeId,
)
from fundledger.models.audit_log import AuditLog
from fundledger.models.contact import Contact
from fundledger.models.receipt import Receipt
from fundledger.models.transaction import Transaction, TransactionItem
from fundledger.services.balance_service import BalanceCalculationService
from fundledger.services.errors import InvalidTypeError, NotFoundError, ValidationFailure
from fundledger.services.outcomes import NoticeLevel
from fundledger.services.transaction_service import TransactionItemInput, TransactionService


async def count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestCreateTransaction:
    """Tests for TransactionService.create_transaction."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_expense_posts_negative_total_with_items(self, session, ledger):
        service = TransactionService(session)

        result = await service.create_transaction(
            ledger.org_id,
            ledger.operating_id,
            date(2026, 3, 2),
            [
                TransactionItemInput(
                    type_id=TransactionItemTypeId.EXPENSE,
                    method_id=TransactionItemMethodId.CARD,
                    amount_in_cents=4599,
                    description="Printer toner",
                ),
                TransactionItemInput(type_id=TransactionItemTypeId.FEE, amount_in_cents=101),
            ],
            description="Office supplies",
            category_id=TransactionCategoryId.OPERATING_EXPENSES,
            actor_id=ledger.admin_id,
        )

        assert result.ok is True
        assert result.notice.level == NoticeLevel.SUCCESS
        assert result.notice.description == "Expense of $47.00 charged to account 1000"

        transaction = result.transactions[0]
        assert transaction.amount_in_cents == -4700
        assert [item.amount_in_cents for item in transaction.items] == [-4599, -101]
        assert sum(item.amount_in_cents for item in transaction.items) == (
            transaction.amount_in_cents
        )

        balance = await BalanceCalculationService(session).calculate_account_balance(
            ledger.operating_id
        )
        assert balance == -4700

        audit = (await session.execute(select(AuditLog))).scalars().all()
        assert [(a.entity_type, a.action, a.entity_id) for a in audit] == [
            ("transaction", "create", transaction.id)
        ]
        assert audit[0].actor_id == ledger.admin_id

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_income_notice_mentions_credit(self, session, ledger):
        result = await TransactionService(session).create_transaction(
            ledger.org_id,
            ledger.benevolence_id,
            date(2026, 3, 2),
            [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=123456)],
        )

        assert result.notice.description == "Income of $1,234.56 credited to account 2000"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_contact_and_receipts_are_attached(self, session, ledger):
        contact = Contact(org_id=ledger.org_id, organization_name="Bright Paper Co")
        receipt = Receipt(
            org_id=ledger.org_id, user_id=ledger.admin_id, title="Invoice 17", s3_key="r/17.pdf"
        )
        session.add_all([contact, receipt])
        await session.commit()
        contact_id, receipt_id = contact.id, receipt.id

        result = await TransactionService(session).create_transaction(
            ledger.org_id,
            ledger.operating_id,
            date(2026, 3, 2),
            [TransactionItemInput(type_id=TransactionItemTypeId.EXPENSE, amount_in_cents=900)],
            contact_id=contact_id,
            receipt_ids=[receipt_id],
        )

        transaction = result.transactions[0]
        assert transaction.contact_id == contact_id
        assert [r.id for r in transaction.receipts] == [receipt_id]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_items_rejected(self, session, ledger):
        with pytest.raises(ValidationFailure) as exc_info:
            await TransactionService(session).create_transaction(
                ledger.org_id, ledger.operating_id, date(2026, 3, 2), []
            )

        assert exc_info.value.field_errors == {"items": "At least one item is required."}
        assert await count(session, Transaction) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_account_of_other_org_rejected(self, session, ledger):
        with pytest.raises(ValidationFailure) as exc_info:
            await TransactionService(session).create_transaction(
                ledger.org_id,
                ledger.other_org_account_id,
                date(2026, 3, 2),
                [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=1)],
            )

        assert exc_info.value.field_errors == {"account_id": "Account not found."}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_references_reported_together(self, session, ledger):
        with pytest.raises(ValidationFailure) as exc_info:
            await TransactionService(session).create_transaction(
                ledger.org_id,
                ledger.operating_id,
                date(2026, 3, 2),
                [
                    TransactionItemInput(
                        type_id=TransactionItemTypeId.DONATION,
                        method_id=404,
                        amount_in_cents=100,
                    )
                ],
                category_id=404,
                contact_id=404,
            )

        assert exc_info.value.field_errors == {
            "category_id": "Category not found.",
            "contact_id": "Contact not found.",
            "items.0.method_id": "Method not found.",
        }

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_type_writes_nothing(self, session, ledger):
        with pytest.raises(InvalidTypeError):
            await TransactionService(session).create_transaction(
                ledger.org_id,
                ledger.operating_id,
                date(2026, 3, 2),
                [TransactionItemInput(type_id=777, amount_in_cents=100)],
            )

        assert await count(session, Transaction) == 0
        assert await count(session, TransactionItem) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_receipt_from_other_org_rejected(self, session, ledger):
        receipt = Receipt(
            org_id=ledger.other_org_id, user_id=ledger.admin_id, title="x", s3_key="x"
        )
        session.add(receipt)
        await session.commit()
        receipt_id = receipt.id

        with pytest.raises(ValidationFailure) as exc_info:
            await TransactionService(session).create_transaction(
                ledger.org_id,
                ledger.operating_id,
                date(2026, 3, 2),
                [TransactionItemInput(type_id=TransactionItemTypeId.EXPENSE, amount_in_cents=1)],
                receipt_ids=[receipt_id],
            )

        assert exc_info.value.field_errors == {"receipt_ids": "Receipt not found."}


class TestReadAndMaintain:
    """Tests for get/list/update/delete."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_transactions_newest_first(self, session, ledger, fund):
        service = TransactionService(session)
        older = await fund(ledger.operating_id, 100)
        newer = (
            await service.create_transaction(
                ledger.org_id,
                ledger.operating_id,
                date(2026, 2, 1),
                [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=50)],
            )
        ).transactions[0].id
        await fund(ledger.benevolence_id, 999)

        transactions = await service.list_transactions(ledger.org_id, ledger.operating_id)

        assert [t.id for t in transactions] == [newer, older]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_list_transactions_for_foreign_account_not_found(self, session, ledger):
        with pytest.raises(NotFoundError):
            await TransactionService(session).list_transactions(
                ledger.org_id, ledger.other_org_account_id
            )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_transaction_scoped_to_org(self, session, ledger, fund):
        transaction_id = await fund(ledger.operating_id, 100)
        service = TransactionService(session)

        transaction = await service.get_transaction(ledger.org_id, transaction_id)
        assert transaction.items[0].amount_in_cents == 100

        with pytest.raises(NotFoundError) as exc_info:
            await service.get_transaction(ledger.other_org_id, transaction_id)
        assert exc_info.value.http_status == 404

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_update_changes_date_description_category(self, session, ledger, fund):
        transaction_id = await fund(ledger.operating_id, 2500)

        transaction = await TransactionService(session).update_transaction(
            ledger.org_id,
            transaction_id,
            {
                "transaction_date": date(2026, 1, 31),
                "description": "Year-end gift",
                "category_id": TransactionCategoryId.GRANTS,
            },
            actor_id=ledger.admin_id,
        )

        assert transaction.transaction_date == date(2026, 1, 31)
        assert transaction.description == "Year-end gift"
        assert transaction.category_id == TransactionCategoryId.GRANTS
        assert transaction.amount_in_cents == 2500

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_update_refuses_amount_change(self, session, ledger, fund):
        transaction_id = await fund(ledger.operating_id, 2500)

        with pytest.raises(ValidationFailure) as exc_info:
            await TransactionService(session).update_transaction(
                ledger.org_id, transaction_id, {"amount_in_cents": 1}
            )

        assert "amount_in_cents" in exc_info.value.field_errors
        balance = await BalanceCalculationService(session).calculate_account_balance(
            ledger.operating_id
        )
        assert balance == 2500

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_removes_items_and_keeps_receipts(self, session, ledger):
        receipt = Receipt(org_id=ledger.org_id, user_id=ledger.admin_id, title="r", s3_key="r")
        session.add(receipt)
        await session.commit()
        receipt_id = receipt.id
        service = TransactionService(session)
        transaction_id = (
            await service.create_transaction(
                ledger.org_id,
                ledger.operating_id,
                date(2026, 3, 2),
                [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=10)],
                receipt_ids=[receipt_id],
            )
        ).transactions[0].id

        await service.delete_transaction(ledger.org_id, transaction_id, actor_id=ledger.admin_id)

        assert await count(session, Transaction) == 0
        assert await count(session, TransactionItem) == 0
        assert await count(session, Receipt) == 1
        with pytest.raises(NotFoundError):
            await service.get_transaction(ledger.org_id, transaction_id)
