"""Unit tests for receipt records."""

from datetime import date

import pytest
from sqlalchemy import func, select

from fundledger.constants import TransactionItemTypeId
from fundledger.models.receipt import Receipt, transaction_receipts
from fundledger.models.transaction import Transaction
from fundledger.services.auth_service import get_authorized_member
from fundledger.services.errors import ForbiddenError, ValidationFailure
from fundledger.services.receipt_service import ReceiptService
from fundledger.services.transaction_service import TransactionItemInput, TransactionService


@pytest.fixture
def receipts(session):
    return ReceiptService(session)


async def count(session, stmt) -> int:
    return (await session.execute(stmt)).scalar_one()


class TestCreateReceipt:
    """Tests for ReceiptService.create_receipt."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_records_uploader(self, receipts, ledger):
        receipt = await receipts.create_receipt(
            ledger.org_id, ledger.member_id, title=" Groceries ", s3_key="grace/r-1.pdf"
        )

        assert receipt.user_id == ledger.member_id
        assert receipt.title == "Groceries"
        assert receipt.s3_key == "grace/r-1.pdf"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_title_and_key_required(self, receipts, ledger):
        with pytest.raises(ValidationFailure) as exc_info:
            await receipts.create_receipt(ledger.org_id, ledger.member_id, title="", s3_key=" ")

        assert set(exc_info.value.field_errors) == {"title", "s3_key"}


class TestListReceipts:
    """Tests for ReceiptService.list_receipts."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_filtered_by_uploader(self, receipts, ledger):
        await receipts.create_receipt(ledger.org_id, ledger.member_id, "Mine", "k/1")
        await receipts.create_receipt(ledger.org_id, ledger.admin_id, "Admin's", "k/2")
        await receipts.create_receipt(ledger.other_org_id, ledger.admin_id, "Harbor", "k/3")

        everyone = await receipts.list_receipts(ledger.org_id)
        mine = await receipts.list_receipts(ledger.org_id, user_id=ledger.member_id)

        assert [r.title for r in everyone] == ["Admin's", "Mine"]
        assert [r.title for r in mine] == ["Mine"]


class TestDeleteReceipts:
    """Tests for ReceiptService.delete_receipts."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_member_deletes_own(self, session, receipts, ledger):
        member = await get_authorized_member(session, ledger.member_id, ledger.org_id)
        receipt = await receipts.create_receipt(ledger.org_id, ledger.member_id, "Mine", "k/1")

        assert await receipts.delete_receipts(member, [receipt.id, receipt.id]) == 1
        assert await count(session, select(func.count()).select_from(Receipt)) == 0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_member_cannot_delete_others(self, session, receipts, ledger):
        member = await get_authorized_member(session, ledger.member_id, ledger.org_id)
        mine = await receipts.create_receipt(ledger.org_id, ledger.member_id, "Mine", "k/1")
        theirs = await receipts.create_receipt(ledger.org_id, ledger.admin_id, "Theirs", "k/2")

        with pytest.raises(ForbiddenError):
            await receipts.delete_receipts(member, [mine.id, theirs.id])

        assert await count(session, select(func.count()).select_from(Receipt)) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_admin_deletes_any_but_not_other_orgs(self, session, receipts, ledger):
        admin = await get_authorized_member(session, ledger.admin_id, ledger.org_id)
        member_upload = await receipts.create_receipt(
            ledger.org_id, ledger.member_id, "Mine", "k/1"
        )
        foreign = await receipts.create_receipt(
            ledger.other_org_id, ledger.admin_id, "Harbor", "k/2"
        )

        assert await receipts.delete_receipts(admin, [member_upload.id, foreign.id]) == 1
        remaining = (await session.execute(select(Receipt.id))).scalars().all()
        assert remaining == [foreign.id]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_attached_receipt_detached_from_posting(self, session, receipts, ledger):
        admin = await get_authorized_member(session, ledger.admin_id, ledger.org_id)
        receipt = await receipts.create_receipt(ledger.org_id, ledger.admin_id, "Invoice", "k/1")
        await TransactionService(session).create_transaction(
            ledger.org_id,
            ledger.operating_id,
            date(2026, 3, 2),
            [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=2500)],
            receipt_ids=[receipt.id],
        )

        assert await receipts.delete_receipts(admin, [receipt.id]) == 1

        links = await count(session, select(func.count()).select_from(transaction_receipts))
        postings = await count(session, select(func.count()).select_from(Transaction))
        assert links == 0
        assert postings == 1
