"""Unit tests for signed line item generation."""

import pytest

from fundledger.constants import TransactionItemMethodId, TransactionItemTypeId
from fundledger.models.transaction_item_type import (
    TransactionItemType,
    TransactionItemTypeDirection,
)
from fundledger.services.errors import InvalidTypeError, ValidationFailure
from fundledger.services.transaction_service import TransactionItemInput, TransactionService


@pytest.mark.unit
@pytest.mark.asyncio
async def test_incoming_type_keeps_amount_positive(session, ledger):
    service = TransactionService(session)

    generated = await service.generate_items(
        [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=5000)],
        ledger.org_id,
    )

    assert generated.total_in_cents == 5000
    assert [item.amount_in_cents for item in generated.transaction_items] == [5000]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_outgoing_type_negates_amount(session, ledger):
    service = TransactionService(session)

    generated = await service.generate_items(
        [TransactionItemInput(type_id=TransactionItemTypeId.FEE, amount_in_cents=200)],
        ledger.org_id,
    )

    assert generated.total_in_cents == -200
    assert generated.transaction_items[0].amount_in_cents == -200


@pytest.mark.unit
@pytest.mark.asyncio
async def test_mixed_items_total_is_sum_of_signed_amounts(session, ledger):
    service = TransactionService(session)
    items = [
        TransactionItemInput(
            type_id=TransactionItemTypeId.DONATION,
            amount_in_cents=10000,
            method_id=TransactionItemMethodId.CHECK,
            description="Sunday offering",
        ),
        TransactionItemInput(type_id=TransactionItemTypeId.FEE, amount_in_cents=350),
        TransactionItemInput(type_id=TransactionItemTypeId.EXPENSE, amount_in_cents=1250),
        TransactionItemInput(type_id=TransactionItemTypeId.GRANT, amount_in_cents=0),
    ]

    generated = await service.generate_items(items, ledger.org_id)

    signed = [item.amount_in_cents for item in generated.transaction_items]
    assert signed == [10000, -350, -1250, 0]
    assert generated.total_in_cents == sum(signed) == 8400
    assert generated.transaction_items[0].method_id == TransactionItemMethodId.CHECK
    assert generated.transaction_items[0].description == "Sunday offering"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_item_list_yields_zero_total(session, ledger):
    generated = await TransactionService(session).generate_items([], ledger.org_id)

    assert generated.total_in_cents == 0
    assert generated.transaction_items == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_type_raises_invalid_type_error(session, ledger):
    service = TransactionService(session)
    items = [
        TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=100),
        TransactionItemInput(type_id=9999, amount_in_cents=100),
    ]

    with pytest.raises(InvalidTypeError) as exc_info:
        await service.generate_items(items, ledger.org_id)

    assert exc_info.value.type_id == 9999
    assert exc_info.value.field_errors == {
        "items.1.type_id": "Invalid transaction item typeId: 9999"
    }
    assert exc_info.value.http_status == 422


@pytest.mark.unit
@pytest.mark.asyncio
async def test_org_specific_type_is_only_visible_to_its_org(session, ledger):
    custom = TransactionItemType(
        name="Scholarship_Refund",
        direction=TransactionItemTypeDirection.OUT,
        org_id=ledger.org_id,
    )
    session.add(custom)
    await session.commit()
    custom_id = custom.id
    service = TransactionService(session)

    generated = await service.generate_items(
        [TransactionItemInput(type_id=custom_id, amount_in_cents=750)], ledger.org_id
    )
    assert generated.total_in_cents == -750

    with pytest.raises(InvalidTypeError):
        await service.generate_items(
            [TransactionItemInput(type_id=custom_id, amount_in_cents=750)], ledger.other_org_id
        )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_negative_raw_amount_is_rejected(session, ledger):
    with pytest.raises(ValidationFailure) as exc_info:
        await TransactionService(session).generate_items(
            [TransactionItemInput(type_id=TransactionItemTypeId.DONATION, amount_in_cents=-5)],
            ledger.org_id,
        )

    assert "items.0.amount" in exc_info.value.field_errors
