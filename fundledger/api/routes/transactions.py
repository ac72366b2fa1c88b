"""Transaction endpoints (expense and income entry, edit, delete)."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_admin, get_current_member, server_error
from fundledger.api.schemas import (
    PostingResponse,
    TransactionCreatePayload,
    TransactionResponse,
    TransactionUpdatePayload,
)
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.errors import AppError
from fundledger.services.transaction_service import TransactionItemInput, TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.post("", response_model=PostingResponse, status_code=201)
async def create_transaction(
    payload: TransactionCreatePayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> PostingResponse:
    """Post an expense or income entry; item types decide the sign."""
    try:
        result = await TransactionService(session).create_transaction(
            member.org_id,
            account_id=payload.account_id,
            transaction_date=payload.transaction_date,
            items=[
                TransactionItemInput(
                    type_id=item.type_id,
                    method_id=item.method_id,
                    amount_in_cents=item.amount,
                    description=item.description,
                )
                for item in payload.items
            ],
            description=payload.description,
            category_id=payload.category_id,
            contact_id=payload.contact_id,
            receipt_ids=payload.receipt_ids,
            actor_id=member.user_id,
        )
        return PostingResponse.from_result(result)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/transactions", e) from e


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> TransactionResponse:
    try:
        transaction = await TransactionService(session).get_transaction(
            member.org_id, transaction_id
        )
        return TransactionResponse.from_transaction(transaction)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"GET /api/transactions/{transaction_id}", e) from e


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: int,
    payload: TransactionUpdatePayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> TransactionResponse:
    """Edit date, description or category. Amounts cannot change."""
    try:
        transaction = await TransactionService(session).update_transaction(
            member.org_id,
            transaction_id,
            payload.model_dump(exclude_unset=True),
            actor_id=member.user_id,
        )
        return TransactionResponse.from_transaction(transaction)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"PUT /api/transactions/{transaction_id}", e) from e


@router.delete("/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> Response:
    try:
        await TransactionService(session).delete_transaction(
            member.org_id, transaction_id, actor_id=member.user_id
        )
        return Response(status_code=204)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"DELETE /api/transactions/{transaction_id}", e) from e
