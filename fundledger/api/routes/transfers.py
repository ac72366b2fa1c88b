"""Transfer endpoint."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_admin, server_error
from fundledger.api.schemas import PostingResponse, TransferPayload
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.errors import AppError
from fundledger.services.transfer_service import TransferService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/transfers", tags=["transfers"])


@router.post("", response_model=PostingResponse)
async def create_transfer(
    payload: TransferPayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> PostingResponse:
    """Move money between two accounts.

    Insufficient funds is answered with 200 and ``ok: false``.
    """
    try:
        result = await TransferService(session).transfer(
            member.org_id,
            from_account_id=payload.from_account_id,
            to_account_id=payload.to_account_id,
            amount_in_cents=payload.amount,
            transaction_date=payload.transaction_date,
            description=payload.description,
            actor_id=member.user_id,
        )
        return PostingResponse.from_result(result)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/transfers", e) from e
