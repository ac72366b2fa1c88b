"""Receipt record endpoints.

The file itself is uploaded to object storage by the client; these
endpoints only record and remove the pointers to it.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_member, server_error
from fundledger.api.schemas import (
    ReceiptCreatePayload,
    ReceiptDeletePayload,
    ReceiptDeleteResponse,
    ReceiptResponse,
)
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.errors import AppError
from fundledger.services.receipt_service import ReceiptService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/receipts", tags=["receipts"])


@router.get("", response_model=list[ReceiptResponse])
async def list_receipts(
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[ReceiptResponse]:
    """Members see their own uploads; admins see the whole organization's."""
    try:
        receipts = await ReceiptService(session).list_receipts(
            member.org_id, user_id=None if member.is_admin else member.user_id
        )
        return [ReceiptResponse.model_validate(receipt) for receipt in receipts]
    except Exception as e:
        raise await server_error(session, "GET /api/receipts", e) from e


@router.post("", response_model=ReceiptResponse, status_code=201)
async def create_receipt(
    payload: ReceiptCreatePayload,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> ReceiptResponse:
    try:
        receipt = await ReceiptService(session).create_receipt(
            member.org_id, member.user_id, title=payload.title, s3_key=payload.s3_key
        )
        return ReceiptResponse.model_validate(receipt)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/receipts", e) from e


@router.delete("", response_model=ReceiptDeleteResponse)
async def delete_receipts(
    payload: ReceiptDeletePayload,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> ReceiptDeleteResponse:
    """Delete receipts by id; the body is ``{"ids": [...]}``."""
    try:
        count = await ReceiptService(session).delete_receipts(member, payload.ids)
        return ReceiptDeleteResponse(count=count)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "DELETE /api/receipts", e) from e
