"""Reimbursement request endpoints."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import (
    get_current_admin,
    get_current_member,
    get_notifier,
    server_error,
)
from fundledger.api.schemas import (
    PostingResponse,
    ReimbursementCreatePayload,
    ReimbursementDetailResponse,
    ReimbursementResponse,
    ReimbursementStatusPayload,
    TransactionResponse,
)
from fundledger.models.reimbursement_request import ReimbursementRequestStatus
from fundledger.services import get_async_session
from fundledger.services.auth_service import AuthorizedMember, authorize_request_access
from fundledger.services.errors import AppError
from fundledger.services.notification_service import NotificationService
from fundledger.services.reimbursement_service import ReimbursementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reimbursements", tags=["reimbursements"])


@router.post("", response_model=ReimbursementResponse, status_code=201)
async def create_reimbursement(
    payload: ReimbursementCreatePayload,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    notifier: NotificationService = Depends(get_notifier),  # noqa: B008
) -> ReimbursementResponse:
    """Submit a reimbursement request as the caller (starts PENDING)."""
    try:
        request = await ReimbursementService(session, notifier).create_request(
            member.org_id,
            user_id=member.user_id,
            account_id=payload.account_id,
            amount_in_cents=payload.amount,
            expense_date=payload.expense_date,
            vendor=payload.vendor,
            description=payload.description,
            method_id=payload.method_id,
            receipt_ids=payload.receipt_ids,
        )
        return ReimbursementResponse.from_request(request)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/reimbursements", e) from e


@router.get("", response_model=list[ReimbursementResponse])
async def list_reimbursements(
    status: ReimbursementRequestStatus | None = None,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    notifier: NotificationService = Depends(get_notifier),  # noqa: B008
) -> list[ReimbursementResponse]:
    """Members see their own requests; admins see every request in the org."""
    try:
        requests = await ReimbursementService(session, notifier).list_requests(
            member.org_id,
            user_id=None if member.is_admin else member.user_id,
            status=status,
        )
        return [ReimbursementResponse.from_request(request) for request in requests]
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "GET /api/reimbursements", e) from e


@router.get("/{request_id}", response_model=ReimbursementDetailResponse)
async def get_reimbursement(
    request_id: int,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    notifier: NotificationService = Depends(get_notifier),  # noqa: B008
) -> ReimbursementDetailResponse:
    """Get a request and the posting its latest approval produced, if any."""
    try:
        service = ReimbursementService(session, notifier)
        request = await service.get_request(member.org_id, request_id)
        authorize_request_access(member, request)

        related = await service.get_related_transaction(member.org_id, request_id)
        return ReimbursementDetailResponse(
            **ReimbursementResponse.from_request(request).model_dump(),
            related_transaction=TransactionResponse.from_transaction(related) if related else None,
        )
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"GET /api/reimbursements/{request_id}", e) from e


@router.delete("/{request_id}", status_code=204)
async def delete_reimbursement(
    request_id: int,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    notifier: NotificationService = Depends(get_notifier),  # noqa: B008
) -> Response:
    try:
        service = ReimbursementService(session, notifier)
        request = await service.get_request(member.org_id, request_id)
        authorize_request_access(member, request)

        await service.delete_request(member.org_id, request_id, actor_id=member.user_id)
        return Response(status_code=204)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"DELETE /api/reimbursements/{request_id}", e) from e


@router.post("/{request_id}/status", response_model=PostingResponse)
async def change_reimbursement_status(
    request_id: int,
    payload: ReimbursementStatusPayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    notifier: NotificationService = Depends(get_notifier),  # noqa: B008
) -> PostingResponse:
    """Move a request to the submitted status.

    Approving requires ``amount``, ``category_id`` and ``account_id``. An
    approval the account cannot cover is answered with 200 and ``ok: false``.
    """
    try:
        result = await ReimbursementService(session, notifier).change_status(
            member.org_id,
            request_id,
            payload.status,
            actor_id=member.user_id,
            amount_in_cents=payload.amount,
            category_id=payload.category_id,
            account_id=payload.account_id,
            approver_note=payload.approver_note,
        )
        return PostingResponse.from_result(result)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"POST /api/reimbursements/{request_id}/status", e) from e
