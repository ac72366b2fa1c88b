"""Account endpoints."""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.api.dependencies import get_current_admin, get_current_member, server_error
from fundledger.api.schemas import (
    AccountCreatePayload,
    AccountResponse,
    AccountUpdatePayload,
    TransactionResponse,
)
from fundledger.services import get_async_session
from fundledger.services.account_service import AccountService, AccountWithBalance
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.errors import AppError
from fundledger.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


def _account_response(view: AccountWithBalance) -> AccountResponse:
    response = AccountResponse.model_validate(view.account)
    response.balance_in_cents = view.balance_in_cents
    return response


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    mine: bool = False,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[AccountResponse]:
    """List the organization's accounts with balances, ordered by code.

    Args:
        mine: Only accounts linked to the caller
    """
    try:
        views = await AccountService(session).list_accounts(
            member.org_id, user_id=member.user_id if mine else None
        )
        return [_account_response(view) for view in views]
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "GET /api/accounts", e) from e


@router.post("", response_model=AccountResponse, status_code=201)
async def create_account(
    payload: AccountCreatePayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> AccountResponse:
    try:
        account = await AccountService(session).create_account(
            member.org_id,
            code=payload.code,
            description=payload.description,
            type_id=payload.type_id,
            user_id=payload.user_id,
            actor_id=member.user_id,
        )
        return _account_response(AccountWithBalance(account=account, balance_in_cents=0))
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, "POST /api/accounts", e) from e


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> AccountResponse:
    try:
        account = await AccountService(session).get_account(member.org_id, account_id)
        return _account_response(account)
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"GET /api/accounts/{account_id}", e) from e


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    payload: AccountUpdatePayload,
    member: AuthorizedMember = Depends(get_current_admin),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> AccountResponse:
    try:
        service = AccountService(session)
        await service.update_account(
            member.org_id,
            account_id,
            payload.model_dump(exclude_unset=True),
            actor_id=member.user_id,
        )
        return _account_response(await service.get_account(member.org_id, account_id))
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"PUT /api/accounts/{account_id}", e) from e


@router.get("/{account_id}/transactions", response_model=list[TransactionResponse])
async def list_account_transactions(
    account_id: int,
    member: AuthorizedMember = Depends(get_current_member),  # noqa: B008
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[TransactionResponse]:
    """Transactions posted against an account, newest first."""
    try:
        transactions = await TransactionService(session).list_transactions(
            member.org_id, account_id
        )
        return [TransactionResponse.from_transaction(t) for t in transactions]
    except AppError:
        raise
    except Exception as e:
        raise await server_error(session, f"GET /api/accounts/{account_id}/transactions", e) from e
