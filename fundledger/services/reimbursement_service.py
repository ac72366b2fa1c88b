"""Reimbursement request lifecycle and approval postings.

Status transitions::

    PENDING -> APPROVED | REJECTED | VOID
    APPROVED | REJECTED | VOID -> PENDING   (reopen)

The caller names the target status directly. Approval posts one negative
transaction against the chosen account, linked back to the request by
``Transaction.reimbursement_request_id``, and is refused (nothing written,
request left PENDING) when the account balance is below the amount.
Reopening never reverses an earlier approval posting.

The requester is e-mailed after every committed transition.
"""

import logging
from datetime import date
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fundledger.constants import (
    REIMBURSEMENT_ITEM_DESCRIPTION,
    TransactionItemMethodId,
    TransactionItemTypeId,
)
from fundledger.models.reimbursement_request import (
    ReimbursementRequest,
    ReimbursementRequestStatus,
)
from fundledger.models.transaction import Transaction
from fundledger.models.transaction_category import TransactionCategory
from fundledger.models.transaction_item_method import TransactionItemMethod
from fundledger.services.audit_service import AuditService
from fundledger.services.balance_service import BalanceCalculationService
from fundledger.services.errors import (
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationFailure,
)
from fundledger.services.locale_service import format_cents
from fundledger.services.notification_service import NotificationService
from fundledger.services.outcomes import Notice, NoticeLevel, PostingResult
from fundledger.services.transaction_service import TransactionItemInput, TransactionService

logger = logging.getLogger(__name__)

Status = ReimbursementRequestStatus

TERMINAL_STATUSES = frozenset({Status.APPROVED, Status.REJECTED, Status.VOID})

ALLOWED_TRANSITIONS: dict[ReimbursementRequestStatus, frozenset[ReimbursementRequestStatus]] = {
    Status.PENDING: TERMINAL_STATUSES,
    Status.APPROVED: frozenset({Status.PENDING}),
    Status.REJECTED: frozenset({Status.PENDING}),
    Status.VOID: frozenset({Status.PENDING}),
}


def is_allowed_transition(
    current: ReimbursementRequestStatus, target: ReimbursementRequestStatus
) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def parse_status(value: ReimbursementRequestStatus | str) -> ReimbursementRequestStatus:
    """Accept a status enum or its (case-insensitive) name."""
    if isinstance(value, ReimbursementRequestStatus):
        return value
    try:
        return ReimbursementRequestStatus(str(value).strip().upper())
    except ValueError as e:
        raise ValidationFailure({"status": f"Unknown status: {value}"}) from e


class ReimbursementService:
    """Create, list and transition reimbursement requests."""

    def __init__(self, session: AsyncSession, notifier: NotificationService | None = None):
        """Initialize service.

        Args:
            session: AsyncSession for database operations
            notifier: Notification sender (default: SES-backed NotificationService)
        """
        self.session = session
        self.notifier = notifier or NotificationService()
        self.balances = BalanceCalculationService(session)
        self.transactions = TransactionService(session)

    async def create_request(
        self,
        org_id: int,
        user_id: int,
        account_id: int,
        amount_in_cents: int,
        expense_date: date,
        vendor: str | None = None,
        description: str | None = None,
        method_id: int | None = None,
        receipt_ids: Iterable[int] = (),
    ) -> ReimbursementRequest:
        """Create a PENDING request on behalf of ``user_id``.

        Raises:
            ValidationFailure: Non-positive amount, or account, method or
                receipts outside the organization
        """
        if amount_in_cents <= 0:
            raise ValidationFailure({"amount": "Must be greater than $0.00"})

        try:
            field_errors: dict[str, str] = {}
            if await self.transactions.get_account(org_id, account_id) is None:
                field_errors["account_id"] = "Account not found."
            if method_id is not None and not await self.transactions.reference.is_visible(
                TransactionItemMethod, method_id, org_id
            ):
                field_errors["method_id"] = "Method not found."
            if field_errors:
                raise ValidationFailure(field_errors)

            receipts = await self.transactions.load_receipts(org_id, receipt_ids)

            request = ReimbursementRequest(
                org_id=org_id,
                user_id=user_id,
                account_id=account_id,
                method_id=method_id,
                amount_in_cents=amount_in_cents,
                expense_date=expense_date,
                vendor=vendor,
                description=description,
                status=Status.PENDING,
            )
            request.receipts = receipts
            self.session.add(request)
            await self.session.flush()

            AuditService.log(
                self.session,
                org_id,
                "reimbursement_request",
                request.id,
                "create",
                actor_id=user_id,
                changes={"amount_in_cents": amount_in_cents, "account_id": account_id},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Reimbursement request {request.id} created by user {user_id} "
            f"for {amount_in_cents} cents"
        )
        return request

    async def get_request(self, org_id: int, request_id: int) -> ReimbursementRequest:
        """Get a request with its receipts.

        Raises:
            NotFoundError: If the request is not in the organization
        """
        stmt = (
            select(ReimbursementRequest)
            .where(ReimbursementRequest.id == request_id, ReimbursementRequest.org_id == org_id)
            .options(selectinload(ReimbursementRequest.receipts))
        )
        result = await self.session.execute(stmt)
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFoundError("Reimbursement request", request_id)
        return request

    async def list_requests(
        self,
        org_id: int,
        user_id: int | None = None,
        status: ReimbursementRequestStatus | None = None,
    ) -> list[ReimbursementRequest]:
        """List requests, newest first.

        Args:
            org_id: Organization to list
            user_id: Only this requester's requests (None for all)
            status: Only requests in this status (None for all)
        """
        stmt = (
            select(ReimbursementRequest)
            .where(ReimbursementRequest.org_id == org_id)
            .options(selectinload(ReimbursementRequest.receipts))
            .order_by(ReimbursementRequest.created_at.desc(), ReimbursementRequest.id.desc())
        )
        if user_id is not None:
            stmt = stmt.where(ReimbursementRequest.user_id == user_id)
        if status is not None:
            stmt = stmt.where(ReimbursementRequest.status == status)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_request(
        self, org_id: int, request_id: int, actor_id: int | None = None
    ) -> None:
        """Delete a request. Postings it produced stay, unlinked.

        Raises:
            NotFoundError: If the request is not in the organization
        """
        try:
            request = await self.get_request(org_id, request_id)
            await self.session.execute(
                update(Transaction)
                .where(Transaction.reimbursement_request_id == request_id)
                .values(reimbursement_request_id=None)
            )
            await self.session.delete(request)
            AuditService.log(
                self.session,
                org_id,
                "reimbursement_request",
                request_id,
                "delete",
                actor_id=actor_id,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Reimbursement request {request_id} deleted by user {actor_id}")

    async def get_related_transaction(self, org_id: int, request_id: int) -> Transaction | None:
        """Latest posting produced by approving this request, if any."""
        stmt = (
            select(Transaction)
            .where(
                Transaction.org_id == org_id,
                Transaction.reimbursement_request_id == request_id,
            )
            .options(selectinload(Transaction.items), selectinload(Transaction.receipts))
            .order_by(Transaction.id.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def _lock_request(self, org_id: int, request_id: int) -> ReimbursementRequest:
        stmt = (
            select(ReimbursementRequest)
            .where(ReimbursementRequest.id == request_id, ReimbursementRequest.org_id == org_id)
            .options(
                selectinload(ReimbursementRequest.user),
                selectinload(ReimbursementRequest.receipts),
            )
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFoundError("Reimbursement request", request_id)
        return request

    async def _validate_approval(
        self,
        org_id: int,
        amount_in_cents: int | None,
        category_id: int | None,
        account_id: int | None,
    ) -> None:
        field_errors: dict[str, str] = {}
        if account_id is None:
            field_errors["account_id"] = "Account is required for approvals."
        if amount_in_cents is None or amount_in_cents <= 0:
            field_errors["amount"] = "Must be greater than $0.00"
        if category_id is None:
            field_errors["category_id"] = "Category is required for approvals."
        elif not await self.transactions.reference.is_visible(
            TransactionCategory, category_id, org_id
        ):
            field_errors["category_id"] = "Category not found."
        if field_errors:
            raise ValidationFailure(field_errors)

    async def change_status(
        self,
        org_id: int,
        request_id: int,
        target: ReimbursementRequestStatus | str,
        actor_id: int | None = None,
        amount_in_cents: int | None = None,
        category_id: int | None = None,
        account_id: int | None = None,
        approver_note: str | None = None,
    ) -> PostingResult:
        """Move a request to ``target`` status.

        ``amount_in_cents``, ``category_id`` and ``account_id`` are required
        only when ``target`` is APPROVED.

        Returns:
            PostingResult; on insufficient funds ``ok`` is False, nothing is
            written and the request stays PENDING

        Raises:
            NotFoundError: Request not in the organization
            InvalidStatusTransitionError: Transition not allowed from the current status
            ValidationFailure: Missing approval fields or unknown account/category
        """
        target = parse_status(target)
        if target == Status.APPROVED:
            await self._validate_approval(org_id, amount_in_cents, category_id, account_id)

        posting: Transaction | None = None
        try:
            request = await self._lock_request(org_id, request_id)
            current = request.status
            if not is_allowed_transition(current, target):
                raise InvalidStatusTransitionError(current.value, target.value)

            if target == Status.APPROVED:
                accounts = await self.balances.lock_accounts(org_id, [account_id])
                account = accounts.get(account_id)
                if account is None:
                    raise ValidationFailure({"account_id": "Account not found."})

                balance = await self.balances.calculate_account_balance(account.id)
                if balance < amount_in_cents:
                    account_code = account.code
                    await self.session.rollback()
                    logger.warning(
                        f"Approval of reimbursement request {request_id} for {amount_in_cents} "
                        f"cents rejected: account {account_code} balance is {balance} cents"
                    )
                    return PostingResult.rejected(
                        "Insufficient Funds",
                        "The reimbursement request couldn't be completed because account "
                        f"{account_code} has a balance of {format_cents(balance)}.",
                    )

                generated = await self.transactions.generate_items(
                    [
                        TransactionItemInput(
                            type_id=TransactionItemTypeId.OTHER_OUTGOING,
                            method_id=TransactionItemMethodId.OTHER,
                            amount_in_cents=amount_in_cents,
                            description=REIMBURSEMENT_ITEM_DESCRIPTION.format(
                                request_id=request.id
                            ),
                        )
                    ],
                    org_id,
                )
                posting = self.transactions.build_transaction(
                    org_id,
                    account.id,
                    date.today(),
                    generated,
                    description=approver_note,
                    category_id=category_id,
                    reimbursement_request_id=request.id,
                )
                self.session.add(posting)

            request.status = target
            if approver_note is not None:
                request.approver_note = approver_note
            await self.session.flush()

            changes = {"from": current.value, "to": target.value}
            if posting is not None:
                changes["transaction_id"] = posting.id
                changes["amount_in_cents"] = posting.amount_in_cents
            AuditService.log(
                self.session,
                org_id,
                "reimbursement_request",
                request.id,
                target.value.lower(),
                actor_id=actor_id,
                changes=changes,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Reimbursement request {request_id} moved {current.value} -> {target.value} "
            f"by user {actor_id}"
        )

        try:
            await self.notifier.send_status_change_notification(request.user.email, target)
        except Exception as e:
            # Status change is already committed
            logger.error(
                f"Notification for reimbursement request {request_id} failed: {e}", exc_info=True
            )

        return PostingResult(
            ok=True,
            notice=self._notice_for(target, account.code if posting is not None else None),
            transactions=[posting] if posting is not None else [],
            reimbursement_request=request,
        )

    @staticmethod
    def _notice_for(target: ReimbursementRequestStatus, account_code: str | None) -> Notice:
        if target == Status.APPROVED:
            return Notice(
                NoticeLevel.SUCCESS,
                "Reimbursement Request Approved",
                f"The reimbursement request was approved and account {account_code} "
                "has been adjusted.",
            )
        if target == Status.REJECTED:
            return Notice(NoticeLevel.SUCCESS, "Reimbursement request rejected")
        if target == Status.VOID:
            return Notice(NoticeLevel.SUCCESS, "Reimbursement request voided")
        return Notice(
            NoticeLevel.INFO,
            "Reimbursement request reopened",
            "The reimbursement request has been reopened and the requester will be notified.",
        )


__all__ = [
    "ALLOWED_TRANSITIONS",
    "TERMINAL_STATUSES",
    "ReimbursementService",
    "is_allowed_transition",
    "parse_status",
]
