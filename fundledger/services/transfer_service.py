"""Transfers between two accounts of the same organization.

A transfer is a pair of postings: a Transfer_Out item on the source
account and a Transfer_In item on the destination, both for the same
amount and date. Both rows are committed together or not at all, and
the source balance is checked while its row is locked.
"""

import logging
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.constants import TransactionCategoryId, TransactionItemTypeId
from fundledger.services.audit_service import AuditService
from fundledger.services.balance_service import BalanceCalculationService
from fundledger.services.errors import ValidationFailure
from fundledger.services.locale_service import format_cents
from fundledger.services.outcomes import Notice, NoticeLevel, PostingResult
from fundledger.services.transaction_service import TransactionItemInput, TransactionService

logger = logging.getLogger(__name__)


class TransferService:
    """Move money between accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.balances = BalanceCalculationService(session)
        self.transactions = TransactionService(session)

    async def transfer(
        self,
        org_id: int,
        from_account_id: int,
        to_account_id: int,
        amount_in_cents: int,
        transaction_date: date | None = None,
        description: str | None = None,
        actor_id: int | None = None,
    ) -> PostingResult:
        """Transfer ``amount_in_cents`` from one account to another.

        Args:
            org_id: Organization both accounts must belong to
            from_account_id: Account to debit
            to_account_id: Account to credit
            amount_in_cents: Positive amount to move
            transaction_date: Posting date for both sides (default: today)
            description: Shared description; defaults to "Transfer to/from <code>"
            actor_id: User performing the transfer

        Returns:
            PostingResult with both transactions, or a rejected result when
            the source balance is too low (nothing written)

        Raises:
            ValidationFailure: Same account on both sides, non-positive amount,
                or an account outside the organization
        """
        if from_account_id == to_account_id:
            raise ValidationFailure({"to_account_id": "From and To accounts must be different."})
        if amount_in_cents <= 0:
            raise ValidationFailure({"amount": "Must be greater than $0.00"})

        transaction_date = transaction_date or date.today()

        try:
            accounts = await self.balances.lock_accounts(org_id, [from_account_id, to_account_id])
            field_errors = {
                field: "Account not found."
                for field, account_id in (
                    ("from_account_id", from_account_id),
                    ("to_account_id", to_account_id),
                )
                if account_id not in accounts
            }
            if field_errors:
                raise ValidationFailure(field_errors)

            from_account = accounts[from_account_id]
            to_account = accounts[to_account_id]

            from_balance = await self.balances.calculate_account_balance(from_account.id)
            if amount_in_cents > from_balance:
                from_code = from_account.code
                # Release the row locks; rollback expires loaded objects
                await self.session.rollback()
                logger.warning(
                    f"Transfer of {amount_in_cents} cents from account {from_code} "
                    f"rejected: balance is {from_balance} cents"
                )
                return PostingResult.rejected(
                    "Insufficient Funds",
                    f"Insufficient funds in from account. Account {from_code} "
                    f"has a balance of {format_cents(from_balance)}.",
                )

            outgoing = await self.transactions.generate_items(
                [
                    TransactionItemInput(
                        type_id=TransactionItemTypeId.TRANSFER_OUT,
                        amount_in_cents=amount_in_cents,
                    )
                ],
                org_id,
            )
            incoming = await self.transactions.generate_items(
                [
                    TransactionItemInput(
                        type_id=TransactionItemTypeId.TRANSFER_IN,
                        amount_in_cents=amount_in_cents,
                    )
                ],
                org_id,
            )

            debit = self.transactions.build_transaction(
                org_id,
                from_account.id,
                transaction_date,
                outgoing,
                description=description or f"Transfer to {to_account.code}",
                category_id=TransactionCategoryId.INTERNAL_TRANSFER_LOSS,
            )
            credit = self.transactions.build_transaction(
                org_id,
                to_account.id,
                transaction_date,
                incoming,
                description=description or f"Transfer from {from_account.code}",
                category_id=TransactionCategoryId.INTERNAL_TRANSFER_GAIN,
            )
            self.session.add_all([debit, credit])
            await self.session.flush()

            AuditService.log(
                self.session,
                org_id,
                "transaction",
                debit.id,
                "transfer",
                actor_id=actor_id,
                changes={
                    "from_account_id": from_account.id,
                    "to_account_id": to_account.id,
                    "amount_in_cents": amount_in_cents,
                    "paired_transaction_id": credit.id,
                },
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Transferred {amount_in_cents} cents from account {from_account.code} "
            f"to account {to_account.code} (transactions {debit.id}, {credit.id})"
        )
        return PostingResult(
            ok=True,
            notice=Notice(
                NoticeLevel.SUCCESS,
                "Transfer Complete",
                f"{format_cents(amount_in_cents)} transferred from account "
                f"{from_account.code} to account {to_account.code}",
            ),
            transactions=[debit, credit],
        )


__all__ = ["TransferService"]
