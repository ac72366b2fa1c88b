"""Balance calculation service for ledger accounts.

An account's balance is never stored: it is the sum of
``Transaction.amount_in_cents`` over every transaction posted against it.

Posting flows that must not overdraw an account (transfers and
reimbursement approvals) first lock the account rows with
``lock_accounts`` and then read the balance inside the same database
transaction, so a concurrent posting against the same account waits
until the first one commits or rolls back.
"""

import logging
from typing import Dict, Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.account import Account
from fundledger.models.transaction import Transaction

logger = logging.getLogger(__name__)


class BalanceCalculationService:
    """Calculate account balances."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session.

        Args:
            session: AsyncSession for database operations
        """
        self.session = session

    async def calculate_account_balance(self, account_id: int) -> int:
        """Calculate balance for an account.

        Args:
            account_id: Account ID to calculate balance for

        Returns:
            Balance in cents (0 for an account without transactions)
        """
        stmt = select(func.coalesce(func.sum(Transaction.amount_in_cents), 0)).where(
            Transaction.account_id == account_id
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def calculate_multiple_account_balances(
        self, account_ids: Iterable[int]
    ) -> Dict[int, int]:
        """Calculate balances for multiple accounts in one query.

        Args:
            account_ids: Account IDs

        Returns:
            Dict mapping account_id to balance in cents; accounts without
            transactions map to 0
        """
        ids = list(account_ids)
        balances = {account_id: 0 for account_id in ids}
        if not ids:
            return balances

        stmt = (
            select(Transaction.account_id, func.sum(Transaction.amount_in_cents))
            .where(Transaction.account_id.in_(ids))
            .group_by(Transaction.account_id)
        )
        result = await self.session.execute(stmt)
        for account_id, total in result.all():
            balances[account_id] = int(total or 0)
        return balances

    async def lock_accounts(self, org_id: int, account_ids: Iterable[int]) -> Dict[int, Account]:
        """Lock account rows for the rest of the current transaction.

        Rows are locked in ascending id order so two postings touching the
        same pair of accounts cannot deadlock. Accounts outside ``org_id``
        are not returned.

        SQLite has no row locks; there the engine opens every transaction
        with ``BEGIN IMMEDIATE`` (see ``fundledger.services``), so the
        whole database is already write-locked when this runs.

        Args:
            org_id: Organization the accounts must belong to
            account_ids: Accounts to lock

        Returns:
            Dict mapping account_id to the locked Account
        """
        ids = sorted(set(account_ids))
        stmt = (
            select(Account)
            .where(Account.org_id == org_id, Account.id.in_(ids))
            .order_by(Account.id)
            .with_for_update()
        )
        result = await self.session.execute(stmt)
        accounts = {account.id: account for account in result.scalars().all()}
        logger.debug("Locked accounts %s for org %s", sorted(accounts), org_id)
        return accounts


__all__ = ["BalanceCalculationService"]
