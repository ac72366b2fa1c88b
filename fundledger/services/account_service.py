"""Account management and balance views."""

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.account import Account
from fundledger.models.account_type import AccountType
from fundledger.models.user import Membership
from fundledger.services.audit_service import AuditService
from fundledger.services.balance_service import BalanceCalculationService
from fundledger.services.errors import NotFoundError, ValidationFailure
from fundledger.services.reference_service import ReferenceDataService

logger = logging.getLogger(__name__)

EDITABLE_ACCOUNT_FIELDS = ("code", "description", "type_id", "user_id")


@dataclass
class AccountWithBalance:
    account: Account
    balance_in_cents: int


class AccountService:
    """Create, edit and list accounts."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.balances = BalanceCalculationService(session)
        self.reference = ReferenceDataService(session)

    async def _get(self, org_id: int, account_id: int) -> Account:
        stmt = select(Account).where(Account.id == account_id, Account.org_id == org_id)
        result = await self.session.execute(stmt)
        account = result.scalar_one_or_none()
        if account is None:
            raise NotFoundError("Account", account_id)
        return account

    async def _validate_fields(
        self, org_id: int, fields: dict[str, Any], account_id: int | None = None
    ) -> dict[str, Any]:
        cleaned = dict(fields)
        field_errors: dict[str, str] = {}

        if "code" in cleaned:
            code = (cleaned["code"] or "").strip()
            cleaned["code"] = code
            if not code:
                field_errors["code"] = "Code is required."
            else:
                stmt = select(Account.id).where(Account.org_id == org_id, Account.code == code)
                if account_id is not None:
                    stmt = stmt.where(Account.id != account_id)
                if (await self.session.execute(stmt)).first() is not None:
                    field_errors["code"] = "Account code already exists."

        if "description" in cleaned:
            description = (cleaned["description"] or "").strip()
            cleaned["description"] = description
            if not description:
                field_errors["description"] = "Description is required."

        if "type_id" in cleaned and not await self.reference.is_visible(
            AccountType, cleaned["type_id"], org_id
        ):
            field_errors["type_id"] = "Account type not found."

        if cleaned.get("user_id") is not None:
            stmt = select(Membership.id).where(
                Membership.org_id == org_id, Membership.user_id == cleaned["user_id"]
            )
            if (await self.session.execute(stmt)).first() is None:
                field_errors["user_id"] = "User not found."

        if field_errors:
            raise ValidationFailure(field_errors)
        return cleaned

    async def create_account(
        self,
        org_id: int,
        code: str,
        description: str,
        type_id: int,
        user_id: int | None = None,
        actor_id: int | None = None,
    ) -> Account:
        """Create an account. ``code`` must be unique within the organization.

        Raises:
            ValidationFailure: Blank or duplicate code, blank description,
                unknown type or user
        """
        try:
            fields = await self._validate_fields(
                org_id,
                {"code": code, "description": description, "type_id": type_id, "user_id": user_id},
            )
            account = Account(org_id=org_id, **fields)
            self.session.add(account)
            await self.session.flush()
            AuditService.log(
                self.session,
                org_id,
                "account",
                account.id,
                "create",
                actor_id=actor_id,
                changes={"code": account.code},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Account {account.code} created in org {org_id}")
        return account

    async def update_account(
        self,
        org_id: int,
        account_id: int,
        changes: dict[str, Any],
        actor_id: int | None = None,
    ) -> Account:
        """Edit code, description, type or linked user.

        Raises:
            NotFoundError: Account not in the organization
            ValidationFailure: Unknown field or invalid value
        """
        unknown = sorted(set(changes) - set(EDITABLE_ACCOUNT_FIELDS))
        if unknown:
            raise ValidationFailure({name: "Unknown field." for name in unknown})

        try:
            account = await self._get(org_id, account_id)
            fields = await self._validate_fields(org_id, changes, account_id=account.id)
            for name, value in fields.items():
                setattr(account, name, value)
            AuditService.log(
                self.session,
                org_id,
                "account",
                account.id,
                "update",
                actor_id=actor_id,
                changes=fields,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Account {account_id} updated: {sorted(fields)}")
        return account

    async def get_account(self, org_id: int, account_id: int) -> AccountWithBalance:
        """Get an account with its derived balance.

        Raises:
            NotFoundError: Account not in the organization
        """
        account = await self._get(org_id, account_id)
        balance = await self.balances.calculate_account_balance(account.id)
        return AccountWithBalance(account=account, balance_in_cents=balance)

    async def list_accounts(
        self, org_id: int, user_id: int | None = None
    ) -> list[AccountWithBalance]:
        """List accounts ordered by code, each with its balance.

        Args:
            org_id: Organization to list
            user_id: Only accounts linked to this user (None for all)
        """
        stmt = select(Account).where(Account.org_id == org_id).order_by(Account.code)
        if user_id is not None:
            stmt = stmt.where(Account.user_id == user_id)
        result = await self.session.execute(stmt)
        accounts = list(result.scalars().all())

        balances = await self.balances.calculate_multiple_account_balances(
            account.id for account in accounts
        )
        return [
            AccountWithBalance(account=account, balance_in_cents=balances[account.id])
            for account in accounts
        ]


__all__ = ["EDITABLE_ACCOUNT_FIELDS", "AccountWithBalance", "AccountService"]
