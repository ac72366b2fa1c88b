"""Seeding of the global reference rows shared by every organization.

Rows are created with the fixed ids from ``fundledger.constants`` and
``org_id = NULL``. Seeding is idempotent: rows that already exist are
left untouched.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.constants import (
    AccountTypeId,
    TransactionCategoryId,
    TransactionItemMethodId,
    TransactionItemTypeId,
)
from fundledger.models.account_type import AccountType
from fundledger.models.organization import Organization
from fundledger.models.transaction_category import TransactionCategory
from fundledger.models.transaction_item_method import TransactionItemMethod
from fundledger.models.transaction_item_type import (
    TransactionItemType,
    TransactionItemTypeDirection,
)
from fundledger.models.user import Membership, MembershipRole, User

logger = logging.getLogger(__name__)

IN = TransactionItemTypeDirection.IN
OUT = TransactionItemTypeDirection.OUT

ACCOUNT_TYPES = {
    AccountTypeId.OPERATING: "Operating",
    AccountTypeId.BENEVOLENCE: "Benevolence",
    AccountTypeId.MINISTRY: "Ministry",
}

TRANSACTION_CATEGORIES = {
    TransactionCategoryId.DONATIONS: "Donations",
    TransactionCategoryId.GRANTS: "Grants",
    TransactionCategoryId.OPERATING_EXPENSES: "Operating_Expenses",
    TransactionCategoryId.PROGRAM_EXPENSES: "Program_Expenses",
    TransactionCategoryId.INTERNAL_TRANSFER_GAIN: "Internal_Transfer_Gain",
    TransactionCategoryId.INTERNAL_TRANSFER_LOSS: "Internal_Transfer_Loss",
    TransactionCategoryId.OTHER: "Other",
}

TRANSACTION_ITEM_METHODS = {
    TransactionItemMethodId.CASH: "Cash",
    TransactionItemMethodId.CHECK: "Check",
    TransactionItemMethodId.ACH: "ACH",
    TransactionItemMethodId.CARD: "Card",
    TransactionItemMethodId.OTHER: "Other",
}

TRANSACTION_ITEM_TYPES = {
    TransactionItemTypeId.DONATION: ("Donation", IN),
    TransactionItemTypeId.GRANT: ("Grant", IN),
    TransactionItemTypeId.OTHER_INCOMING: ("Other_Incoming", IN),
    TransactionItemTypeId.TRANSFER_IN: ("Transfer_In", IN),
    TransactionItemTypeId.EXPENSE: ("Expense", OUT),
    TransactionItemTypeId.FEE: ("Fee", OUT),
    TransactionItemTypeId.OTHER_OUTGOING: ("Other_Outgoing", OUT),
    TransactionItemTypeId.TRANSFER_OUT: ("Transfer_Out", OUT),
}


@dataclass
class SeedSummary:
    """Counts of rows created by a seeding run."""

    account_types: int = 0
    categories: int = 0
    item_methods: int = 0
    item_types: int = 0

    @property
    def total(self) -> int:
        return self.account_types + self.categories + self.item_methods + self.item_types


async def _add_missing(session: AsyncSession, model, rows: dict) -> int:
    created = 0
    for row_id, fields in rows.items():
        if await session.get(model, int(row_id)) is not None:
            continue
        session.add(model(id=int(row_id), org_id=None, **fields))
        created += 1
    return created


async def _advance_sequences(session: AsyncSession) -> None:
    # Explicit ids do not move SERIAL sequences; org-owned rows come next
    for model in (AccountType, TransactionCategory, TransactionItemMethod, TransactionItemType):
        table = model.__tablename__
        await session.execute(
            text(
                f"SELECT setval(pg_get_serial_sequence('{table}', 'id'), "
                f"(SELECT MAX(id) FROM {table}))"
            )
        )


async def seed_reference_data(session: AsyncSession) -> SeedSummary:
    """Create any missing global lookup rows and commit.

    Args:
        session: AsyncSession for database operations

    Returns:
        SeedSummary with the number of rows created per table
    """
    summary = SeedSummary()
    try:
        summary.account_types = await _add_missing(
            session, AccountType, {k: {"name": v} for k, v in ACCOUNT_TYPES.items()}
        )
        summary.categories = await _add_missing(
            session,
            TransactionCategory,
            {k: {"name": v} for k, v in TRANSACTION_CATEGORIES.items()},
        )
        summary.item_methods = await _add_missing(
            session,
            TransactionItemMethod,
            {k: {"name": v} for k, v in TRANSACTION_ITEM_METHODS.items()},
        )
        summary.item_types = await _add_missing(
            session,
            TransactionItemType,
            {
                k: {"name": name, "direction": direction}
                for k, (name, direction) in TRANSACTION_ITEM_TYPES.items()
            },
        )
        if session.get_bind().dialect.name == "postgresql":
            await _advance_sequences(session)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info(
        "Reference data seeded: %d account types, %d categories, %d methods, %d item types",
        summary.account_types,
        summary.categories,
        summary.item_methods,
        summary.item_types,
    )
    return summary


async def seed_organization(
    session: AsyncSession,
    name: str,
    subdomain: str,
    admin_email: str,
    admin_first_name: str | None = None,
    admin_last_name: str | None = None,
) -> Organization:
    """Create an organization with one ADMIN member and commit.

    An existing user with the same e-mail is reused.
    """
    try:
        organization = Organization(name=name, subdomain=subdomain)
        session.add(organization)

        result = await session.execute(select(User).where(User.email == admin_email))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email=admin_email,
                first_name=admin_first_name,
                last_name=admin_last_name,
            )
            session.add(user)
        await session.flush()

        session.add(Membership(user_id=user.id, org_id=organization.id, role=MembershipRole.ADMIN))
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("Organization %s created with admin %s", subdomain, admin_email)
    return organization


__all__ = [
    "SeedSummary",
    "seed_reference_data",
    "seed_organization",
    "ACCOUNT_TYPES",
    "TRANSACTION_CATEGORIES",
    "TRANSACTION_ITEM_METHODS",
    "TRANSACTION_ITEM_TYPES",
]
