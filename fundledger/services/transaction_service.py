"""Transaction service: item generation and simple postings.

Amounts arrive here as non-negative integer cents (parsed at the API
edge). The sign of every posted item comes from the direction of its
item type, never from the screen the user posted from: the expense and
income forms both go through ``create_transaction``.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fundledger.models.account import Account
from fundledger.models.contact import Contact
from fundledger.models.receipt import Receipt
from fundledger.models.transaction import Transaction, TransactionItem
from fundledger.models.transaction_category import TransactionCategory
from fundledger.models.transaction_item_method import TransactionItemMethod
from fundledger.services.audit_service import AuditService
from fundledger.services.errors import InvalidTypeError, NotFoundError, ValidationFailure
from fundledger.services.locale_service import format_cents
from fundledger.services.outcomes import Notice, NoticeLevel, PostingResult
from fundledger.services.reference_service import ReferenceDataService

logger = logging.getLogger(__name__)

# Columns that may change after posting; amounts and items are immutable
EDITABLE_TRANSACTION_FIELDS = ("transaction_date", "description", "category_id")


@dataclass
class TransactionItemInput:
    """A raw line item as entered by the user (amount always non-negative)."""

    type_id: int
    amount_in_cents: int
    method_id: int | None = None
    description: str | None = None


@dataclass
class GeneratedItem:
    """A line item with its signed amount."""

    type_id: int
    method_id: int | None
    amount_in_cents: int
    description: str | None = None


@dataclass
class GeneratedItems:
    total_in_cents: int
    transaction_items: list[GeneratedItem]


class TransactionService:
    """Create, read, edit and delete ledger postings."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session.

        Args:
            session: AsyncSession for database operations
        """
        self.session = session
        self.reference = ReferenceDataService(session)

    async def generate_items(
        self, items: Sequence[TransactionItemInput], org_id: int
    ) -> GeneratedItems:
        """Compute signed item amounts and the transaction total.

        Args:
            items: Raw line items
            org_id: Organization whose item types (plus global defaults) apply

        Returns:
            GeneratedItems; an empty input yields total 0 and no items

        Raises:
            InvalidTypeError: If an item names a type the organization cannot see
            ValidationFailure: If a raw amount is negative
        """
        if not items:
            return GeneratedItems(total_in_cents=0, transaction_items=[])

        item_types = {
            item_type.id: item_type for item_type in await self.reference.get_item_types(org_id)
        }

        generated: list[GeneratedItem] = []
        for index, item in enumerate(items):
            item_type = item_types.get(item.type_id)
            if item_type is None:
                logger.warning(f"Unknown transaction item type {item.type_id} for org {org_id}")
                raise InvalidTypeError(item.type_id, field=f"items.{index}.type_id")
            if item.amount_in_cents < 0:
                raise ValidationFailure(
                    {f"items.{index}.amount": "Must be greater than $0.00"}
                )
            generated.append(
                GeneratedItem(
                    type_id=item.type_id,
                    method_id=item.method_id,
                    amount_in_cents=item.amount_in_cents * item_type.sign,
                    description=item.description,
                )
            )

        total = sum(item.amount_in_cents for item in generated)
        return GeneratedItems(total_in_cents=total, transaction_items=generated)

    def build_transaction(
        self,
        org_id: int,
        account_id: int,
        transaction_date: date,
        generated: GeneratedItems,
        description: str | None = None,
        category_id: int | None = None,
        contact_id: int | None = None,
        reimbursement_request_id: int | None = None,
    ) -> Transaction:
        """Build (but do not add) a transaction with its nested items."""
        return Transaction(
            org_id=org_id,
            account_id=account_id,
            amount_in_cents=generated.total_in_cents,
            transaction_date=transaction_date,
            description=description,
            category_id=category_id,
            contact_id=contact_id,
            reimbursement_request_id=reimbursement_request_id,
            receipts=[],
            items=[
                TransactionItem(
                    org_id=org_id,
                    type_id=item.type_id,
                    method_id=item.method_id,
                    amount_in_cents=item.amount_in_cents,
                    description=item.description,
                )
                for item in generated.transaction_items
            ],
        )

    async def get_account(self, org_id: int, account_id: int) -> Account | None:
        stmt = select(Account).where(Account.id == account_id, Account.org_id == org_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def load_receipts(
        self, org_id: int, receipt_ids: Iterable[int], field: str = "receipt_ids"
    ) -> list[Receipt]:
        """Load receipts by id, requiring every one to belong to the organization."""
        ids = list(dict.fromkeys(receipt_ids))
        if not ids:
            return []
        stmt = select(Receipt).where(Receipt.org_id == org_id, Receipt.id.in_(ids))
        result = await self.session.execute(stmt)
        receipts = list(result.scalars().all())
        if len(receipts) != len(ids):
            raise ValidationFailure({field: "Receipt not found."})
        return receipts

    async def _validate_posting_references(
        self,
        org_id: int,
        items: Sequence[TransactionItemInput],
        category_id: int | None,
        contact_id: int | None,
    ) -> dict[str, str]:
        field_errors: dict[str, str] = {}
        if category_id is not None and not await self.reference.is_visible(
            TransactionCategory, category_id, org_id
        ):
            field_errors["category_id"] = "Category not found."
        if contact_id is not None:
            stmt = select(Contact.id).where(Contact.id == contact_id, Contact.org_id == org_id)
            if (await self.session.execute(stmt)).scalar_one_or_none() is None:
                field_errors["contact_id"] = "Contact not found."
        for index, item in enumerate(items):
            if item.method_id is not None and not await self.reference.is_visible(
                TransactionItemMethod, item.method_id, org_id
            ):
                field_errors[f"items.{index}.method_id"] = "Method not found."
        return field_errors

    async def create_transaction(
        self,
        org_id: int,
        account_id: int,
        transaction_date: date,
        items: Sequence[TransactionItemInput],
        description: str | None = None,
        category_id: int | None = None,
        contact_id: int | None = None,
        receipt_ids: Iterable[int] = (),
        actor_id: int | None = None,
    ) -> PostingResult:
        """Post an expense or income entry against one account.

        The transaction and all of its items are written in one commit.

        Raises:
            ValidationFailure: Empty item list, unknown account, category,
                contact, method or receipt
            InvalidTypeError: Unknown item type
        """
        if not items:
            raise ValidationFailure({"items": "At least one item is required."})

        try:
            account = await self.get_account(org_id, account_id)
            if account is None:
                raise ValidationFailure({"account_id": "Account not found."})

            field_errors = await self._validate_posting_references(
                org_id, items, category_id, contact_id
            )
            if field_errors:
                raise ValidationFailure(field_errors)

            generated = await self.generate_items(items, org_id)
            receipts = await self.load_receipts(org_id, receipt_ids)

            transaction = self.build_transaction(
                org_id,
                account.id,
                transaction_date,
                generated,
                description=description,
                category_id=category_id,
                contact_id=contact_id,
            )
            transaction.receipts = receipts
            self.session.add(transaction)
            await self.session.flush()

            AuditService.log(
                self.session,
                org_id,
                "transaction",
                transaction.id,
                "create",
                actor_id=actor_id,
                changes={
                    "account_id": account.id,
                    "amount_in_cents": transaction.amount_in_cents,
                },
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            f"Transaction {transaction.id} posted to account {account.code} "
            f"({transaction.amount_in_cents} cents, {len(transaction.items)} items)"
        )

        amount = format_cents(abs(transaction.amount_in_cents))
        if transaction.amount_in_cents < 0:
            description_text = f"Expense of {amount} charged to account {account.code}"
        else:
            description_text = f"Income of {amount} credited to account {account.code}"
        return PostingResult(
            ok=True,
            notice=Notice(NoticeLevel.SUCCESS, "Transaction Created", description_text),
            transactions=[transaction],
        )

    async def get_transaction(self, org_id: int, transaction_id: int) -> Transaction:
        """Get a transaction with its items and receipts.

        Raises:
            NotFoundError: If the transaction is not in the organization
        """
        stmt = (
            select(Transaction)
            .where(Transaction.id == transaction_id, Transaction.org_id == org_id)
            .options(selectinload(Transaction.items), selectinload(Transaction.receipts))
        )
        result = await self.session.execute(stmt)
        transaction = result.scalar_one_or_none()
        if transaction is None:
            raise NotFoundError("Transaction", transaction_id)
        return transaction

    async def list_transactions(self, org_id: int, account_id: int) -> list[Transaction]:
        """List an account's transactions, newest first.

        Raises:
            NotFoundError: If the account is not in the organization
        """
        if await self.get_account(org_id, account_id) is None:
            raise NotFoundError("Account", account_id)

        stmt = (
            select(Transaction)
            .where(Transaction.org_id == org_id, Transaction.account_id == account_id)
            .options(selectinload(Transaction.items), selectinload(Transaction.receipts))
            .order_by(Transaction.transaction_date.desc(), Transaction.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_transaction(
        self,
        org_id: int,
        transaction_id: int,
        changes: dict[str, Any],
        actor_id: int | None = None,
    ) -> Transaction:
        """Edit the date, description or category of a posted transaction.

        Args:
            org_id: Organization the transaction belongs to
            transaction_id: Transaction to edit
            changes: Mapping of field name to new value; only
                ``EDITABLE_TRANSACTION_FIELDS`` are accepted
            actor_id: User performing the edit

        Raises:
            NotFoundError: If the transaction is not in the organization
            ValidationFailure: If a non-editable field or unknown category is given
        """
        blocked = sorted(set(changes) - set(EDITABLE_TRANSACTION_FIELDS))
        if blocked:
            raise ValidationFailure(
                {name: "This field cannot be changed after posting." for name in blocked}
            )
        if "transaction_date" in changes and changes["transaction_date"] is None:
            raise ValidationFailure({"transaction_date": "Date is required."})

        try:
            transaction = await self.get_transaction(org_id, transaction_id)

            category_id = changes.get("category_id")
            if category_id is not None and not await self.reference.is_visible(
                TransactionCategory, category_id, org_id
            ):
                raise ValidationFailure({"category_id": "Category not found."})

            for name, value in changes.items():
                setattr(transaction, name, value)

            AuditService.log(
                self.session,
                org_id,
                "transaction",
                transaction.id,
                "update",
                actor_id=actor_id,
                changes={
                    name: value.isoformat() if isinstance(value, date) else value
                    for name, value in changes.items()
                },
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Transaction {transaction_id} updated: {sorted(changes)}")
        return transaction

    async def delete_transaction(
        self, org_id: int, transaction_id: int, actor_id: int | None = None
    ) -> None:
        """Delete a transaction together with its items.

        Receipts are detached, not deleted.

        Raises:
            NotFoundError: If the transaction is not in the organization
        """
        try:
            transaction = await self.get_transaction(org_id, transaction_id)
            snapshot = {
                "account_id": transaction.account_id,
                "amount_in_cents": transaction.amount_in_cents,
            }
            await self.session.delete(transaction)
            AuditService.log(
                self.session,
                org_id,
                "transaction",
                transaction_id,
                "delete",
                actor_id=actor_id,
                changes=snapshot,
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Transaction {transaction_id} deleted ({snapshot['amount_in_cents']} cents)")


__all__ = [
    "EDITABLE_TRANSACTION_FIELDS",
    "TransactionItemInput",
    "GeneratedItem",
    "GeneratedItems",
    "TransactionService",
]
