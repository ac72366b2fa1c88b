"""Receipt records.

Files live in object storage; a receipt row only stores the object key
and a title so postings and reimbursement requests can point at it.
"""

import logging
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.receipt import (
    Receipt,
    reimbursement_request_receipts,
    transaction_receipts,
)
from fundledger.services.audit_service import AuditService
from fundledger.services.auth_service import AuthorizedMember
from fundledger.services.errors import ForbiddenError, ValidationFailure

logger = logging.getLogger(__name__)


class ReceiptService:
    """Record, list and delete uploaded receipts."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_receipt(self, org_id: int, user_id: int, title: str, s3_key: str) -> Receipt:
        """Record an uploaded file for the uploading user.

        Raises:
            ValidationFailure: Blank title or key
        """
        title = (title or "").strip()
        s3_key = (s3_key or "").strip()
        field_errors: dict[str, str] = {}
        if not title:
            field_errors["title"] = "Title is required."
        if not s3_key:
            field_errors["s3_key"] = "Object key is required."
        if field_errors:
            raise ValidationFailure(field_errors)

        try:
            receipt = Receipt(org_id=org_id, user_id=user_id, title=title, s3_key=s3_key)
            self.session.add(receipt)
            await self.session.flush()
            AuditService.log(
                self.session,
                org_id,
                "receipt",
                receipt.id,
                "create",
                actor_id=user_id,
                changes={"title": title, "s3_key": s3_key},
            )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Receipt {receipt.id} recorded for user {user_id} in org {org_id}")
        return receipt

    async def list_receipts(self, org_id: int, user_id: int | None = None) -> list[Receipt]:
        """Receipts newest first.

        Args:
            org_id: Organization to list
            user_id: Only receipts uploaded by this user (None for all)
        """
        stmt = (
            select(Receipt)
            .where(Receipt.org_id == org_id)
            .order_by(Receipt.created_at.desc(), Receipt.id.desc())
        )
        if user_id is not None:
            stmt = stmt.where(Receipt.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete_receipts(self, member: AuthorizedMember, receipt_ids: Iterable[int]) -> int:
        """Delete receipts and detach them from postings and requests.

        Ids outside the caller's organization are ignored. Members may
        only delete their own uploads; admins may delete any.

        Returns:
            Number of receipts deleted

        Raises:
            ForbiddenError: A member named someone else's receipt
        """
        ids = list(dict.fromkeys(receipt_ids))
        if not ids:
            return 0

        try:
            stmt = select(Receipt.id, Receipt.user_id).where(
                Receipt.id.in_(ids), Receipt.org_id == member.org_id
            )
            found = (await self.session.execute(stmt)).all()
            if not member.is_admin and any(row.user_id != member.user_id for row in found):
                raise ForbiddenError("Members can only delete their own receipts")

            found_ids = [row.id for row in found]
            if found_ids:
                await self.session.execute(
                    delete(transaction_receipts).where(
                        transaction_receipts.c.receipt_id.in_(found_ids)
                    )
                )
                await self.session.execute(
                    delete(reimbursement_request_receipts).where(
                        reimbursement_request_receipts.c.receipt_id.in_(found_ids)
                    )
                )
                await self.session.execute(delete(Receipt).where(Receipt.id.in_(found_ids)))
                for receipt_id in found_ids:
                    AuditService.log(
                        self.session,
                        member.org_id,
                        "receipt",
                        receipt_id,
                        "delete",
                        actor_id=member.user_id,
                    )
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(f"Deleted {len(found_ids)} receipts in org {member.org_id}")
        return len(found_ids)


__all__ = ["ReceiptService"]
