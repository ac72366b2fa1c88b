"""ReimbursementRequest ORM model."""

from datetime import date
from enum import Enum as PyEnum

from sqlalchemy import Date, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fundledger.models import Base, BaseModel


class ReimbursementRequestStatus(PyEnum):
    """Lifecycle states of a reimbursement request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    VOID = "VOID"


class ReimbursementRequest(Base, BaseModel):
    """A member's request to be paid back from an account.

    Created PENDING by the requester. An approver moves it to APPROVED
    (which posts a negative transaction against ``account_id``), REJECTED
    or VOID, and may reopen any of those back to PENDING.
    """

    __tablename__ = "reimbursement_requests"

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), nullable=False, index=True, comment="Requester"
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
        comment="Account the requester asked to be paid from",
    )
    method_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction_item_methods.id"), nullable=True
    )
    amount_in_cents: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Requested amount, always positive"
    )
    expense_date: Mapped[date] = mapped_column(Date, nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ReimbursementRequestStatus] = mapped_column(
        Enum(ReimbursementRequestStatus, native_enum=False),
        default=ReimbursementRequestStatus.PENDING,
        nullable=False,
        index=True,
    )
    approver_note: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User")  # noqa: F821
    account: Mapped["Account"] = relationship("Account")  # noqa: F821
    method: Mapped["TransactionItemMethod | None"] = relationship(  # noqa: F821
        "TransactionItemMethod"
    )
    receipts: Mapped[list["Receipt"]] = relationship(  # noqa: F821
        "Receipt",
        secondary="reimbursement_request_receipts",
    )

    __table_args__ = (Index("idx_reimbursement_org_status", "org_id", "status"),)

    def __repr__(self) -> str:
        return (
            f"<ReimbursementRequest(id={self.id}, status={self.status.value}, "
            f"amount_in_cents={self.amount_in_cents}, account_id={self.account_id})>"
        )


__all__ = ["ReimbursementRequest", "ReimbursementRequestStatus"]
