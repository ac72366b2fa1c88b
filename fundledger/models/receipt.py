"""Receipt attachment ORM model and its association tables."""

from sqlalchemy import Column, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column

from fundledger.models import Base, BaseModel

# A receipt can back several postings and several reimbursement requests
transaction_receipts = Table(
    "transaction_receipts",
    Base.metadata,
    Column("transaction_id", ForeignKey("transactions.id", ondelete="CASCADE"), primary_key=True),
    Column("receipt_id", ForeignKey("receipts.id", ondelete="CASCADE"), primary_key=True),
)

reimbursement_request_receipts = Table(
    "reimbursement_request_receipts",
    Base.metadata,
    Column(
        "reimbursement_request_id",
        ForeignKey("reimbursement_requests.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("receipt_id", ForeignKey("receipts.id", ondelete="CASCADE"), primary_key=True),
)


class Receipt(Base, BaseModel):
    """An uploaded receipt file.

    Upload and presigned URL issuance happen elsewhere; this row only
    records the object key so postings can reference it.
    """

    __tablename__ = "receipts"

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    s3_key: Mapped[str] = mapped_column(String(500), nullable=False)

    def __repr__(self) -> str:
        return f"<Receipt(id={self.id}, title={self.title!r})>"


__all__ = ["Receipt", "transaction_receipts", "reimbursement_request_receipts"]
