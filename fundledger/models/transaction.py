"""Transaction and TransactionItem ORM models."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fundledger.models import Base, BaseModel


class Transaction(Base, BaseModel):
    """One ledger posting against exactly one account.

    ``amount_in_cents`` is signed and always equals the sum of its items'
    signed amounts. Items are owned by the transaction: they are created
    together and deleted together.

    An offsetting transaction created by approving a reimbursement request
    points back at it through ``reimbursement_request_id``.
    """

    __tablename__ = "transactions"

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    account_id: Mapped[int] = mapped_column(
        ForeignKey("accounts.id"), nullable=False, index=True
    )
    amount_in_cents: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Signed amount in cents"
    )
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction_categories.id"), nullable=True, index=True
    )
    contact_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id"), nullable=True, index=True
    )
    reimbursement_request_id: Mapped[int | None] = mapped_column(
        ForeignKey("reimbursement_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        comment="Request whose approval produced this posting",
    )

    account: Mapped["Account"] = relationship(  # noqa: F821
        "Account", back_populates="transactions"
    )
    category: Mapped["TransactionCategory | None"] = relationship(  # noqa: F821
        "TransactionCategory"
    )
    contact: Mapped["Contact | None"] = relationship("Contact")  # noqa: F821
    items: Mapped[list["TransactionItem"]] = relationship(
        "TransactionItem",
        back_populates="transaction",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TransactionItem.id",
    )
    receipts: Mapped[list["Receipt"]] = relationship(  # noqa: F821
        "Receipt",
        secondary="transaction_receipts",
    )

    __table_args__ = (
        Index("idx_transaction_org_account", "org_id", "account_id"),
        Index("idx_transaction_date", "transaction_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, account_id={self.account_id}, "
            f"amount_in_cents={self.amount_in_cents}, date={self.transaction_date})>"
        )


class TransactionItem(Base, BaseModel):
    """A line within a transaction.

    The sign of ``amount_in_cents`` comes from the direction of its type:
    positive for IN, negative for OUT.
    """

    __tablename__ = "transaction_items"

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type_id: Mapped[int] = mapped_column(
        ForeignKey("transaction_item_types.id"), nullable=False
    )
    method_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction_item_methods.id"), nullable=True
    )
    amount_in_cents: Mapped[int] = mapped_column(
        Integer, nullable=False, comment="Signed amount in cents"
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    transaction: Mapped["Transaction"] = relationship("Transaction", back_populates="items")
    type: Mapped["TransactionItemType"] = relationship("TransactionItemType")  # noqa: F821
    method: Mapped["TransactionItemMethod | None"] = relationship(  # noqa: F821
        "TransactionItemMethod"
    )

    def __repr__(self) -> str:
        return (
            f"<TransactionItem(id={self.id}, type_id={self.type_id}, "
            f"amount_in_cents={self.amount_in_cents})>"
        )


__all__ = ["Transaction", "TransactionItem"]
