"""Account ORM model for fund ledgers."""

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fundledger.models import Base, BaseModel


class Account(Base, BaseModel):
    """Model representing a fund/ledger account.

    An account never stores its balance. The balance is the sum of the
    ``amount_in_cents`` of every transaction posted against it and is
    derived on read (see ``BalanceCalculationService``).

    Accounts may be linked to a user (e.g. a staff member's ministry fund)
    so that member-facing screens can show "my" accounts.
    """

    __tablename__ = "accounts"

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Short code, unique per organization (e.g. '1000')",
    )
    description: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Human readable account name"
    )
    type_id: Mapped[int] = mapped_column(
        ForeignKey("account_types.id"), nullable=False, index=True
    )
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
        comment="Optional user this fund belongs to",
    )

    type: Mapped["AccountType"] = relationship("AccountType")  # noqa: F821
    user: Mapped["User | None"] = relationship("User")  # noqa: F821
    transactions: Mapped[list["Transaction"]] = relationship(  # noqa: F821
        "Transaction",
        back_populates="account",
    )

    __table_args__ = (
        Index("idx_account_org_code", "org_id", "code", unique=True),
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, code={self.code!r}, org_id={self.org_id})>"


__all__ = ["Account"]
