"""Transaction item method lookup (cash, check, ACH, ...)."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from fundledger.models import Base, BaseModel


class TransactionItemMethod(Base, BaseModel):
    """How money moved for a single line item."""

    __tablename__ = "transaction_item_methods"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    org_id: Mapped[int | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Owning organization; NULL for global defaults",
    )

    def __repr__(self) -> str:
        return f"<TransactionItemMethod(id={self.id}, name={self.name!r}, org_id={self.org_id})>"


__all__ = ["TransactionItemMethod"]
