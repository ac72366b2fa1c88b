"""Transaction item type lookup carrying the IN/OUT direction."""

from enum import Enum as PyEnum

from sqlalchemy import Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from fundledger.models import Base, BaseModel


class TransactionItemTypeDirection(PyEnum):
    """Whether an item adds to (IN) or subtracts from (OUT) its transaction."""

    IN = "IN"
    OUT = "OUT"


class TransactionItemType(Base, BaseModel):
    """Classifies a line item.

    ``direction`` is the only thing that decides the sign of a posted
    item amount.
    """

    __tablename__ = "transaction_item_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    direction: Mapped[TransactionItemTypeDirection] = mapped_column(
        Enum(TransactionItemTypeDirection, native_enum=False),
        nullable=False,
        comment="IN adds to the transaction total, OUT subtracts",
    )
    org_id: Mapped[int | None] = mapped_column(
        ForeignKey("organizations.id"),
        nullable=True,
        index=True,
        comment="Owning organization; NULL for global defaults",
    )

    @property
    def sign(self) -> int:
        return 1 if self.direction == TransactionItemTypeDirection.IN else -1

    def __repr__(self) -> str:
        return (
            f"<TransactionItemType(id={self.id}, name={self.name!r}, "
            f"direction={self.direction.value}, org_id={self.org_id})>"
        )


__all__ = ["TransactionItemType", "TransactionItemTypeDirection"]
