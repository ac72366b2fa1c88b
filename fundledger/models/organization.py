"""Organization ORM model (tenant root)."""

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from fundledger.models import Base, BaseModel


class Organization(Base, BaseModel):
    """A nonprofit tenant.

    Every tenant-owned row (accounts, transactions, reimbursement requests,
    contacts, receipts) carries an ``org_id`` pointing here. Reference data
    rows may leave ``org_id`` empty to act as global defaults.
    """

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Display name of the organization"
    )
    subdomain: Mapped[str] = mapped_column(
        String(100), nullable=False, comment="Unique subdomain used to route the tenant"
    )

    __table_args__ = (Index("idx_organization_subdomain", "subdomain", unique=True),)

    def __repr__(self) -> str:
        return f"<Organization(id={self.id}, name={self.name!r})>"


__all__ = ["Organization"]
