"""Contact ORM model (donors, vendors, partner organizations)."""

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from fundledger.models import Base, BaseModel


class Contact(Base, BaseModel):
    """A person or organization a transaction can be attributed to."""

    __tablename__ = "contacts"

    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    organization_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.organization_name or self.email or f"Contact {self.id}"

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name={self.display_name!r})>"


__all__ = ["Contact"]
