"""User and organization membership ORM models."""

from enum import Enum as PyEnum

from sqlalchemy import Boolean, Enum, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fundledger.models import Base, BaseModel


class MembershipRole(PyEnum):
    """Role a user holds inside one organization."""

    MEMBER = "MEMBER"
    ADMIN = "ADMIN"
    SUPERADMIN = "SUPERADMIN"


class User(Base, BaseModel):
    """A person who can sign in through the identity provider.

    The ``email`` doubles as the username and is the address used for
    reimbursement status notifications.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255), nullable=False, comment="Login e-mail (username)"
    )
    first_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Inactive users are rejected at the API boundary",
    )

    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    __table_args__ = (Index("idx_user_email", "email", unique=True),)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part) or self.email

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r}, is_active={self.is_active})>"


class Membership(Base, BaseModel):
    """Links a user to an organization with a role."""

    __tablename__ = "memberships"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    org_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id"), nullable=False, index=True
    )
    role: Mapped[MembershipRole] = mapped_column(
        Enum(MembershipRole, native_enum=False),
        default=MembershipRole.MEMBER,
        nullable=False,
        comment="MEMBER/ADMIN/SUPERADMIN",
    )

    user: Mapped["User"] = relationship("User", back_populates="memberships")

    __table_args__ = (Index("idx_membership_user_org", "user_id", "org_id", unique=True),)

    @property
    def is_admin(self) -> bool:
        return self.role in (MembershipRole.ADMIN, MembershipRole.SUPERADMIN)

    def __repr__(self) -> str:
        return (
            f"<Membership(user_id={self.user_id}, org_id={self.org_id}, "
            f"role={self.role.value})>"
        )


__all__ = ["User", "Membership", "MembershipRole"]
