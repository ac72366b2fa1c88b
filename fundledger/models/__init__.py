"""SQLAlchemy base model with common fields and model exports."""

from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

# Base class for all models
Base = declarative_base()


class BaseModel:
    """Base model with common timestamp fields."""

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )


# Import models to register them with Base (after Base is defined)
# This must be after Base declaration to avoid circular imports
from fundledger.models.organization import Organization  # noqa: E402
from fundledger.models.user import Membership, MembershipRole, User  # noqa: E402
from fundledger.models.account_type import AccountType  # noqa: E402
from fundledger.models.account import Account  # noqa: E402
from fundledger.models.contact import Contact  # noqa: E402
from fundledger.models.transaction_category import TransactionCategory  # noqa: E402
from fundledger.models.transaction_item_method import TransactionItemMethod  # noqa: E402
from fundledger.models.transaction_item_type import (  # noqa: E402
    TransactionItemType,
    TransactionItemTypeDirection,
)
from fundledger.models.receipt import Receipt  # noqa: E402
from fundledger.models.reimbursement_request import (  # noqa: E402
    ReimbursementRequest,
    ReimbursementRequestStatus,
)
from fundledger.models.transaction import Transaction, TransactionItem  # noqa: E402
from fundledger.models.audit_log import AuditLog  # noqa: E402

__all__ = [
    "Base",
    "BaseModel",
    "Organization",
    "User",
    "Membership",
    "MembershipRole",
    "AccountType",
    "Account",
    "Contact",
    "TransactionCategory",
    "TransactionItemMethod",
    "TransactionItemType",
    "TransactionItemTypeDirection",
    "Receipt",
    "ReimbursementRequest",
    "ReimbursementRequestStatus",
    "Transaction",
    "TransactionItem",
    "AuditLog",
]
