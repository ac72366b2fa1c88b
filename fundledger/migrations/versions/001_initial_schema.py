"""Initial schema: organizations, lookups, accounts, ledger and reimbursements.

Global reference rows are not inserted here; run
``python -m fundledger.cli.seed --skip-create-tables`` after upgrading.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def _lookup_table(name: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        *extra,
        sa.Column(
            "org_id",
            sa.Integer(),
            nullable=True,
            comment="Owning organization; NULL for global defaults",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index(f"ix_{name}_org_id", "org_id"),
    )


def upgrade() -> None:
    # Tenants and people
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("subdomain", sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("idx_organization_subdomain", "subdomain", unique=True),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("idx_user_email", "email", unique=True),
    )

    op.create_table(
        "memberships",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(length=10), nullable=False, server_default="MEMBER"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_memberships_user_id", "user_id"),
        sa.Index("ix_memberships_org_id", "org_id"),
        sa.Index("idx_membership_user_org", "user_id", "org_id", unique=True),
    )

    # Reference data
    _lookup_table("account_types")
    _lookup_table("transaction_categories")
    _lookup_table("transaction_item_methods")
    _lookup_table(
        "transaction_item_types",
        sa.Column(
            "direction",
            sa.String(length=3),
            nullable=False,
            comment="IN adds to the transaction total, OUT subtracts",
        ),
    )

    op.create_table(
        "contacts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("first_name", sa.String(length=255), nullable=True),
        sa.Column("last_name", sa.String(length=255), nullable=True),
        sa.Column("organization_name", sa.String(length=255), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_contacts_org_id", "org_id"),
    )

    op.create_table(
        "accounts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("code", sa.String(length=50), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=False),
        sa.Column("type_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["type_id"], ["account_types.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_accounts_org_id", "org_id"),
        sa.Index("ix_accounts_type_id", "type_id"),
        sa.Index("ix_accounts_user_id", "user_id"),
        sa.Index("idx_account_org_code", "org_id", "code", unique=True),
    )

    op.create_table(
        "receipts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("s3_key", sa.String(length=500), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_receipts_org_id", "org_id"),
        sa.Index("ix_receipts_user_id", "user_id"),
    )

    # Reimbursement requests
    op.create_table(
        "reimbursement_requests",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column("method_id", sa.Integer(), nullable=True),
        sa.Column("amount_in_cents", sa.Integer(), nullable=False),
        sa.Column("expense_date", sa.Date(), nullable=False),
        sa.Column("vendor", sa.String(length=255), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=8), nullable=False, server_default="PENDING"),
        sa.Column("approver_note", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.ForeignKeyConstraint(["method_id"], ["transaction_item_methods.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_reimbursement_requests_org_id", "org_id"),
        sa.Index("ix_reimbursement_requests_user_id", "user_id"),
        sa.Index("ix_reimbursement_requests_account_id", "account_id"),
        sa.Index("ix_reimbursement_requests_status", "status"),
        sa.Index("idx_reimbursement_org_status", "org_id", "status"),
    )

    op.create_table(
        "reimbursement_request_receipts",
        sa.Column("reimbursement_request_id", sa.Integer(), nullable=False),
        sa.Column("receipt_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["reimbursement_request_id"], ["reimbursement_requests.id"], ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(["receipt_id"], ["receipts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("reimbursement_request_id", "receipt_id"),
    )

    # Ledger
    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("account_id", sa.Integer(), nullable=False),
        sa.Column(
            "amount_in_cents", sa.Integer(), nullable=False, comment="Signed amount in cents"
        ),
        sa.Column("transaction_date", sa.Date(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=True),
        sa.Column("contact_id", sa.Integer(), nullable=True),
        sa.Column(
            "reimbursement_request_id",
            sa.Integer(),
            nullable=True,
            comment="Request whose approval produced this posting",
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["account_id"], ["accounts.id"]),
        sa.ForeignKeyConstraint(["category_id"], ["transaction_categories.id"]),
        sa.ForeignKeyConstraint(["contact_id"], ["contacts.id"]),
        sa.ForeignKeyConstraint(
            ["reimbursement_request_id"], ["reimbursement_requests.id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_transactions_org_id", "org_id"),
        sa.Index("ix_transactions_account_id", "account_id"),
        sa.Index("ix_transactions_category_id", "category_id"),
        sa.Index("ix_transactions_contact_id", "contact_id"),
        sa.Index("ix_transactions_reimbursement_request_id", "reimbursement_request_id"),
        sa.Index("idx_transaction_org_account", "org_id", "account_id"),
        sa.Index("idx_transaction_date", "transaction_date"),
    )

    op.create_table(
        "transaction_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=False),
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("type_id", sa.Integer(), nullable=False),
        sa.Column("method_id", sa.Integer(), nullable=True),
        sa.Column(
            "amount_in_cents", sa.Integer(), nullable=False, comment="Signed amount in cents"
        ),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["type_id"], ["transaction_item_types.id"]),
        sa.ForeignKeyConstraint(["method_id"], ["transaction_item_methods.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_transaction_items_org_id", "org_id"),
        sa.Index("ix_transaction_items_transaction_id", "transaction_id"),
    )

    op.create_table(
        "transaction_receipts",
        sa.Column("transaction_id", sa.Integer(), nullable=False),
        sa.Column("receipt_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["transaction_id"], ["transactions.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["receipt_id"], ["receipts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("transaction_id", "receipt_id"),
    )

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("org_id", sa.Integer(), nullable=True),
        sa.Column("entity_type", sa.String(), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["org_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["actor_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    for table in (
        "audit_logs",
        "transaction_receipts",
        "transaction_items",
        "transactions",
        "reimbursement_request_receipts",
        "reimbursement_requests",
        "receipts",
        "accounts",
        "contacts",
        "transaction_item_types",
        "transaction_item_methods",
        "transaction_categories",
        "account_types",
        "memberships",
        "users",
        "organizations",
    ):
        op.drop_table(table)
