"""Identifiers of the global reference rows every organization shares.

These rows are seeded with ``org_id = NULL`` (see
``fundledger.services.reference_seeding``) and are referenced directly by
the posting flows: transfers and reimbursement approvals always use the
same categories, types and methods regardless of organization.
"""

from enum import IntEnum


class AccountTypeId(IntEnum):
    OPERATING = 1
    BENEVOLENCE = 2
    MINISTRY = 3


class TransactionCategoryId(IntEnum):
    DONATIONS = 1
    GRANTS = 2
    OPERATING_EXPENSES = 3
    PROGRAM_EXPENSES = 4
    INTERNAL_TRANSFER_GAIN = 5
    INTERNAL_TRANSFER_LOSS = 6
    OTHER = 7


class TransactionItemMethodId(IntEnum):
    CASH = 1
    CHECK = 2
    ACH = 3
    CARD = 4
    OTHER = 5


class TransactionItemTypeId(IntEnum):
    DONATION = 1
    GRANT = 2
    OTHER_INCOMING = 3
    TRANSFER_IN = 4
    EXPENSE = 5
    FEE = 6
    OTHER_OUTGOING = 7
    TRANSFER_OUT = 8


# Tag written on the single item of a reimbursement approval posting
REIMBURSEMENT_ITEM_DESCRIPTION = "Reimbursement ID: {request_id}"

# Upper bound accepted for a single entered amount ($100,000 exclusive)
MAX_AMOUNT_IN_CENTS = 99_999_99

__all__ = [
    "AccountTypeId",
    "TransactionCategoryId",
    "TransactionItemMethodId",
    "TransactionItemTypeId",
    "REIMBURSEMENT_ITEM_DESCRIPTION",
    "MAX_AMOUNT_IN_CENTS",
]
