"""Pydantic schemas for the ledger API.

Request bodies carry dollar amounts (``"$12.34"``, ``"1,000"`` or plain
numbers); they are converted to integer cents here, before any service
sees them. Responses always report integer cents.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fundledger.models.reimbursement_request import ReimbursementRequestStatus
from fundledger.services.locale_service import parse_amount_to_cents
from fundledger.services.outcomes import PostingResult


def _to_cents(value):
    if value is None:
        return None
    return parse_amount_to_cents(value)


# --- Requests ---------------------------------------------------------------


class AccountCreatePayload(BaseModel):
    """Request payload for POST /api/accounts."""

    code: str = Field(..., max_length=50)
    description: str = Field(..., max_length=255)
    type_id: int
    user_id: int | None = None


class AccountUpdatePayload(BaseModel):
    """Request payload for PUT /api/accounts/{id}; omitted fields are unchanged."""

    code: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=255)
    type_id: int | None = None
    user_id: int | None = None


class TransactionItemPayload(BaseModel):
    type_id: int
    method_id: int | None = None
    amount: int = Field(..., description="Dollar amount, converted to cents")
    description: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_to_cents(cls, value):
        return _to_cents(value)


class TransactionCreatePayload(BaseModel):
    """Request payload for POST /api/transactions (expense and income entry)."""

    account_id: int
    transaction_date: date
    description: str | None = None
    category_id: int | None = None
    contact_id: int | None = None
    receipt_ids: list[int] = Field(default_factory=list)
    items: list[TransactionItemPayload] = Field(..., min_length=1)


class TransactionUpdatePayload(BaseModel):
    """Request payload for PUT /api/transactions/{id}.

    Only date, description and category can change after posting.
    """

    transaction_date: date | None = None
    description: str | None = None
    category_id: int | None = None

    model_config = ConfigDict(extra="forbid")


class TransferPayload(BaseModel):
    """Request payload for POST /api/transfers."""

    from_account_id: int
    to_account_id: int
    amount: int = Field(..., description="Dollar amount, converted to cents")
    transaction_date: date | None = None
    description: str | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def amount_to_cents(cls, value):
        return _to_cents(value)


class ReimbursementCreatePayload(BaseModel):
    """Request payload for POST /api/reimbursements."""

    account_id: int
    amount: int = Field(..., description="Dollar amount, converted to cents")
    expense_date: date
    vendor: str | None = Field(None, max_length=255)
    description: str | None = None
    method_id: int | None = None
    receipt_ids: list[int] = Field(default_factory=list)

    @field_validator("amount", mode="before")
    @classmethod
    def amount_to_cents(cls, value):
        return _to_cents(value)


class ReimbursementStatusPayload(BaseModel):
    """Request payload for POST /api/reimbursements/{id}/status.

    ``status`` is the target state. ``amount``, ``category_id`` and
    ``account_id`` are required when approving.
    """

    status: ReimbursementRequestStatus
    amount: int | None = Field(None, description="Dollar amount, converted to cents")
    category_id: int | None = None
    account_id: int | None = None
    approver_note: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("amount", mode="before")
    @classmethod
    def amount_to_cents(cls, value):
        return _to_cents(value)


class ContactCreatePayload(BaseModel):
    """Request payload for POST /api/contacts; a name or organization name is required."""

    first_name: str | None = Field(None, max_length=255)
    last_name: str | None = Field(None, max_length=255)
    organization_name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)


class ReceiptCreatePayload(BaseModel):
    """Request payload for POST /api/receipts, sent after the file is uploaded."""

    title: str = Field(..., max_length=255)
    s3_key: str = Field(..., max_length=500)


class ReceiptDeletePayload(BaseModel):
    ids: list[int] = Field(..., min_length=1)


class CategoryPayload(BaseModel):
    """Request payload for creating or renaming a transaction category."""

    name: str


# --- Responses --------------------------------------------------------------


class AccountResponse(BaseModel):
    id: int
    code: str
    description: str
    type_id: int
    user_id: int | None = None
    balance_in_cents: int | None = None

    model_config = ConfigDict(from_attributes=True)


class TransactionItemResponse(BaseModel):
    id: int
    type_id: int
    method_id: int | None = None
    amount_in_cents: int
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class TransactionResponse(BaseModel):
    id: int
    account_id: int
    amount_in_cents: int
    transaction_date: date
    description: str | None = None
    category_id: int | None = None
    contact_id: int | None = None
    reimbursement_request_id: int | None = None
    items: list[TransactionItemResponse] = Field(default_factory=list)
    receipt_ids: list[int] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_transaction(cls, transaction) -> "TransactionResponse":
        return cls(
            id=transaction.id,
            account_id=transaction.account_id,
            amount_in_cents=transaction.amount_in_cents,
            transaction_date=transaction.transaction_date,
            description=transaction.description,
            category_id=transaction.category_id,
            contact_id=transaction.contact_id,
            reimbursement_request_id=transaction.reimbursement_request_id,
            items=[TransactionItemResponse.model_validate(item) for item in transaction.items],
            receipt_ids=[receipt.id for receipt in transaction.receipts],
        )


class ReimbursementResponse(BaseModel):
    id: int
    user_id: int
    account_id: int
    method_id: int | None = None
    amount_in_cents: int
    expense_date: date
    vendor: str | None = None
    description: str | None = None
    status: ReimbursementRequestStatus
    approver_note: str | None = None
    receipt_ids: list[int] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_request(cls, request) -> "ReimbursementResponse":
        return cls(
            id=request.id,
            user_id=request.user_id,
            account_id=request.account_id,
            method_id=request.method_id,
            amount_in_cents=request.amount_in_cents,
            expense_date=request.expense_date,
            vendor=request.vendor,
            description=request.description,
            status=request.status,
            approver_note=request.approver_note,
            receipt_ids=[receipt.id for receipt in request.receipts],
            created_at=request.created_at,
        )


class ReimbursementDetailResponse(ReimbursementResponse):
    related_transaction: TransactionResponse | None = None


class ReferenceRow(BaseModel):
    id: int
    name: str
    org_id: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ItemTypeRow(ReferenceRow):
    direction: str

    @field_validator("direction", mode="before")
    @classmethod
    def direction_value(cls, value):
        return getattr(value, "value", value)


class ReferenceDataResponse(BaseModel):
    item_types: list[ItemTypeRow]
    item_methods: list[ReferenceRow]
    categories: list[ReferenceRow]
    account_types: list[ReferenceRow]


class NoticeResponse(BaseModel):
    level: str
    message: str
    description: str = ""


class PostingResponse(BaseModel):
    """Outcome of a posting or status change.

    ``ok`` is False for business-rule rejections (e.g. insufficient funds);
    nothing was written in that case.
    """

    ok: bool
    notice: NoticeResponse
    transactions: list[TransactionResponse] = Field(default_factory=list)
    reimbursement_request: ReimbursementResponse | None = None

    @classmethod
    def from_result(cls, result: PostingResult) -> "PostingResponse":
        request = result.reimbursement_request
        return cls(
            ok=result.ok,
            notice=NoticeResponse(**result.notice.to_dict()),
            transactions=[TransactionResponse.from_transaction(t) for t in result.transactions],
            reimbursement_request=ReimbursementResponse.from_request(request) if request else None,
        )


class ContactResponse(BaseModel):
    id: int
    first_name: str | None = None
    last_name: str | None = None
    organization_name: str | None = None
    email: str | None = None
    display_name: str

    model_config = ConfigDict(from_attributes=True)


class ReceiptResponse(BaseModel):
    id: int
    user_id: int
    title: str
    s3_key: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReceiptDeleteResponse(BaseModel):
    count: int


class CategoryRow(ReferenceRow):
    """A visible category; defaults have no ``org_id`` and cannot be edited."""

    transaction_count: int = 0
