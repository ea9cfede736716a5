from pydantic import BaseModel, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

TxType = Literal["INCOME", "EXPENSE"]
PaymentMethod = Literal["PIX", "CREDIT_CARD", "DEBIT_CARD", "CASH", "OTHER", "BOLETO"]


def positive_amount(v: Decimal) -> Decimal:
    if v is None:
        raise ValueError("amount is required")
    if not v.is_finite():
        raise ValueError("amount must be finite")
    if v <= 0:
        raise ValueError("amount must be positive")
    return v


# leaves room in the 256-char column for an installment suffix like " (12/72)"
MAX_DESCRIPTION = 240


def required_text(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("description is required")
    if len(v) > MAX_DESCRIPTION:
        raise ValueError(f"description must be at most {MAX_DESCRIPTION} characters")
    return v


class TxCreate(BaseModel):
    amount: Decimal
    description: str
    type: TxType
    payment_method: PaymentMethod
    date: date
    category_id: int | None = None
    bank_account_id: int | None = None
    installments: int = 0
    is_recurring: bool = False

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Decimal):
        return positive_amount(v)

    @field_validator("description")
    @classmethod
    def description_trim(cls, v: str):
        return required_text(v)

    @field_validator("installments")
    @classmethod
    def installments_range(cls, v: int):
        if v < 0 or v > 72:
            raise ValueError("installments must be between 0 and 72")
        return v

class TxUpdate(BaseModel):
    amount: Decimal
    description: str
    type: TxType
    payment_method: PaymentMethod
    date: date
    category_id: int | None = None
    bank_account_id: int | None = None

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Decimal):
        return positive_amount(v)

    @field_validator("description")
    @classmethod
    def description_trim(cls, v: str):
        return required_text(v)

class TxOut(BaseModel):
    id: int
    amount: float
    description: str
    type: TxType
    payment_method: PaymentMethod
    date: date
    due_date: date
    current_installment: int | None
    installment_plan_id: int | None
    recurring_id: int | None
    category_id: int | None
    bank_account_id: int | None
    deleted_at: datetime | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True
