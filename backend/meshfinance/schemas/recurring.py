from pydantic import BaseModel, field_validator
from datetime import date, datetime
from decimal import Decimal

from meshfinance.schemas.transaction import PaymentMethod, TxType, positive_amount, required_text

class RecurringCreate(BaseModel):
    description: str
    amount: Decimal
    type: TxType
    payment_method: PaymentMethod
    start_date: date
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

class RecurringUpdate(BaseModel):
    amount: Decimal
    description: str
    start_date: date
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

class RecurringOut(BaseModel):
    id: int
    description: str
    amount: float
    type: TxType
    payment_method: PaymentMethod
    start_date: date
    frequency: str
    active: bool
    category_id: int | None
    bank_account_id: int | None
    created_at: datetime | None = None

    class Config:
        from_attributes = True

class RecurringChangeOut(BaseModel):
    recurring: RecurringOut
    affected: int
