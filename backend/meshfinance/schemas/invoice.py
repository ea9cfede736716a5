from pydantic import BaseModel, field_validator
from datetime import date
from decimal import Decimal

from meshfinance.schemas.transaction import TxOut, positive_amount, required_text

class InvoiceOut(BaseModel):
    year: int
    month: int
    closing_day: int
    due_date: date
    total: float
    transactions: list[TxOut]

class PayInvoiceIn(BaseModel):
    amount: Decimal
    bank_account_id: int
    paid_on: date | None = None
    description: str = "Credit card invoice payment"

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Decimal):
        return positive_amount(v)

    @field_validator("description")
    @classmethod
    def description_trim(cls, v: str):
        return required_text(v)
