from pydantic import BaseModel, field_validator
from datetime import datetime
from decimal import Decimal
from typing import Literal

AccountType = Literal["CHECKING", "INVESTMENT", "CASH"]

class BankAccountCreate(BaseModel):
    name: str
    initial_balance: Decimal = Decimal("0")
    type: AccountType = "CHECKING"
    color: str | None = None
    include_in_total: bool = True
    migrate_legacy: bool = False

    @field_validator("name")
    @classmethod
    def name_trim(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        if len(v) > 128:
            raise ValueError("name too long")
        return v

class BankAccountUpdate(BaseModel):
    name: str | None = None
    type: AccountType | None = None
    color: str | None = None
    include_in_total: bool | None = None
    # when given, an adjustment entry brings the live balance to this value
    target_balance: Decimal | None = None
    migrate_legacy: bool = False

class BankAccountOut(BaseModel):
    id: int
    name: str
    type: str
    color: str
    include_in_total: bool
    initial_balance: float
    current_balance: float = 0.0
    transaction_count: int = 0
    migrated_count: int = 0
    created_at: datetime | None = None

    class Config:
        from_attributes = True
