from pydantic import BaseModel, field_validator
from datetime import datetime
from decimal import Decimal

from meshfinance.schemas.transaction import TxType

class CategoryCreate(BaseModel):
    name: str
    type: TxType

    @field_validator("name")
    @classmethod
    def name_min(cls, v: str):
        v = v.strip()
        if len(v) < 2:
            raise ValueError("name must be at least 2 characters")
        if len(v) > 64:
            raise ValueError("name too long")
        return v

class CategoryOut(BaseModel):
    id: int
    name: str
    type: TxType
    user_id: int | None
    budget_limit: float | None
    deleted_at: datetime | None = None

    class Config:
        from_attributes = True

class BudgetIn(BaseModel):
    limit: Decimal

    @field_validator("limit")
    @classmethod
    def limit_non_negative(cls, v: Decimal):
        if not v.is_finite() or v < 0:
            raise ValueError("limit must be zero or more")
        return v

class BudgetRow(BaseModel):
    category_id: int
    name: str
    budget_limit: float | None
    spent: float
    remaining: float | None
