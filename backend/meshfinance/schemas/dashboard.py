from pydantic import BaseModel
from datetime import date

class AccountBalanceOut(BaseModel):
    bank_account_id: int
    balance: float

class DashboardOut(BaseModel):
    year: int
    month: int
    cutoff: date
    current_balance: float
    starting_balance: float
    month_income: float
    month_expense: float
    card_total: float
    accounts: list[AccountBalanceOut]
