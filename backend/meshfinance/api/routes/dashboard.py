from fastapi import APIRouter, Depends, Query
from datetime import date
from sqlalchemy.orm import Session

from meshfinance.api.deps import db, current_user, today
from meshfinance.models.user import User
from meshfinance.schemas.dashboard import DashboardOut
from meshfinance.services.card_settings import billing_config_for
from meshfinance.services.recurring import extend_recurring_for_user
from meshfinance.services.summary import month_summary

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardOut)
def dashboard(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    s: Session = Depends(db),
    u: User = Depends(current_user),
    d: date = Depends(today),
):
    # keeps fixed expenses a full horizon ahead every time the user looks
    extend_recurring_for_user(s, u.id, billing_config_for(u), d)

    sm = month_summary(s, u.id, year or d.year, month or d.month, d)
    return DashboardOut(
        year=sm.year,
        month=sm.month,
        cutoff=sm.cutoff,
        current_balance=float(sm.current_balance),
        starting_balance=float(sm.starting_balance),
        month_income=float(sm.month_income),
        month_expense=float(sm.month_expense),
        card_total=float(sm.card_total),
        accounts=[{"bank_account_id": k, "balance": float(v)} for k, v in sm.balances.items()],
    )
