from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import select

from meshfinance.api.deps import db, current_user, today
from meshfinance.models.bank_account import BankAccount
from meshfinance.models.user import User
from meshfinance.schemas.invoice import InvoiceOut, PayInvoiceIn
from meshfinance.schemas.transaction import TxOut
from meshfinance.services.audit import log_event
from meshfinance.services.billing import invoice_month, with_day
from meshfinance.services.card_settings import billing_config_for
from meshfinance.services.invoices import invoice_rows, invoice_total, pay_invoice

router = APIRouter(prefix="/credit-card", tags=["credit-card"])


@router.get("/invoice", response_model=InvoiceOut)
def invoice(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    s: Session = Depends(db),
    u: User = Depends(current_user),
    d: date = Depends(today),
):
    cfg = billing_config_for(u)
    if year is None or month is None:
        year, month = invoice_month(d, cfg)

    rows = invoice_rows(s, u.id, year, month)
    return InvoiceOut(
        year=year,
        month=month,
        closing_day=cfg.closing_day,
        due_date=with_day(date(year, month, 1), cfg.due_day),
        total=float(invoice_total(rows)),
        transactions=[TxOut.model_validate(t) for t in rows],
    )


@router.post("/pay", response_model=TxOut)
def pay(body: PayInvoiceIn, s: Session = Depends(db), u: User = Depends(current_user), d: date = Depends(today)):
    acc = s.execute(
        select(BankAccount.id).where(BankAccount.id == body.bank_account_id, BankAccount.user_id == u.id)
    ).scalar_one_or_none()
    if acc is None:
        raise HTTPException(status_code=404, detail="bank_account_not_found")

    t = pay_invoice(s, u.id, body.bank_account_id, body.amount, body.paid_on or d, body.description)
    log_event(
        s,
        user_id=u.id,
        action="invoice.pay",
        entity_type="transaction",
        entity_id=t.id,
        details={"amount": str(t.amount), "bank_account_id": body.bank_account_id, "date": str(t.date)},
    )
    return t
