from fastapi import APIRouter, Depends, Query, HTTPException
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import select, or_

from meshfinance.api.deps import db, current_user, today
from meshfinance.db.atomic import atomic
from meshfinance.models.bank_account import BankAccount
from meshfinance.models.category import Category
from meshfinance.models.transaction import Transaction
from meshfinance.models.user import User
from meshfinance.schemas.recurring import RecurringOut
from meshfinance.schemas.transaction import TxCreate, TxUpdate, TxOut
from meshfinance.services.audit import log_event
from meshfinance.services.billing import is_credit_card, month_bounds
from meshfinance.services.card_settings import billing_config_for
from meshfinance.services import transactions as tx_service
from meshfinance.services.recurring import create_recurring

router = APIRouter(prefix="/transactions", tags=["transactions"])


def _require_tx(s: Session, user: User, tx_id: int, deleted: bool = False) -> Transaction:
    q = select(Transaction).where(Transaction.id == tx_id, Transaction.user_id == user.id)
    q = q.where(Transaction.deleted_at.is_not(None) if deleted else Transaction.deleted_at.is_(None))
    t = s.execute(q).scalar_one_or_none()
    if t is None:
        raise HTTPException(status_code=404, detail="transaction_not_found")
    return t


def check_refs(s: Session, user: User, category_id: int | None, bank_account_id: int | None) -> None:
    # someone else's records answer exactly like missing ones
    if category_id is not None:
        c = s.execute(
            select(Category.id).where(
                Category.id == category_id,
                or_(Category.user_id == user.id, Category.user_id.is_(None)),
                Category.deleted_at.is_(None),
            )
        ).scalar_one_or_none()
        if c is None:
            raise HTTPException(status_code=404, detail="category_not_found")
    if bank_account_id is not None:
        a = s.execute(
            select(BankAccount.id).where(BankAccount.id == bank_account_id, BankAccount.user_id == user.id)
        ).scalar_one_or_none()
        if a is None:
            raise HTTPException(status_code=404, detail="bank_account_not_found")


@router.get("", response_model=list[TxOut])
def list_transactions(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    payment_method: str | None = Query(None),
    category_id: int | None = Query(None),
    bank_account_id: int | None = Query(None),
    s: Session = Depends(db),
    u: User = Depends(current_user),
):
    q = select(Transaction).where(Transaction.user_id == u.id, Transaction.deleted_at.is_(None))
    if year is not None and month is not None:
        first, last = month_bounds(year, month)
        q = q.where(Transaction.date >= first, Transaction.date <= last)
    if payment_method:
        q = q.where(Transaction.payment_method == payment_method)
    if category_id is not None:
        q = q.where(Transaction.category_id == category_id)
    if bank_account_id is not None:
        q = q.where(Transaction.bank_account_id == bank_account_id)
    q = q.order_by(Transaction.date.desc(), Transaction.id.desc())
    return s.execute(q).scalars().all()


@router.post("", response_model=list[TxOut])
def create_transaction(body: TxCreate, s: Session = Depends(db), u: User = Depends(current_user)):
    """Record a purchase; one request can produce several ledger rows.

    Recurring purchases create a standing instruction plus its first months,
    card purchases with installments create one row per installment, anything
    else creates a single row.
    """
    if body.is_recurring and body.installments > 1:
        raise HTTPException(status_code=400, detail="recurring_with_installments")
    if body.installments > 1 and not is_credit_card(body.payment_method):
        raise HTTPException(status_code=400, detail="installments_require_credit_card")
    check_refs(s, u, body.category_id, body.bank_account_id)

    cfg = billing_config_for(u)

    if body.is_recurring:
        rec = create_recurring(
            s,
            u.id,
            cfg,
            description=body.description,
            amount=body.amount,
            type=body.type,
            payment_method=body.payment_method,
            start_date=body.date,
            category_id=body.category_id,
            bank_account_id=body.bank_account_id,
        )
        rows = (
            s.execute(select(Transaction).where(Transaction.recurring_id == rec.id).order_by(Transaction.date.asc()))
            .scalars()
            .all()
        )
        log_event(
            s,
            user_id=u.id,
            action="recurring.create",
            entity_type="recurring",
            entity_id=rec.id,
            details=RecurringOut.model_validate(rec).model_dump(mode="json"),
        )
        return rows

    if body.installments > 1:
        plan, rows = tx_service.create_installments(
            s,
            u.id,
            cfg,
            amount=body.amount,
            description=body.description,
            type=body.type,
            purchase_date=body.date,
            installments=body.installments,
            category_id=body.category_id,
            bank_account_id=body.bank_account_id,
        )
        log_event(
            s,
            user_id=u.id,
            action="installments.create",
            entity_type="installment_plan",
            entity_id=plan.id,
            details={"installments": body.installments, "amount": str(body.amount), "date": str(body.date)},
        )
        return rows

    t = tx_service.create_single(
        s,
        u.id,
        cfg,
        amount=body.amount,
        description=body.description,
        type=body.type,
        payment_method=body.payment_method,
        purchase_date=body.date,
        category_id=body.category_id,
        bank_account_id=body.bank_account_id,
    )
    log_event(
        s,
        user_id=u.id,
        action="tx.create",
        entity_type="transaction",
        entity_id=t.id,
        details={"date": str(t.date), "due_date": str(t.due_date), "amount": str(t.amount)},
    )
    return [t]


@router.patch("/{tx_id}", response_model=TxOut)
def update_transaction(tx_id: int, body: TxUpdate, s: Session = Depends(db), u: User = Depends(current_user)):
    t = _require_tx(s, u, tx_id)
    check_refs(s, u, body.category_id, body.bank_account_id)
    # an instruction holds at most one row per month, deleted rows included
    if tx_service.recurring_period_taken(s, t, body.date):
        raise HTTPException(status_code=409, detail="recurring_period_taken")

    with atomic(s, "transaction.update"):
        tx_service.apply_edit(
            t,
            billing_config_for(u),
            amount=body.amount,
            description=body.description,
            type=body.type,
            payment_method=body.payment_method,
            new_date=body.date,
            category_id=body.category_id,
            bank_account_id=body.bank_account_id,
        )
        s.add(t)
    s.refresh(t)

    log_event(
        s,
        user_id=u.id,
        action="tx.update",
        entity_type="transaction",
        entity_id=t.id,
        details={"date": str(t.date), "due_date": str(t.due_date), "amount": str(t.amount)},
    )
    return t


@router.delete("/{tx_id}")
def delete_transaction(tx_id: int, s: Session = Depends(db), u: User = Depends(current_user)):
    t = _require_tx(s, u, tx_id)
    tx_service.soft_delete(s, t)
    log_event(s, user_id=u.id, action="tx.delete", entity_type="transaction", entity_id=tx_id)
    return {"ok": True}


@router.get("/upcoming", response_model=list[TxOut])
def upcoming_card_transactions(s: Session = Depends(db), u: User = Depends(current_user), d: date = Depends(today)):
    first, _ = month_bounds(d.year, d.month)
    return (
        s.execute(
            select(Transaction)
            .where(
                Transaction.user_id == u.id,
                Transaction.deleted_at.is_(None),
                Transaction.payment_method == "CREDIT_CARD",
                Transaction.date >= first,
            )
            .order_by(Transaction.date.asc(), Transaction.id.asc())
        )
        .scalars()
        .all()
    )
