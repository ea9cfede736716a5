from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import select

from meshfinance.api.deps import db, current_user, today
from meshfinance.api.routes.transactions import check_refs
from meshfinance.models.recurring import RecurringTransaction
from meshfinance.models.user import User
from meshfinance.schemas.recurring import RecurringCreate, RecurringUpdate, RecurringOut, RecurringChangeOut
from meshfinance.services.audit import log_event
from meshfinance.services.card_settings import billing_config_for
from meshfinance.services.recurring import create_recurring, edit_recurring, stop_recurring, extend_recurring_for_user

router = APIRouter(prefix="/recurring", tags=["recurring"])


def _require_recurring(s: Session, user: User, recurring_id: int) -> RecurringTransaction:
    rec = s.execute(
        select(RecurringTransaction).where(
            RecurringTransaction.id == recurring_id,
            RecurringTransaction.user_id == user.id,
        )
    ).scalar_one_or_none()
    if rec is None:
        raise HTTPException(status_code=404, detail="recurring_not_found")
    return rec


@router.get("", response_model=list[RecurringOut])
def list_recurring(
    include_inactive: bool = Query(False),
    s: Session = Depends(db),
    u: User = Depends(current_user),
    d: date = Depends(today),
):
    extend_recurring_for_user(s, u.id, billing_config_for(u), d)

    q = select(RecurringTransaction).where(RecurringTransaction.user_id == u.id)
    if not include_inactive:
        q = q.where(RecurringTransaction.active.is_(True))
    q = q.order_by(RecurringTransaction.start_date.asc(), RecurringTransaction.id.asc())
    return s.execute(q).scalars().all()


@router.post("", response_model=RecurringOut)
def create(body: RecurringCreate, s: Session = Depends(db), u: User = Depends(current_user)):
    check_refs(s, u, body.category_id, body.bank_account_id)
    rec = create_recurring(
        s,
        u.id,
        billing_config_for(u),
        description=body.description,
        amount=body.amount,
        type=body.type,
        payment_method=body.payment_method,
        start_date=body.start_date,
        category_id=body.category_id,
        bank_account_id=body.bank_account_id,
    )
    log_event(
        s,
        user_id=u.id,
        action="recurring.create",
        entity_type="recurring",
        entity_id=rec.id,
        details=body.model_dump(mode="json"),
    )
    return rec


@router.post("/extend")
def extend(s: Session = Depends(db), u: User = Depends(current_user), d: date = Depends(today)):
    return {"created": extend_recurring_for_user(s, u.id, billing_config_for(u), d)}


@router.patch("/{recurring_id}", response_model=RecurringChangeOut)
def update(
    recurring_id: int,
    body: RecurringUpdate,
    s: Session = Depends(db),
    u: User = Depends(current_user),
    d: date = Depends(today),
):
    rec = _require_recurring(s, u, recurring_id)
    if not rec.active:
        raise HTTPException(status_code=409, detail="recurring_inactive")
    check_refs(s, u, body.category_id, body.bank_account_id)

    n = edit_recurring(
        s,
        rec,
        billing_config_for(u),
        d,
        amount=body.amount,
        description=body.description,
        start_date=body.start_date,
        category_id=body.category_id,
        bank_account_id=body.bank_account_id,
    )
    s.refresh(rec)
    log_event(
        s,
        user_id=u.id,
        action="recurring.update",
        entity_type="recurring",
        entity_id=rec.id,
        details={**body.model_dump(mode="json"), "regenerated": n},
    )
    return {"recurring": rec, "affected": n}


@router.post("/{recurring_id}/stop", response_model=RecurringChangeOut)
def stop(recurring_id: int, s: Session = Depends(db), u: User = Depends(current_user), d: date = Depends(today)):
    rec = _require_recurring(s, u, recurring_id)
    removed = stop_recurring(s, rec, d)
    s.refresh(rec)
    log_event(
        s,
        user_id=u.id,
        action="recurring.stop",
        entity_type="recurring",
        entity_id=rec.id,
        details={"removed": removed, "as_of": str(d)},
    )
    return {"recurring": rec, "affected": removed}
