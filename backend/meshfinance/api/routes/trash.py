from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import select

from meshfinance.api.deps import db, current_user
from meshfinance.api.routes.transactions import _require_tx
from meshfinance.models.category import Category
from meshfinance.models.transaction import Transaction
from meshfinance.models.user import User
from meshfinance.schemas.category import CategoryOut
from meshfinance.schemas.transaction import TxOut
from meshfinance.schemas.trash import TrashOut
from meshfinance.services.audit import log_event
from meshfinance.services import transactions as tx_service

router = APIRouter(prefix="/trash", tags=["trash"])


@router.get("", response_model=TrashOut)
def list_trash(s: Session = Depends(db), u: User = Depends(current_user)):
    txs = (
        s.execute(
            select(Transaction)
            .where(Transaction.user_id == u.id, Transaction.deleted_at.is_not(None))
            .order_by(Transaction.deleted_at.desc())
        )
        .scalars()
        .all()
    )
    cats = (
        s.execute(
            select(Category)
            .where(Category.user_id == u.id, Category.deleted_at.is_not(None))
            .order_by(Category.deleted_at.desc())
        )
        .scalars()
        .all()
    )
    return {"transactions": txs, "categories": cats}


@router.post("/transactions/{tx_id}/restore", response_model=TxOut)
def restore_transaction(tx_id: int, s: Session = Depends(db), u: User = Depends(current_user)):
    t = _require_tx(s, u, tx_id, deleted=True)
    tx_service.restore(s, t)
    log_event(s, user_id=u.id, action="tx.restore", entity_type="transaction", entity_id=tx_id)
    return t


@router.post("/categories/{category_id}/restore", response_model=CategoryOut)
def restore_category(category_id: int, s: Session = Depends(db), u: User = Depends(current_user)):
    c = s.execute(
        select(Category).where(
            Category.id == category_id,
            Category.user_id == u.id,
            Category.deleted_at.is_not(None),
        )
    ).scalar_one_or_none()
    if c is None:
        raise HTTPException(status_code=404, detail="category_not_found")
    c.deleted_at = None
    s.add(c)
    s.commit()
    log_event(s, user_id=u.id, action="category.restore", entity_type="category", entity_id=category_id)
    return c
