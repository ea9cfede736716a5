from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import date, datetime
from sqlalchemy.orm import Session
from sqlalchemy import select

from meshfinance.api.deps import db, current_user, today
from meshfinance.models.category import Category
from meshfinance.models.user import User
from meshfinance.schemas.category import CategoryCreate, CategoryOut, BudgetIn, BudgetRow
from meshfinance.services.audit import log_event
from meshfinance.services.budget import budget_overview, visible_categories

router = APIRouter(tags=["categories"])


def _require_own_category(s: Session, user: User, category_id: int) -> Category:
    # global categories are read-only for users
    c = s.execute(
        select(Category).where(
            Category.id == category_id,
            Category.user_id == user.id,
            Category.deleted_at.is_(None),
        )
    ).scalar_one_or_none()
    if c is None:
        raise HTTPException(status_code=404, detail="category_not_found")
    return c


@router.get("/categories", response_model=list[CategoryOut])
def list_categories(s: Session = Depends(db), u: User = Depends(current_user)):
    return s.execute(visible_categories(u.id)).scalars().all()


@router.post("/categories", response_model=CategoryOut)
def create_category(body: CategoryCreate, s: Session = Depends(db), u: User = Depends(current_user)):
    c = Category(name=body.name, type=body.type, user_id=u.id)
    s.add(c)
    s.commit()
    s.refresh(c)
    log_event(s, user_id=u.id, action="category.create", entity_type="category", entity_id=c.id, details=body.model_dump())
    return c


@router.delete("/categories/{category_id}")
def delete_category(category_id: int, s: Session = Depends(db), u: User = Depends(current_user)):
    c = _require_own_category(s, u, category_id)
    c.deleted_at = datetime.utcnow()
    s.add(c)
    s.commit()
    log_event(s, user_id=u.id, action="category.delete", entity_type="category", entity_id=category_id)
    return {"ok": True}


@router.put("/categories/{category_id}/budget", response_model=CategoryOut)
def set_budget(category_id: int, body: BudgetIn, s: Session = Depends(db), u: User = Depends(current_user)):
    c = _require_own_category(s, u, category_id)
    c.budget_limit = body.limit
    s.add(c)
    s.commit()
    s.refresh(c)
    log_event(
        s,
        user_id=u.id,
        action="category.budget",
        entity_type="category",
        entity_id=c.id,
        details={"limit": str(body.limit)},
    )
    return c


@router.get("/budget", response_model=list[BudgetRow])
def budget(
    year: int | None = Query(None, ge=1, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    s: Session = Depends(db),
    u: User = Depends(current_user),
    d: date = Depends(today),
):
    return budget_overview(s, u.id, year or d.year, month or d.month)
