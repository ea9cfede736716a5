from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.orm import Session

from meshfinance.models.category import Category
from meshfinance.models.transaction import Transaction
from meshfinance.services.billing import month_bounds


def visible_categories(user_id: int):
    return (
        select(Category)
        .where(
            or_(Category.user_id == user_id, Category.user_id.is_(None)),
            Category.deleted_at.is_(None),
        )
        .order_by(Category.type.asc(), Category.name.asc())
    )


def budget_overview(s: Session, user_id: int, year: int, month: int) -> list[dict]:
    first, last = month_bounds(year, month)
    spent_rows = s.execute(
        select(Transaction.category_id, func.coalesce(func.sum(Transaction.amount), 0))
        .where(
            Transaction.user_id == user_id,
            Transaction.type == "EXPENSE",
            Transaction.deleted_at.is_(None),
            Transaction.category_id.is_not(None),
            Transaction.date >= first,
            Transaction.date <= last,
        )
        .group_by(Transaction.category_id)
    ).all()
    spent = {cid: Decimal(str(total)) for (cid, total) in spent_rows}

    out = []
    for c in s.execute(visible_categories(user_id)).scalars().all():
        if c.type != "EXPENSE":
            continue
        used = spent.get(c.id, Decimal("0"))
        limit = Decimal(str(c.budget_limit)) if c.budget_limit is not None else None
        out.append(
            {
                "category_id": c.id,
                "name": c.name,
                "budget_limit": limit,
                "spent": used,
                "remaining": (limit - used) if limit is not None else None,
            }
        )
    return out
