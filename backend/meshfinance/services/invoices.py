from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from meshfinance.core.config import settings
from meshfinance.db.atomic import atomic
from meshfinance.models.category import Category
from meshfinance.models.transaction import Transaction
from meshfinance.services.billing import CREDIT_CARD, month_bounds, period_key


def invoice_rows(s: Session, user_id: int, year: int, month: int) -> list[Transaction]:
    # a bill is made of the card rows falling due in its month
    first, last = month_bounds(year, month)
    return (
        s.execute(
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.payment_method == CREDIT_CARD,
                Transaction.deleted_at.is_(None),
                Transaction.due_date >= first,
                Transaction.due_date <= last,
            )
            .order_by(Transaction.date.desc(), Transaction.id.desc())
        )
        .scalars()
        .all()
    )


def invoice_total(rows: list[Transaction]) -> Decimal:
    # card refunds are recorded as income and reduce the bill
    total = Decimal("0")
    for t in rows:
        amt = Decimal(str(t.amount))
        total += amt if t.type == "EXPENSE" else -amt
    return total


def payment_category_id(s: Session, user_id: int) -> int | None:
    hint = (settings.invoice_payment_category_hint or "").strip()
    if not hint:
        return None
    return (
        s.execute(
            select(Category.id)
            .where(
                Category.user_id == user_id,
                Category.deleted_at.is_(None),
                Category.name.ilike(f"%{hint}%"),
            )
            .order_by(Category.id.asc())
            .limit(1)
        )
        .scalars()
        .first()
    )


def pay_invoice(
    s: Session,
    user_id: int,
    bank_account_id: int,
    amount: Decimal,
    paid_on: date,
    description: str,
) -> Transaction:
    """Record the settlement of a card bill as a PIX expense on a bank account."""
    t = Transaction(
        user_id=user_id,
        bank_account_id=bank_account_id,
        category_id=payment_category_id(s, user_id),
        amount=amount,
        type="EXPENSE",
        payment_method="PIX",
        description=description,
        date=paid_on,
        due_date=paid_on,
        period=period_key(paid_on),
    )
    with atomic(s, "invoice.pay"):
        s.add(t)
    s.refresh(t)
    return t
