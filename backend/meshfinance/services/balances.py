from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from meshfinance.models.bank_account import BankAccount
from meshfinance.models.transaction import Transaction
from meshfinance.services.billing import is_credit_card, month_bounds

ZERO = Decimal("0")


def _to_dec(v) -> Decimal:
    return Decimal(str(v))


def balance_cutoff(today: date, year: int | None = None, month: int | None = None) -> date:
    """Last day counted in a balance.

    Today for the live balance. A past month is frozen at its last day so
    the figure does not move when it is looked at later.
    """
    if year is None or month is None:
        return today
    _, last = month_bounds(year, month)
    return last if last < today else today


def fold_balance(initial, txs: Iterable, cutoff: date) -> Decimal:
    """initial + income - expense over the rows that touch the account.

    Credit-card rows are ignored, the account only moves when the invoice is
    paid. Soft-deleted rows and rows dated after ``cutoff`` are ignored too.
    """
    bal = _to_dec(initial)
    for t in txs:
        if getattr(t, "deleted_at", None) is not None:
            continue
        if is_credit_card(t.payment_method) or t.date > cutoff:
            continue
        if t.type == "INCOME":
            bal += _to_dec(t.amount)
        elif t.type == "EXPENSE":
            bal -= _to_dec(t.amount)
    return bal


def account_balances(s: Session, user_id: int, cutoff: date) -> dict[int, Decimal]:
    accounts = s.execute(select(BankAccount).where(BankAccount.user_id == user_id)).scalars().all()
    if not accounts:
        return {}

    txs = (
        s.execute(
            select(Transaction).where(
                Transaction.user_id == user_id,
                Transaction.bank_account_id.in_([a.id for a in accounts]),
                Transaction.payment_method != "CREDIT_CARD",
                Transaction.deleted_at.is_(None),
                Transaction.date <= cutoff,
            )
        )
        .scalars()
        .all()
    )
    by_account: dict[int, list[Transaction]] = {}
    for t in txs:
        by_account.setdefault(t.bank_account_id, []).append(t)

    return {a.id: fold_balance(a.initial_balance, by_account.get(a.id, []), cutoff) for a in accounts}
