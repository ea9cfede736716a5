from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from meshfinance.models.bank_account import BankAccount
from meshfinance.models.transaction import Transaction
from meshfinance.services.balances import account_balances, balance_cutoff
from meshfinance.services.billing import is_credit_card, month_bounds

ZERO = Decimal("0")


@dataclass
class MonthSummary:
    year: int
    month: int
    cutoff: date
    balances: dict[int, Decimal] = field(default_factory=dict)
    current_balance: Decimal = ZERO
    month_income: Decimal = ZERO
    month_expense: Decimal = ZERO
    starting_balance: Decimal = ZERO
    card_total: Decimal = ZERO


def month_summary(s: Session, user_id: int, year: int, month: int, today: date) -> MonthSummary:
    """Balances and month totals for the dashboard.

    Rows on accounts excluded from the total are left out of the month
    figures as well. Card rows count in income/expense by visual date and
    are summed separately as the month's card spend.
    """
    cutoff = balance_cutoff(today, year, month)
    out = MonthSummary(year=year, month=month, cutoff=cutoff)

    accounts = s.execute(select(BankAccount).where(BankAccount.user_id == user_id)).scalars().all()
    out.balances = account_balances(s, user_id, cutoff)
    hidden = {a.id for a in accounts if not a.include_in_total}
    out.current_balance = sum((b for aid, b in out.balances.items() if aid not in hidden), ZERO)

    first, last = month_bounds(year, month)
    txs = (
        s.execute(
            select(Transaction).where(
                Transaction.user_id == user_id,
                Transaction.deleted_at.is_(None),
                Transaction.date >= first,
                Transaction.date <= last,
            )
        )
        .scalars()
        .all()
    )
    for t in txs:
        if t.bank_account_id is not None and t.bank_account_id in hidden:
            continue
        amt = Decimal(str(t.amount))
        if t.type == "INCOME":
            out.month_income += amt
        else:
            out.month_expense += amt
        if is_credit_card(t.payment_method):
            out.card_total += amt

    out.starting_balance = out.current_balance - out.month_income + out.month_expense
    return out
