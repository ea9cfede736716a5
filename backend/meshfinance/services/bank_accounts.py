from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from meshfinance.db.atomic import atomic
from meshfinance.models.bank_account import BankAccount
from meshfinance.models.transaction import Transaction
from meshfinance.services.balances import account_balances
from meshfinance.services.billing import period_key

ADJUSTMENT_DESCRIPTION = "Manual balance adjustment"
MIN_ADJUSTMENT = Decimal("0.01")


def migrate_unassigned(s: Session, user_id: int, account_id: int) -> int:
    """Attach every transaction of the user without an account to ``account_id``."""
    res = s.execute(
        update(Transaction)
        .where(Transaction.user_id == user_id, Transaction.bank_account_id.is_(None))
        .values(bank_account_id=account_id)
    )
    return res.rowcount or 0


def adjust_to_target(s: Session, acc: BankAccount, target: Decimal, today: date) -> Transaction | None:
    current = account_balances(s, acc.user_id, today).get(acc.id, Decimal("0"))
    diff = Decimal(str(target)) - current
    if abs(diff) < MIN_ADJUSTMENT:
        return None

    t = Transaction(
        user_id=acc.user_id,
        bank_account_id=acc.id,
        amount=abs(diff),
        type="INCOME" if diff > 0 else "EXPENSE",
        description=ADJUSTMENT_DESCRIPTION,
        payment_method="OTHER",
        date=today,
        due_date=today,
        period=period_key(today),
    )
    s.add(t)
    return t


def delete_account(s: Session, acc: BankAccount, delete_transactions: bool = False) -> int:
    """Remove the account; its transactions are removed too or left unassigned."""
    with atomic(s, "bank_account.delete"):
        if delete_transactions:
            res = s.execute(delete(Transaction).where(Transaction.bank_account_id == acc.id))
        else:
            res = s.execute(
                update(Transaction).where(Transaction.bank_account_id == acc.id).values(bank_account_id=None)
            )
        s.delete(acc)
    return res.rowcount or 0
