from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import select, delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from meshfinance.core.config import settings
from meshfinance.db.atomic import atomic
from meshfinance.models.recurring import RecurringTransaction
from meshfinance.models.transaction import Transaction
from meshfinance.services.billing import (
    BillingConfig,
    Occurrence,
    add_months,
    extension_schedule,
    recurring_schedule,
    regeneration_schedule,
)

logger = logging.getLogger(__name__)


def _insert_ignoring_taken_periods(s: Session, rec: RecurringTransaction, occurrences: list[Occurrence]) -> int:
    """Insert one row per occurrence; months that already hold a row are skipped."""
    if not occurrences:
        return 0

    values = [
        {
            "user_id": rec.user_id,
            "amount": rec.amount,
            "description": rec.description,
            "type": rec.type,
            "payment_method": rec.payment_method,
            "category_id": rec.category_id,
            "bank_account_id": rec.bank_account_id,
            "recurring_id": rec.id,
            "date": o.date,
            "due_date": o.due_date,
            "period": o.period,
        }
        for o in occurrences
    ]

    insert = pg_insert if s.get_bind().dialect.name == "postgresql" else sqlite_insert
    stmt = (
        insert(Transaction)
        .values(values)
        .on_conflict_do_nothing(index_elements=["recurring_id", "period"])
    )
    res = s.execute(stmt)
    return max(res.rowcount or 0, 0)


def create_recurring(
    s: Session,
    user_id: int,
    cfg: BillingConfig,
    *,
    description: str,
    amount: Decimal,
    type: str,
    payment_method: str,
    start_date: date,
    category_id: int | None = None,
    bank_account_id: int | None = None,
) -> RecurringTransaction:
    with atomic(s, "recurring.create"):
        rec = RecurringTransaction(
            user_id=user_id,
            description=description,
            amount=amount,
            type=type,
            payment_method=payment_method,
            start_date=start_date,
            category_id=category_id,
            bank_account_id=bank_account_id,
            frequency="MONTHLY",
            active=True,
        )
        s.add(rec)
        s.flush()

        occ = recurring_schedule(start_date, payment_method, cfg, months=settings.recurring_initial_months)
        n = _insert_ignoring_taken_periods(s, rec, occ)

    s.refresh(rec)
    logger.info("recurring_id=%s created with %d occurrences", rec.id, n)
    return rec


def _delete_from(s: Session, recurring_id: int, today: date) -> int:
    res = s.execute(
        delete(Transaction).where(
            Transaction.recurring_id == recurring_id,
            Transaction.due_date >= today,
        )
    )
    return res.rowcount or 0


def edit_recurring(
    s: Session,
    rec: RecurringTransaction,
    cfg: BillingConfig,
    today: date,
    *,
    amount: Decimal,
    description: str,
    start_date: date,
    category_id: int | None = None,
    bank_account_id: int | None = None,
) -> int:
    """Rewrite the instruction and replace every occurrence not yet due.

    Rows due before today are history and stay untouched. Returns the
    number of regenerated rows.
    """
    with atomic(s, "recurring.edit"):
        rec.amount = amount
        rec.description = description
        rec.start_date = start_date
        rec.category_id = category_id
        rec.bank_account_id = bank_account_id
        s.add(rec)
        s.flush()

        removed = _delete_from(s, rec.id, today)

        kept = set(
            s.execute(select(Transaction.period).where(Transaction.recurring_id == rec.id)).scalars().all()
        )
        occ = regeneration_schedule(
            today,
            start_date.day,
            rec.payment_method,
            cfg,
            taken_periods=kept,
            months=settings.recurring_initial_months,
        )
        n = _insert_ignoring_taken_periods(s, rec, occ)

    logger.info("recurring_id=%s edited: %d removed, %d regenerated", rec.id, removed, n)
    return n


def stop_recurring(s: Session, rec: RecurringTransaction, today: date) -> int:
    with atomic(s, "recurring.stop"):
        rec.active = False
        s.add(rec)
        removed = _delete_from(s, rec.id, today)

    logger.info("recurring_id=%s stopped, %d pending occurrences removed", rec.id, removed)
    return removed


def extend_recurring_for_user(s: Session, user_id: int, cfg: BillingConfig, today: date) -> int:
    """Top up every active instruction of the user to one horizon ahead of today.

    Anchors on the latest live row of each instruction. Periods that already
    hold a row are skipped, so calling this repeatedly or concurrently adds
    nothing twice.
    """
    recs = (
        s.execute(
            select(RecurringTransaction).where(
                RecurringTransaction.user_id == user_id,
                RecurringTransaction.active.is_(True),
            )
        )
        .scalars()
        .all()
    )
    if not recs:
        return 0

    horizon = add_months(today, settings.recurring_horizon_months)
    total = 0
    with atomic(s, "recurring.extend"):
        for rec in recs:
            last = (
                s.execute(
                    select(Transaction.date)
                    .where(Transaction.recurring_id == rec.id, Transaction.deleted_at.is_(None))
                    .order_by(Transaction.date.desc())
                    .limit(1)
                )
                .scalars()
                .first()
            )
            occ = extension_schedule(rec.start_date, rec.payment_method, cfg, last, horizon)
            total += _insert_ignoring_taken_periods(s, rec, occ)

    if total:
        logger.info("extended recurring occurrences for user_id=%s: %d new rows", user_id, total)
    return total
