from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from meshfinance.db.atomic import atomic
from meshfinance.models.installment_plan import InstallmentPlan
from meshfinance.models.transaction import Transaction
from meshfinance.services.billing import (
    BillingConfig,
    installment_description,
    installment_schedule,
    is_credit_card,
    period_key,
    single_purchase,
    with_day,
)

logger = logging.getLogger(__name__)


def create_single(
    s: Session,
    user_id: int,
    cfg: BillingConfig,
    *,
    amount: Decimal,
    description: str,
    type: str,
    payment_method: str,
    purchase_date: date,
    category_id: int | None = None,
    bank_account_id: int | None = None,
) -> Transaction:
    occ = single_purchase(purchase_date, payment_method, cfg)
    with atomic(s, "transaction.create"):
        t = Transaction(
            user_id=user_id,
            amount=amount,
            description=description,
            type=type,
            payment_method=payment_method,
            date=occ.date,
            due_date=occ.due_date,
            period=occ.period,
            category_id=category_id,
            bank_account_id=bank_account_id,
        )
        s.add(t)
    s.refresh(t)
    return t


def create_installments(
    s: Session,
    user_id: int,
    cfg: BillingConfig,
    *,
    amount: Decimal,
    description: str,
    type: str,
    purchase_date: date,
    installments: int,
    category_id: int | None = None,
    bank_account_id: int | None = None,
) -> tuple[InstallmentPlan, list[Transaction]]:
    """Split a credit-card purchase into one row per installment.

    ``amount`` is the value of each installment. All rows share the returned
    plan and are written in a single commit.
    """
    schedule = installment_schedule(purchase_date, installments, cfg)

    with atomic(s, "transaction.create_installments"):
        plan = InstallmentPlan(
            user_id=user_id,
            description=description,
            installment_amount=amount,
            installments=installments,
            purchase_date=purchase_date,
        )
        s.add(plan)
        s.flush()

        rows = [
            Transaction(
                user_id=user_id,
                amount=amount,
                description=installment_description(description, o.installment, installments),
                type=type,
                payment_method="CREDIT_CARD",
                date=o.date,
                due_date=o.due_date,
                period=o.period,
                current_installment=o.installment,
                installment_plan_id=plan.id,
                category_id=category_id,
                bank_account_id=bank_account_id,
            )
            for o in schedule
        ]
        s.add_all(rows)

    logger.info("installment plan %s: %d rows from %s", plan.id, len(rows), purchase_date)
    return plan, rows


def apply_edit(
    t: Transaction,
    cfg: BillingConfig,
    *,
    amount: Decimal,
    description: str,
    type: str,
    payment_method: str,
    new_date: date,
    category_id: int | None,
    bank_account_id: int | None,
) -> None:
    # an edited date is taken as the visual date as-is, no cycle shift
    t.amount = amount
    t.description = description
    t.type = type
    t.payment_method = payment_method
    t.date = new_date
    t.due_date = with_day(new_date, cfg.due_day) if is_credit_card(payment_method) else new_date
    t.period = period_key(new_date)
    t.category_id = category_id
    t.bank_account_id = bank_account_id


def recurring_period_taken(s: Session, t: Transaction, new_date: date) -> bool:
    """True when moving ``t`` to ``new_date`` would give its instruction two rows in one month."""
    if t.recurring_id is None:
        return False
    other = s.execute(
        select(Transaction.id).where(
            Transaction.recurring_id == t.recurring_id,
            Transaction.period == period_key(new_date),
            Transaction.id != t.id,
        )
    ).first()
    return other is not None


def soft_delete(s: Session, t: Transaction) -> None:
    with atomic(s, "transaction.delete"):
        t.deleted_at = datetime.utcnow()
        s.add(t)


def restore(s: Session, t: Transaction) -> None:
    with atomic(s, "transaction.restore"):
        t.deleted_at = None
        s.add(t)
