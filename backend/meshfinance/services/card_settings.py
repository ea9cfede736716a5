from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from meshfinance.core.config import settings
from meshfinance.db.atomic import atomic
from meshfinance.models.transaction import Transaction
from meshfinance.models.user import User
from meshfinance.services.billing import CREDIT_CARD, BillingConfig, rebase_due_date

logger = logging.getLogger(__name__)


def billing_config_for(user: User) -> BillingConfig:
    closing = user.credit_card_closing_day
    due = user.credit_card_due_day
    return BillingConfig(
        closing_day=closing if closing is not None else settings.default_closing_day,
        due_day=due if due is not None else settings.default_due_day,
    )


def update_card_settings(s: Session, user: User, closing_day: int, due_day: int, scope: str = "future") -> int:
    """Store the user's billing days; with scope "all" also move every card due date.

    Rebased rows keep their year and month, only the day changes. Returns
    the number of rows rebased.
    """
    rebased = 0
    with atomic(s, "card_settings.update"):
        user.credit_card_closing_day = closing_day
        user.credit_card_due_day = due_day
        s.add(user)

        if scope == "all":
            txs = (
                s.execute(
                    select(Transaction).where(
                        Transaction.user_id == user.id,
                        Transaction.payment_method == CREDIT_CARD,
                    )
                )
                .scalars()
                .all()
            )
            for t in txs:
                new_due = rebase_due_date(t.due_date, due_day)
                if new_due != t.due_date:
                    t.due_date = new_due
                    rebased += 1

    if rebased:
        logger.info("rebased %d card due dates to day %d for user_id=%s", rebased, due_day, user.id)
    return rebased
