"""Credit-card billing cycles and monthly recurrence dates.

Everything here is pure calendar arithmetic over ``datetime.date``; callers
pass the user's :class:`BillingConfig` explicitly.

Month addition clamps to the last valid day of the target month
(Jan 31 + 1 month = Feb 28/29), it never rolls over into the following month.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date

from dateutil.relativedelta import relativedelta

CREDIT_CARD = "CREDIT_CARD"


@dataclass(frozen=True)
class BillingConfig:
    closing_day: int = 6
    due_day: int = 10


@dataclass(frozen=True)
class Occurrence:
    date: date
    due_date: date
    installment: int | None = None

    @property
    def period(self) -> str:
        return period_key(self.date)


def period_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


def add_months(d: date, n: int) -> date:
    return d + relativedelta(months=n)


def with_day(d: date, day: int) -> date:
    last = calendar.monthrange(d.year, d.month)[1]
    return d.replace(day=min(day, last))


def month_bounds(year: int, month: int) -> tuple[date, date]:
    first = date(year, month, 1)
    return first, with_day(first, 31)


def is_credit_card(payment_method: str) -> bool:
    return payment_method == CREDIT_CARD


def closing_offset(purchase: date, closing_day: int) -> int:
    # the cycle closes on closing_day, later purchases land on the next bill
    return 1 if purchase.day >= closing_day else 0


def _monthly(visual: date, payment_method: str, cfg: BillingConfig) -> Occurrence:
    if is_credit_card(payment_method):
        return Occurrence(visual, with_day(visual, cfg.due_day))
    return Occurrence(visual, visual)


def single_purchase(purchase: date, payment_method: str, cfg: BillingConfig) -> Occurrence:
    if not is_credit_card(payment_method):
        return Occurrence(purchase, purchase)
    visual = add_months(purchase, closing_offset(purchase, cfg.closing_day))
    return Occurrence(visual, with_day(visual, cfg.due_day))


def installment_schedule(purchase: date, installments: int, cfg: BillingConfig) -> list[Occurrence]:
    """Dates for an N-installment credit-card purchase.

    Each installment is computed from the purchase date directly rather than
    chained off the previous one, so a day-31 purchase comes back to the 31st
    after passing through shorter months.
    """
    if installments < 2:
        raise ValueError("an installment plan needs at least 2 installments")

    offset = closing_offset(purchase, cfg.closing_day)
    out: list[Occurrence] = []
    for i in range(installments):
        shifted = add_months(purchase, offset + i)
        out.append(Occurrence(shifted, with_day(shifted, cfg.due_day), installment=i + 1))
    return out


def installment_description(description: str, installment: int, installments: int) -> str:
    return f"{description} ({installment}/{installments})"


def recurring_schedule(
    start: date,
    payment_method: str,
    cfg: BillingConfig,
    months: int = 12,
) -> list[Occurrence]:
    offset = closing_offset(start, cfg.closing_day) if is_credit_card(payment_method) else 0
    return [_monthly(add_months(start, offset + i), payment_method, cfg) for i in range(months)]


def extension_schedule(
    start: date,
    payment_method: str,
    cfg: BillingConfig,
    last_date: date | None,
    horizon: date,
) -> list[Occurrence]:
    """Occurrences following ``last_date`` whose visual date is before ``horizon``.

    Each step moves one month and snaps back to the start date's day, so a
    clamped Feb 28 is followed by Mar 31 for a day-31 instruction.
    """
    if last_date is None:
        nxt = recurring_schedule(start, payment_method, cfg, months=1)[0].date
    else:
        nxt = with_day(add_months(last_date, 1), start.day)

    out: list[Occurrence] = []
    while nxt < horizon:
        out.append(_monthly(nxt, payment_method, cfg))
        nxt = with_day(add_months(nxt, 1), start.day)
    return out


def regeneration_schedule(
    today: date,
    anchor_day: int,
    payment_method: str,
    cfg: BillingConfig,
    taken_periods: set[str] | frozenset[str] = frozenset(),
    months: int = 12,
) -> list[Occurrence]:
    """The next ``months`` occurrences after an instruction is re-anchored.

    Candidates start in today's month on ``anchor_day``. Any candidate whose
    due date has already passed, or whose month still holds a preserved row,
    is skipped; the walk continues until ``months`` occurrences are collected.
    """
    first = date(today.year, today.month, 1)
    offset = 0
    if is_credit_card(payment_method):
        offset = closing_offset(with_day(first, anchor_day), cfg.closing_day)

    out: list[Occurrence] = []
    step = 0
    while len(out) < months:
        visual = with_day(add_months(first, offset + step), anchor_day)
        step += 1
        occ = _monthly(visual, payment_method, cfg)
        if occ.due_date < today or occ.period in taken_periods:
            continue
        out.append(occ)
    return out


def rebase_due_date(due: date, due_day: int) -> date:
    return with_day(due, due_day)


def invoice_month(today: date, cfg: BillingConfig) -> tuple[int, int]:
    """The bill a purchase made today would land on."""
    d = add_months(date(today.year, today.month, 1), closing_offset(today, cfg.closing_day))
    return d.year, d.month
