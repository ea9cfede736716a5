from datetime import date, datetime
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy import create_engine, select, func
from sqlalchemy.orm import sessionmaker

from meshfinance.db.base import Base
from meshfinance.models.user import User
from meshfinance.models.category import Category
from meshfinance.models.bank_account import BankAccount
from meshfinance.models.installment_plan import InstallmentPlan
from meshfinance.models.recurring import RecurringTransaction
from meshfinance.models.transaction import Transaction
from meshfinance.models.audit_log import AuditLog
from meshfinance.services.billing import BillingConfig
from meshfinance.services.recurring import create_recurring, edit_recurring, stop_recurring, extend_recurring_for_user
from meshfinance.services.transactions import recurring_period_taken

CFG = BillingConfig(closing_day=6, due_day=10)


@pytest.fixture(scope="session")
def engine():
    eng = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(eng)
    return eng


@pytest.fixture()
def session(engine):
    connection = engine.connect()
    trans = connection.begin()
    Session = sessionmaker(bind=connection, autoflush=False, autocommit=False, future=True)
    s = Session()
    try:
        yield s
    finally:
        s.close()
        trans.rollback()
        connection.close()


def _mk_user(session) -> User:
    u = User(username=f"user-{uuid4().hex[:10]}", password_hash="x")
    session.add(u)
    session.commit()
    return u


def _mk_rent(session, user: User, start: date, payment_method: str = "PIX") -> RecurringTransaction:
    return create_recurring(
        session,
        user.id,
        CFG,
        description="Rent",
        amount=Decimal("50.00"),
        type="EXPENSE",
        payment_method=payment_method,
        start_date=start,
    )


def _rows(session, recurring_id: int) -> list[Transaction]:
    return (
        session.execute(
            select(Transaction).where(Transaction.recurring_id == recurring_id).order_by(Transaction.date.asc())
        )
        .scalars()
        .all()
    )


def test_create_materializes_twelve_months(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))

    rows = _rows(session, rec.id)
    assert rec.active is True
    assert len(rows) == 12
    assert [r.date for r in rows] == [date(2024, m, 15) for m in range(1, 13)]
    assert all(r.date == r.due_date for r in rows)
    assert all(Decimal(str(r.amount)) == Decimal("50.00") for r in rows)
    assert all(r.current_installment is None for r in rows)


def test_create_card_recurring_starts_on_next_bill(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 20), payment_method="CREDIT_CARD")

    rows = _rows(session, rec.id)
    assert rows[0].date == date(2024, 2, 20)
    assert rows[0].due_date == date(2024, 2, 10)
    assert rows[-1].date == date(2025, 1, 20)


def test_edit_replaces_only_rows_not_yet_due(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))
    today = date(2024, 6, 20)

    edit_recurring(
        session,
        rec,
        CFG,
        today,
        amount=Decimal("75.00"),
        description="Rent (new lease)",
        start_date=date(2024, 6, 25),
    )

    rows = _rows(session, rec.id)
    past = [r for r in rows if r.due_date < today]
    future = [r for r in rows if r.due_date >= today]

    assert [r.date for r in past] == [date(2024, m, 15) for m in range(1, 7)]
    assert all(Decimal(str(r.amount)) == Decimal("50.00") for r in past)

    # June still holds the preserved 15th, so the new schedule starts in July
    assert len(future) == 12
    assert future[0].date == date(2024, 7, 25)
    assert future[-1].date == date(2025, 6, 25)
    assert all(r.date.day == 25 for r in future)
    assert all(r.description == "Rent (new lease)" for r in future)
    assert all(Decimal(str(r.amount)) == Decimal("75.00") for r in future)

    session.refresh(rec)
    assert rec.start_date == date(2024, 6, 25)


def test_stop_deactivates_and_drops_pending_rows(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))
    today = date(2024, 6, 20)

    removed = stop_recurring(session, rec, today)

    session.refresh(rec)
    rows = _rows(session, rec.id)
    assert rec.active is False
    assert removed == 6
    assert all(r.due_date < today for r in rows)
    assert len(rows) == 6

    # stopped instructions are never hard-deleted
    assert session.get(RecurringTransaction, rec.id) is not None


def test_extension_tops_up_to_one_year_ahead(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))

    extend_recurring_for_user(session, u.id, CFG, date(2024, 6, 20))

    rows = _rows(session, rec.id)
    assert len(rows) == 18
    assert rows[-1].date == date(2025, 6, 15)


def test_extension_is_idempotent(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))
    today = date(2024, 6, 20)

    extend_recurring_for_user(session, u.id, CFG, today)
    second = extend_recurring_for_user(session, u.id, CFG, today)

    assert second == 0
    assert len(_rows(session, rec.id)) == 18


def test_extension_never_duplicates_a_month(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))
    today = date(2024, 6, 20)
    extend_recurring_for_user(session, u.id, CFG, today)

    # soft-deleting the newest row moves the anchor back one month
    last = _rows(session, rec.id)[-1]
    last.deleted_at = datetime(2024, 6, 20, 12, 0, 0)
    session.commit()

    extend_recurring_for_user(session, u.id, CFG, today)

    per_period = session.execute(
        select(Transaction.period, func.count(Transaction.id))
        .where(Transaction.recurring_id == rec.id)
        .group_by(Transaction.period)
    ).all()
    assert len(per_period) == 18
    assert all(n == 1 for (_, n) in per_period)


def test_extension_skips_stopped_instructions(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 1, 15))
    today = date(2024, 6, 20)
    stop_recurring(session, rec, today)

    assert extend_recurring_for_user(session, u.id, CFG, today) == 0
    assert len(_rows(session, rec.id)) == 6


def test_extension_only_touches_the_callers_instructions(session):
    alice = _mk_user(session)
    bob = _mk_user(session)
    a_rec = _mk_rent(session, alice, date(2024, 1, 15))
    b_rec = _mk_rent(session, bob, date(2024, 1, 15))

    extend_recurring_for_user(session, alice.id, CFG, date(2024, 6, 20))

    assert len(_rows(session, a_rec.id)) == 18
    assert len(_rows(session, b_rec.id)) == 12


def test_period_check_sees_other_rows_of_the_instruction(session):
    u = _mk_user(session)
    rec = _mk_rent(session, u, date(2024, 7, 15))
    first = _rows(session, rec.id)[0]

    assert recurring_period_taken(session, first, date(2024, 8, 20)) is True
    assert recurring_period_taken(session, first, date(2024, 7, 28)) is False
    # the month after the last generated row is free
    assert recurring_period_taken(session, first, date(2025, 7, 1)) is False
