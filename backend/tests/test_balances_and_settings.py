from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from meshfinance.db.base import Base
from meshfinance.models.user import User
from meshfinance.models.category import Category
from meshfinance.models.bank_account import BankAccount
from meshfinance.models.installment_plan import InstallmentPlan
from meshfinance.models.recurring import RecurringTransaction
from meshfinance.models.transaction import Transaction
from meshfinance.models.audit_log import AuditLog
from meshfinance.services.balances import account_balances, balance_cutoff, fold_balance
from meshfinance.services.bank_accounts import ADJUSTMENT_DESCRIPTION, adjust_to_target, delete_account, migrate_unassigned
from meshfinance.services.billing import BillingConfig, period_key
from meshfinance.services.card_settings import billing_config_for, update_card_settings
from meshfinance.services.invoices import invoice_rows, invoice_total
from meshfinance.services.summary import month_summary

TODAY = date(2024, 6, 20)


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


def _mk_user(session, **kw) -> User:
    u = User(username=f"user-{uuid4().hex[:10]}", password_hash="x", **kw)
    session.add(u)
    session.commit()
    return u


def _mk_account(session, user: User, initial: str = "100.00", include_in_total: bool = True) -> BankAccount:
    acc = BankAccount(user_id=user.id, name="Checking", initial_balance=Decimal(initial), include_in_total=include_in_total)
    session.add(acc)
    session.commit()
    return acc


def _mk_tx(
    session,
    user: User,
    d: date,
    amount: str,
    type: str = "EXPENSE",
    payment_method: str = "PIX",
    due_date: date | None = None,
    **kw,
) -> Transaction:
    t = Transaction(
        user_id=user.id,
        amount=Decimal(amount),
        description="row",
        type=type,
        payment_method=payment_method,
        date=d,
        due_date=due_date or d,
        period=period_key(d),
        **kw,
    )
    session.add(t)
    session.commit()
    return t


def _row(d: date, amount: str, type: str, payment_method: str = "PIX", deleted: bool = False):
    return SimpleNamespace(
        date=d,
        amount=Decimal(amount),
        type=type,
        payment_method=payment_method,
        deleted_at=datetime(2024, 6, 1) if deleted else None,
    )


def test_fold_balance_counts_only_settled_account_rows():
    rows = [
        _row(date(2024, 6, 1), "50.00", "INCOME"),
        _row(date(2024, 6, 2), "20.00", "EXPENSE", "DEBIT_CARD"),
        _row(date(2024, 6, 3), "999.00", "EXPENSE", "CREDIT_CARD"),
        _row(date(2024, 6, 25), "70.00", "EXPENSE"),
        _row(date(2024, 6, 4), "15.00", "EXPENSE", deleted=True),
    ]
    assert fold_balance(Decimal("100.00"), rows, TODAY) == Decimal("130.00")


def test_fold_balance_without_rows_is_initial():
    assert fold_balance(Decimal("12.34"), [], TODAY) == Decimal("12.34")


@pytest.mark.parametrize(
    "year, month, expected",
    [
        (None, None, TODAY),
        (2024, 5, date(2024, 5, 31)),
        (2024, 2, date(2024, 2, 29)),
        (2024, 6, TODAY),
        (2024, 9, TODAY),
    ],
)
def test_balance_cutoff(year, month, expected):
    assert balance_cutoff(TODAY, year, month) == expected


def test_account_balances_ignores_card_and_future_rows(session):
    u = _mk_user(session)
    acc = _mk_account(session, u)
    _mk_tx(session, u, date(2024, 6, 1), "50.00", "INCOME", bank_account_id=acc.id)
    _mk_tx(session, u, date(2024, 6, 2), "20.00", bank_account_id=acc.id)
    _mk_tx(session, u, date(2024, 6, 3), "300.00", payment_method="CREDIT_CARD", bank_account_id=acc.id)
    _mk_tx(session, u, date(2024, 7, 15), "40.00", bank_account_id=acc.id)

    assert account_balances(session, u.id, TODAY) == {acc.id: Decimal("130.00")}
    # a past month stays frozen at its last day
    assert account_balances(session, u.id, date(2024, 5, 31)) == {acc.id: Decimal("100.00")}


def test_month_summary_excludes_hidden_accounts(session):
    u = _mk_user(session)
    main = _mk_account(session, u, "100.00")
    savings = _mk_account(session, u, "1000.00", include_in_total=False)
    _mk_tx(session, u, date(2024, 6, 1), "50.00", "INCOME", bank_account_id=main.id)
    _mk_tx(session, u, date(2024, 6, 2), "20.00", bank_account_id=main.id)
    _mk_tx(session, u, date(2024, 6, 3), "500.00", "INCOME", bank_account_id=savings.id)
    _mk_tx(session, u, date(2024, 6, 8), "80.00", payment_method="CREDIT_CARD", due_date=date(2024, 6, 10))

    sm = month_summary(session, u.id, 2024, 6, TODAY)

    assert sm.current_balance == Decimal("130.00")
    assert sm.balances[savings.id] == Decimal("1500.00")
    assert sm.month_income == Decimal("50.00")
    assert sm.month_expense == Decimal("100.00")
    assert sm.card_total == Decimal("80.00")
    assert sm.starting_balance == Decimal("180.00")


def test_adjust_to_target_books_the_difference(session):
    u = _mk_user(session)
    acc = _mk_account(session, u, "100.00")

    t = adjust_to_target(session, acc, Decimal("250.00"), TODAY)
    session.commit()

    assert t.description == ADJUSTMENT_DESCRIPTION
    assert t.type == "INCOME"
    assert t.payment_method == "OTHER"
    assert Decimal(str(t.amount)) == Decimal("150.00")
    assert account_balances(session, u.id, TODAY)[acc.id] == Decimal("250.00")

    t = adjust_to_target(session, acc, Decimal("200.00"), TODAY)
    assert t.type == "EXPENSE"
    assert Decimal(str(t.amount)) == Decimal("50.00")


def test_adjust_to_target_ignores_sub_cent_differences(session):
    u = _mk_user(session)
    acc = _mk_account(session, u, "100.00")
    assert adjust_to_target(session, acc, Decimal("100.004"), TODAY) is None


def test_migrate_and_delete_account(session):
    u = _mk_user(session)
    acc = _mk_account(session, u)
    t1 = _mk_tx(session, u, date(2024, 6, 1), "10.00")
    t2 = _mk_tx(session, u, date(2024, 6, 2), "10.00")

    assert migrate_unassigned(session, u.id, acc.id) == 2
    session.commit()

    assert delete_account(session, acc, delete_transactions=False) == 2
    assert session.get(BankAccount, acc.id) is None
    session.expire_all()
    assert session.get(Transaction, t1.id).bank_account_id is None
    assert session.get(Transaction, t2.id) is not None


def test_billing_config_falls_back_to_defaults(session):
    u = _mk_user(session)
    assert billing_config_for(u) == BillingConfig(closing_day=6, due_day=10)

    u2 = _mk_user(session, credit_card_closing_day=25, credit_card_due_day=5)
    assert billing_config_for(u2) == BillingConfig(closing_day=25, due_day=5)


def test_retroactive_due_day_rebases_every_card_row(session):
    u = _mk_user(session)
    _mk_tx(session, u, date(2023, 1, 20), "10.00", payment_method="CREDIT_CARD", due_date=date(2023, 1, 10))
    _mk_tx(session, u, date(2023, 2, 20), "10.00", payment_method="CREDIT_CARD", due_date=date(2023, 2, 10))
    _mk_tx(session, u, date(2024, 2, 20), "10.00", payment_method="CREDIT_CARD", due_date=date(2024, 2, 10))
    pix = _mk_tx(session, u, date(2024, 2, 10), "10.00")

    rebased = update_card_settings(session, u, 6, 30, scope="all")

    dues = (
        session.execute(
            select(Transaction.due_date)
            .where(Transaction.user_id == u.id, Transaction.payment_method == "CREDIT_CARD")
            .order_by(Transaction.date.asc())
        )
        .scalars()
        .all()
    )
    assert rebased == 3
    assert dues == [date(2023, 1, 30), date(2023, 2, 28), date(2024, 2, 29)]
    assert session.get(Transaction, pix.id).due_date == date(2024, 2, 10)
    assert billing_config_for(u).due_day == 30


def test_future_scope_leaves_existing_rows(session):
    u = _mk_user(session)
    t = _mk_tx(session, u, date(2024, 1, 20), "10.00", payment_method="CREDIT_CARD", due_date=date(2024, 1, 10))

    assert update_card_settings(session, u, 6, 16, scope="future") == 0
    assert session.get(Transaction, t.id).due_date == date(2024, 1, 10)
    assert billing_config_for(u) == BillingConfig(closing_day=6, due_day=16)


def test_invoice_groups_card_rows_by_due_month(session):
    u = _mk_user(session)
    _mk_tx(session, u, date(2024, 4, 7), "100.00", payment_method="CREDIT_CARD", due_date=date(2024, 4, 10))
    _mk_tx(session, u, date(2024, 4, 20), "15.00", "INCOME", payment_method="CREDIT_CARD", due_date=date(2024, 4, 10))
    _mk_tx(session, u, date(2024, 5, 7), "100.00", payment_method="CREDIT_CARD", due_date=date(2024, 5, 10))
    _mk_tx(session, u, date(2024, 4, 8), "30.00", due_date=date(2024, 4, 8))

    rows = invoice_rows(session, u.id, 2024, 4)

    assert len(rows) == 2
    assert invoice_total(rows) == Decimal("85.00")
