from fastapi import APIRouter, Depends, HTTPException, Query
from datetime import date
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from meshfinance.api.deps import db, current_user, today
from meshfinance.db.atomic import atomic
from meshfinance.models.bank_account import BankAccount
from meshfinance.models.transaction import Transaction
from meshfinance.models.user import User
from meshfinance.schemas.bank_account import BankAccountCreate, BankAccountUpdate, BankAccountOut
from meshfinance.services.audit import log_event
from meshfinance.services.balances import account_balances
from meshfinance.services.bank_accounts import adjust_to_target, delete_account, migrate_unassigned

router = APIRouter(prefix="/bank-accounts", tags=["bank-accounts"])


def _require_account(s: Session, user: User, account_id: int) -> BankAccount:
    acc = s.execute(
        select(BankAccount).where(BankAccount.id == account_id, BankAccount.user_id == user.id)
    ).scalar_one_or_none()
    if acc is None:
        raise HTTPException(status_code=404, detail="bank_account_not_found")
    return acc


def _account_out(s: Session, acc: BankAccount, d: date, migrated: int = 0) -> dict:
    balance = account_balances(s, acc.user_id, d).get(acc.id, 0)
    count = s.execute(
        select(func.count(Transaction.id)).where(
            Transaction.bank_account_id == acc.id,
            Transaction.deleted_at.is_(None),
        )
    ).scalar_one()
    return {
        "id": acc.id,
        "name": acc.name,
        "type": acc.type,
        "color": acc.color,
        "include_in_total": acc.include_in_total,
        "initial_balance": float(acc.initial_balance),
        "current_balance": float(balance),
        "transaction_count": int(count),
        "migrated_count": migrated,
        "created_at": acc.created_at,
    }


@router.get("", response_model=list[BankAccountOut])
def list_accounts(s: Session = Depends(db), u: User = Depends(current_user), d: date = Depends(today)):
    accounts = (
        s.execute(
            select(BankAccount)
            .where(BankAccount.user_id == u.id)
            .order_by(BankAccount.created_at.asc(), BankAccount.id.asc())
        )
        .scalars()
        .all()
    )
    return [_account_out(s, a, d) for a in accounts]


@router.post("", response_model=BankAccountOut)
def create_account(body: BankAccountCreate, s: Session = Depends(db), u: User = Depends(current_user), d: date = Depends(today)):
    migrated = 0
    with atomic(s, "bank_account.create"):
        acc = BankAccount(
            user_id=u.id,
            name=body.name,
            type=body.type,
            color=body.color or "#10b981",
            initial_balance=body.initial_balance,
            include_in_total=body.include_in_total,
        )
        s.add(acc)
        s.flush()
        if body.migrate_legacy:
            migrated = migrate_unassigned(s, u.id, acc.id)
    s.refresh(acc)

    log_event(
        s,
        user_id=u.id,
        action="bank_account.create",
        entity_type="bank_account",
        entity_id=acc.id,
        details={"name": acc.name, "initial_balance": str(acc.initial_balance), "migrated": migrated},
    )
    return _account_out(s, acc, d, migrated)


@router.patch("/{account_id}", response_model=BankAccountOut)
def update_account(
    account_id: int,
    body: BankAccountUpdate,
    s: Session = Depends(db),
    u: User = Depends(current_user),
    d: date = Depends(today),
):
    acc = _require_account(s, u, account_id)
    name = body.name.strip() if body.name is not None else None
    if name == "":
        raise HTTPException(status_code=400, detail="bank_account_name_required")

    migrated = 0
    adjustment = None
    with atomic(s, "bank_account.update"):
        if name is not None:
            acc.name = name
        if body.type is not None:
            acc.type = body.type
        if body.color is not None:
            acc.color = body.color
        if body.include_in_total is not None:
            acc.include_in_total = body.include_in_total
        s.add(acc)

        if body.migrate_legacy:
            migrated = migrate_unassigned(s, u.id, acc.id)
        elif body.target_balance is not None:
            s.flush()
            adjustment = adjust_to_target(s, acc, body.target_balance, d)

    log_event(
        s,
        user_id=u.id,
        action="bank_account.update",
        entity_type="bank_account",
        entity_id=acc.id,
        details={
            "migrated": migrated,
            "adjustment": str(adjustment.amount) if adjustment is not None else None,
        },
    )
    return _account_out(s, acc, d, migrated)


@router.delete("/{account_id}")
def remove_account(
    account_id: int,
    delete_transactions: bool = Query(False),
    s: Session = Depends(db),
    u: User = Depends(current_user),
):
    acc = _require_account(s, u, account_id)
    affected = delete_account(s, acc, delete_transactions)
    log_event(
        s,
        user_id=u.id,
        action="bank_account.delete",
        entity_type="bank_account",
        entity_id=account_id,
        details={"delete_transactions": delete_transactions, "affected": affected},
    )
    return {"ok": True}
