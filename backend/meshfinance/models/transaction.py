from decimal import Decimal

from sqlalchemy import Integer, Date, DateTime, func, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from meshfinance.db.base import Base

class Transaction(Base):
    __tablename__ = "transactions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    description: Mapped[str] = mapped_column(String(256))
    type: Mapped[str] = mapped_column(String(16))
    payment_method: Mapped[str] = mapped_column(String(16))

    # visual date: the month the entry is attributed to
    date: Mapped[Date] = mapped_column(Date, index=True)
    # the day money actually moves
    due_date: Mapped[Date] = mapped_column(Date, index=True)
    period: Mapped[str] = mapped_column(String(7))

    current_installment: Mapped[int | None] = mapped_column(Integer, nullable=True)
    installment_plan_id: Mapped[int | None] = mapped_column(
        ForeignKey("installment_plans.id", ondelete="SET NULL"), nullable=True, index=True
    )
    recurring_id: Mapped[int | None] = mapped_column(
        ForeignKey("recurring_transactions.id", ondelete="SET NULL"), nullable=True, index=True
    )
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    bank_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True, index=True
    )

    deleted_at: Mapped[DateTime | None] = mapped_column(DateTime, nullable=True, index=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("recurring_id", "period", name="uq_transactions_recurring_period"),
    )
