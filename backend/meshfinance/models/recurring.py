from decimal import Decimal

from sqlalchemy import String, Integer, Date, DateTime, func, ForeignKey, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from meshfinance.db.base import Base

class RecurringTransaction(Base):
    __tablename__ = "recurring_transactions"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    description: Mapped[str] = mapped_column(String(256))
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    type: Mapped[str] = mapped_column(String(16))
    payment_method: Mapped[str] = mapped_column(String(16))
    category_id: Mapped[int | None] = mapped_column(ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    bank_account_id: Mapped[int | None] = mapped_column(ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True)
    # anchors the day-of-month of every generated occurrence
    start_date: Mapped[Date] = mapped_column(Date)
    frequency: Mapped[str] = mapped_column(String(16), default="MONTHLY")
    active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
