from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, func, ForeignKey, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column
from meshfinance.db.base import Base

class BankAccount(Base):
    __tablename__ = "bank_accounts"
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(128))
    type: Mapped[str] = mapped_column(String(16), default="CHECKING")
    color: Mapped[str] = mapped_column(String(16), default="#10b981")
    initial_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    include_in_total: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
