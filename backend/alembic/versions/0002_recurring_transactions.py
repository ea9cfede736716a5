"""Recurring instructions, installment plans and the one-row-per-month guard.

Revision ID: 0002_recurring_transactions
Revises: 0001_init
Create Date: 2026-10-12
"""

from alembic import op
import sqlalchemy as sa


revision = "0002_recurring_transactions"
down_revision = "0001_init"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "recurring_transactions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.String(length=256), nullable=False),
        sa.Column("amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False),
        sa.Column("payment_method", sa.String(length=16), nullable=False),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("bank_account_id", sa.Integer(), sa.ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("frequency", sa.String(length=16), nullable=False, server_default="MONTHLY"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_recurring_transactions_user_id", "recurring_transactions", ["user_id"], unique=False)
    op.create_index("ix_recurring_transactions_active", "recurring_transactions", ["active"], unique=False)

    op.create_table(
        "installment_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("description", sa.String(length=256), nullable=False),
        sa.Column("installment_amount", sa.Numeric(14, 2), nullable=False),
        sa.Column("installments", sa.Integer(), nullable=False),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("now()"), nullable=True),
    )
    op.create_index("ix_installment_plans_user_id", "installment_plans", ["user_id"], unique=False)

    op.add_column(
        "transactions",
        sa.Column("recurring_id", sa.Integer(), sa.ForeignKey("recurring_transactions.id", ondelete="SET NULL"), nullable=True),
    )
    op.add_column(
        "transactions",
        sa.Column("installment_plan_id", sa.Integer(), sa.ForeignKey("installment_plans.id", ondelete="SET NULL"), nullable=True),
    )
    op.add_column("transactions", sa.Column("period", sa.String(length=7), nullable=True))
    op.execute("UPDATE transactions SET period = to_char(date, 'YYYY-MM')")
    op.alter_column("transactions", "period", nullable=False)

    op.create_index("ix_transactions_recurring_id", "transactions", ["recurring_id"], unique=False)
    op.create_index("ix_transactions_installment_plan_id", "transactions", ["installment_plan_id"], unique=False)
    op.create_unique_constraint(
        "uq_transactions_recurring_period",
        "transactions",
        ["recurring_id", "period"],
    )


def downgrade() -> None:
    op.drop_constraint("uq_transactions_recurring_period", "transactions", type_="unique")
    op.drop_index("ix_transactions_installment_plan_id", table_name="transactions")
    op.drop_index("ix_transactions_recurring_id", table_name="transactions")
    op.drop_column("transactions", "period")
    op.drop_column("transactions", "installment_plan_id")
    op.drop_column("transactions", "recurring_id")

    op.drop_index("ix_installment_plans_user_id", table_name="installment_plans")
    op.drop_table("installment_plans")

    op.drop_index("ix_recurring_transactions_active", table_name="recurring_transactions")
    op.drop_index("ix_recurring_transactions_user_id", table_name="recurring_transactions")
    op.drop_table("recurring_transactions")
