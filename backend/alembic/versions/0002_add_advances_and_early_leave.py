"""add salary advances and early leave

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 09:30:00.000000
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "salary_advances",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("repayment_type", sa.String(length=20), nullable=False, server_default="installments"),
        sa.Column("installment_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("remaining_balance", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PENDING"),
        sa.Column("is_paid_off", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reason", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_salary_advances_id"), "salary_advances", ["id"], unique=False)
    op.create_index(op.f("ix_salary_advances_company_id"), "salary_advances", ["company_id"], unique=False)

    op.add_column("attendance_records", sa.Column("early_leave_minutes", sa.Integer(), nullable=False, server_default="0"))

    op.add_column("payroll_lines", sa.Column("early_leave_minutes", sa.Integer(), nullable=False, server_default="0"))
    op.add_column(
        "payroll_lines",
        sa.Column("early_leave_penalty", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
    )
    op.add_column(
        "payroll_lines",
        sa.Column("advance_deduction", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
    )
    op.add_column("payroll_lines", sa.Column("advance_details", sa.JSON(), nullable=False, server_default="[]"))


def downgrade() -> None:
    op.drop_column("payroll_lines", "advance_details")
    op.drop_column("payroll_lines", "advance_deduction")
    op.drop_column("payroll_lines", "early_leave_penalty")
    op.drop_column("payroll_lines", "early_leave_minutes")
    op.drop_column("attendance_records", "early_leave_minutes")
    op.drop_index(op.f("ix_salary_advances_company_id"), table_name="salary_advances")
    op.drop_index(op.f("ix_salary_advances_id"), table_name="salary_advances")
    op.drop_table("salary_advances")
