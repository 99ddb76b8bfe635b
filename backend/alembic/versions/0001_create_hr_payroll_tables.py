"""create hr payroll tables

Revision ID: 0001
Revises: None
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "employees",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_number", sa.String(length=50), nullable=True),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False, server_default=""),
        sa.Column("department", sa.String(length=100), nullable=True),
        sa.Column("position", sa.String(length=100), nullable=True),
        sa.Column("base_salary", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("allowances", sa.JSON(), nullable=False),
        sa.Column("enable_auto_deduction", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="active"),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id", "employee_number", name="uq_employees_company_number"),
    )
    op.create_index(op.f("ix_employees_id"), "employees", ["id"], unique=False)
    op.create_index(op.f("ix_employees_company_id"), "employees", ["company_id"], unique=False)

    op.create_table(
        "attendance_records",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("work_date", sa.Date(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="PRESENT"),
        sa.Column("late_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("overtime_hours", sa.Numeric(precision=6, scale=2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "work_date", name="uq_attendance_employee_day"),
    )
    op.create_index(op.f("ix_attendance_records_id"), "attendance_records", ["id"], unique=False)
    op.create_index(op.f("ix_attendance_records_company_id"), "attendance_records", ["company_id"], unique=False)

    op.create_table(
        "payroll_adjustments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("kind", sa.String(length=20), nullable=False),
        sa.Column("amount", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("reason", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_payroll_adjustments_id"), "payroll_adjustments", ["id"], unique=False)
    op.create_index(op.f("ix_payroll_adjustments_company_id"), "payroll_adjustments", ["company_id"], unique=False)

    op.create_table(
        "hr_settings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("monthly_grace_minutes", sa.Integer(), nullable=False, server_default="60"),
        sa.Column("daily_late_cap_minutes", sa.Integer(), nullable=False, server_default="480"),
        sa.Column("workday_minutes", sa.Integer(), nullable=False, server_default="480"),
        sa.Column("late_minute_rate", sa.Numeric(precision=12, scale=4), nullable=True),
        sa.Column("absence_penalty_rate", sa.Numeric(precision=6, scale=2), nullable=False, server_default="1"),
        sa.Column("overtime_rate", sa.Numeric(precision=6, scale=2), nullable=False, server_default="1.5"),
        sa.Column("social_insurance_rate", sa.Numeric(precision=6, scale=2), nullable=False, server_default="0"),
        sa.Column("tax_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("tax_brackets", sa.JSON(), nullable=True),
        sa.Column("weekend_days", sa.JSON(), nullable=False),
        sa.Column("require_attendance_records", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id"),
    )
    op.create_index(op.f("ix_hr_settings_id"), "hr_settings", ["id"], unique=False)

    op.create_table(
        "payroll_lines",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("working_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("present_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("base_salary", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("allowances", sa.JSON(), nullable=False),
        sa.Column("total_allowances", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("overtime_hours", sa.Numeric(precision=8, scale=2), nullable=False, server_default="0"),
        sa.Column("overtime_amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("bonuses", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("absent_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("attendance_deduction", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("late_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("late_penalty", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("other_deductions", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("total_deductions", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("social_insurance", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("tax_amount", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("gross_salary", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("net_salary", sa.Numeric(precision=12, scale=2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="DRAFT"),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("payment_method", sa.String(length=50), nullable=True),
        sa.Column("payment_reference", sa.String(length=100), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(), nullable=True),
        sa.Column("cancel_reason", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "month", "year", name="uq_payroll_lines_employee_period"),
    )
    op.create_index(op.f("ix_payroll_lines_id"), "payroll_lines", ["id"], unique=False)
    op.create_index(op.f("ix_payroll_lines_company_id"), "payroll_lines", ["company_id"], unique=False)
    op.create_index("ix_payroll_lines_company_period", "payroll_lines", ["company_id", "year", "month"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_payroll_lines_company_period", table_name="payroll_lines")
    op.drop_index(op.f("ix_payroll_lines_company_id"), table_name="payroll_lines")
    op.drop_index(op.f("ix_payroll_lines_id"), table_name="payroll_lines")
    op.drop_table("payroll_lines")
    op.drop_index(op.f("ix_hr_settings_id"), table_name="hr_settings")
    op.drop_table("hr_settings")
    op.drop_index(op.f("ix_payroll_adjustments_company_id"), table_name="payroll_adjustments")
    op.drop_index(op.f("ix_payroll_adjustments_id"), table_name="payroll_adjustments")
    op.drop_table("payroll_adjustments")
    op.drop_index(op.f("ix_attendance_records_company_id"), table_name="attendance_records")
    op.drop_index(op.f("ix_attendance_records_id"), table_name="attendance_records")
    op.drop_table("attendance_records")
    op.drop_index(op.f("ix_employees_company_id"), table_name="employees")
    op.drop_index(op.f("ix_employees_id"), table_name="employees")
    op.drop_table("employees")
