"""Initial schema: classes, students, monthly fees, admissions, payments.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
    ]


def upgrade() -> None:
    # Create classes table
    op.create_table(
        "classes",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("admission_fee", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        sa.Column("monthly_fee", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        sa.Column("remark", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.CheckConstraint("admission_fee >= 0", name="ck_classes_admission_fee"),
        sa.CheckConstraint("monthly_fee >= 0", name="ck_classes_monthly_fee"),
    )

    # Create students table
    op.create_table(
        "students",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_name", sa.String(length=255), nullable=False),
        sa.Column("guardian_name", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("date_of_birth", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("credit", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("idx_student_name", "student_name"),
        sa.Index("idx_student_active", "is_active"),
    )

    # Create monthly_fee table
    op.create_table(
        "monthly_fee",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("paid", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("paid >= 0 AND paid <= amount", name="ck_monthly_fee_paid_range"),
        sa.Index("ix_monthly_fee_student_id", "student_id"),
        sa.Index("ix_monthly_fee_class_id", "class_id"),
        sa.Index("idx_monthly_fee_student_date", "student_id", "date"),
    )

    # Create admission table
    op.create_table(
        "admission",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("class_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("paid", sa.Numeric(precision=10, scale=2), nullable=False, server_default="0"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("remark", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["class_id"], ["classes.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("paid >= 0 AND paid <= amount", name="ck_admission_paid_range"),
        sa.Index("ix_admission_student_id", "student_id"),
        sa.Index("ix_admission_class_id", "class_id"),
        sa.Index("idx_admission_student_date", "student_id", "date"),
    )

    # Create payment table
    op.create_table(
        "payment",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("student_id", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("remark", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["student_id"], ["students.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        sa.Index("ix_payment_student_id", "student_id"),
        sa.Index("ix_payment_date", "date"),
        sa.Index("idx_payment_student_date", "student_id", "date"),
    )


def downgrade() -> None:
    op.drop_table("payment")
    op.drop_table("admission")
    op.drop_table("monthly_fee")
    op.drop_table("students")
    op.drop_table("classes")
