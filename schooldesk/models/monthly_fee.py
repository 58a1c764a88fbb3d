"""Monthly fee ORM model: one charge per student per month."""

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schooldesk.models import Base, BaseModel


class MonthlyFee(Base, BaseModel):
    """A monthly charge owed by a student for a class.

    ``date`` is always the first day of the billed month. ``paid`` moves only
    through fee allocation and stays within ``[0, amount]``.
    """

    __tablename__ = "monthly_fee"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    class_id: Mapped[int] = mapped_column(
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, comment="First day of billed month")
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))

    student: Mapped["Student"] = relationship(  # noqa: F821
        "Student",
        back_populates="monthly_fees",
    )
    school_class: Mapped["SchoolClass"] = relationship(  # noqa: F821
        "SchoolClass",
        back_populates="monthly_fees",
    )

    __table_args__ = (
        CheckConstraint("paid >= 0 AND paid <= amount", name="ck_monthly_fee_paid_range"),
        Index("idx_monthly_fee_student_date", "student_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<MonthlyFee(id={self.id}, student_id={self.student_id}, date={self.date}, "
            f"amount={self.amount}, paid={self.paid})>"
        )


__all__ = ["MonthlyFee"]
