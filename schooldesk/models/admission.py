"""Admission ORM model: one-off charge raised when a student joins a class."""

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schooldesk.models import Base, BaseModel


class Admission(Base, BaseModel):
    """Admission charge for a student joining a class."""

    __tablename__ = "admission"

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
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    paid: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)

    student: Mapped["Student"] = relationship(  # noqa: F821
        "Student",
        back_populates="admissions",
    )
    school_class: Mapped["SchoolClass"] = relationship(  # noqa: F821
        "SchoolClass",
        back_populates="admissions",
    )

    __table_args__ = (
        CheckConstraint("paid >= 0 AND paid <= amount", name="ck_admission_paid_range"),
        Index("idx_admission_student_date", "student_id", "date"),
    )

    @property
    def class_name(self) -> str | None:
        return self.school_class.name if self.school_class else None

    def __repr__(self) -> str:
        return (
            f"<Admission(id={self.id}, student_id={self.student_id}, class_id={self.class_id}, "
            f"amount={self.amount}, paid={self.paid})>"
        )


__all__ = ["Admission"]
