"""Payment ORM model: money received from a student."""

import datetime as dt
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schooldesk.models import Base, BaseModel


class Payment(Base, BaseModel):
    """A payment received from a student.

    The amount is spread over the student's admission and monthly charges;
    whatever no charge absorbs stays on ``Student.credit``.
    """

    __tablename__ = "payment"

    student_id: Mapped[int] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False, index=True)
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)

    student: Mapped["Student"] = relationship(  # noqa: F821
        "Student",
        back_populates="payments",
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payment_amount_positive"),
        Index("idx_payment_student_date", "student_id", "date"),
    )

    @property
    def student_name(self) -> str | None:
        return self.student.student_name if self.student else None

    def __repr__(self) -> str:
        return f"<Payment(id={self.id}, student_id={self.student_id}, amount={self.amount})>"


__all__ = ["Payment"]
