"""Student ORM model."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, Date, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schooldesk.models import Base, BaseModel


class Student(Base, BaseModel):
    """Model representing a student.

    ``credit`` holds money the student has paid that no admission or monthly
    charge has absorbed yet. Payments raise it, settlement and charge
    generation consume it.
    """

    __tablename__ = "students"

    student_name: Mapped[str] = mapped_column(String(255), nullable=False)
    guardian_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    credit: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Paid money not yet applied to any charge",
    )

    # Relationships (rows removed by ON DELETE CASCADE)
    monthly_fees: Mapped[list["MonthlyFee"]] = relationship(  # noqa: F821
        "MonthlyFee",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    admissions: Mapped[list["Admission"]] = relationship(  # noqa: F821
        "Admission",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments: Mapped[list["Payment"]] = relationship(  # noqa: F821
        "Payment",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_student_name", "student_name"),
        Index("idx_student_active", "is_active"),
    )

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, name={self.student_name!r}, credit={self.credit})>"


__all__ = ["Student"]
