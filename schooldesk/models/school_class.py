"""Class ORM model."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from schooldesk.models import Base, BaseModel


class SchoolClass(Base, BaseModel):
    """A class (grade/course) students are admitted to and billed for."""

    __tablename__ = "classes"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Class name (e.g., 'Grade 5', 'Hifz A')",
    )
    admission_fee: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Default admission charge",
    )
    monthly_fee: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        default=Decimal("0"),
        comment="Default monthly charge",
    )
    remark: Mapped[str | None] = mapped_column(Text, nullable=True)

    monthly_fees: Mapped[list["MonthlyFee"]] = relationship(  # noqa: F821
        "MonthlyFee",
        back_populates="school_class",
        passive_deletes=True,
    )
    admissions: Mapped[list["Admission"]] = relationship(  # noqa: F821
        "Admission",
        back_populates="school_class",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("admission_fee >= 0", name="ck_classes_admission_fee"),
        CheckConstraint("monthly_fee >= 0", name="ck_classes_monthly_fee"),
    )

    def __repr__(self) -> str:
        return f"<SchoolClass(id={self.id}, name={self.name!r}, monthly_fee={self.monthly_fee})>"


__all__ = ["SchoolClass"]
