"""Monthly fee service: charge generation, edits, listings and allocation."""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from schooldesk.errors import NotFoundError, ValidationError
from schooldesk.models import MonthlyFee, SchoolClass, Student
from schooldesk.schemas.monthly_fee import MonthlyFeeBulkCreate, MonthlyFeeCreate, MonthlyFeeUpdate
from schooldesk.services.allocation import ZERO, FeeAllocator, plan_bulk, to_cents
from schooldesk.services.charge_store import ChargeSnapshot, ChargeStore, as_id_list
from schooldesk.services.payment_service import PaymentService
from schooldesk.services.result import service_call
from schooldesk.utils.dates import first_of_month, month_range

logger = logging.getLogger(__name__)


class MonthlyFeeService:
    """Service for monthly fee database operations.

    All statements run in the session given at construction; callers decide
    when it commits.
    """

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = ChargeStore(db_session, MonthlyFee)
        self.allocator = FeeAllocator(self.store)
        self.payments = PaymentService(db_session)

    def _require(self, student_id: int, class_id: int) -> tuple[Student, SchoolClass]:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student not found")
        school_class = self.db.get(SchoolClass, class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        return student, school_class

    def _create_run(
        self,
        student_id: int,
        class_id: int,
        start: date,
        count: int,
        fee: Decimal,
        have_amount: Decimal,
    ) -> tuple[List[int], Decimal]:
        """Insert count consecutive monthly charges funded by have_amount."""
        if fee < 0:
            raise ValidationError("monthly fee cannot be negative")
        fee = to_cents(fee)
        paid_amounts = plan_bulk(count, fee, have_amount)
        ids = []
        for month, paid in zip(month_range(start, count), paid_amounts):
            ids.append(
                self.store.create(
                    {
                        "student_id": student_id,
                        "class_id": class_id,
                        "date": month,
                        "amount": fee,
                        "paid": paid,
                    }
                )
            )
        used = sum(paid_amounts, ZERO)
        return ids, used

    @service_call("creating monthly fee")
    def create(self, data: MonthlyFeeCreate) -> int:
        """Create one monthly charge, paid from the student's credit where possible.

        Returns:
            ID of the created charge
        """
        student, school_class = self._require(data.student_id, data.class_id)
        fee = data.amount if data.amount is not None else school_class.monthly_fee
        ids, used = self._create_run(
            data.student_id, data.class_id, data.date, 1, Decimal(fee), Decimal(student.credit)
        )
        if used:
            self.payments.adjust_used(data.student_id, used, "monthly")
        return ids[0]

    @service_call("creating monthly fees")
    def create_bulk(
        self,
        student_id: int,
        class_id: int,
        start: date,
        count: int,
        fee: Decimal,
        have_amount: Decimal,
    ) -> Decimal:
        """Create a contiguous run of monthly charges.

        have_amount is spread over the new charges in month order, each one
        filled before the next gets anything. Credit is not touched; see
        create_bulk_with_payment.

        Args:
            student_id: Student billed
            class_id: Class billed for
            start: Any date in the first month
            count: Number of months; 0 or less creates nothing
            fee: Amount of each charge
            have_amount: Money available to pay the new charges

        Returns:
            Amount of have_amount used
        """
        if count <= 0:
            return ZERO
        self._require(student_id, class_id)
        _, used = self._create_run(
            student_id, class_id, start, count, Decimal(fee), Decimal(have_amount)
        )
        logger.info(
            "Created %d monthly fees for student_id=%d class_id=%d from %s (used %s)",
            count,
            student_id,
            class_id,
            first_of_month(start),
            used,
        )
        return used

    @service_call("creating monthly fees")
    def create_bulk_with_payment(self, data: MonthlyFeeBulkCreate) -> Decimal:
        """Create a run of monthly charges paid from the student's credit.

        Returns:
            Credit used by the new charges
        """
        if data.count <= 0:
            return ZERO
        student, school_class = self._require(data.student_id, data.class_id)
        fee = data.fee if data.fee is not None else school_class.monthly_fee
        used = self.create_bulk(
            data.student_id,
            data.class_id,
            data.from_date,
            data.count,
            fee,
            student.credit,
        ).unwrap()
        self.payments.adjust_used(data.student_id, used, "monthly")
        return used

    @service_call("updating monthly fee")
    def update(self, fee_id: int, data: MonthlyFeeUpdate) -> bool:
        """Change a charge's month or amount.

        The amount may not drop below what is already paid. A higher amount
        is settled from the student's credit.
        """
        charge = self.store.get(fee_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not charge or not changes:
            return False

        if "amount" in changes and changes["amount"] < charge.paid:
            raise ValidationError(
                f"amount {changes['amount']} is below the {charge.paid} already paid"
            )
        if "date" in changes:
            changes["date"] = first_of_month(changes["date"])

        for field, value in changes.items():
            setattr(charge, field, value)
        self.db.flush()

        self.payments.settle(charge.student_id).unwrap()
        return True

    @service_call("deleting monthly fees")
    def delete(self, ids: int | Iterable[int]) -> bool:
        """Delete charges; their paid money returns to the students' credit."""
        id_list = as_id_list(ids)
        refunds = self.store.paid_by_student(MonthlyFee.id.in_(id_list))
        deleted = self.store.delete(id_list)
        for student_id, paid in refunds.items():
            if paid:
                self.payments.adjust_used(student_id, -paid, "monthly")
            self.payments.settle(student_id).unwrap()
        logger.info("Deleted %d monthly fees: %s", deleted, id_list)
        return deleted > 0

    @service_call("listing monthly fees")
    def list(self, student_id: int) -> List[dict]:
        """List a student's monthly fees with class and student names, newest first."""
        stmt = (
            select(
                MonthlyFee.id,
                MonthlyFee.student_id,
                MonthlyFee.class_id,
                MonthlyFee.date,
                MonthlyFee.amount,
                MonthlyFee.paid,
                SchoolClass.name.label("class_name"),
                Student.student_name,
            )
            .join(SchoolClass, MonthlyFee.class_id == SchoolClass.id)
            .join(Student, MonthlyFee.student_id == Student.id)
            .where(MonthlyFee.student_id == student_id)
            .order_by(MonthlyFee.date.desc(), MonthlyFee.id.desc())
        )
        return [dict(row._mapping) for row in self.db.execute(stmt)]

    @service_call("listing monthly fees")
    def list_by_date_range(self, student_id: int, start: date, end: date) -> List[dict]:
        """List a student's monthly fees with dates in [start, end], oldest first."""
        stmt = (
            select(
                MonthlyFee.id,
                MonthlyFee.student_id,
                MonthlyFee.class_id,
                MonthlyFee.date,
                MonthlyFee.amount,
                MonthlyFee.paid,
                SchoolClass.name.label("class_name"),
                Student.student_name,
            )
            .join(SchoolClass, MonthlyFee.class_id == SchoolClass.id)
            .join(Student, MonthlyFee.student_id == Student.id)
            .where(
                MonthlyFee.student_id == student_id,
                MonthlyFee.date >= start,
                MonthlyFee.date <= end,
            )
            .order_by(MonthlyFee.date.asc(), MonthlyFee.id.asc())
        )
        return [dict(row._mapping) for row in self.db.execute(stmt)]

    @service_call("fetching monthly fee")
    def get(self, fee_id: int) -> MonthlyFee:
        charge = self.store.get(fee_id)
        if not charge:
            raise NotFoundError("Monthly fee not found")
        return charge

    @service_call("listing unpaid monthly fees")
    def unpaid_list(self, student_id: int) -> List[ChargeSnapshot]:
        return self.store.unpaid_list(student_id)

    @service_call("listing paid monthly fees")
    def paid_list(self, student_id: int) -> List[ChargeSnapshot]:
        return self.store.paid_list(student_id)

    @service_call("adjusting monthly fee payments")
    def adjust_paid(self, student_id: int, amount: Decimal) -> Decimal:
        """Allocate a signed amount directly over the student's monthly fees.

        This is the bare allocator: student credit is not touched, so callers
        that move real money go through PaymentService instead.
        """
        return self.allocator.allocate(student_id, amount)


__all__ = ["MonthlyFeeService"]
