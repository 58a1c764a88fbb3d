"""Payment service for recording payments and keeping student credit consistent.

Provides methods for:
- Recording, editing and deleting payments
- Settling a student's credit against outstanding charges
- Bookkeeping of credit consumed by charge generation (adjust_used)

Ledger rule kept by every method here:
    credit + sum(admission.paid) + sum(monthly_fee.paid) == sum(payment.amount)
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from schooldesk.errors import NotFoundError, ValidationError
from schooldesk.models import Admission, MonthlyFee, Payment, Student
from schooldesk.schemas.payment import PaymentCreate, PaymentUpdate
from schooldesk.services.allocation import ZERO, FeeAllocator
from schooldesk.services.charge_store import ChargeStore, as_id_list
from schooldesk.services.result import service_call

logger = logging.getLogger(__name__)


class PaymentService:
    """Core money operations: payments, credit and settlement."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.admission_allocator = FeeAllocator(ChargeStore(db_session, Admission))
        self.monthly_allocator = FeeAllocator(ChargeStore(db_session, MonthlyFee))

    def _get_student(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def adjust_credit(self, student_id: int, delta: Decimal) -> Decimal:
        """Add delta to a student's credit.

        Args:
            student_id: Student to update
            delta: Signed change

        Returns:
            New credit

        Raises:
            NotFoundError: If student does not exist
        """
        student = self._get_student(student_id)
        student.credit = Decimal(student.credit) + Decimal(delta)
        self.db.flush()
        return student.credit

    def adjust_used(self, student_id: int, used: Decimal, kind: str) -> Decimal:
        """Record that charges of the given kind absorbed ``used`` from credit.

        A negative ``used`` (money taken back from charges) returns it to credit.
        """
        credit = self.adjust_credit(student_id, -Decimal(used))
        logger.info(
            "Credit adjusted for student_id=%d: %s used by %s, credit now %s",
            student_id,
            used,
            kind,
            credit,
        )
        return credit

    def _settle(self, student_id: int) -> Decimal:
        """Apply available credit to admissions first, then monthly fees."""
        student = self._get_student(student_id)
        available = Decimal(student.credit)
        if available <= 0:
            return ZERO

        used_admission = self.admission_allocator.allocate(student_id, available)
        if used_admission:
            self.adjust_used(student_id, used_admission, "admission")

        used_monthly = ZERO
        remaining = available - used_admission
        if remaining > 0:
            used_monthly = self.monthly_allocator.allocate(student_id, remaining)
            if used_monthly:
                self.adjust_used(student_id, used_monthly, "monthly")

        return used_admission + used_monthly

    def _withdraw(self, student_id: int, amount: Decimal) -> None:
        """Take amount out of a student's money.

        Unapplied credit goes first, then monthly fees are reversed, then
        admissions (the opposite of the settlement order).

        Raises:
            ValidationError: If the student's charges hold less than required
        """
        credit = self.adjust_credit(student_id, -Decimal(amount))
        if credit < 0:
            reversed_monthly = self.monthly_allocator.allocate(student_id, credit)
            if reversed_monthly:
                credit = self.adjust_used(student_id, reversed_monthly, "monthly")
        if credit < 0:
            reversed_admission = self.admission_allocator.allocate(student_id, credit)
            if reversed_admission:
                credit = self.adjust_used(student_id, reversed_admission, "admission")
        if credit < 0:
            logger.error("Ledger out of balance for student_id=%d: short by %s", student_id, -credit)
            raise ValidationError(f"cannot take back {amount}, student ledger is short by {-credit}")

    @service_call("settling student credit")
    def settle(self, student_id: int) -> Decimal:
        """Apply a student's credit to outstanding charges. Returns amount used."""
        return self._settle(student_id)

    @service_call("creating payment")
    def create(self, data: PaymentCreate) -> int:
        """Record a payment and allocate it.

        The amount is added to the student's credit and the credit is settled
        against admissions, then monthly fees. Any leftover stays as credit.

        Args:
            data: Validated payment payload

        Returns:
            ID of the created payment
        """
        self._get_student(data.student_id)

        payment = Payment(
            student_id=data.student_id,
            amount=data.amount,
            date=data.date,
            remark=data.remark,
        )
        self.db.add(payment)
        self.db.flush()

        self.adjust_credit(data.student_id, data.amount)
        used = self._settle(data.student_id)
        logger.info(
            "Recorded payment id=%d student_id=%d amount=%s (applied %s)",
            payment.id,
            data.student_id,
            data.amount,
            used,
        )
        return payment.id

    @service_call("updating payment")
    def update(self, payment_id: int, data: PaymentUpdate) -> bool:
        """Edit a payment; a changed amount is allocated or reversed by its difference.

        Returns:
            False if the payment does not exist or nothing was sent
        """
        payment = self.db.get(Payment, payment_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not payment or not changes:
            return False

        new_amount = changes.pop("amount", None)
        if new_amount is not None and new_amount != payment.amount:
            delta = Decimal(new_amount) - Decimal(payment.amount)
            payment.amount = new_amount
            self.db.flush()
            if delta > 0:
                self.adjust_credit(payment.student_id, delta)
                self._settle(payment.student_id)
            else:
                self._withdraw(payment.student_id, -delta)
            logger.info("Payment id=%d amount changed by %s", payment_id, delta)

        for field, value in changes.items():
            setattr(payment, field, value)
        self.db.flush()
        return True

    @service_call("deleting payment")
    def delete(self, ids: int | Iterable[int]) -> bool:
        """Delete payments, taking their money back from credit and charges.

        Returns:
            True if at least one payment was deleted
        """
        id_list = as_id_list(ids)
        payments = list(self.db.scalars(select(Payment).where(Payment.id.in_(id_list))))
        for payment in payments:
            self._withdraw(payment.student_id, payment.amount)

        if not payments:
            return False
        result = self.db.execute(delete(Payment).where(Payment.id.in_([p.id for p in payments])))
        logger.info("Deleted %d payments: %s", result.rowcount, [p.id for p in payments])
        return result.rowcount > 0

    @service_call("listing payments")
    def list(self, student_id: int | None = None) -> list[dict]:
        """List payments with student names, newest first.

        Args:
            student_id: Restrict to one student when given
        """
        stmt = (
            select(
                Payment.id,
                Payment.student_id,
                Student.student_name,
                Payment.amount,
                Payment.date,
                Payment.remark,
            )
            .join(Student, Payment.student_id == Student.id)
            .order_by(Payment.date.desc(), Payment.id.desc())
        )
        if student_id is not None:
            stmt = stmt.where(Payment.student_id == student_id)
        return [dict(row._mapping) for row in self.db.execute(stmt)]

    @service_call("fetching payment")
    def get(self, payment_id: int) -> Payment:
        payment = self.db.get(Payment, payment_id)
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    @service_call("summing payments")
    def total_paid(self, student_id: int, until: date | None = None) -> Decimal:
        """Sum of a student's payments, optionally up to a date inclusive."""
        stmt = select(Payment.amount).where(Payment.student_id == student_id)
        if until is not None:
            stmt = stmt.where(Payment.date <= until)
        return sum((Decimal(a) for a in self.db.scalars(stmt)), ZERO)


__all__ = ["PaymentService"]
