"""Student service for student records and balances."""

import logging
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from schooldesk.errors import NotFoundError
from schooldesk.models import Admission, MonthlyFee, Student
from schooldesk.schemas.student import StudentBalance, StudentCreate, StudentUpdate
from schooldesk.services.charge_store import ChargeStore, as_id_list
from schooldesk.services.payment_service import PaymentService
from schooldesk.services.result import service_call

logger = logging.getLogger(__name__)


class StudentService:
    """Service for student database operations."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    @service_call("creating student")
    def create(self, data: StudentCreate) -> int:
        student = Student(**data.model_dump(), credit=Decimal("0"))
        self.db.add(student)
        self.db.flush()
        logger.info("Created student id=%d name=%r", student.id, student.student_name)
        return student.id

    @service_call("updating student")
    def update(self, student_id: int, data: StudentUpdate) -> bool:
        student = self.db.get(Student, student_id)
        changes = data.model_dump(exclude_unset=True)
        if not student or not changes:
            return False
        for field, value in changes.items():
            setattr(student, field, value)
        self.db.flush()
        return True

    @service_call("deleting student")
    def delete(self, ids: int | Iterable[int]) -> bool:
        """Delete students. Charges and payments go with them (ON DELETE CASCADE)."""
        id_list = as_id_list(ids)
        result = self.db.execute(delete(Student).where(Student.id.in_(id_list)))
        logger.info("Deleted %d students: %s", result.rowcount, id_list)
        return result.rowcount > 0

    @service_call("fetching student")
    def list(self, student_id: int | None = None) -> List[Student]:
        """List students by name, or the one student with student_id."""
        stmt = select(Student).order_by(Student.student_name, Student.id)
        if student_id is not None:
            stmt = stmt.where(Student.id == student_id)
        return list(self.db.scalars(stmt))

    @service_call("fetching student")
    def get(self, student_id: int) -> Student:
        student = self.db.get(Student, student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    @service_call("calculating student balance")
    def balance(self, student_id: int) -> StudentBalance:
        """Summarize what a student owes and has paid.

        Args:
            student_id: Student to summarize

        Returns:
            StudentBalance with credit, outstanding admission and monthly
            amounts, and the sum of all payments
        """
        student = self.get(student_id).unwrap()
        admission_due = ChargeStore(self.db, Admission).outstanding(student_id)
        monthly_due = ChargeStore(self.db, MonthlyFee).outstanding(student_id)
        total_paid = PaymentService(self.db).total_paid(student_id).unwrap()
        return StudentBalance(
            student_id=student_id,
            credit=Decimal(student.credit),
            admission_due=admission_due,
            monthly_due=monthly_due,
            total_due=admission_due + monthly_due,
            total_paid=total_paid,
        )


__all__ = ["StudentService"]
