"""Admission service for enrolling students in classes."""

import logging
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from schooldesk.errors import NotFoundError, ValidationError
from schooldesk.models import Admission, SchoolClass, Student
from schooldesk.schemas.admission import AdmissionCreate, AdmissionUpdate
from schooldesk.schemas.monthly_fee import MonthlyFeeBulkCreate
from schooldesk.services.charge_store import ChargeStore, as_id_list
from schooldesk.services.monthly_fee_service import MonthlyFeeService
from schooldesk.services.payment_service import PaymentService
from schooldesk.services.result import service_call

logger = logging.getLogger(__name__)


class AdmissionService:
    """Service for admission charges."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session
        self.store = ChargeStore(db_session, Admission)
        self.payments = PaymentService(db_session)

    @service_call("creating admission")
    def create(self, data: AdmissionCreate) -> int:
        """Admit a student to a class.

        Creates the admission charge, settles it from the student's credit,
        then generates ``data.months`` monthly charges starting at the
        admission month.

        Args:
            data: Validated admission payload; missing fees fall back to the
                class defaults

        Returns:
            ID of the created admission
        """
        student = self.db.get(Student, data.student_id)
        if not student:
            raise NotFoundError("Student not found")
        school_class = self.db.get(SchoolClass, data.class_id)
        if not school_class:
            raise NotFoundError("Class not found")

        amount = data.amount if data.amount is not None else school_class.admission_fee
        monthly = data.monthly if data.monthly is not None else school_class.monthly_fee

        admission_id = self.store.create(
            {
                "student_id": data.student_id,
                "class_id": data.class_id,
                "amount": amount,
                "paid": 0,
                "date": data.date,
                "remark": data.remark,
            }
        )
        self.payments.settle(data.student_id).unwrap()

        if data.months > 0:
            MonthlyFeeService(self.db).create_bulk_with_payment(
                MonthlyFeeBulkCreate(
                    student_id=data.student_id,
                    class_id=data.class_id,
                    from_date=data.date,
                    count=data.months,
                    fee=monthly,
                )
            ).unwrap()

        logger.info(
            "Admitted student_id=%d to class_id=%d (admission id=%d, %d months)",
            data.student_id,
            data.class_id,
            admission_id,
            data.months,
        )
        return admission_id

    @service_call("updating admission")
    def update(self, admission_id: int, data: AdmissionUpdate) -> bool:
        admission = self.store.get(admission_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if not admission or not changes:
            return False

        if "amount" in changes and changes["amount"] < admission.paid:
            raise ValidationError(
                f"amount {changes['amount']} is below the {admission.paid} already paid"
            )

        for field, value in changes.items():
            setattr(admission, field, value)
        self.db.flush()

        self.payments.settle(admission.student_id).unwrap()
        return True

    @service_call("deleting admission")
    def delete(self, ids: int | Iterable[int]) -> bool:
        """Delete admissions; their paid money returns to the students' credit."""
        id_list = as_id_list(ids)
        refunds = self.store.paid_by_student(Admission.id.in_(id_list))
        deleted = self.store.delete(id_list)
        for student_id, paid in refunds.items():
            if paid:
                self.payments.adjust_used(student_id, -paid, "admission")
            self.payments.settle(student_id).unwrap()
        logger.info("Deleted %d admissions: %s", deleted, id_list)
        return deleted > 0

    @service_call("listing admissions")
    def list(self, student_id: int | None = None) -> List[dict]:
        """List admissions with class names, newest first."""
        stmt = (
            select(
                Admission.id,
                Admission.student_id,
                Admission.class_id,
                SchoolClass.name.label("class_name"),
                Admission.amount,
                Admission.paid,
                Admission.date,
                Admission.remark,
            )
            .join(SchoolClass, Admission.class_id == SchoolClass.id)
            .order_by(Admission.date.desc(), Admission.id.desc())
        )
        if student_id is not None:
            stmt = stmt.where(Admission.student_id == student_id)
        return [dict(row._mapping) for row in self.db.execute(stmt)]

    @service_call("fetching admission")
    def get(self, admission_id: int) -> Admission:
        admission = self.store.get(admission_id)
        if not admission:
            raise NotFoundError("Admission not found")
        return admission


__all__ = ["AdmissionService"]
