"""Class service for class CRUD."""

import logging
from decimal import Decimal
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from schooldesk.errors import NotFoundError
from schooldesk.models import Admission, MonthlyFee, SchoolClass
from schooldesk.schemas.school_class import ClassCreate, ClassUpdate
from schooldesk.services.charge_store import ChargeStore, as_id_list
from schooldesk.services.payment_service import PaymentService
from schooldesk.services.result import service_call

logger = logging.getLogger(__name__)


class ClassService:
    """Service for class database operations."""

    def __init__(self, db_session: Session):
        """Initialize with database session."""
        self.db = db_session

    @service_call("creating class")
    def create(self, data: ClassCreate) -> int:
        school_class = SchoolClass(**data.model_dump())
        self.db.add(school_class)
        self.db.flush()
        logger.info("Created class id=%d name=%r", school_class.id, school_class.name)
        return school_class.id

    @service_call("updating class")
    def update(self, class_id: int, data: ClassUpdate) -> bool:
        """Update the fields sent. Existing charges keep their amounts."""
        school_class = self.db.get(SchoolClass, class_id)
        changes = data.model_dump(exclude_unset=True)
        if not school_class or not changes:
            return False
        for field, value in changes.items():
            setattr(school_class, field, value)
        self.db.flush()
        return True

    @service_call("deleting class")
    def delete(self, ids: int | Iterable[int]) -> bool:
        """Delete classes together with their charges.

        Money paid on the removed charges goes back to each student's credit
        and is settled against the student's remaining charges.
        """
        id_list = as_id_list(ids)
        refunds: dict[int, Decimal] = {}
        for model in (MonthlyFee, Admission):
            for student_id, paid in ChargeStore(self.db, model).paid_by_student(
                model.class_id.in_(id_list)
            ).items():
                refunds[student_id] = refunds.get(student_id, Decimal("0")) + paid

        result = self.db.execute(delete(SchoolClass).where(SchoolClass.id.in_(id_list)))

        payments = PaymentService(self.db)
        for student_id, paid in refunds.items():
            if paid:
                payments.adjust_used(student_id, -paid, "class removal")
            payments.settle(student_id).unwrap()

        logger.info("Deleted %d classes: %s", result.rowcount, id_list)
        return result.rowcount > 0

    @service_call("fetching class")
    def list(self, class_id: int | None = None) -> List[SchoolClass]:
        """List classes by name, or the one class with class_id."""
        stmt = select(SchoolClass).order_by(SchoolClass.name)
        if class_id is not None:
            stmt = stmt.where(SchoolClass.id == class_id)
        return list(self.db.scalars(stmt))

    @service_call("fetching class")
    def get(self, class_id: int) -> SchoolClass:
        school_class = self.db.get(SchoolClass, class_id)
        if not school_class:
            raise NotFoundError("Class not found")
        return school_class


__all__ = ["ClassService"]
