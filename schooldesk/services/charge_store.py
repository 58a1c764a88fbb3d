"""Persistence for charge rows (monthly fees and admissions).

Both charge tables share the columns the allocator needs: ``student_id``,
``date``, ``amount`` and ``paid``. A ChargeStore is bound to one session,
which is the transaction every statement runs in.
"""

import logging
from decimal import Decimal
from typing import Any, Iterable, List, NamedTuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from schooldesk.models import Admission, MonthlyFee

logger = logging.getLogger(__name__)

ChargeModel = type[MonthlyFee] | type[Admission]


class ChargeSnapshot(NamedTuple):
    """Point-in-time view of a charge used for allocation planning."""

    id: int
    amount: Decimal
    paid: Decimal


def as_id_list(ids: int | Iterable[int]) -> List[int]:
    """Accept one id or an iterable of ids."""
    if isinstance(ids, int):
        return [ids]
    return list(ids)


class ChargeStore:
    """Charge table access for one model."""

    def __init__(self, session: Session, model: ChargeModel):
        """Initialize with database session and charge model."""
        self.session = session
        self.model = model

    def create(self, values: dict[str, Any]) -> int:
        """Insert a charge row and return its id."""
        charge = self.model(**values)
        self.session.add(charge)
        self.session.flush()
        return charge.id

    def delete(self, ids: int | Iterable[int]) -> int:
        """Delete charges by id. Returns the number of rows removed."""
        id_list = as_id_list(ids)
        if not id_list:
            return 0
        result = self.session.execute(delete(self.model).where(self.model.id.in_(id_list)))
        return result.rowcount

    def get(self, charge_id: int):
        """Get a charge by id, or None."""
        return self.session.get(self.model, charge_id)

    def list(self, student_id: int) -> List:
        """All charges of a student, newest first."""
        return list(
            self.session.scalars(
                select(self.model)
                .where(self.model.student_id == student_id)
                .order_by(self.model.date.desc(), self.model.id.desc())
            )
        )

    def unpaid_list(self, student_id: int) -> List[ChargeSnapshot]:
        """Charges with money still owed.

        Ordered by paid descending, then date ascending: partially paid
        charges are cleared before untouched ones, older before newer.
        """
        m = self.model
        rows = self.session.execute(
            select(m.id, m.amount, m.paid)
            .where(m.student_id == student_id, m.paid < m.amount)
            .order_by(m.paid.desc(), m.date.asc(), m.id.asc())
        )
        return [ChargeSnapshot(*row) for row in rows]

    def paid_list(self, student_id: int) -> List[ChargeSnapshot]:
        """Charges holding some paid money.

        Ordered by paid ascending, then date descending: the least paid,
        most recent charges are reversed first.
        """
        m = self.model
        rows = self.session.execute(
            select(m.id, m.amount, m.paid)
            .where(m.student_id == student_id, m.paid > 0)
            .order_by(m.paid.asc(), m.date.desc(), m.id.desc())
        )
        return [ChargeSnapshot(*row) for row in rows]

    def apply_delta(self, charge_id: int, delta: Decimal) -> bool:
        """Add delta to a charge's paid amount in a single UPDATE."""
        m = self.model
        result = self.session.execute(
            update(m)
            .where(m.id == charge_id)
            .values(paid=func.round(m.paid + delta, 2, type_=m.paid.type))
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount > 0

    def paid_by_student(self, *conditions) -> dict[int, Decimal]:
        """Sum of paid per student over the rows matching conditions.

        Called before deleting charges so their paid money can go back to
        the students' credit.
        """
        m = self.model
        rows = self.session.execute(
            select(m.student_id, func.sum(m.paid))
            .where(*conditions)
            .group_by(m.student_id)
        )
        return {
            student_id: Decimal(str(total or 0)).quantize(Decimal("0.01"))
            for student_id, total in rows
        }

    def outstanding(self, student_id: int) -> Decimal:
        """Total amount still owed by a student on this charge table."""
        m = self.model
        total = self.session.scalar(
            select(func.coalesce(func.sum(m.amount - m.paid), 0)).where(m.student_id == student_id)
        )
        return Decimal(str(total)).quantize(Decimal("0.01"))


__all__ = ["ChargeModel", "ChargeSnapshot", "ChargeStore", "as_id_list"]
