"""Record services bound to an explicit SQLAlchemy session."""

from schooldesk.services.admission_service import AdmissionService
from schooldesk.services.allocation import FeeAllocator, allocate, plan_allocation, plan_bulk
from schooldesk.services.charge_store import ChargeStore
from schooldesk.services.class_service import ClassService
from schooldesk.services.monthly_fee_service import MonthlyFeeService
from schooldesk.services.payment_service import PaymentService
from schooldesk.services.result import Failure, FailureKind, Success
from schooldesk.services.student_service import StudentService

__all__ = [
    "AdmissionService",
    "ChargeStore",
    "ClassService",
    "Failure",
    "FailureKind",
    "FeeAllocator",
    "MonthlyFeeService",
    "PaymentService",
    "StudentService",
    "Success",
    "allocate",
    "plan_allocation",
    "plan_bulk",
]
