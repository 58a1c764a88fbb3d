"""IPC controllers and their channel registration."""

from schooldesk.controllers.admission_controller import AdmissionController
from schooldesk.controllers.base import BaseController
from schooldesk.controllers.class_controller import ClassController
from schooldesk.controllers.monthly_fee_controller import MonthlyFeeController
from schooldesk.controllers.payment_controller import PaymentController
from schooldesk.controllers.student_controller import StudentController
from schooldesk.db import SessionFactory
from schooldesk.ipc import IpcRouter

CONTROLLERS = {
    "class": ClassController,
    "student": StudentController,
    "monthly_fee": MonthlyFeeController,
    "admission": AdmissionController,
    "payment": PaymentController,
}


def create_router(session_factory: SessionFactory | None = None) -> IpcRouter:
    """Build a router with every controller channel registered.

    Args:
        session_factory: Session factory shared by all controllers
            (default: the configured SessionLocal)
    """
    router = IpcRouter()
    for prefix, controller_class in CONTROLLERS.items():
        controller = controller_class(session_factory)
        for operation, handler in controller.routes().items():
            router.handle(f"{prefix}:{operation}", handler)
    return router


__all__ = [
    "AdmissionController",
    "BaseController",
    "ClassController",
    "MonthlyFeeController",
    "PaymentController",
    "StudentController",
    "create_router",
]
