"""IPC controller for payments."""

from schooldesk.controllers.base import BaseController
from schooldesk.schemas.payment import PaymentCreate, PaymentRecord, PaymentUpdate
from schooldesk.services.payment_service import PaymentService


class PaymentController(BaseController):
    entity = "Payment"
    noun = "payment"
    service_class = PaymentService
    create_schema = PaymentCreate
    update_schema = PaymentUpdate
    record_schema = PaymentRecord
