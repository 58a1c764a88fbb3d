"""IPC controller for admissions."""

from schooldesk.controllers.base import BaseController
from schooldesk.schemas.admission import AdmissionCreate, AdmissionRecord, AdmissionUpdate
from schooldesk.services.admission_service import AdmissionService


class AdmissionController(BaseController):
    entity = "Admission"
    noun = "admission"
    service_class = AdmissionService
    create_schema = AdmissionCreate
    update_schema = AdmissionUpdate
    record_schema = AdmissionRecord
