"""IPC controller for classes."""

from schooldesk.controllers.base import BaseController
from schooldesk.schemas.school_class import ClassCreate, ClassRecord, ClassUpdate
from schooldesk.services.class_service import ClassService


class ClassController(BaseController):
    entity = "Class"
    noun = "class"
    service_class = ClassService
    create_schema = ClassCreate
    update_schema = ClassUpdate
    record_schema = ClassRecord
