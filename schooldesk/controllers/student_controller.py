"""IPC controller for students."""

from schooldesk.controllers.base import BaseController
from schooldesk.schemas.envelope import ApiResponse
from schooldesk.schemas.student import StudentCreate, StudentRecord, StudentUpdate
from schooldesk.services.student_service import StudentService


class StudentController(BaseController):
    entity = "Student"
    noun = "student"
    service_class = StudentService
    create_schema = StudentCreate
    update_schema = StudentUpdate
    record_schema = StudentRecord

    def balance(self, student_id: int) -> ApiResponse:
        """Credit, dues and payment total for one student."""
        return self.run(
            "calculating student balance",
            lambda session: StudentService(session).balance(student_id),
            "Student balance fetched successfully",
            to_data=lambda balance: balance.model_dump(),
        )

    def routes(self):
        routes = super().routes()
        routes["balance"] = self.balance
        return routes
