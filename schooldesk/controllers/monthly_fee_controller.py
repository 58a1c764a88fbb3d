"""IPC controller for monthly fees.

``list`` is filtered by student: monthly fees are always shown per student.
"""

from datetime import date
from typing import Any

from schooldesk.controllers.base import BaseController
from schooldesk.schemas.envelope import ApiResponse, api_error
from schooldesk.schemas.monthly_fee import (
    MonthlyFeeBulkCreate,
    MonthlyFeeCreate,
    MonthlyFeeDetail,
    MonthlyFeeRecord,
    MonthlyFeeUpdate,
)
from schooldesk.services.monthly_fee_service import MonthlyFeeService


class MonthlyFeeController(BaseController):
    entity = "Monthly fee"
    noun = "monthly fee"
    service_class = MonthlyFeeService
    create_schema = MonthlyFeeCreate
    update_schema = MonthlyFeeUpdate
    record_schema = MonthlyFeeDetail
    list_schema = MonthlyFeeRecord

    def list(self, student_id: int | None = None) -> ApiResponse:
        if student_id is None:
            return api_error("Error while fetching monthly fee: student id is required")
        return super().list(student_id)

    def create_bulk(self, data: Any) -> ApiResponse:
        """Create a run of monthly fees paid from credit. Data is the credit used."""
        return self.run(
            "creating monthly fees",
            lambda session: MonthlyFeeService(session).create_bulk_with_payment(
                self._parse(MonthlyFeeBulkCreate, data)
            ),
            "Monthly fees created successfully",
        )

    def list_by_date_range(self, student_id: int, start: str | date, end: str | date) -> ApiResponse:
        """Monthly fees of a student with dates between start and end inclusive."""
        return self.run(
            "fetching monthly fee",
            lambda session: MonthlyFeeService(session).list_by_date_range(
                student_id, _as_date(start), _as_date(end)
            ),
            "Monthly fee fetched successfully",
            to_data=self._records,
        )

    def routes(self):
        routes = super().routes()
        routes["bulk"] = self.create_bulk
        routes["range"] = self.list_by_date_range
        return routes


def _as_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)
