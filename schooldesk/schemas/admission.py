"""Pydantic schemas for admissions."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from schooldesk.schemas.common import Money


class AdmissionCreate(BaseModel):
    """Payload for admission:create.

    ``monthly`` and ``months`` describe the monthly charges generated with
    the admission, starting at the admission month.
    """

    student_id: int
    class_id: int
    amount: Money | None = Field(None, description="Defaults to the class admission fee")
    monthly: Money | None = Field(None, description="Defaults to the class monthly fee")
    months: int = Field(0, ge=0, description="Monthly charges to generate")
    date: dt.date
    remark: str | None = None


class AdmissionUpdate(BaseModel):
    """Payload for admission:update."""

    amount: Money | None = None
    date: dt.date | None = None
    remark: str | None = None


class AdmissionRecord(BaseModel):
    """Admission joined with its class name."""

    id: int
    student_id: int
    class_id: int
    class_name: str | None = Field(None, serialization_alias="class")
    amount: Money
    paid: Money
    date: dt.date
    remark: str | None = None

    model_config = ConfigDict(from_attributes=True)
