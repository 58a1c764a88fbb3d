"""Pydantic schemas for monthly fees."""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from schooldesk.schemas.common import Money


class MonthlyFeeCreate(BaseModel):
    """Payload for monthly_fee:create (a single month)."""

    student_id: int
    class_id: int
    date: dt.date
    amount: Money | None = Field(None, description="Defaults to the class monthly fee")


class MonthlyFeeBulkCreate(BaseModel):
    """Payload for monthly_fee:bulk: a contiguous run of months."""

    student_id: int
    class_id: int
    from_date: dt.date = Field(..., alias="from")
    count: int = Field(..., description="Number of months; 0 or less creates nothing")
    fee: Money | None = Field(None, description="Defaults to the class monthly fee")

    model_config = ConfigDict(populate_by_name=True)


class MonthlyFeeUpdate(BaseModel):
    """Payload for monthly_fee:update."""

    date: dt.date | None = None
    amount: Money | None = None


class MonthlyFeeRecord(BaseModel):
    """Monthly fee joined with class and student names."""

    id: int
    student_id: int
    class_id: int
    date: dt.date
    amount: Money
    paid: Money
    class_name: str | None = None
    student_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MonthlyFeeDetail(BaseModel):
    """Single monthly fee row."""

    id: int
    student_id: int
    class_id: int
    date: dt.date
    amount: Money
    paid: Money
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)
