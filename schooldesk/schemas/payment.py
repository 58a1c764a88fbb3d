"""Pydantic schemas for payments."""

import datetime as dt

from pydantic import BaseModel, ConfigDict

from schooldesk.schemas.common import PositiveMoney


class PaymentCreate(BaseModel):
    """Payload for payment:create."""

    student_id: int
    amount: PositiveMoney
    date: dt.date
    remark: str | None = None


class PaymentUpdate(BaseModel):
    """Payload for payment:update. A new amount is re-allocated by its difference."""

    amount: PositiveMoney | None = None
    date: dt.date | None = None
    remark: str | None = None


class PaymentRecord(BaseModel):
    """Payment joined with the student's name."""

    id: int
    student_id: int
    student_name: str | None = None
    amount: PositiveMoney
    date: dt.date
    remark: str | None = None

    model_config = ConfigDict(from_attributes=True)
