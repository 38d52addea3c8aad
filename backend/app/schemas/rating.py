from pydantic import BaseModel
import uuid
from datetime import date, datetime
from decimal import Decimal


class RatingPeriodOut(BaseModel):
    id: str                   # current | last | quarter | year
    name: str
    start_date: date
    end_date: date


class RatingRecalculate(BaseModel):
    period_start: date | None = None
    period_end: date | None = None


class RatingResultOut(BaseModel):
    employee_id: uuid.UUID
    period_start: date
    period_end: date
    rating: Decimal
    status: str
    violations_count: int
    is_blocked: bool

    model_config = {"from_attributes": True}


class EmployeeRatingOut(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    company_id: uuid.UUID
    period_start: date
    period_end: date
    rating: Decimal
    status: str
    updated_at: datetime

    model_config = {"from_attributes": True}
