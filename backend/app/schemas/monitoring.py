import uuid
from datetime import date
from typing import Any

from pydantic import BaseModel


class CompanySweepOut(BaseModel):
    violations_found: int
    exceptions_created: int

    model_config = {"from_attributes": True}


class GlobalSweepOut(BaseModel):
    companies_processed: int
    total_violations: int
    total_exceptions: int

    model_config = {"from_attributes": True}


class DetectedViolationOut(BaseModel):
    """A violation the detector currently sees; nothing is recorded for it."""
    type: str
    employee_id: uuid.UUID
    company_id: uuid.UUID | None = None
    shift_id: uuid.UUID
    shift_date: date
    severity: int
    details: dict[str, Any] = {}

    model_config = {"from_attributes": True}
