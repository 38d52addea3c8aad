from pydantic import BaseModel
import uuid
from datetime import date as Date, datetime
from typing import Any


class AttendanceExceptionOut(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    date: Date
    kind: str                 # late_start | early_end | missed_shift | long_break | no_break_end
    severity: int             # 1..3
    details: dict[str, Any] | None
    resolved_at: datetime | None
    violation_id: uuid.UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}
