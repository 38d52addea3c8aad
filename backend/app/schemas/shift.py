from pydantic import BaseModel
import uuid
from datetime import datetime as DateTime
from typing import Optional


class ShiftStart(BaseModel):
    """Either a planned shift id or an employee id (bot: today's shift or ad-hoc)."""
    shift_id: Optional[uuid.UUID] = None
    employee_id: Optional[uuid.UUID] = None
    source: str = "bot"


class BreakStart(BaseModel):
    type: str = "lunch"  # lunch | short
    source: str = "bot"


class WorkIntervalOut(BaseModel):
    id: uuid.UUID
    shift_id: uuid.UUID
    start_at: DateTime
    end_at: Optional[DateTime]
    source: str

    model_config = {"from_attributes": True}


class BreakIntervalOut(BaseModel):
    id: uuid.UUID
    shift_id: uuid.UUID
    start_at: DateTime
    end_at: Optional[DateTime]
    type: str
    source: str

    model_config = {"from_attributes": True}


class ShiftOut(BaseModel):
    id: uuid.UUID
    employee_id: uuid.UUID
    planned_start: DateTime
    planned_end: DateTime
    actual_start: Optional[DateTime]
    actual_end: Optional[DateTime]
    status: str
    created_at: DateTime

    model_config = {"from_attributes": True}


class ShiftDetailOut(BaseModel):
    shift: ShiftOut
    work_intervals: list[WorkIntervalOut]
    break_intervals: list[BreakIntervalOut]
    work_minutes: float

    model_config = {"from_attributes": True}
