from app.schemas.employee import EmployeeOut
from app.schemas.shift import ShiftStart, BreakStart, ShiftOut, ShiftDetailOut, WorkIntervalOut, BreakIntervalOut
from app.schemas.violation import (
    ViolationRuleCreate, ViolationRuleUpdate, ViolationRuleOut,
    ViolationCreate, ViolationUpdate, ViolationOut,
)
from app.schemas.rating import RatingPeriodOut, RatingRecalculate, RatingResultOut, EmployeeRatingOut
from app.schemas.exception import AttendanceExceptionOut
from app.schemas.monitoring import CompanySweepOut, GlobalSweepOut

__all__ = [
    "EmployeeOut",
    "ShiftStart", "BreakStart", "ShiftOut", "ShiftDetailOut", "WorkIntervalOut", "BreakIntervalOut",
    "ViolationRuleCreate", "ViolationRuleUpdate", "ViolationRuleOut",
    "ViolationCreate", "ViolationUpdate", "ViolationOut",
    "RatingPeriodOut", "RatingRecalculate", "RatingResultOut", "EmployeeRatingOut",
    "AttendanceExceptionOut",
    "CompanySweepOut", "GlobalSweepOut",
]
