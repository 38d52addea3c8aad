from app.models.company import Company
from app.models.employee import Employee
from app.models.shift import Shift, WorkInterval, BreakInterval
from app.models.violation import ViolationRule, Violation, EmployeeRating
from app.models.attendance_exception import AttendanceException
from app.models.notification import NotificationLog

__all__ = [
    "Company",
    "Employee",
    "Shift",
    "WorkInterval",
    "BreakInterval",
    "ViolationRule",
    "Violation",
    "EmployeeRating",
    "AttendanceException",
    "NotificationLog",
]
