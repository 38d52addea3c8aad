"""
Violation recorder – persists one detected event as violation + exception.

Per event, in one unit of work:

  A. insert the auto violation and recalculate the current rating (flush only);
     any failure is rolled back and logged, the event continues without a
     violation
  B. insert the exception (linked to the violation from A if there is one)
     and commit

The partial unique index on open exceptions (employee_id, date, kind) makes
B fail with IntegrityError when a concurrent sweep got there first; the whole
unit is rolled back then, so no orphan violation survives.
"""
import logging
import uuid
from enum import Enum

from sqlalchemy.exc import IntegrityError

from app.core.metrics import VIOLATIONS_DETECTED
from app.models.attendance_exception import AttendanceException
from app.models.violation import Violation, SOURCE_AUTO
from app.repositories import Repositories
from app.services.notification_service import (
    NotificationService, EVENT_VIOLATION_DETECTED, violation_message,
)
from app.services.rating_service import RatingService
from app.services.violation_detector import DetectedViolation
from app.utils.periods import utcnow, month_period

logger = logging.getLogger(__name__)

# Detected type → company rule code
RULE_CODE_MAP = {
    "late_start": "late",
    "early_end": "early_end",
    "missed_shift": "missed_shift",
    "long_break": "long_break",
    "no_break_end": "no_break_end",
}


class RecordOutcome(str, Enum):
    RECORDED = "recorded"
    RECORDED_WITHOUT_VIOLATION = "recorded_without_violation"
    SKIPPED_DUPLICATE = "skipped_duplicate"
    SKIPPED_NO_RULE = "skipped_no_rule"
    SKIPPED_NO_EMPLOYEE = "skipped_no_employee"


class ViolationRecorder:

    def __init__(
        self,
        repos: Repositories,
        rating_service: RatingService | None = None,
        notifier: NotificationService | None = None,
    ):
        self.repos = repos
        self.rating_service = rating_service or RatingService(repos)
        self.notifier = notifier or NotificationService(repos)

    async def record(self, event: DetectedViolation) -> RecordOutcome:
        employee = await self.repos.employees.get(event.employee_id)
        if employee is None:
            logger.warning("Dropping %s for unknown employee %s", event.type, event.employee_id)
            return RecordOutcome.SKIPPED_NO_EMPLOYEE
        employee_id, company_id = employee.id, employee.company_id

        if await self.repos.exceptions.find_unresolved(employee_id, event.shift_date, event.type):
            return RecordOutcome.SKIPPED_DUPLICATE

        code = RULE_CODE_MAP.get(event.type)
        rule = await self.rating_service.get_active_rule_by_code(company_id, code) if code else None
        if rule is None:
            logger.warning(
                "No active rule '%s' for company %s, %s not recorded", code, company_id, event.type
            )
            return RecordOutcome.SKIPPED_NO_RULE

        now = utcnow()
        violation_id = await self._record_violation(event, employee_id, company_id, rule.id, rule.penalty_percent, now)

        exception = AttendanceException(
            employee_id=employee_id,
            date=event.shift_date,
            kind=event.type,
            severity=event.severity,
            details={**event.details, "shiftId": str(event.shift_id), "detectedAt": now.isoformat()},
            violation_id=violation_id,
        )
        try:
            await self.repos.exceptions.insert(exception)
            await self.repos.commit()
        except IntegrityError:
            await self.repos.rollback()
            logger.info(
                "Open %s exception for employee %s on %s already exists",
                event.type, employee_id, event.shift_date,
            )
            return RecordOutcome.SKIPPED_DUPLICATE

        if violation_id:
            VIOLATIONS_DETECTED.labels(type=event.type, severity=str(event.severity), source=SOURCE_AUTO).inc()
        logger.info(
            "Exception %s (%s, severity %d) opened for employee %s%s",
            exception.id, event.type, event.severity, employee_id,
            "" if violation_id else " without violation",
        )
        await self._notify(employee_id, event)
        return RecordOutcome.RECORDED if violation_id else RecordOutcome.RECORDED_WITHOUT_VIOLATION

    async def _record_violation(self, event, employee_id, company_id, rule_id, penalty, now) -> uuid.UUID | None:
        try:
            violation = Violation(
                employee_id=employee_id,
                company_id=company_id,
                rule_id=rule_id,
                source=SOURCE_AUTO,
                reason=f"Auto-detected: {event.type}",
                penalty=penalty,
                created_at=now,
            )
            await self.repos.violations.add(violation)
            period_start, period_end = month_period(now.date())
            await self.rating_service.calculate_and_store(employee_id, period_start, period_end)
            return violation.id
        except Exception:
            logger.error(
                "Recording %s violation for employee %s failed, exception kept without violation",
                event.type, employee_id, exc_info=True,
            )
            await self.repos.rollback()
            return None

    async def _notify(self, employee_id: uuid.UUID, event: DetectedViolation) -> None:
        try:
            employee = await self.repos.employees.get(employee_id)
            if employee is not None:
                await self.notifier.notify_employee(employee, EVENT_VIOLATION_DETECTED, violation_message(event))
        except Exception:
            logger.warning("Notification for employee %s failed", employee_id, exc_info=True)
