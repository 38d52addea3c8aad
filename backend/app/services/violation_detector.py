"""
Violation detector – turns current shift and interval state into candidate
violation events.

Detection is pure: it reads, never writes. Thresholds are in minutes and
compared strictly (a value equal to the threshold is not a violation).

| type         | condition                                         | severity          |
|--------------|---------------------------------------------------|-------------------|
| missed_shift | planned, now - planned_start > 60, no work        | 3                 |
| late_start   | first work start - planned_start > 15             | >30 → 2, else 1   |
| early_end    | completed, planned_end - actual_end > 15          | >30 → 2, else 1   |
| long_break   | closed break longer than 90                       | >180 → 3, else 2  |
| no_break_end | open break running longer than 90                 | 3                 |
"""
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any, Sequence

from app.models.shift import Shift, WorkInterval, BreakInterval, SHIFT_PLANNED, SHIFT_COMPLETED
from app.repositories import Repositories
from app.utils.periods import utcnow, ensure_utc, minutes_between

logger = logging.getLogger(__name__)

LATE_THRESHOLD = 15
EARLY_END_THRESHOLD = 15
LONG_BREAK_THRESHOLD = 90
MISSED_SHIFT_THRESHOLD = 60

# Completed shifts stay in the sweep scope this long so early_end can be seen
COMPLETED_LOOKBACK = timedelta(hours=24)

LATE_START = "late_start"
EARLY_END = "early_end"
MISSED_SHIFT = "missed_shift"
LONG_BREAK = "long_break"
NO_BREAK_END = "no_break_end"


@dataclass
class DetectedViolation:
    type: str
    employee_id: uuid.UUID
    company_id: uuid.UUID | None
    shift_id: uuid.UUID
    shift_date: date
    severity: int
    details: dict[str, Any] = field(default_factory=dict)


def _iso(value: datetime | None) -> str | None:
    return ensure_utc(value).isoformat() if value else None


def detect_shift_violations(
    shift: Shift,
    work_intervals: Sequence[WorkInterval],
    break_intervals: Sequence[BreakInterval],
    now: datetime,
    company_id: uuid.UUID | None = None,
) -> list[DetectedViolation]:
    """All violations visible on one shift at `now`, in a stable order."""
    now = ensure_utc(now)
    planned_start = ensure_utc(shift.planned_start)
    planned_end = ensure_utc(shift.planned_end)
    shift_date = planned_start.date()

    def event(kind: str, severity: int, **details: Any) -> DetectedViolation:
        return DetectedViolation(
            type=kind,
            employee_id=shift.employee_id,
            company_id=company_id,
            shift_id=shift.id,
            shift_date=shift_date,
            severity=severity,
            details=details,
        )

    found: list[DetectedViolation] = []
    work = sorted(work_intervals, key=lambda i: ensure_utc(i.start_at))

    # ── Missed shift ──────────────────────────────────────────────────────────
    if shift.status == SHIFT_PLANNED and not work:
        overdue = minutes_between(planned_start, now)
        if overdue > MISSED_SHIFT_THRESHOLD:
            found.append(event(
                MISSED_SHIFT, 3,
                planned=_iso(planned_start),
                threshold=MISSED_SHIFT_THRESHOLD,
                minutesLate=math.floor(overdue),
            ))

    # ── Late start ────────────────────────────────────────────────────────────
    if work:
        first_start = ensure_utc(work[0].start_at)
        late = minutes_between(planned_start, first_start)
        if late > LATE_THRESHOLD:
            found.append(event(
                LATE_START, 2 if late > 30 else 1,
                planned=_iso(planned_start),
                actual=_iso(first_start),
                threshold=LATE_THRESHOLD,
                minutesLate=math.floor(late),
            ))

    # ── Early end ─────────────────────────────────────────────────────────────
    if shift.status == SHIFT_COMPLETED and work and work[-1].end_at is not None:
        actual_end = ensure_utc(shift.actual_end or work[-1].end_at)
        early = minutes_between(actual_end, planned_end)
        if early > EARLY_END_THRESHOLD:
            found.append(event(
                EARLY_END, 2 if early > 30 else 1,
                planned=_iso(planned_end),
                actual=_iso(actual_end),
                threshold=EARLY_END_THRESHOLD,
                minutesEarly=math.floor(early),
            ))

    # ── Breaks ────────────────────────────────────────────────────────────────
    for pause in sorted(break_intervals, key=lambda i: ensure_utc(i.start_at)):
        start = ensure_utc(pause.start_at)
        if pause.end_at is not None:
            duration = minutes_between(start, pause.end_at)
            if duration > LONG_BREAK_THRESHOLD:
                found.append(event(
                    LONG_BREAK, 3 if duration > 180 else 2,
                    duration=math.floor(duration),
                    threshold=LONG_BREAK_THRESHOLD,
                    breakStart=_iso(start),
                    breakEnd=_iso(pause.end_at),
                ))
        else:
            duration = minutes_between(start, now)
            if duration > LONG_BREAK_THRESHOLD:
                found.append(event(
                    NO_BREAK_END, 3,
                    duration=math.floor(duration),
                    threshold=LONG_BREAK_THRESHOLD,
                    breakStart=_iso(start),
                ))

    return found


class ViolationDetector:

    def __init__(self, repos: Repositories):
        self.repos = repos

    async def detect_for_company(
        self, company_id: uuid.UUID, now: datetime | None = None
    ) -> list[DetectedViolation]:
        """Detected events for all monitorable shifts of a company.

        Read failures are logged and yield an empty list.
        """
        now = ensure_utc(now) if now else utcnow()
        try:
            rows = await self.repos.shifts.find_monitorable_by_company(
                company_id, now - COMPLETED_LOOKBACK
            )
            found: list[DetectedViolation] = []
            for shift, owner_company_id in rows:
                work = await self.repos.shifts.work_intervals(shift.id)
                breaks = await self.repos.shifts.break_intervals(shift.id)
                found.extend(detect_shift_violations(shift, work, breaks, now, owner_company_id))
        except Exception:
            logger.error("Violation detection failed for company %s", company_id, exc_info=True)
            return []

        logger.info(
            "Detected %d violation(s) across %d shift(s) for company %s",
            len(found), len(rows), company_id,
        )
        return found
