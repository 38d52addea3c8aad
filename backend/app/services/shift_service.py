"""
Shift service: shift status transitions and the work/break interval ledger.

Invariant: per shift at most one open work interval and one open break
interval. Opening one kind closes the open interval of the other kind in the
same flush; the partial unique indexes on both interval tables reject a
concurrent second opening.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from app.models.shift import (
    Shift, WorkInterval, BreakInterval,
    SHIFT_PLANNED, SHIFT_ACTIVE, SHIFT_COMPLETED, SHIFT_CANCELLED,
)
from app.repositories import Repositories
from app.utils.periods import utcnow, ensure_utc, end_of_day, minutes_between

logger = logging.getLogger(__name__)


@dataclass
class ShiftDetails:
    shift: Shift
    work_intervals: list[WorkInterval] = field(default_factory=list)
    break_intervals: list[BreakInterval] = field(default_factory=list)
    work_minutes: float = 0.0


class ShiftService:

    def __init__(self, repos: Repositories):
        self.repos = repos

    # ── Lookups ──────────────────────────────────────────────────────────────

    async def get_shift(self, shift_id: uuid.UUID) -> Shift:
        shift = await self.repos.shifts.get(shift_id)
        if shift is None:
            raise NotFoundError("Shift")
        return shift

    async def get_details(self, shift_id: uuid.UUID) -> ShiftDetails:
        shift = await self.get_shift(shift_id)
        work = list(await self.repos.shifts.work_intervals(shift_id))
        breaks = list(await self.repos.shifts.break_intervals(shift_id))
        return ShiftDetails(
            shift=shift,
            work_intervals=work,
            break_intervals=breaks,
            work_minutes=_net_work_minutes(work, breaks),
        )

    async def calculate_work_minutes(self, shift_id: uuid.UUID) -> float:
        """Closed work time minus closed break time, never negative."""
        work = await self.repos.shifts.work_intervals(shift_id)
        breaks = await self.repos.shifts.break_intervals(shift_id)
        return _net_work_minutes(work, breaks)

    # ── Shift transitions ────────────────────────────────────────────────────

    async def start_shift(
        self,
        shift_id: uuid.UUID | None = None,
        employee_id: uuid.UUID | None = None,
        now: datetime | None = None,
        source: str = "bot",
    ) -> Shift:
        """Start a planned shift, or today's shift of an employee.

        Without a planned shift for today an ad-hoc active shift is created
        that runs until the end of the day.
        """
        now = now or utcnow()
        if shift_id is None and employee_id is None:
            raise ValidationError("shift_id or employee_id is required")

        if shift_id is not None:
            shift = await self._load_for_update(shift_id)
        else:
            shift = await self._todays_shift(employee_id, now)

        if shift is None:
            employee = await self.repos.employees.get(employee_id)
            if employee is None:
                raise NotFoundError("Employee")
            shift = Shift(
                employee_id=employee.id,
                planned_start=now,
                planned_end=end_of_day(now),
                actual_start=now,
                status=SHIFT_ACTIVE,
            )
            await self.repos.shifts.add(shift)
            logger.info("Ad-hoc shift %s created for employee %s", shift.id, employee.id)
        else:
            self._transition(shift, SHIFT_ACTIVE)
            shift.actual_start = now

        await self._open_work(shift.id, now, source)
        await self._commit("start shift")
        logger.info("Shift %s started at %s", shift.id, now.isoformat())
        return shift

    async def end_shift(self, shift_id: uuid.UUID, now: datetime | None = None) -> Shift:
        now = now or utcnow()
        shift = await self._load_for_update(shift_id)
        self._transition(shift, SHIFT_COMPLETED)

        await self._close_open_intervals(shift.id, now)
        shift.actual_end = now
        await self._commit("end shift")
        logger.info("Shift %s completed at %s", shift_id, now.isoformat())
        return shift

    async def cancel_shift(self, shift_id: uuid.UUID, now: datetime | None = None) -> Shift:
        now = now or utcnow()
        shift = await self._load_for_update(shift_id)
        self._transition(shift, SHIFT_CANCELLED)

        await self._close_open_intervals(shift.id, now)
        await self._commit("cancel shift")
        logger.info("Shift %s cancelled", shift_id)
        return shift

    # ── Breaks ───────────────────────────────────────────────────────────────

    async def start_break(
        self,
        shift_id: uuid.UUID,
        break_type: str = "lunch",
        now: datetime | None = None,
        source: str = "bot",
    ) -> BreakInterval:
        now = now or utcnow()
        shift = await self._load_for_update(shift_id)
        if shift.status != SHIFT_ACTIVE:
            raise InvalidTransitionError("Shift is not active")

        if await self.repos.shifts.open_break_interval(shift_id) is not None:
            raise InvalidTransitionError("A break is already in progress")

        work = await self.repos.shifts.open_work_interval(shift_id)
        if work is not None:
            work.end_at = now

        interval = BreakInterval(shift_id=shift_id, start_at=now, type=break_type, source=source)
        await self._flush_interval(interval, "A break is already in progress")
        await self._commit("start break")
        logger.info("Break started on shift %s (%s)", shift_id, break_type)
        return interval

    async def end_break(self, shift_id: uuid.UUID, now: datetime | None = None, source: str = "bot") -> BreakInterval:
        now = now or utcnow()
        shift = await self._load_for_update(shift_id)

        interval = await self.repos.shifts.open_break_interval(shift_id)
        if interval is None:
            raise InvalidTransitionError("No active break found")

        interval.end_at = now
        if shift.status == SHIFT_ACTIVE:
            await self._open_work(shift_id, now, source)
        await self._commit("end break")
        logger.info("Break ended on shift %s", shift_id)
        return interval

    # ── Internals ────────────────────────────────────────────────────────────

    async def _load_for_update(self, shift_id: uuid.UUID) -> Shift:
        shift = await self.repos.shifts.get_for_update(shift_id)
        if shift is None:
            raise NotFoundError("Shift")
        return shift

    async def _todays_shift(self, employee_id: uuid.UUID, now: datetime) -> Shift | None:
        day_start = ensure_utc(now).replace(hour=0, minute=0, second=0, microsecond=0)
        shifts = await self.repos.shifts.find_by_employee_between(
            employee_id, day_start, day_start + timedelta(days=1)
        )
        if not shifts:
            return None
        for shift in shifts:
            if shift.status == SHIFT_PLANNED:
                return shift
        raise InvalidTransitionError("Shift already started or finished")

    def _transition(self, shift: Shift, status: str) -> None:
        if not shift.can_transition_to(status):
            raise InvalidTransitionError(
                f"Shift cannot change from '{shift.status}' to '{status}'"
            )
        shift.status = status

    async def _open_work(self, shift_id: uuid.UUID, now: datetime, source: str) -> None:
        if await self.repos.shifts.open_work_interval(shift_id) is not None:
            raise InvalidTransitionError("Work interval already open")
        interval = WorkInterval(shift_id=shift_id, start_at=now, source=source)
        await self._flush_interval(interval, "Work interval already open")

    async def _close_open_intervals(self, shift_id: uuid.UUID, now: datetime) -> None:
        work = await self.repos.shifts.open_work_interval(shift_id)
        if work is not None:
            work.end_at = now
        pause = await self.repos.shifts.open_break_interval(shift_id)
        if pause is not None:
            pause.end_at = now

    async def _flush_interval(self, interval: WorkInterval | BreakInterval, conflict_message: str) -> None:
        try:
            await self.repos.shifts.add_interval(interval)
        except IntegrityError:
            await self.repos.rollback()
            raise InvalidTransitionError(conflict_message)

    async def _commit(self, action: str) -> None:
        try:
            await self.repos.commit()
        except IntegrityError:
            await self.repos.rollback()
            logger.warning("Concurrent update rejected during %s", action)
            raise InvalidTransitionError(f"Concurrent update rejected during {action}")


def _net_work_minutes(work: list[WorkInterval], breaks: list[BreakInterval]) -> float:
    closed_work = [(ensure_utc(i.start_at), ensure_utc(i.end_at)) for i in work if i.end_at]
    closed_breaks = [(ensure_utc(i.start_at), ensure_utc(i.end_at)) for i in breaks if i.end_at]

    worked = sum(minutes_between(start, end) for start, end in closed_work)
    # Breaks normally split work intervals; only manual overlaps are subtracted
    paused = 0.0
    for b_start, b_end in closed_breaks:
        for w_start, w_end in closed_work:
            lower, upper = max(b_start, w_start), min(b_end, w_end)
            if upper > lower:
                paused += minutes_between(lower, upper)
    return max(0.0, worked - paused)
