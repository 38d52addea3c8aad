"""
Shift and interval persistence.

Shifts never carry an embedded employee; company scoping is an explicit
join on employees.company_id performed here.
"""
import uuid
from datetime import datetime
from typing import Protocol, Sequence

from sqlalchemy import select, and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee
from app.models.shift import (
    Shift, WorkInterval, BreakInterval, SHIFT_PLANNED, SHIFT_ACTIVE, SHIFT_COMPLETED,
)


class ShiftRepository(Protocol):
    async def get(self, shift_id: uuid.UUID) -> Shift | None: ...

    async def get_for_update(self, shift_id: uuid.UUID) -> Shift | None: ...

    async def add(self, shift: Shift) -> Shift: ...

    async def find_by_employee_between(
        self, employee_id: uuid.UUID, start: datetime, end: datetime
    ) -> Sequence[Shift]: ...

    async def find_monitorable_by_company(
        self, company_id: uuid.UUID, completed_since: datetime
    ) -> Sequence[tuple[Shift, uuid.UUID]]: ...

    async def work_intervals(self, shift_id: uuid.UUID) -> Sequence[WorkInterval]: ...

    async def break_intervals(self, shift_id: uuid.UUID) -> Sequence[BreakInterval]: ...

    async def open_work_interval(self, shift_id: uuid.UUID) -> WorkInterval | None: ...

    async def open_break_interval(self, shift_id: uuid.UUID) -> BreakInterval | None: ...

    async def add_interval(self, interval: WorkInterval | BreakInterval) -> None: ...


class SqlShiftRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, shift_id: uuid.UUID) -> Shift | None:
        return await self.db.get(Shift, shift_id)

    async def get_for_update(self, shift_id: uuid.UUID) -> Shift | None:
        # FOR UPDATE is a no-op on SQLite, row lock on PostgreSQL
        result = await self.db.execute(
            select(Shift).where(Shift.id == shift_id).with_for_update()
        )
        return result.scalar_one_or_none()

    async def add(self, shift: Shift) -> Shift:
        self.db.add(shift)
        await self.db.flush()
        return shift

    async def find_by_employee_between(
        self, employee_id: uuid.UUID, start: datetime, end: datetime
    ) -> Sequence[Shift]:
        result = await self.db.execute(
            select(Shift)
            .where(
                Shift.employee_id == employee_id,
                Shift.planned_start >= start,
                Shift.planned_start < end,
            )
            .order_by(Shift.planned_start)
        )
        return result.scalars().all()

    async def find_monitorable_by_company(
        self, company_id: uuid.UUID, completed_since: datetime
    ) -> Sequence[tuple[Shift, uuid.UUID]]:
        """Planned and active shifts of the company plus recently completed ones.

        Returns (shift, company_id) pairs so callers never need the employee row.
        """
        result = await self.db.execute(
            select(Shift, Employee.company_id)
            .join(Employee, Employee.id == Shift.employee_id)
            .where(
                Employee.company_id == company_id,
                or_(
                    Shift.status.in_([SHIFT_PLANNED, SHIFT_ACTIVE]),
                    and_(
                        Shift.status == SHIFT_COMPLETED,
                        Shift.planned_start >= completed_since,
                    ),
                ),
            )
            .order_by(Shift.planned_start)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def work_intervals(self, shift_id: uuid.UUID) -> Sequence[WorkInterval]:
        result = await self.db.execute(
            select(WorkInterval).where(WorkInterval.shift_id == shift_id).order_by(WorkInterval.start_at)
        )
        return result.scalars().all()

    async def break_intervals(self, shift_id: uuid.UUID) -> Sequence[BreakInterval]:
        result = await self.db.execute(
            select(BreakInterval).where(BreakInterval.shift_id == shift_id).order_by(BreakInterval.start_at)
        )
        return result.scalars().all()

    async def open_work_interval(self, shift_id: uuid.UUID) -> WorkInterval | None:
        result = await self.db.execute(
            select(WorkInterval).where(
                WorkInterval.shift_id == shift_id,
                WorkInterval.end_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def open_break_interval(self, shift_id: uuid.UUID) -> BreakInterval | None:
        result = await self.db.execute(
            select(BreakInterval).where(
                BreakInterval.shift_id == shift_id,
                BreakInterval.end_at.is_(None),
            )
        )
        return result.scalar_one_or_none()

    async def add_interval(self, interval: WorkInterval | BreakInterval) -> None:
        self.db.add(interval)
        await self.db.flush()
