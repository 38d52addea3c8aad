import uuid
from datetime import date
from typing import Protocol, Sequence

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance_exception import AttendanceException
from app.models.employee import Employee


class ExceptionRepository(Protocol):
    async def get(self, exception_id: uuid.UUID) -> AttendanceException | None: ...

    async def find_unresolved(
        self, employee_id: uuid.UUID, day: date, kind: str
    ) -> AttendanceException | None: ...

    async def insert(self, exception: AttendanceException) -> AttendanceException: ...

    async def list_by_company(
        self, company_id: uuid.UUID, unresolved_only: bool = False
    ) -> Sequence[AttendanceException]: ...

    async def count_by_company(self, company_id: uuid.UUID) -> int: ...


class SqlExceptionRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, exception_id: uuid.UUID) -> AttendanceException | None:
        return await self.db.get(AttendanceException, exception_id)

    async def find_unresolved(
        self, employee_id: uuid.UUID, day: date, kind: str
    ) -> AttendanceException | None:
        result = await self.db.execute(
            select(AttendanceException).where(
                AttendanceException.employee_id == employee_id,
                AttendanceException.date == day,
                AttendanceException.kind == kind,
                AttendanceException.resolved_at.is_(None),
            ).limit(1)
        )
        return result.scalar_one_or_none()

    async def insert(self, exception: AttendanceException) -> AttendanceException:
        """Flushes the new row; raises IntegrityError if an unresolved twin exists."""
        self.db.add(exception)
        await self.db.flush()
        return exception

    async def list_by_company(
        self, company_id: uuid.UUID, unresolved_only: bool = False
    ) -> Sequence[AttendanceException]:
        query = (
            select(AttendanceException)
            .join(Employee, Employee.id == AttendanceException.employee_id)
            .where(Employee.company_id == company_id)
        )
        if unresolved_only:
            query = query.where(AttendanceException.resolved_at.is_(None))
        result = await self.db.execute(
            query.order_by(AttendanceException.date.desc(), AttendanceException.created_at.desc())
        )
        return result.scalars().all()

    async def count_by_company(self, company_id: uuid.UUID) -> int:
        result = await self.db.execute(
            select(func.count(AttendanceException.id))
            .join(Employee, Employee.id == AttendanceException.employee_id)
            .where(Employee.company_id == company_id)
        )
        return result.scalar() or 0
