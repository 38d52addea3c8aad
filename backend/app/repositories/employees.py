import uuid
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.employee import Employee


class EmployeeRepository(Protocol):
    async def get(self, employee_id: uuid.UUID) -> Employee | None: ...

    async def get_by_telegram_id(self, telegram_user_id: str) -> Employee | None: ...

    async def list_by_company(self, company_id: uuid.UUID) -> Sequence[Employee]: ...

    async def set_status(self, employee: Employee, status: str) -> None: ...


class SqlEmployeeRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, employee_id: uuid.UUID) -> Employee | None:
        return await self.db.get(Employee, employee_id)

    async def get_by_telegram_id(self, telegram_user_id: str) -> Employee | None:
        result = await self.db.execute(
            select(Employee).where(Employee.telegram_user_id == telegram_user_id)
        )
        return result.scalar_one_or_none()

    async def list_by_company(self, company_id: uuid.UUID) -> Sequence[Employee]:
        result = await self.db.execute(
            select(Employee).where(Employee.company_id == company_id).order_by(Employee.full_name)
        )
        return result.scalars().all()

    async def set_status(self, employee: Employee, status: str) -> None:
        employee.status = status
        await self.db.flush()
