import uuid
from typing import Protocol, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.company import Company


class CompanyRepository(Protocol):
    async def get(self, company_id: uuid.UUID) -> Company | None: ...

    async def list_all(self) -> Sequence[Company]: ...


class SqlCompanyRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, company_id: uuid.UUID) -> Company | None:
        return await self.db.get(Company, company_id)

    async def list_all(self) -> Sequence[Company]:
        result = await self.db.execute(
            select(Company).order_by(Company.created_at)
        )
        return result.scalars().all()
