import uuid
from datetime import date, datetime
from typing import Protocol, Sequence

from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.attendance_exception import AttendanceException
from app.models.violation import ViolationRule, Violation, EmployeeRating


class ViolationRuleRepository(Protocol):
    async def get(self, rule_id: uuid.UUID) -> ViolationRule | None: ...

    async def list_by_company(self, company_id: uuid.UUID) -> Sequence[ViolationRule]: ...

    async def find_by_code(
        self, company_id: uuid.UUID, code: str, exclude_id: uuid.UUID | None = None
    ) -> ViolationRule | None: ...

    async def find_active_by_code(self, company_id: uuid.UUID, code: str) -> ViolationRule | None: ...

    async def add(self, rule: ViolationRule) -> ViolationRule: ...

    async def delete(self, rule: ViolationRule) -> None: ...


class ViolationRepository(Protocol):
    async def get(self, violation_id: uuid.UUID) -> Violation | None: ...

    async def add(self, violation: Violation) -> Violation: ...

    async def delete(self, violation: Violation) -> None: ...

    async def list_by_employee(
        self, employee_id: uuid.UUID, start: datetime | None = None, end: datetime | None = None
    ) -> Sequence[Violation]: ...

    async def list_with_rules(
        self, employee_id: uuid.UUID, start: datetime, end: datetime
    ) -> Sequence[tuple[Violation, ViolationRule | None]]: ...

    async def employees_for_rule(self, rule_id: uuid.UUID) -> Sequence[uuid.UUID]: ...

    async def delete_for_rule(self, rule_id: uuid.UUID) -> int: ...


class RatingRepository(Protocol):
    async def find(
        self, employee_id: uuid.UUID, period_start: date, period_end: date
    ) -> EmployeeRating | None: ...

    async def add(self, rating: EmployeeRating) -> EmployeeRating: ...

    async def list_by_employee(self, employee_id: uuid.UUID) -> Sequence[EmployeeRating]: ...

    async def list_by_company(
        self, company_id: uuid.UUID, period_start: date | None = None, period_end: date | None = None
    ) -> Sequence[EmployeeRating]: ...


class SqlViolationRuleRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, rule_id: uuid.UUID) -> ViolationRule | None:
        return await self.db.get(ViolationRule, rule_id)

    async def list_by_company(self, company_id: uuid.UUID) -> Sequence[ViolationRule]:
        result = await self.db.execute(
            select(ViolationRule).where(ViolationRule.company_id == company_id).order_by(ViolationRule.code)
        )
        return result.scalars().all()

    async def find_by_code(
        self, company_id: uuid.UUID, code: str, exclude_id: uuid.UUID | None = None
    ) -> ViolationRule | None:
        conditions = [
            ViolationRule.company_id == company_id,
            func.lower(ViolationRule.code) == code.strip().lower(),
        ]
        if exclude_id is not None:
            conditions.append(ViolationRule.id != exclude_id)
        result = await self.db.execute(select(ViolationRule).where(*conditions).limit(1))
        return result.scalar_one_or_none()

    async def find_active_by_code(self, company_id: uuid.UUID, code: str) -> ViolationRule | None:
        result = await self.db.execute(
            select(ViolationRule).where(
                ViolationRule.company_id == company_id,
                func.lower(ViolationRule.code) == code.lower(),
                ViolationRule.is_active == True,  # noqa: E712
            ).limit(1)
        )
        return result.scalar_one_or_none()

    async def add(self, rule: ViolationRule) -> ViolationRule:
        self.db.add(rule)
        await self.db.flush()
        return rule

    async def delete(self, rule: ViolationRule) -> None:
        await self.db.delete(rule)
        await self.db.flush()


class SqlViolationRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, violation_id: uuid.UUID) -> Violation | None:
        return await self.db.get(Violation, violation_id)

    async def add(self, violation: Violation) -> Violation:
        self.db.add(violation)
        await self.db.flush()
        return violation

    async def delete(self, violation: Violation) -> None:
        # SQLite does not enforce ON DELETE SET NULL unless foreign keys are enabled
        await self.db.execute(
            update(AttendanceException)
            .where(AttendanceException.violation_id == violation.id)
            .values(violation_id=None)
        )
        await self.db.delete(violation)
        await self.db.flush()

    async def list_by_employee(
        self, employee_id: uuid.UUID, start: datetime | None = None, end: datetime | None = None
    ) -> Sequence[Violation]:
        conditions = [Violation.employee_id == employee_id]
        if start is not None:
            conditions.append(Violation.created_at >= start)
        if end is not None:
            conditions.append(Violation.created_at < end)
        result = await self.db.execute(
            select(Violation).where(*conditions).order_by(Violation.created_at.desc())
        )
        return result.scalars().all()

    async def list_with_rules(
        self, employee_id: uuid.UUID, start: datetime, end: datetime
    ) -> Sequence[tuple[Violation, ViolationRule | None]]:
        result = await self.db.execute(
            select(Violation, ViolationRule)
            .outerjoin(ViolationRule, ViolationRule.id == Violation.rule_id)
            .where(
                Violation.employee_id == employee_id,
                Violation.created_at >= start,
                Violation.created_at < end,
            )
            .order_by(Violation.created_at)
        )
        return [(row[0], row[1]) for row in result.all()]

    async def employees_for_rule(self, rule_id: uuid.UUID) -> Sequence[uuid.UUID]:
        result = await self.db.execute(
            select(Violation.employee_id).where(Violation.rule_id == rule_id).distinct()
        )
        return result.scalars().all()

    async def delete_for_rule(self, rule_id: uuid.UUID) -> int:
        ids = select(Violation.id).where(Violation.rule_id == rule_id)
        await self.db.execute(
            update(AttendanceException)
            .where(AttendanceException.violation_id.in_(ids))
            .values(violation_id=None)
        )
        result = await self.db.execute(delete(Violation).where(Violation.rule_id == rule_id))
        return result.rowcount or 0


class SqlRatingRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(
        self, employee_id: uuid.UUID, period_start: date, period_end: date
    ) -> EmployeeRating | None:
        result = await self.db.execute(
            select(EmployeeRating).where(
                EmployeeRating.employee_id == employee_id,
                EmployeeRating.period_start == period_start,
                EmployeeRating.period_end == period_end,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, rating: EmployeeRating) -> EmployeeRating:
        self.db.add(rating)
        await self.db.flush()
        return rating

    async def list_by_employee(self, employee_id: uuid.UUID) -> Sequence[EmployeeRating]:
        result = await self.db.execute(
            select(EmployeeRating)
            .where(EmployeeRating.employee_id == employee_id)
            .order_by(EmployeeRating.period_start)
        )
        return result.scalars().all()

    async def list_by_company(
        self, company_id: uuid.UUID, period_start: date | None = None, period_end: date | None = None
    ) -> Sequence[EmployeeRating]:
        conditions = [EmployeeRating.company_id == company_id]
        if period_start is not None:
            conditions.append(EmployeeRating.period_start == period_start)
        if period_end is not None:
            conditions.append(EmployeeRating.period_end == period_end)
        result = await self.db.execute(
            select(EmployeeRating).where(*conditions).order_by(EmployeeRating.rating)
        )
        return result.scalars().all()
