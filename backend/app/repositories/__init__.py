"""
Repository bundle handed to services (constructor injection).

All SQL repositories of one bundle share a single AsyncSession; the bundle
owns the unit of work (commit / rollback).
"""
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.repositories.companies import CompanyRepository, SqlCompanyRepository
from app.repositories.employees import EmployeeRepository, SqlEmployeeRepository
from app.repositories.exceptions import ExceptionRepository, SqlExceptionRepository
from app.repositories.notifications import NotificationLogRepository, SqlNotificationLogRepository
from app.repositories.shifts import ShiftRepository, SqlShiftRepository
from app.repositories.violations import (
    RatingRepository, SqlRatingRepository,
    SqlViolationRepository, SqlViolationRuleRepository,
    ViolationRepository, ViolationRuleRepository,
)


@dataclass
class Repositories:
    db: AsyncSession
    companies: CompanyRepository
    employees: EmployeeRepository
    shifts: ShiftRepository
    rules: ViolationRuleRepository
    violations: ViolationRepository
    ratings: RatingRepository
    exceptions: ExceptionRepository
    notifications: NotificationLogRepository

    @classmethod
    def from_session(cls, db: AsyncSession) -> "Repositories":
        return cls(
            db=db,
            companies=SqlCompanyRepository(db),
            employees=SqlEmployeeRepository(db),
            shifts=SqlShiftRepository(db),
            rules=SqlViolationRuleRepository(db),
            violations=SqlViolationRepository(db),
            ratings=SqlRatingRepository(db),
            exceptions=SqlExceptionRepository(db),
            notifications=SqlNotificationLogRepository(db),
        )

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()


__all__ = ["Repositories"]
