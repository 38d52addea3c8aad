"""
Rating service – violation rule registry, manual violations and the
per-period employee rating.

rating = max(0, 100 - sum of penalties of violations whose rule is active)

  rating >= 80        → active
  30 < rating < 80    → warning
  rating <= 30        → terminated (blocked)

Termination is the only status pushed to the employee record, and it is never
reverted automatically.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Sequence

from app.core.exceptions import NotFoundError, ValidationError
from app.models.employee import Employee, EMPLOYEE_ACTIVE, EMPLOYEE_WARNING, EMPLOYEE_TERMINATED
from app.models.violation import ViolationRule, Violation, EmployeeRating, SOURCE_MANUAL
from app.repositories import Repositories
from app.utils.periods import utcnow, ensure_utc, month_period, period_bounds

logger = logging.getLogger(__name__)

MAX_RATING = Decimal("100")
ACTIVE_THRESHOLD = Decimal("80")
BLOCK_THRESHOLD = Decimal("30")


@dataclass
class RatingResult:
    employee_id: uuid.UUID
    period_start: date
    period_end: date
    rating: Decimal
    status: str
    violations_count: int
    is_blocked: bool


def rating_status(rating: Decimal) -> str:
    if rating >= ACTIVE_THRESHOLD:
        return EMPLOYEE_ACTIVE
    if rating > BLOCK_THRESHOLD:
        return EMPLOYEE_WARNING
    return EMPLOYEE_TERMINATED


def calculate_rating(penalties: Sequence[Decimal]) -> Decimal:
    total = sum((Decimal(p) for p in penalties), Decimal("0"))
    return max(Decimal("0"), MAX_RATING - total)


class RatingService:

    def __init__(self, repos: Repositories):
        self.repos = repos

    # ── Rule registry ────────────────────────────────────────────────────────

    async def list_violation_rules(self, company_id: uuid.UUID) -> Sequence[ViolationRule]:
        return await self.repos.rules.list_by_company(company_id)

    async def get_active_rule_by_code(self, company_id: uuid.UUID, code: str) -> ViolationRule | None:
        return await self.repos.rules.find_active_by_code(company_id, code)

    async def create_violation_rule(
        self,
        company_id: uuid.UUID,
        code: str,
        name: str,
        penalty_percent: Decimal,
        auto_detectable: bool = False,
        is_active: bool = True,
    ) -> ViolationRule:
        if await self.repos.companies.get(company_id) is None:
            raise NotFoundError("Company")
        code = _normalize_code(code)
        if await self.repos.rules.find_by_code(company_id, code) is not None:
            raise ValidationError(f"Violation rule with code '{code}' already exists")

        rule = ViolationRule(
            company_id=company_id,
            code=code,
            name=name.strip(),
            penalty_percent=Decimal(penalty_percent),
            auto_detectable=auto_detectable,
            is_active=is_active,
        )
        await self.repos.rules.add(rule)
        await self.repos.commit()
        logger.info("Violation rule '%s' created for company %s", code, company_id)
        return rule

    async def update_violation_rule(self, rule_id: uuid.UUID, **changes) -> ViolationRule:
        """Apply the given fields. A deactivated rule drops out of later recalculations."""
        rule = await self.repos.rules.get(rule_id)
        if rule is None:
            raise NotFoundError("Violation rule")

        if changes.get("code") is not None:
            code = _normalize_code(changes["code"])
            if await self.repos.rules.find_by_code(rule.company_id, code, exclude_id=rule.id) is not None:
                raise ValidationError(f"Violation rule with code '{code}' already exists")
            rule.code = code
        if changes.get("name") is not None:
            rule.name = changes["name"].strip()
        if changes.get("penalty_percent") is not None:
            rule.penalty_percent = Decimal(changes["penalty_percent"])
        if changes.get("auto_detectable") is not None:
            rule.auto_detectable = changes["auto_detectable"]
        if changes.get("is_active") is not None:
            rule.is_active = changes["is_active"]

        await self.repos.commit()
        logger.info("Violation rule %s updated (%s)", rule_id, ", ".join(sorted(changes)))
        return rule

    async def delete_violation_rule(self, rule_id: uuid.UUID) -> None:
        """
        Delete a rule together with its violations.

        Every stored rating period of the affected employees is recalculated,
        plus the current month.
        """
        rule = await self.repos.rules.get(rule_id)
        if rule is None:
            raise NotFoundError("Violation rule")

        employee_ids = list(await self.repos.violations.employees_for_rule(rule_id))
        removed = await self.repos.violations.delete_for_rule(rule_id)
        await self.repos.rules.delete(rule)

        for employee_id in employee_ids:
            periods = {(r.period_start, r.period_end) for r in await self.repos.ratings.list_by_employee(employee_id)}
            periods.add(month_period())
            for period_start, period_end in sorted(periods):
                await self.calculate_and_store(employee_id, period_start, period_end)
        await self.repos.commit()
        logger.info("Violation rule %s deleted with %d violation(s)", rule_id, removed)

    # ── Violations ───────────────────────────────────────────────────────────

    async def create_violation(
        self,
        employee_id: uuid.UUID,
        company_id: uuid.UUID,
        rule_id: uuid.UUID,
        source: str = SOURCE_MANUAL,
        reason: str | None = None,
        penalty: Decimal | None = None,
        created_by: uuid.UUID | None = None,
    ) -> Violation:
        employee = await self._get_employee(employee_id)
        rule = await self.repos.rules.get(rule_id)
        if rule is None:
            raise NotFoundError("Violation rule")
        if employee.company_id != company_id or rule.company_id != company_id:
            raise ValidationError("Employee and rule must belong to the same company")

        violation = Violation(
            employee_id=employee.id,
            company_id=company_id,
            rule_id=rule.id,
            source=source,
            reason=reason,
            penalty=Decimal(penalty) if penalty is not None else rule.penalty_percent,
            created_by=created_by,
        )
        await self.repos.violations.add(violation)

        period_start, period_end = month_period(ensure_utc(violation.created_at).date())
        await self.calculate_and_store(employee.id, period_start, period_end)
        await self.repos.commit()
        logger.info(
            "Violation %s (%s, rule %s) recorded for employee %s",
            violation.id, source, rule.code, employee_id,
        )
        return violation

    async def update_violation(
        self,
        violation_id: uuid.UUID,
        reason: str | None = None,
        penalty: Decimal | None = None,
        rule_id: uuid.UUID | None = None,
    ) -> Violation:
        violation = await self.repos.violations.get(violation_id)
        if violation is None:
            raise NotFoundError("Violation")

        if rule_id is not None and rule_id != violation.rule_id:
            rule = await self.repos.rules.get(rule_id)
            if rule is None:
                raise NotFoundError("Violation rule")
            if rule.company_id != violation.company_id:
                raise ValidationError("Rule belongs to a different company")
            violation.rule_id = rule.id
        if reason is not None:
            violation.reason = reason
        if penalty is not None:
            violation.penalty = Decimal(penalty)

        await self.repos.db.flush()
        period_start, period_end = month_period(ensure_utc(violation.created_at).date())
        await self.calculate_and_store(violation.employee_id, period_start, period_end)
        await self.repos.commit()
        return violation

    async def delete_violation(self, violation_id: uuid.UUID) -> None:
        violation = await self.repos.violations.get(violation_id)
        if violation is None:
            raise NotFoundError("Violation")

        employee_id = violation.employee_id
        period_start, period_end = month_period(ensure_utc(violation.created_at).date())
        await self.repos.violations.delete(violation)
        await self.calculate_and_store(employee_id, period_start, period_end)
        await self.repos.commit()
        logger.info("Violation %s deleted", violation_id)

    async def list_violations(
        self,
        employee_id: uuid.UUID,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> Sequence[Violation]:
        await self._get_employee(employee_id)
        if period_start is None or period_end is None:
            return await self.repos.violations.list_by_employee(employee_id)
        lower, upper = period_bounds(period_start, period_end)
        return await self.repos.violations.list_by_employee(employee_id, lower, upper)

    # ── Ratings ──────────────────────────────────────────────────────────────

    async def calculate_and_store(
        self, employee_id: uuid.UUID, period_start: date, period_end: date
    ) -> RatingResult:
        """Recompute and upsert the rating without committing."""
        employee = await self._get_employee(employee_id)
        lower, upper = period_bounds(period_start, period_end)
        rows = await self.repos.violations.list_with_rules(employee.id, lower, upper)

        penalties = [v.penalty for v, rule in rows if rule is not None and rule.is_active]
        rating = calculate_rating(penalties)
        status = rating_status(rating)

        stored = await self.repos.ratings.find(employee.id, period_start, period_end)
        if stored is None:
            stored = EmployeeRating(
                employee_id=employee.id,
                company_id=employee.company_id,
                period_start=period_start,
                period_end=period_end,
            )
            stored.rating = rating
            stored.status = status
            await self.repos.ratings.add(stored)
        else:
            stored.rating = rating
            stored.status = status
            stored.updated_at = utcnow()

        is_blocked = rating <= BLOCK_THRESHOLD
        if is_blocked and employee.status != EMPLOYEE_TERMINATED:
            await self.repos.employees.set_status(employee, EMPLOYEE_TERMINATED)
            logger.warning(
                "Employee %s terminated: rating %s for %s..%s",
                employee.id, rating, period_start, period_end,
            )

        logger.info(
            "Rating for employee %s (%s..%s): %s from %d violation(s)",
            employee.id, period_start, period_end, rating, len(penalties),
        )
        return RatingResult(
            employee_id=employee.id,
            period_start=period_start,
            period_end=period_end,
            rating=rating,
            status=status,
            violations_count=len(penalties),
            is_blocked=is_blocked,
        )

    async def recalculate_employee_rating(
        self,
        employee_id: uuid.UUID,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> RatingResult:
        period_start, period_end = _resolve_period(period_start, period_end)
        result = await self.calculate_and_store(employee_id, period_start, period_end)
        await self.repos.commit()
        return result

    async def recalculate_company_ratings(
        self,
        company_id: uuid.UUID,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> list[RatingResult]:
        if await self.repos.companies.get(company_id) is None:
            raise NotFoundError("Company")
        period_start, period_end = _resolve_period(period_start, period_end)

        employee_ids = [e.id for e in await self.repos.employees.list_by_company(company_id)]
        results = [
            await self.calculate_and_store(employee_id, period_start, period_end)
            for employee_id in employee_ids
        ]
        await self.repos.commit()
        logger.info(
            "Recalculated %d rating(s) for company %s (%s..%s)",
            len(results), company_id, period_start, period_end,
        )
        return results

    async def get_company_ratings(
        self,
        company_id: uuid.UUID,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> Sequence[EmployeeRating]:
        return await self.repos.ratings.list_by_company(company_id, period_start, period_end)

    async def get_employee_rating(
        self,
        employee_id: uuid.UUID,
        period_start: date | None = None,
        period_end: date | None = None,
    ) -> EmployeeRating | None:
        period_start, period_end = _resolve_period(period_start, period_end)
        return await self.repos.ratings.find(employee_id, period_start, period_end)

    async def _get_employee(self, employee_id: uuid.UUID) -> Employee:
        employee = await self.repos.employees.get(employee_id)
        if employee is None:
            raise NotFoundError("Employee")
        return employee


def _normalize_code(code: str) -> str:
    code = code.strip().lower()
    if not code:
        raise ValidationError("Rule code must not be empty")
    return code


def _resolve_period(period_start: date | None, period_end: date | None) -> tuple[date, date]:
    if period_start is None or period_end is None:
        return month_period()
    if period_end < period_start:
        raise ValidationError("period_end must not be before period_start")
    return period_start, period_end
