"""
Tests for RatingService – rule registry, manual violations and the rating calculation.
"""
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.core.exceptions import NotFoundError, ValidationError
from app.models.employee import Employee
from app.models.violation import EmployeeRating, Violation
from app.services.rating_service import RatingService, rating_status, calculate_rating
from app.utils.periods import month_period
from tests.conftest import create_rule, create_company, create_employee


# ── Pure helpers ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("rating,expected", [
    (Decimal("100"), "active"),
    (Decimal("80"), "active"),
    (Decimal("79.99"), "warning"),
    (Decimal("50"), "warning"),
    (Decimal("30.01"), "warning"),
    (Decimal("30"), "terminated"),
    (Decimal("0"), "terminated"),
])
def test_rating_status_boundaries(rating, expected):
    assert rating_status(rating) == expected


def test_calculate_rating_is_bounded():
    assert calculate_rating([]) == Decimal("100")
    assert calculate_rating([Decimal("5"), Decimal("10")]) == Decimal("85")
    assert calculate_rating([Decimal("60"), Decimal("70")]) == Decimal("0")


# ── Rule registry ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_rule_rejects_duplicate_code_case_insensitive(repos, company):
    svc = RatingService(repos)
    await svc.create_violation_rule(company.id, "late", "Late", Decimal("5"))

    with pytest.raises(ValidationError):
        await svc.create_violation_rule(company.id, "  LATE ", "Late again", Decimal("3"))


@pytest.mark.asyncio
async def test_same_code_allowed_in_other_company(db, repos, company):
    other = await create_company(db, "Other")
    svc = RatingService(repos)
    await svc.create_violation_rule(company.id, "late", "Late", Decimal("5"))
    rule = await svc.create_violation_rule(other.id, "late", "Late", Decimal("5"))
    assert rule.company_id == other.id


@pytest.mark.asyncio
async def test_update_rule_rejects_duplicate_code(db, repos, company):
    await create_rule(db, company, "late")
    early = await create_rule(db, company, "early_end")
    svc = RatingService(repos)

    with pytest.raises(ValidationError):
        await svc.update_violation_rule(early.id, code="Late")


@pytest.mark.asyncio
async def test_create_rule_unknown_company(repos):
    import uuid
    with pytest.raises(NotFoundError):
        await RatingService(repos).create_violation_rule(uuid.uuid4(), "late", "Late", Decimal("5"))


@pytest.mark.asyncio
async def test_get_active_rule_by_code(db, repos, company):
    await create_rule(db, company, "late", is_active=False)
    svc = RatingService(repos)
    assert await svc.get_active_rule_by_code(company.id, "late") is None

    await create_rule(db, company, "missed_shift")
    rule = await svc.get_active_rule_by_code(company.id, "MISSED_SHIFT")
    assert rule is not None and rule.code == "missed_shift"


# ── Rating calculation ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_manual_violation_lowers_rating(db, repos, company, employee):
    rule = await create_rule(db, company, "late", penalty="5")
    svc = RatingService(repos)

    violation = await svc.create_violation(employee.id, company.id, rule.id, reason="Came late")
    assert violation.source == "manual"
    assert violation.penalty == Decimal("5")

    result = await svc.recalculate_employee_rating(employee.id)
    assert result.rating == Decimal("95")
    assert result.status == "active"
    assert result.violations_count == 1


@pytest.mark.asyncio
async def test_explicit_penalty_overrides_rule(db, repos, company, employee):
    rule = await create_rule(db, company, "late", penalty="5")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, rule.id, penalty=Decimal("12"))

    result = await svc.recalculate_employee_rating(employee.id)
    assert result.rating == Decimal("88")


@pytest.mark.asyncio
async def test_violation_company_mismatch_rejected(db, repos, company, employee):
    other = await create_company(db, "Other")
    rule = await create_rule(db, other, "late")
    with pytest.raises(ValidationError):
        await RatingService(repos).create_violation(employee.id, company.id, rule.id)


@pytest.mark.asyncio
async def test_scenario_termination_at_25(db, repos, company, employee):
    """Penalties totalling 75% → rating 25 → employee terminated."""
    rule = await create_rule(db, company, "misconduct", penalty="25")
    svc = RatingService(repos)
    for _ in range(3):
        await svc.create_violation(employee.id, company.id, rule.id)

    result = await svc.recalculate_employee_rating(employee.id)
    assert result.rating == Decimal("25")
    assert result.status == "terminated"
    assert result.is_blocked

    stored = await db.get(Employee, employee.id)
    await db.refresh(stored)
    assert stored.status == "terminated"


@pytest.mark.asyncio
async def test_rating_never_below_zero(db, repos, company, employee):
    rule = await create_rule(db, company, "misconduct", penalty="60")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, rule.id)
    await svc.create_violation(employee.id, company.id, rule.id)

    result = await svc.recalculate_employee_rating(employee.id)
    assert result.rating == Decimal("0")


@pytest.mark.asyncio
async def test_termination_is_not_reverted(db, repos, company, employee):
    rule = await create_rule(db, company, "misconduct", penalty="40")
    svc = RatingService(repos)
    first = await svc.create_violation(employee.id, company.id, rule.id)
    await svc.create_violation(employee.id, company.id, rule.id)
    assert (await svc.recalculate_employee_rating(employee.id)).status == "terminated"

    await svc.delete_violation(first.id)
    result = await svc.recalculate_employee_rating(employee.id)
    assert result.rating == Decimal("60")
    assert result.status == "warning"

    stored = await db.get(Employee, employee.id)
    await db.refresh(stored)
    assert stored.status == "terminated"


@pytest.mark.asyncio
async def test_deactivated_rule_excluded_but_violation_kept(db, repos, company, employee):
    late = await create_rule(db, company, "late", penalty="5")
    missed = await create_rule(db, company, "missed_shift", penalty="20")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, late.id)
    await svc.create_violation(employee.id, company.id, missed.id)
    assert (await svc.recalculate_employee_rating(employee.id)).rating == Decimal("75")

    await svc.update_violation_rule(missed.id, is_active=False)
    result = await svc.recalculate_employee_rating(employee.id)
    assert result.rating == Decimal("95")

    rows = (await db.execute(select(Violation).where(Violation.employee_id == employee.id))).scalars().all()
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_recalculation_is_idempotent(db, repos, company, employee):
    rule = await create_rule(db, company, "late", penalty="5")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, rule.id)

    first = await svc.recalculate_employee_rating(employee.id)
    second = await svc.recalculate_employee_rating(employee.id)
    assert first.rating == second.rating == Decimal("95")

    period_start, period_end = month_period()
    rows = (await db.execute(
        select(EmployeeRating).where(
            EmployeeRating.employee_id == employee.id,
            EmployeeRating.period_start == period_start,
            EmployeeRating.period_end == period_end,
        )
    )).scalars().all()
    assert len(rows) == 1


@pytest.mark.asyncio
async def test_violations_outside_period_ignored(db, repos, company, employee):
    rule = await create_rule(db, company, "late", penalty="5")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, rule.id)

    result = await svc.recalculate_employee_rating(employee.id, date(2001, 1, 1), date(2001, 1, 31))
    assert result.rating == Decimal("100")
    assert result.violations_count == 0


@pytest.mark.asyncio
async def test_update_violation_penalty_recalculates(db, repos, company, employee):
    rule = await create_rule(db, company, "late", penalty="5")
    svc = RatingService(repos)
    violation = await svc.create_violation(employee.id, company.id, rule.id)

    await svc.update_violation(violation.id, penalty=Decimal("15"))
    rating = await svc.get_employee_rating(employee.id)
    assert rating.rating == Decimal("85")


@pytest.mark.asyncio
async def test_delete_rule_removes_its_violations(db, repos, company, employee):
    rule = await create_rule(db, company, "late", penalty="10")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, rule.id)

    await svc.delete_violation_rule(rule.id)
    assert await svc.list_violations(employee.id) == []
    rating = await svc.get_employee_rating(employee.id)
    assert rating.rating == Decimal("100")


@pytest.mark.asyncio
async def test_recalculate_company_ratings(db, repos, company, employee):
    second = await create_employee(db, company, full_name="Second Employee")
    rule = await create_rule(db, company, "late", penalty="5")
    svc = RatingService(repos)
    await svc.create_violation(employee.id, company.id, rule.id)

    results = await svc.recalculate_company_ratings(company.id)
    by_employee = {r.employee_id: r.rating for r in results}
    assert by_employee == {employee.id: Decimal("95"), second.id: Decimal("100")}

    ratings = await svc.get_company_ratings(company.id, *month_period())
    assert len(ratings) == 2


@pytest.mark.asyncio
async def test_reversed_period_rejected(repos, employee):
    with pytest.raises(ValidationError):
        await RatingService(repos).recalculate_employee_rating(employee.id, date(2025, 2, 1), date(2025, 1, 1))


@pytest.mark.asyncio
async def test_delete_rule_recalculates_past_periods(db, repos, company, employee):
    employee_id = employee.id
    rule = await create_rule(db, company, "misconduct", penalty="40")
    svc = RatingService(repos)
    violation = await svc.create_violation(employee_id, company.id, rule.id)

    last_start, last_end = month_period(month_period()[0] - timedelta(days=1))
    violation.created_at = datetime(last_start.year, last_start.month, 15, 12, 0, tzinfo=timezone.utc)
    await db.commit()
    past = await svc.recalculate_employee_rating(employee_id, last_start, last_end)
    assert past.rating == Decimal("60")

    await svc.delete_violation_rule(rule.id)

    stored = await svc.get_employee_rating(employee_id, last_start, last_end)
    assert stored.rating == Decimal("100")
    assert stored.status == "active"
