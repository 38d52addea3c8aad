"""
Tests for shift actions, monitoring runs and the exception ledger over HTTP.
"""
import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select, func

from app.models.attendance_exception import AttendanceException
from app.models.violation import Violation, EmployeeRating
from tests.conftest import create_rule, create_shift, add_work, create_employee, recent_base


# ── Shift actions ─────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_shift_flow_over_http(client, db, employee):
    shift = await create_shift(db, employee, recent_base())

    resp = await client.post("/api/v1/shifts/start", json={"shift_id": str(shift.id)})
    assert resp.status_code == 200
    assert resp.json()["status"] == "active"

    resp = await client.post(f"/api/v1/shifts/{shift.id}/breaks/start", json={"type": "lunch"})
    assert resp.status_code == 201

    resp = await client.post(f"/api/v1/shifts/{shift.id}/breaks/start")
    assert resp.status_code == 409

    resp = await client.post(f"/api/v1/shifts/{shift.id}/breaks/end")
    assert resp.status_code == 200
    assert resp.json()["end_at"] is not None

    resp = await client.post(f"/api/v1/shifts/{shift.id}/end")
    assert resp.status_code == 200
    assert resp.json()["status"] == "completed"

    resp = await client.get(f"/api/v1/shifts/{shift.id}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["shift"]["status"] == "completed"
    assert len(body["work_intervals"]) == 2
    assert len(body["break_intervals"]) == 1


@pytest.mark.asyncio
async def test_start_shift_requires_target(client):
    resp = await client.post("/api/v1/shifts/start", json={})
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_unknown_shift_404(client):
    resp = await client.post(f"/api/v1/shifts/{uuid.uuid4()}/end")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_employee_lookup_by_telegram(client, db, company):
    emp = await create_employee(db, company, telegram_user_id="998877")
    resp = await client.get("/api/v1/employees/by-telegram/998877")
    assert resp.status_code == 200
    assert resp.json()["id"] == str(emp.id)

    resp = await client.get("/api/v1/employees/by-telegram/000")
    assert resp.status_code == 404


# ── Monitoring + exceptions ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_company_monitoring_run_and_resolve(client, db, company, employee):
    await create_rule(db, company, "late", penalty="5")
    base = recent_base()
    shift = await create_shift(db, employee, base, status="active")
    await add_work(db, shift, base + timedelta(minutes=20))

    resp = await client.post(f"/api/v1/companies/{company.id}/monitoring/run")
    assert resp.status_code == 200
    assert resp.json() == {"violations_found": 1, "exceptions_created": 1}

    resp = await client.post(f"/api/v1/companies/{company.id}/monitoring/run")
    assert resp.json() == {"violations_found": 1, "exceptions_created": 0}

    resp = await client.get(f"/api/v1/companies/{company.id}/exceptions", params={"unresolved_only": True})
    exceptions = resp.json()
    assert len(exceptions) == 1
    assert exceptions[0]["kind"] == "late_start"
    assert exceptions[0]["violation_id"] is not None

    resp = await client.post(f"/api/v1/exceptions/{exceptions[0]['id']}/resolve")
    assert resp.status_code == 200
    assert resp.json()["resolved_at"] is not None

    resp = await client.get(f"/api/v1/companies/{company.id}/exceptions", params={"unresolved_only": True})
    assert resp.json() == []


@pytest.mark.asyncio
async def test_global_monitoring_run(client, db, company):
    resp = await client.post("/api/v1/monitoring/run")
    assert resp.status_code == 200
    assert resp.json() == {"companies_processed": 1, "total_violations": 0, "total_exceptions": 0}


@pytest.mark.asyncio
async def test_monitoring_unknown_company_404(client):
    resp = await client.post(f"/api/v1/companies/{uuid.uuid4()}/monitoring/run")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_resolve_unknown_exception_404(client):
    resp = await client.post(f"/api/v1/exceptions/{uuid.uuid4()}/resolve")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/health")
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_violation_preview_writes_nothing(client, db, company, employee):
    await create_rule(db, company, "late", penalty="5")
    base = recent_base()
    shift = await create_shift(db, employee, base, status="active")
    await add_work(db, shift, base + timedelta(minutes=20))

    resp = await client.get(f"/api/v1/companies/{company.id}/violations")
    assert resp.status_code == 200
    preview = resp.json()
    assert len(preview) == 1
    assert preview[0]["type"] == "late_start"
    assert preview[0]["shift_id"] == str(shift.id)
    assert preview[0]["employee_id"] == str(employee.id)
    assert preview[0]["severity"] == 1
    assert preview[0]["details"]["minutesLate"] == 20

    assert await db.scalar(select(func.count()).select_from(AttendanceException)) == 0
    assert await db.scalar(select(func.count()).select_from(Violation)) == 0
    assert await db.scalar(select(func.count()).select_from(EmployeeRating)) == 0


@pytest.mark.asyncio
async def test_violation_preview_unknown_company_404(client):
    resp = await client.get(f"/api/v1/companies/{uuid.uuid4()}/violations")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_metrics_exposed(client, db, company):
    await client.post(f"/api/v1/companies/{company.id}/monitoring/run")

    resp = await client.get("/metrics")
    assert resp.status_code == 200
    assert "shiftwatch_monitoring_runs_total" in resp.text
    assert "shiftwatch_monitoring_duration_seconds_count" in resp.text
