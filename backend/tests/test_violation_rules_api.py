"""
Tests for /api/v1/violation-rules and /api/v1/violations.
"""
import uuid
from decimal import Decimal

import pytest

from tests.conftest import create_rule

RULES_URL = "/api/v1/violation-rules"
VIOLATIONS_URL = "/api/v1/violations"


def rule_payload(company_id, code="late", penalty=5):
    return {
        "company_id": str(company_id),
        "code": code,
        "name": "Late arrival",
        "penalty_percent": penalty,
        "auto_detectable": True,
    }


# ── Rules ─────────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_and_list_rules(client, company):
    resp = await client.post(RULES_URL, json=rule_payload(company.id))
    assert resp.status_code == 201
    data = resp.json()
    assert data["code"] == "late"
    assert Decimal(data["penalty_percent"]) == Decimal("5")

    resp = await client.get(f"/api/v1/companies/{company.id}/violation-rules")
    assert resp.status_code == 200
    assert [r["code"] for r in resp.json()] == ["late"]


@pytest.mark.asyncio
async def test_duplicate_code_rejected(client, company):
    await client.post(RULES_URL, json=rule_payload(company.id))
    resp = await client.post(RULES_URL, json=rule_payload(company.id, code="LATE"))
    assert resp.status_code == 400
    assert "already exists" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_negative_penalty_rejected(client, company):
    resp = await client.post(RULES_URL, json=rule_payload(company.id, penalty=-1))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_rule_for_unknown_company(client):
    resp = await client.post(RULES_URL, json=rule_payload(uuid.uuid4()))
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_and_delete_rule(client, db, company):
    rule = await create_rule(db, company, "late")

    resp = await client.put(f"{RULES_URL}/{rule.id}", json={"is_active": False, "penalty_percent": 7})
    assert resp.status_code == 200
    assert resp.json()["is_active"] is False
    assert Decimal(resp.json()["penalty_percent"]) == Decimal("7")

    resp = await client.delete(f"{RULES_URL}/{rule.id}")
    assert resp.status_code == 204

    resp = await client.put(f"{RULES_URL}/{rule.id}", json={"name": "gone"})
    assert resp.status_code == 404


# ── Violations + ratings ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_manual_violation_updates_rating(client, db, company, employee):
    rule = await create_rule(db, company, "late", penalty="5")

    resp = await client.post(VIOLATIONS_URL, json={
        "employee_id": str(employee.id),
        "company_id": str(company.id),
        "rule_id": str(rule.id),
        "reason": "Came in at 09:40",
    })
    assert resp.status_code == 201
    assert resp.json()["source"] == "manual"
    violation_id = resp.json()["id"]

    resp = await client.post(f"/api/v1/employees/{employee.id}/rating/recalculate", json={})
    assert resp.status_code == 200
    assert Decimal(resp.json()["rating"]) == Decimal("95")
    assert resp.json()["status"] == "active"

    resp = await client.get(f"/api/v1/employees/{employee.id}/violations")
    assert [v["id"] for v in resp.json()] == [violation_id]

    resp = await client.delete(f"{VIOLATIONS_URL}/{violation_id}")
    assert resp.status_code == 204

    resp = await client.get(f"/api/v1/companies/{company.id}/ratings")
    assert Decimal(resp.json()[0]["rating"]) == Decimal("100")


@pytest.mark.asyncio
async def test_violation_rule_of_other_company_rejected(client, db, company, employee):
    from tests.conftest import create_company
    other = await create_company(db, "Other")
    rule = await create_rule(db, other, "late")

    resp = await client.post(VIOLATIONS_URL, json={
        "employee_id": str(employee.id),
        "company_id": str(company.id),
        "rule_id": str(rule.id),
    })
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_rating_periods(client):
    resp = await client.get("/api/v1/ratings/periods")
    assert resp.status_code == 200
    assert [p["id"] for p in resp.json()] == ["current", "last", "quarter", "year"]
