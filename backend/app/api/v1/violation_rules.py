import uuid

from fastapi import APIRouter, status

from app.api.deps import Ratings
from app.schemas.violation import ViolationRuleCreate, ViolationRuleUpdate, ViolationRuleOut

router = APIRouter(tags=["violation-rules"])


@router.get("/companies/{company_id}/violation-rules", response_model=list[ViolationRuleOut])
async def list_rules(company_id: uuid.UUID, service: Ratings):
    return await service.list_violation_rules(company_id)


@router.post("/violation-rules", response_model=ViolationRuleOut, status_code=status.HTTP_201_CREATED)
async def create_rule(payload: ViolationRuleCreate, service: Ratings):
    return await service.create_violation_rule(**payload.model_dump())


@router.put("/violation-rules/{rule_id}", response_model=ViolationRuleOut)
async def update_rule(rule_id: uuid.UUID, payload: ViolationRuleUpdate, service: Ratings):
    return await service.update_violation_rule(rule_id, **payload.model_dump(exclude_unset=True))


@router.delete("/violation-rules/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rule(rule_id: uuid.UUID, service: Ratings):
    await service.delete_violation_rule(rule_id)
