import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from app.api.deps import Ratings
from app.models.violation import SOURCE_MANUAL
from app.schemas.violation import ViolationCreate, ViolationUpdate, ViolationOut

router = APIRouter(tags=["violations"])


@router.post("/violations", response_model=ViolationOut, status_code=status.HTTP_201_CREATED)
async def create_violation(payload: ViolationCreate, service: Ratings):
    return await service.create_violation(source=SOURCE_MANUAL, **payload.model_dump())


@router.get("/employees/{employee_id}/violations", response_model=list[ViolationOut])
async def list_violations(
    employee_id: uuid.UUID,
    service: Ratings,
    period_start: date | None = Query(None),
    period_end: date | None = Query(None),
):
    return await service.list_violations(employee_id, period_start, period_end)


@router.put("/violations/{violation_id}", response_model=ViolationOut)
async def update_violation(violation_id: uuid.UUID, payload: ViolationUpdate, service: Ratings):
    return await service.update_violation(violation_id, **payload.model_dump(exclude_unset=True))


@router.delete("/violations/{violation_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_violation(violation_id: uuid.UUID, service: Ratings):
    await service.delete_violation(violation_id)
