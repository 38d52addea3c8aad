import uuid

from fastapi import APIRouter, HTTPException, status

from app.api.deps import Shifts
from app.schemas.shift import ShiftStart, BreakStart, ShiftOut, ShiftDetailOut, BreakIntervalOut

router = APIRouter(prefix="/shifts", tags=["shifts"])


@router.post("/start", response_model=ShiftOut)
async def start_shift(payload: ShiftStart, service: Shifts):
    if payload.shift_id is None and payload.employee_id is None:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="shift_id or employee_id is required",
        )
    return await service.start_shift(
        shift_id=payload.shift_id,
        employee_id=payload.employee_id,
        source=payload.source,
    )


@router.get("/{shift_id}", response_model=ShiftDetailOut)
async def get_shift(shift_id: uuid.UUID, service: Shifts):
    return ShiftDetailOut.model_validate(await service.get_details(shift_id))


@router.post("/{shift_id}/end", response_model=ShiftOut)
async def end_shift(shift_id: uuid.UUID, service: Shifts):
    return await service.end_shift(shift_id)


@router.post("/{shift_id}/cancel", response_model=ShiftOut)
async def cancel_shift(shift_id: uuid.UUID, service: Shifts):
    return await service.cancel_shift(shift_id)


# ── Breaks ───────────────────────────────────────────────────────────────────

@router.post("/{shift_id}/breaks/start", response_model=BreakIntervalOut, status_code=status.HTTP_201_CREATED)
async def start_break(shift_id: uuid.UUID, service: Shifts, payload: BreakStart | None = None):
    payload = payload or BreakStart()
    return await service.start_break(shift_id, break_type=payload.type, source=payload.source)


@router.post("/{shift_id}/breaks/end", response_model=BreakIntervalOut)
async def end_break(shift_id: uuid.UUID, service: Shifts):
    return await service.end_break(shift_id)
