import uuid

from fastapi import APIRouter, Query

from app.api.deps import Exceptions
from app.schemas.exception import AttendanceExceptionOut

router = APIRouter(tags=["exceptions"])


@router.get("/companies/{company_id}/exceptions", response_model=list[AttendanceExceptionOut])
async def list_exceptions(
    company_id: uuid.UUID,
    service: Exceptions,
    unresolved_only: bool = Query(False),
):
    return await service.list_exceptions(company_id, unresolved_only)


@router.post("/exceptions/{exception_id}/resolve", response_model=AttendanceExceptionOut)
async def resolve_exception(exception_id: uuid.UUID, service: Exceptions):
    return await service.resolve_exception(exception_id)
