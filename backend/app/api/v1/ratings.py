import uuid
from datetime import date

from fastapi import APIRouter, Query

from app.api.deps import Ratings
from app.schemas.rating import RatingPeriodOut, RatingRecalculate, RatingResultOut, EmployeeRatingOut
from app.utils.periods import rating_periods

router = APIRouter(tags=["ratings"])


@router.get("/ratings/periods", response_model=list[RatingPeriodOut])
async def list_periods():
    return rating_periods()


@router.get("/companies/{company_id}/ratings", response_model=list[EmployeeRatingOut])
async def list_company_ratings(
    company_id: uuid.UUID,
    service: Ratings,
    period_start: date | None = Query(None),
    period_end: date | None = Query(None),
):
    return await service.get_company_ratings(company_id, period_start, period_end)


@router.post("/companies/{company_id}/ratings/recalculate", response_model=list[RatingResultOut])
async def recalculate_company(company_id: uuid.UUID, service: Ratings, payload: RatingRecalculate | None = None):
    payload = payload or RatingRecalculate()
    return await service.recalculate_company_ratings(company_id, payload.period_start, payload.period_end)


@router.post("/employees/{employee_id}/rating/recalculate", response_model=RatingResultOut)
async def recalculate_employee(employee_id: uuid.UUID, service: Ratings, payload: RatingRecalculate | None = None):
    payload = payload or RatingRecalculate()
    return await service.recalculate_employee_rating(employee_id, payload.period_start, payload.period_end)
