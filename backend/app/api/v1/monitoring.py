import uuid

from fastapi import APIRouter, HTTPException, status

from app.api.deps import Detector, Monitor, Repos
from app.schemas.monitoring import CompanySweepOut, GlobalSweepOut, DetectedViolationOut

router = APIRouter(tags=["monitoring"])


async def _require_company(repos: Repos, company_id: uuid.UUID) -> None:
    if await repos.companies.get(company_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Company not found")


@router.get("/companies/{company_id}/violations", response_model=list[DetectedViolationOut])
async def preview_company_violations(company_id: uuid.UUID, detector: Detector, repos: Repos):
    """Runs detection only: no violation, exception or rating is written."""
    await _require_company(repos, company_id)
    return [DetectedViolationOut.model_validate(v) for v in await detector.detect_for_company(company_id)]


@router.post("/companies/{company_id}/monitoring/run", response_model=CompanySweepOut)
async def run_company_monitoring(company_id: uuid.UUID, monitor: Monitor, repos: Repos):
    await _require_company(repos, company_id)
    return await monitor.process_company_shifts(company_id)


@router.post("/monitoring/run", response_model=GlobalSweepOut)
async def run_global_monitoring(monitor: Monitor):
    """Manual or cron-triggered sweep over all companies."""
    return await monitor.run_global_sweep()
