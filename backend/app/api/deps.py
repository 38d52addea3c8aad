from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.repositories import Repositories
from app.services.exception_service import ExceptionService
from app.services.rating_service import RatingService
from app.services.shift_monitor import ShiftMonitor
from app.services.shift_service import ShiftService
from app.services.sweep_lock import SweepLocks
from app.services.violation_detector import ViolationDetector


async def get_repositories(db: Annotated[AsyncSession, Depends(get_db)]) -> Repositories:
    return Repositories.from_session(db)


def get_sweep_locks(request: Request) -> SweepLocks:
    """Process-wide sweep locks live on app.state (created in the lifespan)."""
    locks = getattr(request.app.state, "sweep_locks", None)
    if locks is None:
        locks = request.app.state.sweep_locks = SweepLocks()
    return locks


DB = Annotated[AsyncSession, Depends(get_db)]
Repos = Annotated[Repositories, Depends(get_repositories)]


def get_shift_service(repos: Repos) -> ShiftService:
    return ShiftService(repos)


def get_rating_service(repos: Repos) -> RatingService:
    return RatingService(repos)


def get_exception_service(repos: Repos) -> ExceptionService:
    return ExceptionService(repos)


def get_violation_detector(repos: Repos) -> ViolationDetector:
    return ViolationDetector(repos)


def get_shift_monitor(
    repos: Repos,
    locks: Annotated[SweepLocks, Depends(get_sweep_locks)],
) -> ShiftMonitor:
    return ShiftMonitor(repos, locks=locks)


Shifts = Annotated[ShiftService, Depends(get_shift_service)]
Ratings = Annotated[RatingService, Depends(get_rating_service)]
Exceptions = Annotated[ExceptionService, Depends(get_exception_service)]
Monitor = Annotated[ShiftMonitor, Depends(get_shift_monitor)]
Detector = Annotated[ViolationDetector, Depends(get_violation_detector)]
