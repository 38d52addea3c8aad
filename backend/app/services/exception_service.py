import logging
import uuid
from typing import Sequence

from app.core.exceptions import NotFoundError
from app.models.attendance_exception import AttendanceException
from app.repositories import Repositories
from app.utils.periods import utcnow

logger = logging.getLogger(__name__)


class ExceptionService:

    def __init__(self, repos: Repositories):
        self.repos = repos

    async def list_exceptions(
        self, company_id: uuid.UUID, unresolved_only: bool = False
    ) -> Sequence[AttendanceException]:
        return await self.repos.exceptions.list_by_company(company_id, unresolved_only)

    async def resolve_exception(self, exception_id: uuid.UUID) -> AttendanceException:
        """Mark an exception as reviewed; resolving twice keeps the first timestamp."""
        exception = await self.repos.exceptions.get(exception_id)
        if exception is None:
            raise NotFoundError("Exception")
        if exception.resolved_at is None:
            exception.resolved_at = utcnow()
            await self.repos.commit()
            logger.info("Exception %s (%s) resolved", exception_id, exception.kind)
        return exception
