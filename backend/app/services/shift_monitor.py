"""
Shift monitor – runs detection and recording per company and across all
companies.

Neither entry point raises: a failing or timed-out company counts as zero
and the global sweep moves on to the next one.
"""
import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from app.core.config import settings
from app.core.metrics import MONITORING_RUNS, MONITORING_DURATION
from app.repositories import Repositories
from app.services.sweep_lock import SweepLocks
from app.services.violation_detector import ViolationDetector
from app.services.violation_recorder import ViolationRecorder
from app.utils.periods import utcnow

logger = logging.getLogger(__name__)


@dataclass
class CompanySweepResult:
    violations_found: int = 0
    exceptions_created: int = 0


@dataclass
class GlobalSweepResult:
    companies_processed: int = 0
    total_violations: int = 0
    total_exceptions: int = 0


class ShiftMonitor:

    def __init__(
        self,
        repos: Repositories,
        detector: ViolationDetector | None = None,
        recorder: ViolationRecorder | None = None,
        locks: SweepLocks | None = None,
        company_timeout: float | None = None,
    ):
        self.repos = repos
        self.detector = detector or ViolationDetector(repos)
        self.recorder = recorder or ViolationRecorder(repos)
        self.locks = locks or SweepLocks()
        self.company_timeout = (
            settings.MONITORING_COMPANY_TIMEOUT_SECONDS if company_timeout is None else company_timeout
        )

    async def process_company_shifts(
        self, company_id: uuid.UUID, now: datetime | None = None
    ) -> CompanySweepResult:
        with MONITORING_DURATION.time():
            try:
                result = await asyncio.wait_for(
                    self._process_locked(company_id, now or utcnow()),
                    timeout=self.company_timeout,
                )
                MONITORING_RUNS.labels(status="success").inc()
                return result
            except asyncio.TimeoutError:
                MONITORING_RUNS.labels(status="timeout").inc()
                logger.error("Sweep of company %s timed out after %ss", company_id, self.company_timeout)
            except Exception:
                MONITORING_RUNS.labels(status="error").inc()
                logger.error("Sweep of company %s failed", company_id, exc_info=True)
        await self._reset_session()
        return CompanySweepResult()

    async def run_global_sweep(self, now: datetime | None = None) -> GlobalSweepResult:
        result = GlobalSweepResult()
        try:
            company_ids = [c.id for c in await self.repos.companies.list_all()]
        except Exception:
            logger.error("Could not list companies for the monitoring sweep", exc_info=True)
            await self._reset_session()
            return result

        for company_id in company_ids:
            company_result = await self.process_company_shifts(company_id, now)
            result.companies_processed += 1
            result.total_violations += company_result.violations_found
            result.total_exceptions += company_result.exceptions_created

        logger.info(
            "Monitoring sweep done: %d companies, %d violations, %d new exceptions",
            result.companies_processed, result.total_violations, result.total_exceptions,
        )
        return result

    async def _process_locked(self, company_id: uuid.UUID, now: datetime) -> CompanySweepResult:
        async with self.locks.hold(company_id):
            return await self._process(company_id, now)

    async def _process(self, company_id: uuid.UUID, now: datetime) -> CompanySweepResult:
        before = await self.repos.exceptions.count_by_company(company_id)
        events = await self.detector.detect_for_company(company_id, now)

        for event in events:
            try:
                await self.recorder.record(event)
            except Exception:
                logger.error(
                    "Recording %s for employee %s failed", event.type, event.employee_id, exc_info=True
                )
                await self._reset_session()

        after = await self.repos.exceptions.count_by_company(company_id)
        created = max(0, after - before)
        logger.info(
            "Company %s: %d violation(s) detected, %d exception(s) created",
            company_id, len(events), created,
        )
        return CompanySweepResult(violations_found=len(events), exceptions_created=created)

    async def _reset_session(self) -> None:
        try:
            await self.repos.rollback()
        except Exception:
            logger.warning("Session rollback after sweep failure failed", exc_info=True)
