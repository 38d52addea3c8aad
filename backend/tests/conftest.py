"""
Shared pytest fixtures for the ShiftWatch backend tests.

Uses SQLite in-memory with StaticPool so all sessions share one connection,
meaning data written in one session is visible to others (important for HTTP client tests).
"""
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

import app.models  # noqa – registers all SQLAlchemy models with Base.metadata
from app.core.database import Base, get_db
from app.main import app
from app.models.company import Company
from app.models.employee import Employee
from app.models.shift import Shift, WorkInterval, BreakInterval
from app.models.violation import ViolationRule
from app.repositories import Repositories

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# ── Shared engine (function-scoped: fresh DB per test) ───────────────────────

@pytest_asyncio.fixture
async def engine():
    """Creates a fresh in-memory SQLite engine per test with a shared connection pool."""
    eng = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,          # single shared connection → all sessions see same data
    )
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await eng.dispose()


@pytest_asyncio.fixture
async def db(engine) -> AsyncSession:
    """Async DB session for services and direct data inspection inside tests."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def repos(db) -> Repositories:
    return Repositories.from_session(db)


# ── HTTP client fixture ───────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(engine) -> AsyncClient:
    """
    FastAPI test client with get_db overridden to use the test engine.
    Each request gets its own session but shares the same underlying
    connection via StaticPool.
    """
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


# ── Company + Employee fixtures ───────────────────────────────────────────────

@pytest_asyncio.fixture
async def company(db) -> Company:
    return await create_company(db)


@pytest_asyncio.fixture
async def employee(db, company) -> Employee:
    return await create_employee(db, company)


# ── Helpers ───────────────────────────────────────────────────────────────────

def utc(year, month, day, hour=0, minute=0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def recent_base(hours_ago: int = 3) -> datetime:
    """A whole-minute UTC timestamp a few hours in the past."""
    now = datetime.now(timezone.utc).replace(second=0, microsecond=0)
    return now - timedelta(hours=hours_ago)


async def create_company(db, name: str = "Test Company") -> Company:
    c = Company(id=uuid.uuid4(), name=name, is_active=True)
    db.add(c)
    await db.commit()
    await db.refresh(c)
    return c


async def create_employee(db, company, full_name: str = "Test Employee",
                          telegram_user_id: str | None = None) -> Employee:
    e = Employee(
        id=uuid.uuid4(),
        company_id=company.id,
        full_name=full_name,
        telegram_user_id=telegram_user_id,
        status="active",
    )
    db.add(e)
    await db.commit()
    await db.refresh(e)
    return e


async def create_rule(db, company, code: str, penalty: str = "5", is_active: bool = True) -> ViolationRule:
    r = ViolationRule(
        id=uuid.uuid4(),
        company_id=company.id,
        code=code,
        name=code.replace("_", " ").title(),
        penalty_percent=Decimal(penalty),
        auto_detectable=True,
        is_active=is_active,
    )
    db.add(r)
    await db.commit()
    await db.refresh(r)
    return r


async def create_shift(db, employee, planned_start: datetime, hours: int = 8,
                       status: str = "planned", actual_start=None, actual_end=None) -> Shift:
    s = Shift(
        id=uuid.uuid4(),
        employee_id=employee.id,
        planned_start=planned_start,
        planned_end=planned_start + timedelta(hours=hours),
        actual_start=actual_start,
        actual_end=actual_end,
        status=status,
    )
    db.add(s)
    await db.commit()
    await db.refresh(s)
    return s


async def add_work(db, shift, start: datetime, end: datetime | None = None) -> WorkInterval:
    w = WorkInterval(shift_id=shift.id, start_at=start, end_at=end)
    db.add(w)
    await db.commit()
    return w


async def add_break(db, shift, start: datetime, end: datetime | None = None) -> BreakInterval:
    b = BreakInterval(shift_id=shift.id, start_at=start, end_at=end)
    db.add(b)
    await db.commit()
    return b
