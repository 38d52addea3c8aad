import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.core.config import settings
from app.core.database import create_tables
from app.core.redis import get_redis, close_redis
from app.core.exceptions import NotFoundError, ValidationError, InvalidTransitionError
from app.api.v1.employees import router as employees_router
from app.api.v1.shifts import router as shifts_router
from app.api.v1.violation_rules import router as violation_rules_router
from app.api.v1.violations import router as violations_router
from app.api.v1.ratings import router as ratings_router
from app.api.v1.exceptions import router as exceptions_router
from app.api.v1.monitoring import router as monitoring_router
from app.services.sweep_lock import SweepLocks, RedisSweepLocks

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (SQLite / local development)
    await create_tables()
    if settings.USE_CELERY:
        # Share sweep locks with the Celery worker
        app.state.sweep_locks = RedisSweepLocks(await get_redis(), settings.SWEEP_LOCK_TIMEOUT_SECONDS)
    else:
        app.state.sweep_locks = SweepLocks()
    yield
    await close_redis()


app = FastAPI(
    title="ShiftWatch API",
    description="Shift monitoring, violations and employee ratings",
    version="1.0.0",
    lifespan=lifespan,
    # Swagger UI only in development – set DEBUG=false in production
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Domain errors → HTTP ─────────────────────────────────────────────────────

@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


API_PREFIX = "/api/v1"

app.include_router(employees_router, prefix=API_PREFIX)
app.include_router(shifts_router, prefix=API_PREFIX)
app.include_router(violation_rules_router, prefix=API_PREFIX)
app.include_router(violations_router, prefix=API_PREFIX)
app.include_router(ratings_router, prefix=API_PREFIX)
app.include_router(exceptions_router, prefix=API_PREFIX)
app.include_router(monitoring_router, prefix=API_PREFIX)


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "ShiftWatch API", "version": "1.0.0"}
