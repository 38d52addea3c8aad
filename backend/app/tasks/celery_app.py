from celery import Celery
from celery.schedules import crontab

from app.core.config import settings

celery_app = Celery(
    "shiftwatch",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["app.tasks.monitoring_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        # Every few minutes: detect violations on all companies' shifts
        "shift-monitoring": {
            "task": "app.tasks.monitoring_tasks.run_global_shift_monitoring",
            "schedule": crontab(minute=f"*/{settings.MONITORING_INTERVAL_MINUTES}"),
        },
    },
)
