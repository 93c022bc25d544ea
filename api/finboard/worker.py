from celery import Celery
from celery.schedules import crontab

from finboard.core.config import settings

celery_app = Celery(
    "finboard",
    broker=settings.redis_url,
    backend=settings.redis_url,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
)

# ─── Scheduled tasks ──────────────────────────
celery_app.conf.beat_schedule = {
    "check-budget-alerts": {
        "task": "finboard.services.notifications.check_budget_alerts",
        "schedule": crontab(hour=9, minute=0),
    },
}

# autodiscover_tasks() only looks for a "tasks.py" file, which we don't use.
celery_app.conf.include = [
    "finboard.services.notifications",
]
