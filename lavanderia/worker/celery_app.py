# lavanderia/worker/celery_app.py
from celery import Celery
from celery.schedules import crontab

from lavanderia.core.config import get_settings

settings = get_settings()

celery_app = Celery(
    "lavanderia_tasks",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "lavanderia.worker.tasks_notifications",
    ],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.TIMEZONE,
    enable_utc=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    beat_schedule={
        "send-scheduled-messages-daily": {
            "task": "notifications.send_scheduled_messages",
            "schedule": crontab(hour=settings.SCHEDULED_HOUR, minute=settings.SCHEDULED_MINUTE),
        },
    },
)
