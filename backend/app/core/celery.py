"""
Celery configuration for background task processing.
"""

from celery import Celery
from celery.schedules import crontab
from app.core.config import settings

# Create Celery app
celery_app = Celery(
    "secure_wallet",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=[
        "app.tasks.maintenance_tasks",
    ]
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=5 * 60,  # 5 minutes
    task_soft_time_limit=4 * 60,  # 4 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

# Periodic task schedule
celery_app.conf.beat_schedule = {
    # Hard-delete access grants older than the retention window
    "purge-stale-access-grants": {
        "task": "app.tasks.maintenance_tasks.purge_stale_access_grants",
        "schedule": crontab(minute=0),  # Every hour
    },

    # Delete support tickets closed more than 24 hours ago
    "purge-closed-tickets": {
        "task": "app.tasks.maintenance_tasks.purge_closed_tickets",
        "schedule": crontab(minute=30),  # Every hour
    },
}
