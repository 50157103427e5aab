"""Celery application for background maintenance tasks."""
from celery import Celery

from inkwell.core.config import settings

celery_app = Celery(
    "inkwell",
    broker=settings.CELERY_BROKER_URL,
    include=["inkwell.workers.maintenance"],
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "reconcile-post-counts": {
            "task": "inkwell.workers.maintenance.reconcile_post_counts",
            "schedule": float(settings.RECONCILE_INTERVAL_SECONDS),
        },
        "sweep-orphaned-media": {
            "task": "inkwell.workers.maintenance.sweep_orphaned_media",
            "schedule": float(settings.RECONCILE_INTERVAL_SECONDS),
        },
    },
)
