"""
Celery application configuration
"""

import os

from celery import Celery

from gamewallet.core.config import settings

# Use REDIS_URL as fallback for Celery broker
broker_url = os.environ.get('CELERY_BROKER_URL', os.environ.get('REDIS_URL', settings.celery_broker_url))
backend_url = os.environ.get('CELERY_RESULT_BACKEND', os.environ.get('REDIS_URL', settings.celery_result_backend))

# Create Celery instance
celery = Celery(
    "gamewallet",
    broker=broker_url,
    backend=backend_url,
    include=["gamewallet.tasks.maintenance"]
)

# Configure Celery
celery.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=10 * 60,  # 10 minutes
    task_soft_time_limit=8 * 60,  # 8 minutes
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    result_expires=3600,  # 1 hour
    worker_concurrency=int(os.getenv("CELERY_WORKER_CONCURRENCY", 2)),
    task_routes={
        "gamewallet.tasks.maintenance.mature_positions": {"queue": "settlement"},
        "gamewallet.tasks.maintenance.close_due_draws": {"queue": "settlement"},
    },
    task_default_queue="default",
)

# Periodic sweeps
celery.conf.beat_schedule = {
    "mature-positions": {
        "task": "gamewallet.tasks.maintenance.mature_positions",
        "schedule": float(settings.maturity_sweep_seconds),
    },
    "close-due-draws": {
        "task": "gamewallet.tasks.maintenance.close_due_draws",
        "schedule": float(settings.maturity_sweep_seconds),
    },
}

# For testing, we can run tasks synchronously
if settings.app_env == "testing":
    celery.conf.task_always_eager = True
    celery.conf.task_eager_propagates = True

if __name__ == "__main__":
    celery.start()
