"""
Celery application configuration for the drayage engine.

Celery runs the out-of-band terminal confirmation follow-up so that an
appointment request returns immediately in REQUESTED status.

Usage:
    # Start worker (from project root):
    celery -A drayage.core.celery_app worker -Q appointments,default --loglevel=info
"""
from celery import Celery

from drayage.core.config import settings

# Create Celery application
celery_app = Celery(
    "drayage",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["drayage.services.tasks"],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Result backend
    result_expires=86400,

    worker_prefetch_multiplier=1,

    # Task routing
    task_routes={
        "drayage.services.tasks.confirm_appointment": {"queue": "appointments"},
        "drayage.services.tasks.*": {"queue": "default"},
    },

    # Confirmation is a short round trip; anything longer is a stuck worker
    task_soft_time_limit=60,
    task_time_limit=90,

    task_default_retry_delay=30,
    task_max_retries=3,
)

celery_app.conf.task_queues = {
    "default": {
        "exchange": "default",
        "routing_key": "default",
    },
    "appointments": {
        "exchange": "appointments",
        "routing_key": "appointments",
    },
}
