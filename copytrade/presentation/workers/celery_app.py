"""Celery Application Configuration.

Celery beat - це зовнішній scheduler pipeline'а: три кроки (detect,
process, monitor) запускаються кожні ``pipeline_interval_seconds`` з
hard time limit ``task_time_limit_seconds``.

Usage:
    # Start worker
    celery -A copytrade.presentation.workers worker --loglevel=info

    # Start beat scheduler
    celery -A copytrade.presentation.workers beat --loglevel=info

    # Start both (development only)
    celery -A copytrade.presentation.workers worker --beat --loglevel=info
"""

from celery import Celery

from copytrade.config import get_settings

settings = get_settings()

TASKS_MODULE = "copytrade.presentation.workers.tasks.pipeline_tasks"

celery_app = Celery(
    "copytrade_workers",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[TASKS_MODULE],
)

celery_app.conf.update(
    # ==================== Task Settings ====================
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution
    task_acks_late=settings.celery_task_acks_late,
    task_reject_on_worker_lost=settings.celery_task_reject_on_worker_lost,
    task_time_limit=settings.task_time_limit_seconds,
    task_soft_time_limit=max(settings.task_time_limit_seconds - 5, 1),

    # Result backend
    result_expires=3600,

    # ==================== Worker Settings ====================
    worker_prefetch_multiplier=1,
    worker_concurrency=settings.celery_worker_concurrency,
    worker_max_tasks_per_child=1000,

    # ==================== Broker Settings ====================
    broker_connection_retry_on_startup=True,
    broker_connection_retry=True,
    broker_connection_max_retries=10,

    # ==================== Beat Scheduler ====================
    beat_schedule={
        "detect-leader-trades": {
            "task": f"{TASKS_MODULE}.detect_leader_trades",
            "schedule": settings.pipeline_interval_seconds,
        },
        "process-pending-trades": {
            "task": f"{TASKS_MODULE}.process_pending_trades",
            "schedule": settings.pipeline_interval_seconds,
        },
        "monitor-open-positions": {
            "task": f"{TASKS_MODULE}.monitor_open_positions",
            "schedule": settings.pipeline_interval_seconds,
        },
    },

    # ==================== Task Routes ====================
    task_routes={f"{TASKS_MODULE}.*": {"queue": "pipeline"}},

    task_default_queue="default",
    task_default_exchange="default",
    task_default_routing_key="default",
)
