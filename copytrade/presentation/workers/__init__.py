"""Celery workers for the scheduled pipeline steps.

Usage:
    # Start worker
    celery -A copytrade.presentation.workers worker --loglevel=info

    # Start beat scheduler
    celery -A copytrade.presentation.workers beat --loglevel=info
"""

from .celery_app import celery_app

__all__ = ["celery_app"]
