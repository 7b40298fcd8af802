"""Presentation layer: HTTP API, Celery workers and the dependency container."""
