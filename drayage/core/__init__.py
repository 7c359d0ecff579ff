"""
Core package for the drayage lifecycle engine.
"""
from drayage.core.config import settings, get_settings
from drayage.core.celery_app import celery_app

__all__ = ["settings", "get_settings", "celery_app"]
