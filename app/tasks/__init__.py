"""
Celery Tasks Module
Imports and registers all Celery tasks for the application
"""

from . import status_tasks

__all__ = [
    'status_tasks',
]
