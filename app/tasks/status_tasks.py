"""
Status Reconciliation Tasks
Scheduled sweep that keeps teacher/student active flags in line with
the current week's bookings
"""

import logging

from celery.schedules import crontab
from flask import current_app

from app.context import get_context
from app.extensions import celery
from app.services.status_service import StatusService

logger = logging.getLogger(__name__)

RUN_STATUS_CHECK_TASK = 'app.tasks.status_tasks.run_status_check'


def run_status_check_function(ctx=None):
    """Run the sweep with the given context, or the current app's"""
    ctx = ctx or get_context(current_app)
    logger.info("🚀 Starting status reconciliation")
    result = StatusService(ctx).run_status_check()
    if result['skipped']:
        logger.info("⏭️ Status reconciliation skipped, previous run still in progress")
    else:
        logger.info(f"✅ Status reconciliation completed: {result}")
    return result


@celery.task(name=RUN_STATUS_CHECK_TASK)
def run_status_check():
    return run_status_check_function()


def status_check_beat_schedule(config):
    """Daily sweep plus one at the start of the business week"""
    return {
        'status-check-daily': {
            'task': RUN_STATUS_CHECK_TASK,
            'schedule': crontab(
                hour=config.get('RECONCILE_DAILY_HOUR', 0),
                minute=config.get('RECONCILE_DAILY_MINUTE', 5)
            ),
        },
        'status-check-week-start': {
            'task': RUN_STATUS_CHECK_TASK,
            'schedule': crontab(
                hour=config.get('RECONCILE_WEEKLY_HOUR', 0),
                minute=config.get('RECONCILE_WEEKLY_MINUTE', 1),
                day_of_week=1
            ),
        },
    }
