#!/usr/bin/env python3
"""
Celery entry point for the status reconciliation job

    python celery_worker.py           # worker
    python celery_worker.py beat      # scheduler (daily + Monday sweeps)
    celery -A celery_worker.celery worker --loglevel=info
"""

from app.app import create_app
import logging
import sys
import signal

logger = logging.getLogger(__name__)

# Importing app.tasks registers run_status_check on the shared instance
app, celery = create_app()
from app import tasks  # noqa: E402,F401


def signal_handler(signum, frame):
    logger.info(f"🛑 Received signal {signum}, shutting down")
    sys.exit(0)


def start(mode='worker'):
    if mode == 'beat':
        schedules = ', '.join(sorted(celery.conf.beat_schedule))
        logger.info(f"⏰ Starting Celery beat with {schedules}")
        celery.start(['beat', '--loglevel=info'])
    else:
        logger.info("🚀 Starting Celery worker...")
        celery.worker_main(['worker', '--loglevel=info', '--without-gossip', '--without-mingle', '--without-heartbeat'])


if __name__ == '__main__':
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        start(sys.argv[1] if len(sys.argv) > 1 else 'worker')
    except KeyboardInterrupt:
        logger.info("🛑 Stopped by user (Ctrl+C)")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Celery failed to start: {e}")
        sys.exit(1)
