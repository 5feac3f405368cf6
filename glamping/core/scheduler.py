# File: glamping/core/scheduler.py
from datetime import datetime
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from glamping.core.config import settings
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()

def start_scheduler():
    """Start all scheduled jobs"""
    from glamping.tasks.auto_checkout import run_auto_checkout_sweep

    if scheduler.running:
        return

    try:
        # Overdue check-outs; first pass right away so a restart after the
        # cutoff does not wait a full interval
        scheduler.add_job(
            run_auto_checkout_sweep,
            trigger=IntervalTrigger(seconds=settings.AUTO_SWEEP_INTERVAL_SECONDS),
            id='auto_checkout_sweep',
            name='Check out rooms past the check-out cutoff',
            next_run_time=datetime.now(),
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        scheduler.start()
        logger.info("✅ Scheduler started successfully")
        logger.info(f"Active jobs: {len(scheduler.get_jobs())}")
    except Exception as e:
        logger.error(f"Failed to start scheduler: {e}")

def stop_scheduler():
    """Stop scheduler gracefully"""
    if not scheduler.running:
        return
    try:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler stopped")
    except Exception as e:
        logger.error(f"Error stopping scheduler: {e}")
