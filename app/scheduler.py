"""
Scheduler Module

Background job that keeps the repair feed warm.
Uses APScheduler to refresh on a configurable interval.
"""

import os
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from app.services.repair_feed import get_repair_feed

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Configuration from environment
FEED_REFRESH_ENABLED = os.getenv("FEED_REFRESH_ENABLED", "true").lower() == "true"
FEED_REFRESH_INTERVAL_MINUTES = int(os.getenv("FEED_REFRESH_INTERVAL_MINUTES", "5"))

# Create scheduler
scheduler = AsyncIOScheduler()


async def scheduled_feed_refresh():
    """Refresh the repair feed (every N minutes)"""
    if not FEED_REFRESH_ENABLED:
        logger.info("[Scheduler] Feed refresh disabled, skipping")
        return

    feed = get_repair_feed()
    try:
        result = await feed.refresh(feed.params)
        logger.info(f"[Scheduler] Feed refresh #{result.request_id} complete: "
                    f"applied={result.applied}, repairs={result.record_count}")
    except Exception as e:
        logger.error(f"[Scheduler] Feed refresh failed: {e}")


def start_scheduler():
    """Start the background scheduler"""
    if not FEED_REFRESH_ENABLED:
        logger.info("[Scheduler] Feed refresh disabled via FEED_REFRESH_ENABLED env var")
        return

    logger.info(f"[Scheduler] Starting scheduler: feed refresh every {FEED_REFRESH_INTERVAL_MINUTES} minutes")

    scheduler.add_job(
        scheduled_feed_refresh,
        IntervalTrigger(minutes=FEED_REFRESH_INTERVAL_MINUTES),
        id="repair_feed_refresh",
        name="Repair Feed Refresh",
        replace_existing=True
    )

    scheduler.start()
    logger.info("[Scheduler] Scheduler started successfully")


def stop_scheduler():
    """Stop the scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("[Scheduler] Scheduler stopped")
