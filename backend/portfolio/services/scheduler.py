"""
Background jobs running inside the API process.
Currently one job: dropping expired geolocation cache entries.
"""

import os
from typing import Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from portfolio.services.geolocation import GeoResolver
from portfolio.utils.logger import app_logger

scheduler: Optional[AsyncIOScheduler] = None

# Coroutine job: AsyncIOScheduler runs it on the event loop, alongside the handlers that fill the cache
async def prune_geo_cache(geo_resolver: GeoResolver) -> int:
    try:
        removed = geo_resolver.prune_expired()
        app_logger.debug(f"Geo cache prune finished: {removed} removed, {len(geo_resolver.cache)} kept")
        return removed
    except Exception as e:
        app_logger.error(f"Geo cache prune failed: {str(e)}")
        return 0

def start_scheduler(geo_resolver: GeoResolver, interval_minutes: int = 60):
    global scheduler

    if os.getenv("DISABLE_SCHEDULER", "false").lower() == "true":
        app_logger.info("Scheduler disabled (DISABLE_SCHEDULER=true)")
        return

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        prune_geo_cache,
        IntervalTrigger(minutes=interval_minutes),
        args=[geo_resolver],
        id="prune_geo_cache",
        name="Prune expired geolocation cache entries",
        replace_existing=True,
    )
    scheduler.start()
    app_logger.info(f"Scheduler started; geo cache pruned every {interval_minutes} minutes")

def stop_scheduler():
    global scheduler

    if scheduler is None:
        return
    try:
        scheduler.shutdown(wait=False)
        app_logger.info("Scheduler stopped")
    except Exception as e:
        app_logger.error(f"Scheduler shutdown failed: {str(e)}")
    finally:
        scheduler = None

def get_scheduler_status():
    if scheduler is None:
        return {"running": False, "jobs": []}

    return {
        "running": scheduler.running,
        "jobs": [
            {
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger)
            }
            for job in scheduler.get_jobs()
        ]
    }
