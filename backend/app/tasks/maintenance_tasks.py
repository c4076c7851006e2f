"""
Background tasks for retention cleanup.
"""

import asyncio
from datetime import datetime
from typing import Dict, Any
from loguru import logger

from app.core.celery import celery_app
from app.core.database import AsyncSessionLocal, engine
from app.services.support_service import support_service
from app.services.temp_access_service import temp_access_service


@celery_app.task(name="app.tasks.maintenance_tasks.purge_stale_access_grants")
def purge_stale_access_grants() -> Dict[str, Any]:
    """Delete temporary access grants past their retention period."""
    return asyncio.run(_async_purge_stale_access_grants())


async def _async_purge_stale_access_grants() -> Dict[str, Any]:
    try:
        async with AsyncSessionLocal() as db:
            purged = await temp_access_service.purge_stale(db)
        logger.info(f"Access grant purge finished: {purged} removed")
        return {"timestamp": datetime.utcnow().isoformat(), "purged": purged}
    finally:
        # Each task run has its own event loop; pooled connections must not outlive it
        await engine.dispose()


@celery_app.task(name="app.tasks.maintenance_tasks.purge_closed_tickets")
def purge_closed_tickets() -> Dict[str, Any]:
    """Delete support tickets closed longer ago than the retention window."""
    return asyncio.run(_async_purge_closed_tickets())


async def _async_purge_closed_tickets() -> Dict[str, Any]:
    try:
        async with AsyncSessionLocal() as db:
            purged = await support_service.purge_closed(db)
        logger.info(f"Closed ticket purge finished: {purged} removed")
        return {"timestamp": datetime.utcnow().isoformat(), "purged": purged}
    finally:
        await engine.dispose()
