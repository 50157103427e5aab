"""Celery tasks repairing counter drift and orphaned uploads."""
import asyncio

from inkwell.core.celery_app import celery_app
from inkwell.db.session import async_session_maker
from inkwell.services import maintenance_service, user_service
from inkwell.services.storage_service import get_storage


async def _reconcile() -> dict[str, list[int]]:
    async with async_session_maker() as session:
        drifted = await user_service.reconcile_post_counts(session)
    return {str(user_id): [stored, actual] for user_id, (stored, actual) in drifted.items()}


async def _sweep(dry_run: bool) -> list[str]:
    async with async_session_maker() as session:
        return await maintenance_service.sweep_orphaned_media(session, get_storage(), dry_run=dry_run)


@celery_app.task(name="inkwell.workers.maintenance.reconcile_post_counts")
def reconcile_post_counts() -> dict[str, list[int]]:
    """Recompute every user's post counter. Returns the repaired users."""
    return asyncio.run(_reconcile())


@celery_app.task(name="inkwell.workers.maintenance.sweep_orphaned_media")
def sweep_orphaned_media(dry_run: bool = False) -> list[str]:
    return asyncio.run(_sweep(dry_run))
