"""
Celery tasks for contact maintenance.
"""

import uuid
from typing import Any

from sqlalchemy import select

from src.core.config import get_settings
from src.core.database import Database
from src.core.logging import get_logger
from src.models import Workspace
from src.services.contacts.backfill import backfill_contacts_from_calls
from src.worker.celery_app import celery_app

logger = get_logger(__name__)


@celery_app.task(bind=True, name="backfill_contacts_task")
def backfill_contacts_task(self, workspace_id: str) -> dict[str, Any]:
    """
    Backfill one workspace's contacts from its call history.

    Args:
        workspace_id: Workspace to backfill

    Returns:
        dict with status and created/updated counts
    """
    correlation_id = str(uuid.uuid4())
    logger.info(f"[{correlation_id}] Starting contact backfill for workspace {workspace_id}")

    settings = get_settings()
    database = Database.from_settings(settings)
    try:
        with database.session() as db:
            result = backfill_contacts_from_calls(
                db, workspace_id, test_call_sentinel=settings.test_call_sentinel
            )
    except Exception as e:
        logger.error(f"[{correlation_id}] Backfill failed for workspace {workspace_id}: {str(e)}", exc_info=True)
        raise
    finally:
        database.dispose()

    logger.info(
        f"[{correlation_id}] Backfill done for workspace {workspace_id}: "
        f"{result.created} created, {result.updated} updated"
    )
    return {"status": "completed", "workspace_id": workspace_id, **result.to_dict()}


@celery_app.task(name="backfill_all_workspaces_task")
def backfill_all_workspaces_task() -> dict[str, Any]:
    """Queue a backfill for every workspace."""
    settings = get_settings()
    database = Database.from_settings(settings)
    try:
        with database.session() as db:
            workspace_ids = list(db.scalars(select(Workspace.id)).all())
    finally:
        database.dispose()

    for workspace_id in workspace_ids:
        backfill_contacts_task.delay(workspace_id)

    logger.info(f"Queued contact backfill for {len(workspace_ids)} workspaces")
    return {"status": "queued", "workspaces": len(workspace_ids)}
