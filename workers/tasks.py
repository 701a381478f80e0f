# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background tasks:
# - export_tech_spec_pdf: render a tech spec, upload it to storage and
#   return a signed download URL
# =============================================================================

import logging
from typing import Any

from celery import current_task, shared_task

from app.exceptions import RemoteStoreError, StorageUploadError, TechSpecException

logger = logging.getLogger(__name__)

EXPORT_STEPS = 4


# =============================================================================
# Task State Updates
# =============================================================================

def update_progress(current: int, total: int, message: str = "Processing..."):
    """
    Update task progress for polling.

    Args:
        current: Current step number
        total: Total steps
        message: Status message
    """
    if current_task:
        current_task.update_state(
            state="PROGRESS",
            meta={
                "current": current,
                "total": total,
                "percent": int((current / total) * 100),
                "message": message,
            }
        )


# =============================================================================
# PDF Export Task
# =============================================================================

@shared_task(
    bind=True,
    name="workers.tasks.export_tech_spec_pdf",
    autoretry_for=(RemoteStoreError, StorageUploadError),
    retry_backoff=True,
)
def export_tech_spec_pdf(self, tech_spec_id: str, user_id: str) -> dict[str, Any]:
    """
    Render a tech spec to PDF and publish it through a signed URL.

    Supabase outages are retried; anything else (missing tech spec,
    rendering failure) is reported in the result.

    Args:
        tech_spec_id: The tech spec UUID
        user_id: Owner UUID; the export fails if the user doesn't own it

    Returns:
        Dict with success, storage_path, signed_url, filename, size_bytes
        and item_count
    """
    from core.services.export_service import ExportService
    from core.services.item_service import ItemService
    from core.services.tech_spec_service import TechSpecService

    logger.info(f"Exporting tech spec {tech_spec_id} to PDF")

    step = iter(range(2, EXPORT_STEPS + 1))

    try:
        update_progress(1, EXPORT_STEPS, "Loading stage plot...")
        tech_spec = TechSpecService.get_tech_spec(tech_spec_id, user_id=user_id)
        items = ItemService.list_items(tech_spec.id)
        profile = TechSpecService.get_author_profile(user_id)

        export = ExportService.export_tech_spec(
            tech_spec,
            items,
            profile,
            on_step=lambda message: update_progress(next(step), EXPORT_STEPS, message),
        )

    except (RemoteStoreError, StorageUploadError):
        raise
    except TechSpecException as e:
        logger.warning(f"Export of tech spec {tech_spec_id} failed: {e.message}")
        return {"success": False, "error": e.message, "code": e.code}

    return {
        "success": True,
        "tech_spec_id": tech_spec.id,
        **export,
        "item_count": len(items),
    }
