# =============================================================================
# app/routers/exports.py - PDF Export Endpoints
# =============================================================================
# Two ways to get a printable tech spec:
# - GET  /{id}/export.pdf : render now and download
# - POST /{id}/export     : render in a worker, upload to storage, and poll
#                           GET /tasks/{task_id} for a signed download URL
# =============================================================================

import logging

from fastapi import APIRouter, HTTPException, Response
from pydantic import BaseModel

from app.dependencies import CurrentUser, OwnedTechSpec
from core.services.export_service import export_filename, render_tech_spec_pdf
from core.services.item_service import ItemService
from core.services.tech_spec_service import TechSpecService

logger = logging.getLogger(__name__)

router = APIRouter()


class ExportSubmitResponse(BaseModel):
    """Response model for a queued export."""
    task_id: str
    status: str
    message: str


@router.get("/{tech_spec_id}/export.pdf")
async def download_pdf(tech_spec: OwnedTechSpec, user: CurrentUser):
    """Render the tech spec and download it as a PDF."""
    items = ItemService.list_items(tech_spec.id)
    profile = TechSpecService.get_author_profile(user.id)
    content = render_tech_spec_pdf(tech_spec, items, profile)

    return Response(
        content=content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(tech_spec.name)}"'},
    )


@router.post("/{tech_spec_id}/export", response_model=ExportSubmitResponse, status_code=202)
async def queue_pdf_export(tech_spec: OwnedTechSpec, user: CurrentUser):
    """
    Queue a background export.

    The finished task's result holds `signed_url`, valid for
    EXPORT_URL_TTL_SECONDS.
    """
    try:
        from workers.tasks import export_tech_spec_pdf

        result = export_tech_spec_pdf.delay(tech_spec.id, str(user.id))
    except Exception as e:
        logger.error(f"Error submitting export task: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Failed to queue export. Is Redis running? Error: {e}"
        )

    logger.info(f"Queued PDF export {result.id} for tech spec {tech_spec.id}")
    return ExportSubmitResponse(
        task_id=result.id,
        status="PENDING",
        message="Export queued. Use GET /api/v1/tasks/{task_id} to check status.",
    )
