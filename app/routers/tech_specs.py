# =============================================================================
# app/routers/tech_specs.py - Tech Spec CRUD Endpoints
# =============================================================================
# Create, list, rename, resize, share and delete tech specs.
# All endpoints require authentication; users only see their own documents.
# =============================================================================

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from app.dependencies import CurrentUser, OwnedTechSpec
from core.models.tech_spec import TechSpec, TechSpecCreate, TechSpecUpdate
from core.services.editor_service import editor_sessions
from core.services.tech_spec_service import TechSpecService

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class TechSpecList(BaseModel):
    """A user's tech specs, newest first."""
    tech_specs: list[TechSpec]
    count: int


class ShareRequest(BaseModel):
    """Turn the public link on or off."""
    is_publicly_shared: bool = Field(..., examples=[True])


class ShareResponse(BaseModel):
    tech_spec_id: str
    is_publicly_shared: bool
    share_token: str | None = None
    share_path: str | None = Field(
        default=None,
        description="Path of the public view, relative to the API root"
    )


class DeleteResponse(BaseModel):
    tech_spec_id: str
    message: str = "Tech spec deleted"


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=TechSpec, status_code=status.HTTP_201_CREATED)
async def create_tech_spec(request: TechSpecCreate, user: CurrentUser):
    """Create an empty tech spec (800 x 600 stage, not shared)."""
    return TechSpecService.create_tech_spec(user.id, request.name, request.description)


@router.get("", response_model=TechSpecList)
async def list_tech_specs(user: CurrentUser):
    """List the caller's tech specs, newest first."""
    tech_specs = TechSpecService.list_tech_specs(user.id)
    return TechSpecList(tech_specs=tech_specs, count=len(tech_specs))


@router.get("/{tech_spec_id}", response_model=TechSpec)
async def get_tech_spec(tech_spec: OwnedTechSpec):
    """Get one tech spec."""
    return tech_spec


@router.patch("/{tech_spec_id}", response_model=TechSpec)
async def update_tech_spec(request: TechSpecUpdate, tech_spec: OwnedTechSpec, user: CurrentUser):
    """Update name, description or stage size."""
    return TechSpecService.update_tech_spec(tech_spec.id, request.changes(), user_id=user.id)


@router.delete("/{tech_spec_id}", response_model=DeleteResponse)
async def delete_tech_spec(tech_spec: OwnedTechSpec, user: CurrentUser):
    """Delete a tech spec and all of its stage plot items."""
    TechSpecService.delete_tech_spec(tech_spec.id, user_id=user.id)
    editor_sessions.discard(str(user.id), tech_spec.id)
    return DeleteResponse(tech_spec_id=tech_spec.id)


@router.post("/{tech_spec_id}/share", response_model=ShareResponse)
async def share_tech_spec(request: ShareRequest, tech_spec: OwnedTechSpec, user: CurrentUser):
    """
    Enable or disable the public read-only link.

    The share token itself never changes, so re-enabling restores the old link.
    """
    updated = TechSpecService.set_public_share(tech_spec.id, request.is_publicly_shared, user_id=user.id)
    return ShareResponse(
        tech_spec_id=updated.id,
        is_publicly_shared=updated.is_publicly_shared,
        share_token=updated.share_token,
        share_path=f"/shared/{updated.share_token}" if updated.is_publicly_shared and updated.share_token else None,
    )
