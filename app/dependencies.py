# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Path

from app.auth import AuthUser, get_current_user
from core.models.tech_spec import TechSpec
from core.services.editor_service import StagePlotEditor
from core.services.tech_spec_service import TechSpecService

CurrentUser = Annotated[AuthUser, Depends(get_current_user)]

TechSpecId = Annotated[UUID, Path(description="Tech spec UUID")]
ItemId = Annotated[UUID, Path(description="Stage plot item UUID")]


async def get_owned_tech_spec(tech_spec_id: TechSpecId, user: CurrentUser) -> TechSpec:
    """
    Load the tech spec named in the path, as long as the caller owns it.

    Raises:
        TechSpecNotFoundError: 404 if it doesn't exist or belongs to someone else
    """
    return TechSpecService.get_tech_spec(tech_spec_id, user_id=user.id)


OwnedTechSpec = Annotated[TechSpec, Depends(get_owned_tech_spec)]


async def get_editor(tech_spec: OwnedTechSpec, user: CurrentUser) -> StagePlotEditor:
    """The caller's editor on the tech spec in the path."""
    return StagePlotEditor(user.id, tech_spec.id)


EditorDep = Annotated[StagePlotEditor, Depends(get_editor)]
