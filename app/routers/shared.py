# =============================================================================
# app/routers/shared.py - Public Share View
# =============================================================================
# Read-only view of a tech spec whose owner turned on public sharing.
# No authentication: the share token is the credential.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path
from pydantic import BaseModel

from core.models.editor import ChannelListResponse, EquipmentListResponse
from core.models.stage_plot import StagePlotItem
from core.models.tech_spec import SharedTechSpec
from core.services.editor_service import build_channel_list, build_equipment_list
from core.services.item_service import ItemService
from core.services.tech_spec_service import TechSpecService

router = APIRouter()


class SharedTechSpecResponse(BaseModel):
    """Everything a venue needs to read a shared tech spec."""
    tech_spec: SharedTechSpec
    items: list[StagePlotItem]
    channel_list: ChannelListResponse
    equipment_list: EquipmentListResponse


@router.get("/{share_token}", response_model=SharedTechSpecResponse)
async def get_shared_tech_spec(
    share_token: Annotated[UUID, Path(description="Share token from the public link")],
):
    """
    Get a publicly shared tech spec with its stage plot, input list and
    equipment list.

    Returns 404 for unknown tokens and for tech specs that are no longer shared,
    and 502 when the lookup itself fails.
    """
    tech_spec = TechSpecService.get_shared_tech_spec(share_token)
    items = ItemService.list_items(tech_spec.id)

    return SharedTechSpecResponse(
        tech_spec=tech_spec,
        items=items,
        channel_list=build_channel_list(items),
        equipment_list=build_equipment_list(items),
    )
