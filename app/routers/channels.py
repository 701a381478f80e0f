# =============================================================================
# app/routers/channels.py - Channel List & Equipment List Endpoints
# =============================================================================
# Both lists are derived from the stage plot items on every request;
# neither is stored.
# =============================================================================

from fastapi import APIRouter

from app.dependencies import EditorDep
from core.models.editor import (
    ChannelListResponse,
    ChannelReorderRequest,
    ChannelReorderResponse,
    EquipmentListResponse,
)

router = APIRouter()


@router.get("/{tech_spec_id}/channels", response_model=ChannelListResponse)
async def get_channel_list(editor: EditorDep):
    """
    Get the input list.

    `channel_items` are sorted by channel number; items without a channel
    are listed separately in creation order. Channel numbers used more than
    once are reported in `duplicate_channels`.
    """
    return editor.channel_list()


@router.post("/{tech_spec_id}/channels/reorder", response_model=ChannelReorderResponse)
async def reorder_channels(request: ChannelReorderRequest, editor: EditorDep):
    """
    Drag a row of the input list onto another row.

    Channels are renumbered 1..N in the new order; only items whose number
    changed are written.
    """
    return editor.reorder_channels(request.active_id, request.over_id)


@router.get("/{tech_spec_id}/equipment", response_model=EquipmentListResponse)
async def get_equipment_list(editor: EditorDep):
    """
    Get the consolidated equipment list.

    Identical items (same icon, label, mic and provider) are counted on one row.
    """
    return editor.equipment_list()
