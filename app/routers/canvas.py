# =============================================================================
# app/routers/canvas.py - Canvas Interaction Endpoints
# =============================================================================
# What happens when the user drops, clicks or rotates on the stage canvas.
# Pointer coordinates are converted to canvas percentages server-side so
# every client places items the same way.
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel, Field

from app.dependencies import EditorDep, ItemId
from core.models.editor import (
    CanvasClickRequest,
    DropOutcome,
    DropRequest,
    DrumKitRequest,
    EditorStateResponse,
    RotateRequest,
)
from core.models.stage_plot import StagePlotItem
from core.services.item_service import ItemService

router = APIRouter()


class DrumKitResponse(BaseModel):
    """Items placed for a drum kit."""
    items: list[StagePlotItem]
    warnings: list[str] = Field(default_factory=list)


@router.post("/{tech_spec_id}/canvas/drop", response_model=DropOutcome)
async def drop_on_canvas(request: DropRequest, editor: EditorDep):
    """
    Handle a drag that ended over the canvas.

    - `item_id`: moves that item to the drop point
    - `icon_type`: creates a new item there and selects it
    - `icon_type: "drums"` without `drum_kit`: nothing is written and
      `action` is `choice_required`; repeat the drop with
      `drum_kit.mode` set to `bare` or `expanded`
    """
    return editor.handle_drop(request)


@router.post("/{tech_spec_id}/canvas/drum-kit", response_model=DrumKitResponse)
async def place_drum_kit(request: DrumKitRequest, editor: EditorDep):
    """
    Place a drum kit at a canvas position given in percent.

    The expanded kit is nine mic'd positions (kick, snare top/bottom, hi-hat,
    three toms, two overheads) on consecutive channels.
    """
    items = editor.place_drum_kit(request.center_x, request.center_y, request.options)
    return DrumKitResponse(
        items=items,
        warnings=ItemService.channel_warnings(ItemService.list_items(editor.tech_spec_id)),
    )


@router.post("/{tech_spec_id}/canvas/click", response_model=EditorStateResponse)
async def click_canvas(request: CanvasClickRequest, editor: EditorDep):
    """
    Click on an item or on empty canvas (`item_id: null`).

    While a pairing is in progress, clicking another item completes it and
    the updated items are returned.
    """
    return editor.click(request.item_id)


@router.post("/{tech_spec_id}/items/{item_id}/rotate", response_model=StagePlotItem)
async def rotate_item(request: RotateRequest, item_id: ItemId, editor: EditorDep):
    """Rotate an item 15 degrees left or right."""
    return editor.rotate_item(str(item_id), request.direction)
