# =============================================================================
# app/routers/pairing.py - Monitor Pairing Endpoints
# =============================================================================
# Drives the pairing flow:
#   POST /pairing/start {item_id}   -> awaiting_partner
#   POST /pairing/click {item_id}   -> idle, both monitors paired
#   POST /pairing/cancel            -> idle, nothing written
#   DELETE /editor                  -> selection and pairing forgotten
# =============================================================================

from fastapi import APIRouter

from app.dependencies import EditorDep, ItemId
from core.models.editor import EditorStateResponse, PairingRequest

router = APIRouter()


@router.get("/{tech_spec_id}/pairing", response_model=EditorStateResponse)
async def get_pairing_state(editor: EditorDep):
    """Current selection and pairing state of the caller's editor."""
    return editor.state_response()


@router.post("/{tech_spec_id}/pairing/start", response_model=EditorStateResponse)
async def start_pairing(request: PairingRequest, editor: EditorDep):
    """
    Start pairing from a monitor.

    Fails with 409 if a pairing is already in progress or the item isn't
    a monitor.
    """
    return editor.start_pairing(request.item_id)


@router.post("/{tech_spec_id}/pairing/click", response_model=EditorStateResponse)
async def click_pairing_partner(request: PairingRequest, editor: EditorDep):
    """Click the partner item. Clicking the source item again does nothing."""
    return editor.click(request.item_id)


@router.post("/{tech_spec_id}/pairing/cancel", response_model=EditorStateResponse)
async def cancel_pairing(editor: EditorDep):
    """Abandon the pairing in progress."""
    return editor.cancel_pairing()


@router.post("/{tech_spec_id}/items/{item_id}/unpair", response_model=EditorStateResponse)
async def unpair_item(item_id: ItemId, editor: EditorDep):
    """Clear the pairing on an item and on its partner."""
    return editor.unpair(str(item_id))


@router.delete("/{tech_spec_id}/editor", response_model=EditorStateResponse)
async def leave_editor(editor: EditorDep):
    """
    Forget the caller's selection and any pairing in progress.

    Called when the user navigates away from the stage plot. Nothing is
    written to the tech spec.
    """
    editor.leave()
    return editor.state_response()
