# =============================================================================
# app/routers/items.py - Stage Plot Item Endpoints
# =============================================================================
# Direct access to the item store: list, add, edit and delete items.
# Property edits from the item inspector land here.
# =============================================================================

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from app.dependencies import EditorDep, ItemId, OwnedTechSpec
from core.models.stage_plot import StagePlotItem, StagePlotItemCreate, StagePlotItemUpdate
from core.services.item_service import ItemService

router = APIRouter()


# =============================================================================
# Response Models
# =============================================================================

class ItemListResponse(BaseModel):
    """Items of a tech spec in creation order."""
    items: list[StagePlotItem]
    count: int
    warnings: list[str] = Field(default_factory=list)


class ItemResponse(BaseModel):
    """A written item plus any duplicate channel warnings for its tech spec."""
    item: StagePlotItem
    warnings: list[str] = Field(default_factory=list)


class ItemDeleteResponse(BaseModel):
    item_id: str
    unpaired_item_id: str | None = None
    message: str = "Item deleted"


def _warnings_after_channel_write(tech_spec_id: str, item: StagePlotItem) -> list[str]:
    if not item.has_channel:
        return []
    return ItemService.channel_warnings(ItemService.list_items(tech_spec_id))


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/{tech_spec_id}/items", response_model=ItemListResponse)
async def list_items(tech_spec: OwnedTechSpec):
    """List every item on the stage plot."""
    items = ItemService.list_items(tech_spec.id)
    return ItemListResponse(
        items=items,
        count=len(items),
        warnings=ItemService.channel_warnings(items),
    )


@router.post("/{tech_spec_id}/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(request: StagePlotItemCreate, tech_spec: OwnedTechSpec):
    """
    Add an item at an explicit position.

    Drag-and-drop from the palette should use POST /canvas/drop instead,
    which converts pointer coordinates for you.
    """
    overrides = request.model_dump(exclude={"icon_type", "position_x", "position_y"})
    item = ItemService.create_item(
        tech_spec.id,
        request.icon_type,
        request.position_x,
        request.position_y,
        overrides=overrides,
    )
    return ItemResponse(item=item, warnings=_warnings_after_channel_write(tech_spec.id, item))


@router.patch("/{tech_spec_id}/items/{item_id}", response_model=ItemResponse)
async def update_item(request: StagePlotItemUpdate, item_id: ItemId, tech_spec: OwnedTechSpec):
    """
    Edit item properties.

    Only the fields present in the body are written. Sending
    `"channel_number": null` also turns off phantom power and the insert.
    """
    item = ItemService.update_item(item_id, request.changes(), tech_spec_id=tech_spec.id)
    return ItemResponse(item=item, warnings=_warnings_after_channel_write(tech_spec.id, item))


@router.delete("/{tech_spec_id}/items/{item_id}", response_model=ItemDeleteResponse)
async def delete_item(item_id: ItemId, editor: EditorDep):
    """Delete an item. Its monitor partner, if any, becomes unpaired."""
    deleted = editor.delete_item(str(item_id))
    return ItemDeleteResponse(item_id=deleted.id, unpaired_item_id=deleted.paired_with_id)
