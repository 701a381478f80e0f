# =============================================================================
# core/models/editor.py - Stage Plot Editor Schemas
# =============================================================================
# Request/response models for the interactive editor:
# - canvas drops, drum kit expansion and rotation
# - the pairing state exposed to clients
# - the derived channel list and equipment list
# =============================================================================

from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from .stage_plot import IconType, MicType, ProvidedBy, RotateDirection, StagePlotItem


# =============================================================================
# Canvas
# =============================================================================

class CanvasRect(BaseModel):
    """Bounding box of the canvas element in client (pointer) coordinates."""

    left: float
    top: float
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class DrumKitMode(str, Enum):
    """Choices offered after dropping the drum kit icon."""
    BARE = "bare"
    EXPANDED = "expanded"


class DrumKitOptions(BaseModel):
    """
    How to place a dropped drum kit.

    - bare: just the drum kit icon
    - expanded: nine mic'd positions with sequential channels from start_channel
      (defaults to one past the highest channel in use)
    """

    mode: DrumKitMode = DrumKitMode.EXPANDED
    start_channel: int | None = Field(default=None, ge=1)
    include_kit_icon: bool = Field(
        default=False,
        description="Also place the drum kit body (without a channel) at the drop point"
    )


class DropRequest(BaseModel):
    """
    A drag ending over the canvas.

    Exactly one of icon_type (dragged from the palette) or item_id (an item
    already on the stage) must be set.

    Example:
        {
            "icon_type": "monitor",
            "pointer_x": 640,
            "pointer_y": 410,
            "canvas": {"left": 320, "top": 120, "width": 800, "height": 600}
        }
    """

    icon_type: IconType | None = None
    item_id: UUID | None = None
    pointer_x: float
    pointer_y: float
    canvas: CanvasRect
    drum_kit: DrumKitOptions | None = None

    @model_validator(mode="after")
    def _exactly_one_payload(self) -> "DropRequest":
        if (self.icon_type is None) == (self.item_id is None):
            raise ValueError("Provide exactly one of icon_type or item_id")
        return self


class DropAction(str, Enum):
    """What a drop ended up doing."""
    CREATED = "created"
    MOVED = "moved"
    CHOICE_REQUIRED = "choice_required"


class DropOutcome(BaseModel):
    """
    Result of a canvas drop.

    CHOICE_REQUIRED means the drum kit icon was dropped without a DrumKitOptions
    choice; nothing was written and the client should ask bare vs expanded.
    """

    action: DropAction
    position_x: float
    position_y: float
    items: list[StagePlotItem] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class DrumKitRequest(BaseModel):
    """Explicit drum kit placement at a canvas position (percent)."""

    center_x: float
    center_y: float
    options: DrumKitOptions = Field(default_factory=DrumKitOptions)


class RotateRequest(BaseModel):
    """Rotate an item one step."""

    direction: RotateDirection


class CanvasClickRequest(BaseModel):
    """Click on an item (item_id set) or on empty canvas (item_id null)."""

    item_id: UUID | None = None


# =============================================================================
# Pairing
# =============================================================================

class PairingMode(str, Enum):
    """Serialized form of the pairing state machine."""
    IDLE = "idle"
    AWAITING_PARTNER = "awaiting_partner"


class EditorStateResponse(BaseModel):
    """Interaction state of one user's editor on one tech spec."""

    pairing: PairingMode
    source_item_id: str | None = None
    selected_item_id: str | None = None
    updated_items: list[StagePlotItem] = Field(default_factory=list)


class PairingRequest(BaseModel):
    """Item the user acted on."""

    item_id: UUID


# =============================================================================
# Channel List
# =============================================================================

class ChannelAssignment(BaseModel):
    """A channel number to write back to one item."""

    model_config = {"frozen": True}

    item_id: str
    channel_number: int = Field(..., ge=1)


class ChannelReorderRequest(BaseModel):
    """
    Drag-and-drop reorder as reported by the sortable list: the dragged row
    (active_id) was dropped onto another row (over_id).
    """

    active_id: UUID
    over_id: UUID


class DuplicateChannel(BaseModel):
    """A channel number used by more than one item."""

    channel_number: int
    item_ids: list[str]


class ChannelListResponse(BaseModel):
    """Input list for the front-of-house engineer."""

    channel_items: list[StagePlotItem]
    unassigned_items: list[StagePlotItem]
    duplicate_channels: list[DuplicateChannel] = Field(default_factory=list)
    next_free_channel: int


class ChannelReorderResponse(BaseModel):
    """Assignments written by a reorder and the refreshed channel list."""

    assignments: list[ChannelAssignment]
    channel_list: ChannelListResponse


# =============================================================================
# Equipment List
# =============================================================================

class EquipmentRow(BaseModel):
    """One consolidated line of the printable equipment list."""

    model_config = {"frozen": True}

    icon_type: IconType
    label: str
    mic_type: MicType | None = None
    mic_label: str | None = None
    provided_by: ProvidedBy
    count: int = Field(..., ge=1)


class ProviderSummary(BaseModel):
    """Counts of who brings what."""

    model_config = {"frozen": True}

    total: int = 0
    artist: int = 0
    venue: int = 0
    unspecified: int = 0


class EquipmentListResponse(BaseModel):
    """Consolidated equipment list plus provider totals."""

    rows: list[EquipmentRow]
    summary: ProviderSummary
