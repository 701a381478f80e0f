# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - stage_plot.py: Stage plot items and their enumerations
# - tech_spec.py: Tech spec documents, shared view, author profile
# - editor.py: Canvas, pairing, channel list and equipment list contracts
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Stage Plot Models
# -----------------------------------------------------------------------------
from .stage_plot import (
    IconType,
    MicType,
    ProvidedBy,
    RotateDirection,
    StagePlotItem,
    StagePlotItemCreate,
    StagePlotItemUpdate,
    to_db_fields,
)

# -----------------------------------------------------------------------------
# Tech Spec Models
# -----------------------------------------------------------------------------
from .tech_spec import (
    AuthorProfile,
    SharedTechSpec,
    TechSpec,
    TechSpecCreate,
    TechSpecUpdate,
)

# -----------------------------------------------------------------------------
# Editor Models
# -----------------------------------------------------------------------------
from .editor import (
    CanvasClickRequest,
    CanvasRect,
    ChannelAssignment,
    ChannelListResponse,
    ChannelReorderRequest,
    ChannelReorderResponse,
    DrumKitMode,
    DrumKitOptions,
    DrumKitRequest,
    DropAction,
    DropOutcome,
    DropRequest,
    DuplicateChannel,
    EditorStateResponse,
    EquipmentListResponse,
    EquipmentRow,
    PairingMode,
    PairingRequest,
    ProviderSummary,
    RotateRequest,
)

__all__ = [
    # Stage plot
    "IconType",
    "MicType",
    "ProvidedBy",
    "RotateDirection",
    "StagePlotItem",
    "StagePlotItemCreate",
    "StagePlotItemUpdate",
    "to_db_fields",
    # Tech spec
    "AuthorProfile",
    "SharedTechSpec",
    "TechSpec",
    "TechSpecCreate",
    "TechSpecUpdate",
    # Editor
    "CanvasClickRequest",
    "CanvasRect",
    "ChannelAssignment",
    "ChannelListResponse",
    "ChannelReorderRequest",
    "ChannelReorderResponse",
    "DrumKitMode",
    "DrumKitOptions",
    "DrumKitRequest",
    "DropAction",
    "DropOutcome",
    "DropRequest",
    "DuplicateChannel",
    "EditorStateResponse",
    "EquipmentListResponse",
    "EquipmentRow",
    "PairingMode",
    "PairingRequest",
    "ProviderSummary",
    "RotateRequest",
]
