# =============================================================================
# core/stage_plot/ - Stage Plot Logic
# =============================================================================
# Framework-free building blocks of the stage plot editor:
# - icons.py: icon catalog with capability tags, mic catalog
# - canvas.py: pointer normalization, rotation, drum kit layout
# - pairing.py: interaction state and the monitor pairing state machine
# - channels.py: channel list partition, reorder renumbering, duplicates
# - equipment.py: consolidated equipment list and provider summary
#
# Nothing in this package reads or writes Supabase.
# =============================================================================

from .canvas import build_drum_kit, pointer_to_percent, rotate
from .channels import (
    find_duplicate_channels,
    next_free_channel,
    partition_channels,
    plan_channel_reorder,
    plan_channel_reorder_by_id,
)
from .equipment import consolidate_equipment, summarize_providers
from .icons import (
    MIC_TYPES,
    STAGE_ICONS,
    IconDefinition,
    default_label_for,
    search_icons,
)
from .pairing import AwaitingPartner, Idle, InteractionState, PairEffect

__all__ = [
    "build_drum_kit",
    "pointer_to_percent",
    "rotate",
    "find_duplicate_channels",
    "next_free_channel",
    "partition_channels",
    "plan_channel_reorder",
    "plan_channel_reorder_by_id",
    "consolidate_equipment",
    "summarize_providers",
    "MIC_TYPES",
    "STAGE_ICONS",
    "IconDefinition",
    "default_label_for",
    "search_icons",
    "AwaitingPartner",
    "Idle",
    "InteractionState",
    "PairEffect",
]
