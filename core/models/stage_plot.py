# =============================================================================
# core/models/stage_plot.py - Stage Plot Item Schemas
# =============================================================================
# These models define the contract for stage plot items:
# - IconType / MicType / ProvidedBy: closed enumerations stored as text
# - StagePlotItem: one piece of equipment placed on a tech spec's stage
# - StagePlotItemCreate / StagePlotItemUpdate: write payloads
#
# Positions are percentages of the canvas (0,0 = top-left). Items are
# immutable; edits produce a new instance with model_copy(update=...), which
# keeps them hashable for the memoised channel/equipment derivations.
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class IconType(str, Enum):
    """Equipment categories that can be dropped on the stage."""
    GUITAR = "guitar"
    BASS = "bass"
    VIOLIN = "violin"
    CELLO = "cello"
    KEYBOARD = "keyboard"
    PIANO = "piano"
    DRUMS = "drums"
    PERCUSSION = "percussion"
    SAXOPHONE = "saxophone"
    TRUMPET = "trumpet"
    TROMBONE = "trombone"
    MIC_TALL = "mic_tall"
    MIC_SHORT = "mic_short"
    DI_BOX = "di_box"
    MONITOR = "monitor"
    SUBWOOFER = "subwoofer"
    AMP_GUITAR = "amp_guitar"
    AMP_BASS = "amp_bass"
    MIXER = "mixer"
    LAPTOP = "laptop"
    PERSON = "person"


class MicType(str, Enum):
    """Microphones and DI boxes offered in the mic picker."""
    SM58 = "sm58"
    SM57 = "sm57"
    BETA58 = "beta58"
    BETA52 = "beta52"
    BETA91 = "beta91"
    E604 = "e604"
    E609 = "e609"
    E906 = "e906"
    MD421 = "md421"
    CONDENSER = "condenser"
    RIBBON = "ribbon"
    DI_ACTIVE = "di_active"
    DI_PASSIVE = "di_passive"
    WIRELESS = "wireless"
    OTHER = "other"


class ProvidedBy(str, Enum):
    """
    Who brings the equipment.

    UNSPECIFIED is stored as NULL in the provided_by column.
    """
    ARTIST = "artist"
    VENUE = "venue"
    UNSPECIFIED = "unspecified"


class RotateDirection(str, Enum):
    """Direction of a single 15 degree rotation step."""
    LEFT = "left"
    RIGHT = "right"


def _none_to_unspecified(value: Any) -> Any:
    return ProvidedBy.UNSPECIFIED if value is None else value


class StagePlotItem(BaseModel):
    """
    A piece of equipment placed on a stage plot.

    Built from a `stage_plot_items` row via StagePlotItem.from_db_row().

    Example:
        {
            "id": "7d1f...",
            "tech_spec_id": "550e...",
            "icon_type": "mic_short",
            "label": "Snare Top",
            "position_x": 42.0,
            "position_y": 55.0,
            "rotation": 0,
            "provided_by": "artist",
            "mic_type": "sm57",
            "channel_number": 2,
            "phantom_power": false,
            "insert_required": true,
            "monitor_mixes": ["Drums"],
            "fx_sends": [],
            "paired_with_id": null,
            "notes": null
        }
    """

    model_config = {"frozen": True, "extra": "ignore"}

    id: str = Field(..., description="Store-generated item identifier")
    tech_spec_id: str = Field(..., description="Owning tech spec")
    icon_type: IconType
    label: str | None = Field(default=None, description="Overrides the icon's default name")

    position_x: float = Field(default=0.0, description="Percent of canvas width from the left")
    position_y: float = Field(default=0.0, description="Percent of canvas height from the top")
    rotation: int = Field(default=0, ge=0, lt=360, description="Degrees clockwise")

    provided_by: ProvidedBy = ProvidedBy.UNSPECIFIED
    mic_type: MicType | None = None

    channel_number: int | None = Field(default=None, ge=1)
    phantom_power: bool = False
    insert_required: bool = False
    monitor_mixes: tuple[str, ...] = ()
    fx_sends: tuple[str, ...] = ()

    paired_with_id: str | None = None
    notes: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("provided_by", mode="before")
    @classmethod
    def _provided_by_default(cls, value: Any) -> Any:
        return _none_to_unspecified(value)

    @field_validator("rotation", mode="before")
    @classmethod
    def _rotation_default(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("phantom_power", "insert_required", mode="before")
    @classmethod
    def _flag_default(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("monitor_mixes", "fx_sends", mode="before")
    @classmethod
    def _list_default(cls, value: Any) -> Any:
        return () if value is None else value

    @field_validator("id", "tech_spec_id", "paired_with_id", mode="before")
    @classmethod
    def _uuid_to_str(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "StagePlotItem":
        """Create an item from a Supabase row."""
        return cls.model_validate(row)

    @property
    def has_channel(self) -> bool:
        """Channel settings (48V, insert) only apply once a channel is set."""
        return self.channel_number is not None


class StagePlotItemCreate(BaseModel):
    """
    Payload for placing a new item on the stage.

    Example:
        {
            "icon_type": "monitor",
            "position_x": 30.0,
            "position_y": 85.0,
            "label": "Vocal Wedge"
        }
    """

    icon_type: IconType
    position_x: float
    position_y: float
    label: str | None = Field(default=None, max_length=120)
    rotation: int = Field(default=0, ge=0, lt=360)
    provided_by: ProvidedBy = ProvidedBy.UNSPECIFIED
    mic_type: MicType | None = None
    channel_number: int | None = Field(default=None, ge=1)
    phantom_power: bool = False
    insert_required: bool = False
    monitor_mixes: list[str] = Field(default_factory=list)
    fx_sends: list[str] = Field(default_factory=list)
    notes: str | None = None


class StagePlotItemUpdate(BaseModel):
    """
    Partial update for an item. Only fields that are explicitly sent are
    written; send null to clear an optional field.

    Example:
        {"channel_number": 4, "phantom_power": true}
    """

    icon_type: IconType | None = None
    label: str | None = Field(default=None, max_length=120)
    position_x: float | None = None
    position_y: float | None = None
    rotation: int | None = Field(default=None, ge=0, lt=360)
    provided_by: ProvidedBy | None = None
    mic_type: MicType | None = None
    channel_number: int | None = Field(default=None, ge=1)
    phantom_power: bool | None = None
    insert_required: bool | None = None
    monitor_mixes: list[str] | None = None
    fx_sends: list[str] | None = None
    notes: str | None = None

    @model_validator(mode="after")
    def _no_null_for_required_columns(self) -> "StagePlotItemUpdate":
        for name in ("icon_type", "position_x", "position_y", "rotation"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Return only the fields the caller sent."""
        return self.model_dump(exclude_unset=True)


def to_db_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """
    Convert model values into column values for stage_plot_items.

    Enums become their text value, UNSPECIFIED becomes NULL and tuples
    become lists.
    """
    row: dict[str, Any] = {}
    for key, value in fields.items():
        if value is ProvidedBy.UNSPECIFIED:
            value = None
        elif isinstance(value, Enum):
            value = value.value
        elif isinstance(value, tuple):
            value = list(value)
        row[key] = value
    return row
