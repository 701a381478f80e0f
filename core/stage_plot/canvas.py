# =============================================================================
# core/stage_plot/canvas.py - Canvas Geometry
# =============================================================================
# Pure functions behind the canvas interaction layer:
# - pointer coordinates -> canvas-relative percentages
# - 15 degree rotation steps that wrap at 360
# - the nine-position drum kit layout around a drop point
#
# Nothing here talks to Supabase; the editor service applies the results.
# =============================================================================

from dataclasses import dataclass

from core.models.editor import CanvasRect
from core.models.stage_plot import (
    IconType,
    MicType,
    RotateDirection,
    StagePlotItemCreate,
)

ROTATION_STEP_DEGREES = 15

# Drum kit mics are kept off the very edge of the stage
DRUM_KIT_MIN_PERCENT = 5.0
DRUM_KIT_MAX_PERCENT = 95.0


def pointer_to_percent(pointer_x: float, pointer_y: float, rect: CanvasRect) -> tuple[float, float]:
    """
    Convert a pointer position to percentages of the canvas box.

    Not clamped: a drop outside the canvas yields a value outside [0, 100],
    which only affects where the icon is drawn.

    Example:
        rect = CanvasRect(left=100, top=50, width=400, height=300)
        pointer_to_percent(300, 200, rect)  # (50.0, 50.0)
    """
    x = (pointer_x - rect.left) / rect.width * 100
    y = (pointer_y - rect.top) / rect.height * 100
    return x, y


def rotate(rotation: int, direction: RotateDirection | str) -> int:
    """
    Rotate one step left (counter-clockwise) or right, wrapping into [0, 360).

    Example:
        rotate(0, "left")    # 345
        rotate(350, "right") # 5
    """
    step = -ROTATION_STEP_DEGREES if RotateDirection(direction) is RotateDirection.LEFT else ROTATION_STEP_DEGREES
    return (rotation + step) % 360


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


@dataclass(frozen=True)
class DrumMicPosition:
    """One mic'd position of the drum kit, offset from the kit centre in percent."""

    label: str
    offset_x: float
    offset_y: float
    mic_type: MicType
    icon_type: IconType = IconType.MIC_SHORT


DRUM_KIT_LAYOUT: tuple[DrumMicPosition, ...] = (
    DrumMicPosition("Kick", 0, 15, MicType.BETA52),
    DrumMicPosition("Snare Top", -8, 5, MicType.SM57),
    DrumMicPosition("Snare Bottom", -8, 8, MicType.SM57),
    DrumMicPosition("Hi-Hat", -15, 0, MicType.CONDENSER),
    DrumMicPosition("Rack Tom 1", -5, -5, MicType.E609),
    DrumMicPosition("Rack Tom 2", 5, -5, MicType.E609),
    DrumMicPosition("Floor Tom", 12, 5, MicType.E609),
    DrumMicPosition("OH Left", -12, -12, MicType.CONDENSER, IconType.MIC_TALL),
    DrumMicPosition("OH Right", 12, -12, MicType.CONDENSER, IconType.MIC_TALL),
)


def build_drum_kit(
    center_x: float,
    center_y: float,
    start_channel: int,
    include_kit_icon: bool = False,
) -> list[StagePlotItemCreate]:
    """
    Lay out a mic'd drum kit around a drop point.

    Produces one item per DRUM_KIT_LAYOUT entry with channels
    start_channel .. start_channel + 8 in layout order. Positions are clamped
    to [5, 95]. With include_kit_icon the kit body itself is placed first, at
    the drop point and without a channel.

    Example:
        payloads = build_drum_kit(50, 40, start_channel=1)
        [p.channel_number for p in payloads]  # [1, 2, ..., 9]
    """
    if start_channel < 1:
        raise ValueError("start_channel must be a positive channel number")

    payloads: list[StagePlotItemCreate] = []

    if include_kit_icon:
        payloads.append(StagePlotItemCreate(
            icon_type=IconType.DRUMS,
            position_x=center_x,
            position_y=center_y,
            label="Drum Kit",
        ))

    for index, mic in enumerate(DRUM_KIT_LAYOUT):
        payloads.append(StagePlotItemCreate(
            icon_type=mic.icon_type,
            position_x=clamp(center_x + mic.offset_x, DRUM_KIT_MIN_PERCENT, DRUM_KIT_MAX_PERCENT),
            position_y=clamp(center_y + mic.offset_y, DRUM_KIT_MIN_PERCENT, DRUM_KIT_MAX_PERCENT),
            label=mic.label,
            channel_number=start_channel + index,
            mic_type=mic.mic_type,
        ))

    return payloads
