# =============================================================================
# core/stage_plot/icons.py - Equipment Icon Catalog
# =============================================================================
# One definition per IconType with its palette label, palette category and
# capability tags. Field visibility in the editor (mic picker, pairing) and
# field validation in the item store both read the tags instead of comparing
# icon type strings.
# =============================================================================

from dataclasses import dataclass

from core.models.stage_plot import IconType, MicType

CATEGORY_LABELS: dict[str, str] = {
    "strings": "Strings",
    "keys": "Keys",
    "drums": "Drums & Percussion",
    "brass": "Brass & Wind",
    "audio": "Audio Equipment",
    "other": "Other",
}


@dataclass(frozen=True)
class IconDefinition:
    """Palette entry for one icon type."""

    type: IconType
    label: str
    category: str
    supports_mic_type: bool = False
    supports_pairing: bool = False


STAGE_ICONS: tuple[IconDefinition, ...] = (
    IconDefinition(IconType.GUITAR, "Guitar", "strings"),
    IconDefinition(IconType.BASS, "Bass", "strings"),
    IconDefinition(IconType.VIOLIN, "Violin", "strings"),
    IconDefinition(IconType.CELLO, "Cello", "strings"),
    IconDefinition(IconType.KEYBOARD, "Keyboard", "keys"),
    IconDefinition(IconType.PIANO, "Piano", "keys"),
    IconDefinition(IconType.DRUMS, "Drum Kit", "drums"),
    IconDefinition(IconType.PERCUSSION, "Percussion", "drums"),
    IconDefinition(IconType.SAXOPHONE, "Saxophone", "brass"),
    IconDefinition(IconType.TRUMPET, "Trumpet", "brass"),
    IconDefinition(IconType.TROMBONE, "Trombone", "brass"),
    IconDefinition(IconType.MIC_TALL, "Mic (Tall Stand)", "audio", supports_mic_type=True),
    IconDefinition(IconType.MIC_SHORT, "Mic (Short Stand)", "audio", supports_mic_type=True),
    IconDefinition(IconType.DI_BOX, "DI Box", "audio", supports_mic_type=True),
    IconDefinition(IconType.MONITOR, "Monitor Wedge", "audio", supports_pairing=True),
    IconDefinition(IconType.SUBWOOFER, "Subwoofer", "audio"),
    IconDefinition(IconType.AMP_GUITAR, "Guitar Amp", "audio"),
    IconDefinition(IconType.AMP_BASS, "Bass Amp", "audio"),
    IconDefinition(IconType.MIXER, "Mixer", "audio"),
    IconDefinition(IconType.LAPTOP, "Laptop", "other"),
    IconDefinition(IconType.PERSON, "Performer", "other"),
)

MIC_TYPES: tuple[tuple[MicType, str], ...] = (
    (MicType.SM58, "Shure SM58"),
    (MicType.SM57, "Shure SM57"),
    (MicType.BETA58, "Shure Beta 58A"),
    (MicType.BETA52, "Shure Beta 52A"),
    (MicType.BETA91, "Shure Beta 91A"),
    (MicType.E604, "Sennheiser e604"),
    (MicType.E609, "Sennheiser e609"),
    (MicType.E906, "Sennheiser e906"),
    (MicType.MD421, "Sennheiser MD 421"),
    (MicType.CONDENSER, "Condenser"),
    (MicType.RIBBON, "Ribbon"),
    (MicType.DI_ACTIVE, "Active DI"),
    (MicType.DI_PASSIVE, "Passive DI"),
    (MicType.WIRELESS, "Wireless"),
    (MicType.OTHER, "Other"),
)

_ICONS_BY_TYPE: dict[IconType, IconDefinition] = {icon.type: icon for icon in STAGE_ICONS}
_MIC_LABELS: dict[MicType, str] = dict(MIC_TYPES)


def get_icon(icon_type: IconType | str) -> IconDefinition:
    """
    Look up the definition for an icon type.

    Raises:
        ValueError: If the string is not a known icon type
    """
    return _ICONS_BY_TYPE[IconType(icon_type)]


def default_label_for(icon_type: IconType | str) -> str:
    """Name shown for an item that has no label of its own."""
    return get_icon(icon_type).label


def mic_label_for(mic_type: MicType | str | None) -> str | None:
    """Display name of a mic type, or None when no mic is set."""
    if mic_type is None:
        return None
    return _MIC_LABELS[MicType(mic_type)]


def supports_mic_type(icon_type: IconType | str) -> bool:
    return get_icon(icon_type).supports_mic_type


def supports_pairing(icon_type: IconType | str) -> bool:
    return get_icon(icon_type).supports_pairing


def search_icons(term: str = "") -> list[IconDefinition]:
    """
    Filter the palette by a case-insensitive substring of label or type.

    An empty term returns the whole catalog.
    """
    needle = term.strip().lower()
    if not needle:
        return list(STAGE_ICONS)
    return [
        icon for icon in STAGE_ICONS
        if needle in icon.label.lower() or needle in icon.type.value
    ]


def group_icons_by_category(icons: list[IconDefinition]) -> dict[str, list[IconDefinition]]:
    """Group palette entries by category, keeping catalog order in each group."""
    grouped: dict[str, list[IconDefinition]] = {}
    for icon in icons:
        grouped.setdefault(icon.category, []).append(icon)
    return grouped
