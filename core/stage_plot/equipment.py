# =============================================================================
# core/stage_plot/equipment.py - Equipment List Consolidation
# =============================================================================
# Collapses visually identical items into counted rows for the printable
# equipment list. Two items are identical when they share
# (icon type, effective label, mic type, provider), where the effective label
# is the item's own label or the icon's default name.
# =============================================================================

from collections.abc import Iterable
from functools import lru_cache

from core.models.editor import EquipmentRow, ProviderSummary
from core.models.stage_plot import ProvidedBy, StagePlotItem
from core.stage_plot.icons import default_label_for, mic_label_for


def effective_label(item: StagePlotItem) -> str:
    return item.label or default_label_for(item.icon_type)


@lru_cache(maxsize=128)
def _consolidate(items: tuple[StagePlotItem, ...]) -> tuple[EquipmentRow, ...]:
    counts: dict[tuple, int] = {}
    for item in items:
        key = (item.icon_type, effective_label(item), item.mic_type, item.provided_by)
        counts[key] = counts.get(key, 0) + 1

    # dicts keep insertion order, so rows come out in first-seen order
    return tuple(
        EquipmentRow(
            icon_type=icon_type,
            label=label,
            mic_type=mic_type,
            mic_label=mic_label_for(mic_type),
            provided_by=provided_by,
            count=count,
        )
        for (icon_type, label, mic_type, provided_by), count in counts.items()
    )


def consolidate_equipment(items: Iterable[StagePlotItem]) -> list[EquipmentRow]:
    """
    Group identical items into rows with a count, in first-seen order.

    Example:
        three SM58 vocal mics from the artist and one from the venue
        -> [Mic (Short Stand) / SM58 / artist x3, Mic (Short Stand) / SM58 / venue x1]
    """
    return list(_consolidate(tuple(items)))


@lru_cache(maxsize=128)
def _summarize(items: tuple[StagePlotItem, ...]) -> ProviderSummary:
    return ProviderSummary(
        total=len(items),
        artist=sum(1 for item in items if item.provided_by is ProvidedBy.ARTIST),
        venue=sum(1 for item in items if item.provided_by is ProvidedBy.VENUE),
        unspecified=sum(1 for item in items if item.provided_by is ProvidedBy.UNSPECIFIED),
    )


def summarize_providers(items: Iterable[StagePlotItem]) -> ProviderSummary:
    """Count items per provider."""
    return _summarize(tuple(items))
