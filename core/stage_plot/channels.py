# =============================================================================
# core/stage_plot/channels.py - Channel List Derivation
# =============================================================================
# The channel (input) list is a projection of the item collection:
# - items with a channel number, ascending
# - items without one, in collection order
#
# A drag-and-drop reorder renumbers the channel items 1..N by their new
# position and reports only the items whose number changed, so the caller
# writes as little as possible. Duplicate numbers are reported but never
# corrected here; a reorder happens to resolve them.
#
# Derivations are memoised on the (immutable, hashable) item tuple.
# =============================================================================

from collections.abc import Iterable
from functools import lru_cache

from app.exceptions import ChannelReorderError
from core.models.editor import ChannelAssignment, DuplicateChannel
from core.models.stage_plot import StagePlotItem


@lru_cache(maxsize=128)
def _partition(items: tuple[StagePlotItem, ...]) -> tuple[tuple[StagePlotItem, ...], tuple[StagePlotItem, ...]]:
    assigned = sorted(
        (item for item in items if item.has_channel),
        key=lambda item: item.channel_number,
    )
    unassigned = tuple(item for item in items if not item.has_channel)
    return tuple(assigned), unassigned


def partition_channels(items: Iterable[StagePlotItem]) -> tuple[list[StagePlotItem], list[StagePlotItem]]:
    """
    Split items into (channel_items, unassigned_items).

    channel_items is sorted ascending by channel number (stable for ties);
    unassigned_items keeps the input order. Every item lands in exactly one list.
    """
    assigned, unassigned = _partition(tuple(items))
    return list(assigned), list(unassigned)


def array_move(items: list, old_index: int, new_index: int) -> list:
    """
    Move one element to a new index, shifting the others.

    Example:
        array_move(["a", "b", "c"], 2, 0)  # ["c", "a", "b"]
    """
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


def renumber(ordered_items: list[StagePlotItem]) -> list[ChannelAssignment]:
    """
    Number items 1..N by position and return the assignments that change
    an item's current channel number.
    """
    return [
        ChannelAssignment(item_id=item.id, channel_number=position)
        for position, item in enumerate(ordered_items, start=1)
        if item.channel_number != position
    ]


def plan_channel_reorder(
    channel_items: list[StagePlotItem],
    old_index: int,
    new_index: int,
) -> list[ChannelAssignment]:
    """
    Renumber the channel list after dragging the row at old_index to new_index.

    Raises:
        ChannelReorderError: If an index is outside the list
    """
    size = len(channel_items)
    if not (0 <= old_index < size and 0 <= new_index < size):
        raise ChannelReorderError(
            "Reorder index out of range",
            details={"old_index": old_index, "new_index": new_index, "size": size},
        )
    return renumber(array_move(channel_items, old_index, new_index))


def plan_channel_reorder_by_id(
    items: Iterable[StagePlotItem],
    active_id: str,
    over_id: str,
) -> list[ChannelAssignment]:
    """
    Reorder as reported by a sortable list: row active_id was dropped on over_id.

    Dropping a row onto itself changes nothing.

    Raises:
        ChannelReorderError: If either id has no channel number
    """
    channel_items, _ = partition_channels(items)
    ids = [item.id for item in channel_items]

    missing = [item_id for item_id in (active_id, over_id) if item_id not in ids]
    if missing:
        raise ChannelReorderError(
            "Item is not in the channel list",
            details={"item_ids": missing},
        )
    if active_id == over_id:
        return []

    return plan_channel_reorder(channel_items, ids.index(active_id), ids.index(over_id))


@lru_cache(maxsize=128)
def _duplicates(items: tuple[StagePlotItem, ...]) -> tuple[DuplicateChannel, ...]:
    by_channel: dict[int, list[str]] = {}
    for item in items:
        if item.has_channel:
            by_channel.setdefault(item.channel_number, []).append(item.id)
    return tuple(
        DuplicateChannel(channel_number=number, item_ids=item_ids)
        for number, item_ids in sorted(by_channel.items())
        if len(item_ids) > 1
    )


def find_duplicate_channels(items: Iterable[StagePlotItem]) -> list[DuplicateChannel]:
    """List channel numbers used by more than one item, ascending."""
    return list(_duplicates(tuple(items)))


def items_on_channel(
    items: Iterable[StagePlotItem],
    channel_number: int,
    exclude_id: str | None = None,
) -> list[StagePlotItem]:
    """Items already using a channel number, optionally ignoring one item."""
    return [
        item for item in items
        if item.channel_number == channel_number and item.id != exclude_id
    ]


def next_free_channel(items: Iterable[StagePlotItem]) -> int:
    """One past the highest channel in use (1 for an empty list)."""
    numbers = [item.channel_number for item in items if item.has_channel]
    return max(numbers, default=0) + 1
