# =============================================================================
# core/stage_plot/pairing.py - Editor Interaction State & Monitor Pairing
# =============================================================================
# The editor's interaction state is an explicit value instead of scattered
# UI variables:
#
#   InteractionState(selected_item_id, pairing, dragging_item_id)
#
# where `pairing` is one of
#
#   Idle                          - clicks select items
#   AwaitingPartner(source_id)    - the next click on another item pairs it
#
# Transitions are pure: they return a new state and, when a pair should be
# written, a PairEffect for the caller to apply. Abandoning a state needs no
# cleanup because no transition writes anything by itself.
# =============================================================================

from dataclasses import dataclass, field, replace

from app.exceptions import PairingStateError
from core.models.stage_plot import StagePlotItem
from core.stage_plot.icons import get_icon, supports_pairing


@dataclass(frozen=True)
class Idle:
    """No pairing in progress."""


@dataclass(frozen=True)
class AwaitingPartner:
    """Pairing started from source_item_id; waiting for the partner click."""

    source_item_id: str


PairingState = Idle | AwaitingPartner


@dataclass(frozen=True)
class PairEffect:
    """Link item_id and partner_id to each other."""

    item_id: str
    partner_id: str


@dataclass(frozen=True)
class InteractionState:
    """Everything the editor remembers between two user actions."""

    selected_item_id: str | None = None
    pairing: PairingState = field(default_factory=Idle)
    dragging_item_id: str | None = None

    @property
    def is_pairing(self) -> bool:
        return isinstance(self.pairing, AwaitingPartner)


def select_item(state: InteractionState, item_id: str | None) -> InteractionState:
    return replace(state, selected_item_id=item_id)


def start_pairing(state: InteractionState, item: StagePlotItem) -> InteractionState:
    """
    Idle --start_pairing(item)--> AwaitingPartner(item.id)

    Raises:
        PairingStateError: If a pairing is already in progress or the item
            can't be paired
    """
    if state.is_pairing:
        raise PairingStateError(
            "A pairing is already in progress",
            suggestion="Click the partner monitor or cancel the current pairing",
            details={"source_item_id": state.pairing.source_item_id},
        )
    if not supports_pairing(item.icon_type):
        raise PairingStateError(
            f"{get_icon(item.icon_type).label} items can't be paired",
            suggestion="Pairing is only available for monitor wedges",
            details={"item_id": item.id, "icon_type": item.icon_type.value},
        )
    return replace(state, selected_item_id=item.id, pairing=AwaitingPartner(item.id))


def click_item(state: InteractionState, item: StagePlotItem) -> tuple[InteractionState, PairEffect | None]:
    """
    Handle a click on an item.

    - Idle: the item becomes the selection.
    - AwaitingPartner(source), item is source: stays awaiting, item selected.
    - AwaitingPartner(source), another monitor: back to Idle with a PairEffect.

    Raises:
        PairingStateError: If a pairing is in progress and the clicked item
            can't be paired; the state is left as it was
    """
    pairing = state.pairing

    if isinstance(pairing, AwaitingPartner):
        if item.id == pairing.source_item_id:
            return replace(state, selected_item_id=item.id), None
        if not supports_pairing(item.icon_type):
            raise PairingStateError(
                f"{get_icon(item.icon_type).label} items can't be paired",
                suggestion="Click another monitor or cancel the current pairing",
                details={"item_id": item.id, "source_item_id": pairing.source_item_id},
            )
        effect = PairEffect(item_id=pairing.source_item_id, partner_id=item.id)
        return replace(state, pairing=Idle()), effect

    return replace(state, selected_item_id=item.id), None


def click_canvas(state: InteractionState) -> InteractionState:
    """A click on empty canvas clears the selection, except while pairing."""
    if state.is_pairing:
        return state
    return replace(state, selected_item_id=None)


def cancel_pairing(state: InteractionState) -> InteractionState:
    return replace(state, pairing=Idle())


def forget_item(state: InteractionState, item_id: str) -> InteractionState:
    """Drop every reference to a deleted item."""
    pairing = state.pairing
    if isinstance(pairing, AwaitingPartner) and pairing.source_item_id == item_id:
        pairing = Idle()
    return InteractionState(
        selected_item_id=None if state.selected_item_id == item_id else state.selected_item_id,
        pairing=pairing,
        dragging_item_id=None if state.dragging_item_id == item_id else state.dragging_item_id,
    )


def unpair_targets(item: StagePlotItem) -> tuple[str, str]:
    """
    Return (item_id, partner_id) whose pairing must be cleared.

    Raises:
        PairingStateError: If the item isn't paired
    """
    if not item.paired_with_id:
        raise PairingStateError(
            "Item is not paired",
            suggestion="Select a paired monitor to unpair it",
            details={"item_id": item.id},
        )
    return item.id, item.paired_with_id
