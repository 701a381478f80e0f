# =============================================================================
# core/services/editor_service.py - Stage Plot Editor Controller
# =============================================================================
# Connects the pure stage plot logic (canvas, pairing, channels, equipment)
# to the item store.
#
# Each (user, tech spec) pair has one InteractionState held in an
# in-process registry. States are plain values, so leaving the editor
# needs no cleanup: the entry is simply overwritten or discarded.
# =============================================================================

import logging
from uuid import UUID

from core.models.editor import (
    ChannelListResponse,
    ChannelReorderResponse,
    DropAction,
    DropOutcome,
    DropRequest,
    DrumKitMode,
    DrumKitOptions,
    EditorStateResponse,
    EquipmentListResponse,
    PairingMode,
)
from core.models.stage_plot import IconType, RotateDirection, StagePlotItem
from core.services.item_service import ItemService
from core.stage_plot import pairing
from core.stage_plot.canvas import build_drum_kit, pointer_to_percent, rotate
from core.stage_plot.channels import (
    find_duplicate_channels,
    next_free_channel,
    partition_channels,
    plan_channel_reorder_by_id,
)
from core.stage_plot.equipment import consolidate_equipment, summarize_providers
from core.stage_plot.pairing import AwaitingPartner, InteractionState
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


class EditorSessionStore:
    """In-process registry of interaction states keyed by (user_id, tech_spec_id)."""

    def __init__(self):
        self._states: dict[tuple[str, str], InteractionState] = {}

    def get(self, user_id: str, tech_spec_id: str) -> InteractionState:
        return self._states.get((user_id, tech_spec_id), InteractionState())

    def put(self, user_id: str, tech_spec_id: str, state: InteractionState) -> None:
        self._states[(user_id, tech_spec_id)] = state

    def discard(self, user_id: str, tech_spec_id: str) -> None:
        self._states.pop((user_id, tech_spec_id), None)

    def clear(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)


# Shared by every request handled by this process
editor_sessions = EditorSessionStore()


def build_channel_list(items: list[StagePlotItem]) -> ChannelListResponse:
    """Channel list view of a set of items."""
    channel_items, unassigned_items = partition_channels(items)
    return ChannelListResponse(
        channel_items=channel_items,
        unassigned_items=unassigned_items,
        duplicate_channels=find_duplicate_channels(items),
        next_free_channel=next_free_channel(items),
    )


def build_equipment_list(items: list[StagePlotItem]) -> EquipmentListResponse:
    """Consolidated equipment list view of a set of items."""
    return EquipmentListResponse(
        rows=consolidate_equipment(items),
        summary=summarize_providers(items),
    )


class StagePlotEditor:
    """
    One user's editor on one tech spec.

    The caller is expected to have checked that the user owns the tech spec.

    Example:
        editor = StagePlotEditor(user_id, tech_spec_id)
        editor.start_pairing(monitor_a)
        editor.click(monitor_b)   # pairs A <-> B
    """

    def __init__(
        self,
        user_id: str | UUID,
        tech_spec_id: str | UUID,
        sessions: EditorSessionStore | None = None,
    ):
        self.user_id = normalize_uuid(user_id)
        self.tech_spec_id = normalize_uuid(tech_spec_id)
        self.sessions = sessions if sessions is not None else editor_sessions

    @property
    def state(self) -> InteractionState:
        return self.sessions.get(self.user_id, self.tech_spec_id)

    def _save(self, state: InteractionState) -> InteractionState:
        self.sessions.put(self.user_id, self.tech_spec_id, state)
        return state

    def state_response(self, updated_items: list[StagePlotItem] | None = None) -> EditorStateResponse:
        state = self.state
        source = state.pairing.source_item_id if isinstance(state.pairing, AwaitingPartner) else None
        return EditorStateResponse(
            pairing=PairingMode.AWAITING_PARTNER if source else PairingMode.IDLE,
            source_item_id=source,
            selected_item_id=state.selected_item_id,
            updated_items=updated_items or [],
        )

    def leave(self) -> None:
        """Forget this editor's state (user navigated away)."""
        self.sessions.discard(self.user_id, self.tech_spec_id)

    # -------------------------------------------------------------------------
    # Canvas
    # -------------------------------------------------------------------------

    def handle_drop(self, request: DropRequest) -> DropOutcome:
        """
        Apply a drag that ended over the canvas.

        - an existing item moves to the drop point
        - a palette icon is created there and selected
        - the drum kit icon needs a bare/expanded choice; without one nothing
          is written and CHOICE_REQUIRED is returned
        """
        position_x, position_y = pointer_to_percent(request.pointer_x, request.pointer_y, request.canvas)

        if request.item_id is not None:
            moved = ItemService.update_item(
                normalize_uuid(request.item_id),
                {"position_x": position_x, "position_y": position_y},
                tech_spec_id=self.tech_spec_id,
            )
            return DropOutcome(
                action=DropAction.MOVED,
                position_x=position_x,
                position_y=position_y,
                items=[moved],
            )

        if request.icon_type is IconType.DRUMS:
            if request.drum_kit is None:
                return DropOutcome(
                    action=DropAction.CHOICE_REQUIRED,
                    position_x=position_x,
                    position_y=position_y,
                )
            if request.drum_kit.mode is DrumKitMode.EXPANDED:
                created = self.place_drum_kit(position_x, position_y, request.drum_kit)
                return DropOutcome(
                    action=DropAction.CREATED,
                    position_x=position_x,
                    position_y=position_y,
                    items=created,
                    warnings=ItemService.channel_warnings(ItemService.list_items(self.tech_spec_id)),
                )

        item = ItemService.create_item(self.tech_spec_id, request.icon_type, position_x, position_y)
        self._save(pairing.select_item(self.state, item.id))
        return DropOutcome(
            action=DropAction.CREATED,
            position_x=position_x,
            position_y=position_y,
            items=[item],
        )

    def place_drum_kit(
        self,
        center_x: float,
        center_y: float,
        options: DrumKitOptions | None = None,
    ) -> list[StagePlotItem]:
        """
        Place the nine-mic drum kit around a point with consecutive channels.

        Channels start at options.start_channel, or one past the highest
        channel already used.
        """
        options = options or DrumKitOptions()

        if options.mode is DrumKitMode.BARE:
            return [ItemService.create_item(self.tech_spec_id, IconType.DRUMS, center_x, center_y)]

        start_channel = options.start_channel
        if start_channel is None:
            start_channel = next_free_channel(ItemService.list_items(self.tech_spec_id))

        payloads = build_drum_kit(center_x, center_y, start_channel, include_kit_icon=options.include_kit_icon)
        created = ItemService.create_items(self.tech_spec_id, payloads)
        logger.info(
            f"Placed drum kit on tech spec {self.tech_spec_id} "
            f"(channels {start_channel}-{start_channel + 8})"
        )
        return created

    def rotate_item(self, item_id: str | UUID, direction: RotateDirection) -> StagePlotItem:
        """Turn an item one 15 degree step."""
        item = ItemService.get_item(normalize_uuid(item_id), tech_spec_id=self.tech_spec_id)
        return ItemService.update_item(
            item.id,
            {"rotation": rotate(item.rotation, direction)},
            tech_spec_id=self.tech_spec_id,
        )

    def delete_item(self, item_id: str | UUID) -> StagePlotItem:
        """Delete an item and drop it from the interaction state."""
        deleted = ItemService.delete_item(normalize_uuid(item_id), tech_spec_id=self.tech_spec_id)
        self._save(pairing.forget_item(self.state, deleted.id))
        return deleted

    # -------------------------------------------------------------------------
    # Selection & Pairing
    # -------------------------------------------------------------------------

    def click(self, item_id: str | UUID | None) -> EditorStateResponse:
        """
        Click on an item, or on empty canvas when item_id is None.

        While a pairing is in progress, clicking another item completes it.
        """
        if item_id is None:
            self._save(pairing.click_canvas(self.state))
            return self.state_response()

        item = ItemService.get_item(normalize_uuid(item_id), tech_spec_id=self.tech_spec_id)
        new_state, effect = pairing.click_item(self.state, item)

        updated: list[StagePlotItem] = []
        if effect is not None:
            updated = ItemService.pair_items(effect.item_id, effect.partner_id, tech_spec_id=self.tech_spec_id)

        self._save(new_state)
        return self.state_response(updated)

    def start_pairing(self, item_id: str | UUID) -> EditorStateResponse:
        item = ItemService.get_item(normalize_uuid(item_id), tech_spec_id=self.tech_spec_id)
        self._save(pairing.start_pairing(self.state, item))
        logger.debug(f"Pairing started from {item.id}")
        return self.state_response()

    def cancel_pairing(self) -> EditorStateResponse:
        self._save(pairing.cancel_pairing(self.state))
        return self.state_response()

    def unpair(self, item_id: str | UUID) -> EditorStateResponse:
        updated = ItemService.unpair_item(normalize_uuid(item_id), tech_spec_id=self.tech_spec_id)
        return self.state_response(updated)

    # -------------------------------------------------------------------------
    # Derived lists
    # -------------------------------------------------------------------------

    def channel_list(self) -> ChannelListResponse:
        return build_channel_list(ItemService.list_items(self.tech_spec_id))

    def reorder_channels(self, active_id: str | UUID, over_id: str | UUID) -> ChannelReorderResponse:
        """
        Move row active_id to where over_id is and renumber 1..N.

        Only items whose number changed are written.
        """
        items = ItemService.list_items(self.tech_spec_id)
        assignments = plan_channel_reorder_by_id(items, normalize_uuid(active_id), normalize_uuid(over_id))
        updated = ItemService.apply_channel_assignments(self.tech_spec_id, assignments)

        by_id = {item.id: item for item in updated}
        refreshed = [by_id.get(item.id, item) for item in items]
        # Items the store didn't echo back still get their new number locally
        numbers = {assignment.item_id: assignment.channel_number for assignment in assignments}
        refreshed = [
            item if item.id in by_id or item.id not in numbers
            else item.model_copy(update={"channel_number": numbers[item.id]})
            for item in refreshed
        ]

        return ChannelReorderResponse(
            assignments=assignments,
            channel_list=build_channel_list(refreshed),
        )

    def equipment_list(self) -> EquipmentListResponse:
        return build_equipment_list(ItemService.list_items(self.tech_spec_id))
