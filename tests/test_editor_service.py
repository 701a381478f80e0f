# =============================================================================
# tests/test_editor_service.py - Stage Plot Editor Tests
# =============================================================================
# The editor glues the pure canvas/pairing/channel logic to the item store.
# These tests drive it the way the routers do.
# =============================================================================

import pytest

from app.config import settings
from app.exceptions import PairingStateError, StagePlotItemNotFoundError
from core.models.editor import (
    CanvasRect,
    DropAction,
    DropRequest,
    DrumKitMode,
    DrumKitOptions,
    PairingMode,
)
from core.models.stage_plot import IconType, RotateDirection
from core.services.editor_service import (
    EditorSessionStore,
    StagePlotEditor,
    build_channel_list,
    build_equipment_list,
    editor_sessions,
)
from tests.conftest import USER_ID

CANVAS = CanvasRect(left=100, top=100, width=800, height=600)


@pytest.fixture
def editor(tech_spec_row):
    return StagePlotEditor(USER_ID, tech_spec_row["id"])


def drop(**fields) -> DropRequest:
    fields.setdefault("pointer_x", 500)
    fields.setdefault("pointer_y", 400)
    return DropRequest(canvas=CANVAS, **fields)


# =============================================================================
# Session Store
# =============================================================================

class TestEditorSessionStore:

    def test_states_are_per_user_and_tech_spec(self, fake_supabase, seed_item, tech_spec_row):
        monitor = seed_item(icon_type="monitor")
        mine = StagePlotEditor(USER_ID, tech_spec_row["id"])
        theirs = StagePlotEditor("someone-else", tech_spec_row["id"])

        mine.start_pairing(monitor["id"])

        assert mine.state.is_pairing
        assert not theirs.state.is_pairing
        assert len(editor_sessions) == 1

    def test_leave_discards_state(self, editor, seed_item):
        monitor = seed_item(icon_type="monitor")
        editor.start_pairing(monitor["id"])
        editor.leave()
        assert not editor.state.is_pairing

    def test_private_store(self, fake_supabase, seed_item, tech_spec_row):
        store = EditorSessionStore()
        editor = StagePlotEditor(USER_ID, tech_spec_row["id"], sessions=store)
        editor.start_pairing(seed_item(icon_type="monitor")["id"])
        assert len(store) == 1
        assert len(editor_sessions) == 0


# =============================================================================
# Canvas
# =============================================================================

class TestDrop:

    def test_palette_drop_creates_and_selects(self, editor, fake_supabase):
        outcome = editor.handle_drop(drop(icon_type="monitor"))

        assert outcome.action is DropAction.CREATED
        assert (outcome.position_x, outcome.position_y) == (50.0, 50.0)
        created = outcome.items[0]
        assert created.icon_type is IconType.MONITOR
        assert editor.state.selected_item_id == created.id

    def test_existing_item_moves(self, editor, fake_supabase, seed_item):
        row = seed_item(icon_type="guitar", position_x=10, position_y=10)
        outcome = editor.handle_drop(drop(item_id=row["id"], pointer_x=260, pointer_y=160))

        assert outcome.action is DropAction.MOVED
        assert fake_supabase.row("stage_plot_items", row["id"])["position_x"] == 20.0
        assert fake_supabase.row("stage_plot_items", row["id"])["position_y"] == 10.0
        assert len(fake_supabase.tables["stage_plot_items"]) == 1

    def test_drums_without_choice_writes_nothing(self, editor, fake_supabase):
        outcome = editor.handle_drop(drop(icon_type="drums"))
        assert outcome.action is DropAction.CHOICE_REQUIRED
        assert outcome.items == []
        assert fake_supabase.tables["stage_plot_items"] == []

    def test_drums_bare(self, editor, fake_supabase):
        outcome = editor.handle_drop(drop(icon_type="drums", drum_kit=DrumKitOptions(mode=DrumKitMode.BARE)))
        assert [i.icon_type for i in outcome.items] == [IconType.DRUMS]
        assert outcome.items[0].channel_number is None

    def test_drums_expanded(self, editor, fake_supabase, seed_item):
        seed_item(channel_number=4)
        outcome = editor.handle_drop(drop(icon_type="drums", drum_kit=DrumKitOptions()))

        assert outcome.action is DropAction.CREATED
        assert [i.channel_number for i in outcome.items] == list(range(5, 14))
        assert len(fake_supabase.tables["stage_plot_items"]) == 10

    def test_drums_expanded_reports_duplicates(self, editor, seed_item, monkeypatch):
        monkeypatch.setattr(settings, "CHANNEL_NUMBER_POLICY", "warn")
        seed_item(channel_number=1)
        outcome = editor.handle_drop(
            drop(icon_type="drums", drum_kit=DrumKitOptions(start_channel=1))
        )
        assert outcome.warnings == ["Channel 1 is assigned to 2 items"]

    def test_place_drum_kit_with_kit_icon(self, editor):
        created = editor.place_drum_kit(50, 50, DrumKitOptions(start_channel=10, include_kit_icon=True))
        assert created[0].icon_type is IconType.DRUMS
        assert [i.channel_number for i in created[1:]] == list(range(10, 19))


class TestRotateAndDelete:

    def test_rotate(self, editor, fake_supabase, seed_item):
        row = seed_item(icon_type="monitor", rotation=0)
        assert editor.rotate_item(row["id"], RotateDirection.LEFT).rotation == 345
        assert editor.rotate_item(row["id"], RotateDirection.RIGHT).rotation == 0

    def test_rotate_item_on_other_tech_spec(self, editor, fake_supabase):
        other = fake_supabase.seed("tech_specs", user_id=USER_ID, name="Other")
        row = fake_supabase.seed("stage_plot_items", tech_spec_id=other["id"], icon_type="guitar")
        with pytest.raises(StagePlotItemNotFoundError):
            editor.rotate_item(row["id"], RotateDirection.LEFT)

    def test_delete_pairing_source_resets_state(self, editor, fake_supabase, seed_item):
        monitor = seed_item(icon_type="monitor")
        editor.start_pairing(monitor["id"])
        editor.delete_item(monitor["id"])
        assert not editor.state.is_pairing
        assert editor.state.selected_item_id is None


# =============================================================================
# Pairing
# =============================================================================

class TestPairingFlow:

    def test_start_then_click_pairs(self, editor, fake_supabase, seed_item):
        a, b = seed_item(icon_type="monitor"), seed_item(icon_type="monitor")

        started = editor.start_pairing(a["id"])
        assert started.pairing is PairingMode.AWAITING_PARTNER
        assert started.source_item_id == a["id"]

        finished = editor.click(b["id"])
        assert finished.pairing is PairingMode.IDLE
        assert {i.id for i in finished.updated_items} == {a["id"], b["id"]}
        rows = fake_supabase.items()
        assert rows[a["id"]]["paired_with_id"] == b["id"]
        assert rows[b["id"]]["paired_with_id"] == a["id"]

    def test_click_source_does_not_pair(self, editor, fake_supabase, seed_item):
        a = seed_item(icon_type="monitor")
        editor.start_pairing(a["id"])
        response = editor.click(a["id"])
        assert response.pairing is PairingMode.AWAITING_PARTNER
        assert fake_supabase.row("stage_plot_items", a["id"])["paired_with_id"] is None

    def test_canvas_click_while_pairing(self, editor, seed_item):
        a = seed_item(icon_type="monitor")
        editor.start_pairing(a["id"])
        assert editor.click(None).pairing is PairingMode.AWAITING_PARTNER

    def test_canvas_click_clears_selection(self, editor, seed_item):
        a = seed_item(icon_type="guitar")
        editor.click(a["id"])
        assert editor.state.selected_item_id == a["id"]
        assert editor.click(None).selected_item_id is None

    def test_cancel(self, editor, fake_supabase, seed_item):
        a, b = seed_item(icon_type="monitor"), seed_item(icon_type="monitor")
        editor.start_pairing(a["id"])
        editor.cancel_pairing()
        editor.click(b["id"])
        assert fake_supabase.row("stage_plot_items", b["id"])["paired_with_id"] is None

    def test_start_on_guitar_rejected(self, editor, seed_item):
        guitar = seed_item(icon_type="guitar")
        with pytest.raises(PairingStateError):
            editor.start_pairing(guitar["id"])
        assert not editor.state.is_pairing

    def test_click_guitar_while_pairing(self, editor, fake_supabase, seed_item):
        monitor, guitar = seed_item(icon_type="monitor"), seed_item(icon_type="guitar")
        editor.start_pairing(monitor["id"])

        with pytest.raises(PairingStateError):
            editor.click(guitar["id"])

        assert editor.state.is_pairing
        assert editor.state.pairing.source_item_id == monitor["id"]
        assert fake_supabase.row("stage_plot_items", guitar["id"])["paired_with_id"] is None

    def test_unpair(self, editor, fake_supabase, seed_item):
        a, b = seed_item(icon_type="monitor"), seed_item(icon_type="monitor")
        editor.start_pairing(a["id"])
        editor.click(b["id"])

        response = editor.unpair(a["id"])

        assert len(response.updated_items) == 2
        assert all(row["paired_with_id"] is None for row in fake_supabase.tables["stage_plot_items"])


# =============================================================================
# Derived Lists
# =============================================================================

class TestDerivedLists:

    def test_channel_list(self, editor, seed_item):
        seed_item(channel_number=3)
        seed_item()
        seed_item(channel_number=1)

        channel_list = editor.channel_list()

        assert [i.channel_number for i in channel_list.channel_items] == [1, 3]
        assert len(channel_list.unassigned_items) == 1
        assert channel_list.next_free_channel == 4

    def test_reorder_renumbers_and_writes_changes(self, editor, fake_supabase, seed_item):
        a = seed_item(channel_number=2)
        b = seed_item(channel_number=5)
        c = seed_item(channel_number=9)

        response = editor.reorder_channels(c["id"], a["id"])

        assert {x.item_id: x.channel_number for x in response.assignments} == {c["id"]: 1, b["id"]: 3}
        assert [i.id for i in response.channel_list.channel_items] == [c["id"], a["id"], b["id"]]
        assert [i.channel_number for i in response.channel_list.channel_items] == [1, 2, 3]
        assert fake_supabase.row("stage_plot_items", a["id"])["channel_number"] == 2

    def test_equipment_list(self, editor, seed_item):
        for provider in ("artist", "artist", "venue", "artist"):
            seed_item(icon_type="mic_short", mic_type="sm58", provided_by=provider)

        equipment = editor.equipment_list()

        assert [(r.provided_by.value, r.count) for r in equipment.rows] == [("artist", 3), ("venue", 1)]
        assert equipment.summary.total == 4

    def test_builders_on_empty_stage(self):
        assert build_channel_list([]).next_free_channel == 1
        assert build_equipment_list([]).summary.total == 0
