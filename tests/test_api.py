# =============================================================================
# tests/test_api.py - HTTP API Tests
# =============================================================================
# End-to-end through FastAPI's TestClient with authentication overridden
# and the in-memory Supabase from conftest.py behind the services.
# =============================================================================

from unittest.mock import MagicMock, patch
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from app.auth import AuthUser, get_current_user
from app.main import app
from core.services.editor_service import editor_sessions
from tests.conftest import OTHER_USER_ID, USER_ID

API = "/api/v1"


@pytest.fixture
def client(fake_supabase):
    app.dependency_overrides[get_current_user] = lambda: AuthUser(id=UUID(USER_ID), email="sam@example.com")
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def spec_url(tech_spec_row):
    return f"{API}/tech-specs/{tech_spec_row['id']}"


def canvas_drop(**fields):
    body = {
        "pointer_x": 500,
        "pointer_y": 400,
        "canvas": {"left": 100, "top": 100, "width": 800, "height": 600},
    }
    body.update(fields)
    return body


# =============================================================================
# Public Endpoints
# =============================================================================

class TestPublicEndpoints:

    def test_root(self, client):
        assert client.get("/").status_code == 200

    def test_palette(self, client):
        response = client.get(f"{API}/icons")
        assert response.status_code == 200
        data = response.json()
        assert [c["category"] for c in data["categories"]][0] == "strings"
        assert len(data["mic_types"]) == 15

    def test_palette_search(self, client):
        data = client.get(f"{API}/icons", params={"search": "wedge"}).json()
        assert len(data["categories"]) == 1
        assert data["categories"][0]["icons"][0]["type"] == "monitor"
        assert data["categories"][0]["icons"][0]["supports_pairing"] is True

    def test_unauthenticated_request_rejected(self, fake_supabase):
        with TestClient(app) as anonymous:
            response = anonymous.get(f"{API}/tech-specs")
        assert response.status_code in (401, 403)


# =============================================================================
# Tech Specs
# =============================================================================

class TestTechSpecEndpoints:

    def test_create_and_list(self, client):
        created = client.post(f"{API}/tech-specs", json={"name": "  Club Night ", "description": "Trio"})
        assert created.status_code == 201
        assert created.json()["name"] == "Club Night"

        listed = client.get(f"{API}/tech-specs").json()
        assert listed["count"] == 1
        assert listed["tech_specs"][0]["id"] == created.json()["id"]

    def test_blank_name_is_422(self, client):
        assert client.post(f"{API}/tech-specs", json={"name": "   "}).status_code == 422

    def test_someone_elses_tech_spec_is_404(self, client, fake_supabase):
        foreign = fake_supabase.seed("tech_specs", user_id=OTHER_USER_ID, name="Theirs")
        response = client.get(f"{API}/tech-specs/{foreign['id']}")
        assert response.status_code == 404
        assert response.json()["code"] == "TECH_SPEC_NOT_FOUND"

    def test_invalid_uuid_is_422(self, client):
        assert client.get(f"{API}/tech-specs/not-a-uuid").status_code == 422

    def test_update(self, client, spec_url):
        response = client.patch(spec_url, json={"stage_width": 1200})
        assert response.status_code == 200
        assert response.json()["stage_width"] == 1200

    def test_delete(self, client, spec_url, fake_supabase):
        assert client.delete(spec_url).status_code == 200
        assert fake_supabase.tables["tech_specs"] == []

    def test_share_and_public_view(self, client, spec_url, seed_item, tech_spec_row):
        seed_item(icon_type="mic_short", mic_type="sm58", channel_number=2, provided_by="artist")
        seed_item(icon_type="monitor")

        shared = client.post(f"{spec_url}/share", json={"is_publicly_shared": True}).json()
        assert shared["is_publicly_shared"] is True
        assert shared["share_path"] == f"/shared/{tech_spec_row['share_token']}"

        public = client.get(f"{API}/shared/{tech_spec_row['share_token']}")
        assert public.status_code == 200
        body = public.json()
        assert body["tech_spec"]["name"] == "Summer Tour 2025"
        assert len(body["items"]) == 2
        assert body["channel_list"]["next_free_channel"] == 3
        assert body["equipment_list"]["summary"]["total"] == 2

    def test_unshared_public_view_is_404(self, client, tech_spec_row):
        response = client.get(f"{API}/shared/{tech_spec_row['share_token']}")
        assert response.status_code == 404

    def test_unknown_share_token(self, client):
        assert client.get(f"{API}/shared/{uuid4()}").status_code == 404

    def test_shared_view_outage_is_502(self, client, fake_supabase, tech_spec_row):
        fake_supabase.errors[("rpc", "get_shared_tech_spec")] = Exception("connection refused")
        response = client.get(f"{API}/shared/{tech_spec_row['share_token']}")
        assert response.status_code == 502
        assert response.json()["code"] == "REMOTE_STORE_ERROR"


# =============================================================================
# Items
# =============================================================================

class TestItemEndpoints:

    def test_create_and_list(self, client, spec_url):
        response = client.post(f"{spec_url}/items", json={
            "icon_type": "mic_tall",
            "position_x": 50,
            "position_y": 20,
            "mic_type": "sm58",
            "channel_number": 1,
            "phantom_power": False,
        })
        assert response.status_code == 201
        item = response.json()["item"]
        assert item["provided_by"] == "unspecified"

        listed = client.get(f"{spec_url}/items").json()
        assert listed["count"] == 1

    def test_invalid_field_is_422(self, client, spec_url):
        response = client.post(f"{spec_url}/items", json={
            "icon_type": "guitar",
            "position_x": 50,
            "position_y": 20,
            "mic_type": "sm58",
        })
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_ITEM_FIELD"

    def test_duplicate_channel_warning(self, client, spec_url, seed_item, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "CHANNEL_NUMBER_POLICY", "warn")
        seed_item(channel_number=3)
        response = client.post(f"{spec_url}/items", json={
            "icon_type": "mic_short", "position_x": 1, "position_y": 1, "channel_number": 3,
        })
        assert response.json()["warnings"] == ["Channel 3 is assigned to 2 items"]

    def test_duplicate_channel_rejected(self, client, spec_url, seed_item, monkeypatch):
        from app.config import settings
        monkeypatch.setattr(settings, "CHANNEL_NUMBER_POLICY", "reject")
        seed_item(channel_number=3)
        response = client.post(f"{spec_url}/items", json={
            "icon_type": "mic_short", "position_x": 1, "position_y": 1, "channel_number": 3,
        })
        assert response.status_code == 409

    def test_patch_clear_channel(self, client, spec_url, seed_item):
        row = seed_item(channel_number=4, phantom_power=True)
        response = client.patch(f"{spec_url}/items/{row['id']}", json={"channel_number": None})
        assert response.status_code == 200
        item = response.json()["item"]
        assert item["channel_number"] is None
        assert item["phantom_power"] is False

    def test_delete_reports_unpaired_partner(self, client, spec_url, seed_item):
        a, b = seed_item(icon_type="monitor"), seed_item(icon_type="monitor")
        client.post(f"{spec_url}/pairing/start", json={"item_id": a["id"]})
        client.post(f"{spec_url}/pairing/click", json={"item_id": b["id"]})

        response = client.delete(f"{spec_url}/items/{a['id']}")

        assert response.json() == {"item_id": a["id"], "unpaired_item_id": b["id"], "message": "Item deleted"}

    def test_missing_item_is_404(self, client, spec_url):
        response = client.patch(f"{spec_url}/items/{uuid4()}", json={"label": "x"})
        assert response.status_code == 404


# =============================================================================
# Canvas, Pairing, Channels
# =============================================================================

class TestEditorEndpoints:

    def test_drop_from_palette(self, client, spec_url):
        response = client.post(f"{spec_url}/canvas/drop", json=canvas_drop(icon_type="monitor"))
        body = response.json()
        assert body["action"] == "created"
        assert (body["position_x"], body["position_y"]) == (50.0, 50.0)

        pairing = client.get(f"{spec_url}/pairing").json()
        assert pairing["selected_item_id"] == body["items"][0]["id"]

    def test_drop_drums_asks_for_choice(self, client, spec_url):
        body = client.post(f"{spec_url}/canvas/drop", json=canvas_drop(icon_type="drums")).json()
        assert body["action"] == "choice_required"
        assert body["items"] == []

    def test_drum_kit(self, client, spec_url):
        response = client.post(f"{spec_url}/canvas/drum-kit", json={
            "center_x": 50, "center_y": 40, "options": {"start_channel": 1},
        })
        items = response.json()["items"]
        assert [i["channel_number"] for i in items] == list(range(1, 10))

    def test_rotate(self, client, spec_url, seed_item):
        row = seed_item(icon_type="monitor")
        response = client.post(f"{spec_url}/items/{row['id']}/rotate", json={"direction": "left"})
        assert response.json()["rotation"] == 345

    def test_pairing_flow(self, client, spec_url, seed_item, fake_supabase):
        a, b = seed_item(icon_type="monitor"), seed_item(icon_type="monitor")

        started = client.post(f"{spec_url}/pairing/start", json={"item_id": a["id"]}).json()
        assert started["pairing"] == "awaiting_partner"

        done = client.post(f"{spec_url}/pairing/click", json={"item_id": b["id"]}).json()
        assert done["pairing"] == "idle"
        assert fake_supabase.row("stage_plot_items", a["id"])["paired_with_id"] == b["id"]

        unpaired = client.post(f"{spec_url}/items/{b['id']}/unpair")
        assert unpaired.status_code == 200
        assert fake_supabase.row("stage_plot_items", a["id"])["paired_with_id"] is None

    def test_start_pairing_on_guitar_is_409(self, client, spec_url, seed_item):
        row = seed_item(icon_type="guitar")
        response = client.post(f"{spec_url}/pairing/start", json={"item_id": row["id"]})
        assert response.status_code == 409
        assert response.json()["code"] == "PAIRING_STATE_ERROR"

    def test_pairing_with_guitar_is_409(self, client, spec_url, seed_item):
        monitor, guitar = seed_item(icon_type="monitor"), seed_item(icon_type="guitar")
        client.post(f"{spec_url}/pairing/start", json={"item_id": monitor["id"]})

        response = client.post(f"{spec_url}/pairing/click", json={"item_id": guitar["id"]})

        assert response.status_code == 409
        assert response.json()["code"] == "PAIRING_STATE_ERROR"
        assert client.get(f"{spec_url}/pairing").json()["pairing"] == "awaiting_partner"

    def test_cancel_pairing(self, client, spec_url, seed_item):
        row = seed_item(icon_type="monitor")
        client.post(f"{spec_url}/pairing/start", json={"item_id": row["id"]})
        assert client.post(f"{spec_url}/pairing/cancel").json()["pairing"] == "idle"

    def test_malformed_body_ids_are_422(self, client, spec_url, fake_supabase):
        calls_before = len(fake_supabase.calls)

        assert client.post(f"{spec_url}/pairing/start", json={"item_id": "item-1"}).status_code == 422
        assert client.post(f"{spec_url}/canvas/click", json={"item_id": "42"}).status_code == 422
        assert client.post(
            f"{spec_url}/channels/reorder", json={"active_id": "row-1", "over_id": str(uuid4())}
        ).status_code == 422
        assert client.post(
            f"{spec_url}/canvas/drop", json=canvas_drop(item_id="not-a-uuid")
        ).status_code == 422

        # nothing reaches the items table
        assert all(call[0] == "tech_specs" for call in fake_supabase.calls[calls_before:])

    def test_leave_editor_forgets_state(self, client, spec_url, seed_item, fake_supabase):
        a, b = seed_item(icon_type="monitor"), seed_item(icon_type="monitor")
        client.post(f"{spec_url}/pairing/start", json={"item_id": a["id"]})

        response = client.delete(f"{spec_url}/editor")

        assert response.status_code == 200
        assert response.json()["pairing"] == "idle"
        assert response.json()["selected_item_id"] is None
        assert len(editor_sessions) == 0

        # a click after coming back only selects
        client.post(f"{spec_url}/pairing/click", json={"item_id": b["id"]})
        assert fake_supabase.row("stage_plot_items", b["id"])["paired_with_id"] is None

    def test_channels_and_reorder(self, client, spec_url, seed_item):
        a, b, c = seed_item(channel_number=2), seed_item(channel_number=5), seed_item(channel_number=9)
        seed_item()

        channel_list = client.get(f"{spec_url}/channels").json()
        assert [i["channel_number"] for i in channel_list["channel_items"]] == [2, 5, 9]
        assert len(channel_list["unassigned_items"]) == 1

        response = client.post(f"{spec_url}/channels/reorder", json={"active_id": c["id"], "over_id": a["id"]})
        body = response.json()
        assert [i["id"] for i in body["channel_list"]["channel_items"]] == [c["id"], a["id"], b["id"]]
        assert [i["channel_number"] for i in body["channel_list"]["channel_items"]] == [1, 2, 3]

    def test_reorder_unassigned_item_is_400(self, client, spec_url, seed_item):
        a, loose = seed_item(channel_number=1), seed_item()
        response = client.post(f"{spec_url}/channels/reorder", json={"active_id": loose["id"], "over_id": a["id"]})
        assert response.status_code == 400

    def test_equipment(self, client, spec_url, seed_item):
        for _ in range(3):
            seed_item(icon_type="monitor", provided_by="venue")
        body = client.get(f"{spec_url}/equipment").json()
        assert body["rows"][0]["count"] == 3
        assert body["summary"]["venue"] == 3


# =============================================================================
# Exports
# =============================================================================

class TestExportEndpoints:

    def test_download_pdf(self, client, spec_url, seed_item):
        seed_item(icon_type="guitar")
        response = client.get(f"{spec_url}/export.pdf")
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert 'filename="Summer_Tour_2025_tech_spec.pdf"' in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    def test_queue_export(self, client, spec_url, tech_spec_row):
        with patch("workers.tasks.export_tech_spec_pdf") as task:
            task.delay.return_value = MagicMock(id="task-123")
            response = client.post(f"{spec_url}/export")
        assert response.status_code == 202
        assert response.json()["task_id"] == "task-123"
        task.delay.assert_called_once_with(tech_spec_row["id"], USER_ID)

    def test_task_status(self, client):
        result = MagicMock(status="PROGRESS", info={"percent": 50, "message": "Rendering PDF..."})
        with patch("app.routers.tasks._async_result", return_value=result):
            body = client.get(f"{API}/tasks/task-123").json()
        assert body["status"] == "PROGRESS"
        assert body["progress"] == 50
        assert body["message"] == "Rendering PDF..."


# =============================================================================
# Auth
# =============================================================================

class TestAuth:
    """Real token validation (no dependency override)."""

    @staticmethod
    def _token(**claims):
        from jose import jwt

        from app.config import settings

        payload = {"sub": USER_ID, "aud": "authenticated", "email": "sam@example.com"}
        payload.update(claims)
        return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")

    def test_valid_token(self, fake_supabase):
        with TestClient(app) as anonymous:
            response = anonymous.get(
                f"{API}/auth/verify",
                headers={"Authorization": f"Bearer {self._token()}"},
            )
        assert response.status_code == 200
        assert response.json()["user_id"] == USER_ID

    def test_wrong_audience(self, fake_supabase):
        with TestClient(app) as anonymous:
            response = anonymous.get(
                f"{API}/auth/verify",
                headers={"Authorization": f"Bearer {self._token(aud='anon')}"},
            )
        assert response.status_code == 401

    def test_me_falls_back_to_token_email(self, client):
        body = client.get(f"{API}/auth/me").json()
        assert body["id"] == USER_ID
        assert body["email"] == "sam@example.com"
        assert body["full_name"] is None

    def test_me_with_profile(self, client, fake_supabase):
        fake_supabase.seed("profiles", id=USER_ID, full_name="Sam Rivers", phone="555-0100")
        body = client.get(f"{API}/auth/me").json()
        assert body["full_name"] == "Sam Rivers"
        assert body["phone"] == "555-0100"


# =============================================================================
# Health
# =============================================================================

class TestHealth:

    def test_health(self, client):
        body = client.get(f"{API}/health").json()
        assert body["status"] == "healthy"

    def test_ready(self, client):
        body = client.get(f"{API}/health/ready").json()
        assert body["status"] == "ready"
        assert body["checks"] == {"database": "healthy", "storage": "healthy"}

    def test_degraded_when_database_fails(self, client, fake_supabase):
        fake_supabase.errors[("tech_specs", "select")] = Exception("connection refused")
        body = client.get(f"{API}/health/ready").json()
        assert body["status"] == "degraded"
        assert body["checks"]["database"].startswith("unhealthy")
