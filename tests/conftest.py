# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - An in-memory stand-in for the Supabase client (tables, RPCs, storage)
#   installed as the SupabaseClient singleton
# - Factories for stage plot items and tech specs
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import copy
from datetime import datetime, timedelta, timezone
from itertools import count
from uuid import uuid4

import pytest

from core.models.stage_plot import StagePlotItem
from core.services.editor_service import editor_sessions
from lib.supabase_client import SupabaseClient

USER_ID = "11111111-2222-3333-4444-555555555555"
OTHER_USER_ID = "99999999-8888-7777-6666-555555555555"

TABLE_DEFAULTS = {
    "tech_specs": {
        "description": None,
        "stage_width": 800,
        "stage_depth": 600,
        "is_publicly_shared": False,
    },
    "stage_plot_items": {
        "label": None,
        "position_x": 0,
        "position_y": 0,
        "rotation": 0,
        "mic_type": None,
        "provided_by": None,
        "paired_with_id": None,
        "notes": None,
        "channel_number": None,
        "phantom_power": False,
        "insert_required": False,
        "monitor_mixes": [],
        "fx_sends": [],
    },
    "profiles": {},
}


# =============================================================================
# Fake Supabase
# =============================================================================

class FakeResponse:
    def __init__(self, data):
        self.data = data


class FakeQuery:
    """Chainable query builder mirroring the postgrest-py calls the services make."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.action = "select"
        self.payload = None
        self.filters: list[tuple[str, object]] = []
        self.order_by: tuple[str, bool] | None = None
        self.row_limit: int | None = None
        self.is_single = False

    def select(self, *columns):
        self.action = "select"
        return self

    def insert(self, data):
        self.action = "insert"
        self.payload = data
        return self

    def update(self, data):
        self.action = "update"
        self.payload = data
        return self

    def delete(self):
        self.action = "delete"
        return self

    def eq(self, column, value):
        self.filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, size):
        self.row_limit = size
        return self

    def single(self):
        self.is_single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(str(row.get(column)) == str(value) for column, value in self.filters)

    def execute(self):
        self.db.calls.append((self.table_name, self.action))
        error = self.db.errors.get((self.table_name, self.action))
        if error:
            raise error

        rows = self.db.tables.setdefault(self.table_name, [])

        if self.action == "insert":
            payloads = self.payload if isinstance(self.payload, list) else [self.payload]
            return FakeResponse([self.db.insert_row(self.table_name, data) for data in payloads])

        matched = [row for row in rows if self._matches(row)]

        if self.action == "update":
            stamp = self.db.next_timestamp()
            for row in matched:
                row.update(copy.deepcopy(self.payload))
                row["updated_at"] = stamp
            return FakeResponse(copy.deepcopy(matched))

        if self.action == "delete":
            for row in matched:
                self.db.delete_row(self.table_name, row)
            return FakeResponse(copy.deepcopy(matched))

        if self.order_by:
            column, desc = self.order_by
            matched = sorted(matched, key=lambda row: row.get(column) or "", reverse=desc)
        if self.row_limit is not None:
            matched = matched[:self.row_limit]

        if self.is_single:
            if len(matched) != 1:
                raise Exception(
                    "{'code': 'PGRST116', 'message': 'JSON object requested, multiple (or no) rows returned'}"
                )
            return FakeResponse(copy.deepcopy(matched[0]))

        return FakeResponse(copy.deepcopy(matched))


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self):
        self.db.calls.append(("rpc", self.name))
        error = self.db.errors.get(("rpc", self.name))
        if error:
            raise error
        handler = getattr(self.db, f"rpc_{self.name}")
        return FakeResponse(handler(**self.params))


class FakeBucket:
    def __init__(self, storage: "FakeStorage", bucket: str):
        self.storage = storage
        self.bucket = bucket

    def upload(self, path, file, file_options=None):
        if self.storage.fail_uploads:
            raise Exception("storage unavailable")
        self.storage.objects[(self.bucket, path)] = file
        return {"Key": f"{self.bucket}/{path}"}

    def create_signed_url(self, path, expires_in):
        return {
            "signedURL": f"https://test-project.supabase.co/storage/v1/object/sign/"
                         f"{self.bucket}/{path}?token=test&expires_in={expires_in}"
        }


class FakeStorage:
    def __init__(self):
        self.objects: dict[tuple[str, str], bytes] = {}
        self.fail_uploads = False

    def from_(self, bucket):
        return FakeBucket(self, bucket)

    def list_buckets(self):
        return [{"name": "tech-spec-exports"}]


class FakeSupabase:
    """
    In-memory Supabase: tables as lists of dicts, the stage plot RPCs
    implemented in Python with the same semantics as the SQL functions.

    Set `errors[(table, action)]` or `errors[("rpc", name)]` to make a call fail.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {name: [] for name in TABLE_DEFAULTS}
        self.errors: dict[tuple[str, str], Exception] = {}
        self.calls: list[tuple[str, str]] = []
        self.storage = FakeStorage()
        self._clock = count()

    # -- client API ----------------------------------------------------------

    def table(self, name):
        return FakeQuery(self, name)

    def rpc(self, name, params):
        return FakeRpc(self, name, params)

    # -- helpers -------------------------------------------------------------

    def next_timestamp(self) -> str:
        base = datetime(2025, 1, 1, tzinfo=timezone.utc)
        return (base + timedelta(seconds=next(self._clock))).isoformat()

    def insert_row(self, table: str, data: dict) -> dict:
        row = copy.deepcopy(TABLE_DEFAULTS.get(table, {}))
        row.update(copy.deepcopy(data))
        row.setdefault("id", str(uuid4()))
        if table == "tech_specs":
            row.setdefault("share_token", str(uuid4()))
        stamp = self.next_timestamp()
        row.setdefault("created_at", stamp)
        row.setdefault("updated_at", stamp)
        self.tables.setdefault(table, []).append(row)
        return copy.deepcopy(row)

    def delete_row(self, table: str, row: dict) -> None:
        self.tables[table] = [r for r in self.tables[table] if r["id"] != row["id"]]
        if table == "tech_specs":
            self.tables["stage_plot_items"] = [
                item for item in self.tables["stage_plot_items"] if item["tech_spec_id"] != row["id"]
            ]
        if table == "stage_plot_items":
            # ON DELETE SET NULL
            for item in self.tables["stage_plot_items"]:
                if item.get("paired_with_id") == row["id"]:
                    item["paired_with_id"] = None

    def seed(self, table: str, **fields) -> dict:
        return self.insert_row(table, fields)

    def row(self, table: str, row_id: str) -> dict:
        return next(r for r in self.tables[table] if r["id"] == row_id)

    def items(self) -> dict[str, dict]:
        return {row["id"]: row for row in self.tables["stage_plot_items"]}

    def _set_pair(self, row: dict, partner_id) -> dict:
        row["paired_with_id"] = partner_id
        row["updated_at"] = self.next_timestamp()
        return copy.deepcopy(row)

    # -- RPC functions -------------------------------------------------------

    def rpc_get_shared_tech_spec(self, p_share_token):
        results = []
        for spec in self.tables["tech_specs"]:
            if spec.get("share_token") == p_share_token and spec.get("is_publicly_shared"):
                profile = next((p for p in self.tables["profiles"] if p["id"] == spec["user_id"]), {})
                results.append({
                    "id": spec["id"],
                    "name": spec["name"],
                    "description": spec.get("description"),
                    "stage_width": spec.get("stage_width"),
                    "stage_depth": spec.get("stage_depth"),
                    "owner_name": profile.get("full_name"),
                    "owner_business": profile.get("business_name"),
                })
        return results

    def rpc_pair_stage_plot_items(self, p_item_id, p_partner_id):
        if p_item_id == p_partner_id:
            raise Exception("An item cannot be paired with itself")
        pair = (p_item_id, p_partner_id)
        changed = [
            self._set_pair(row, None)
            for row in self.tables["stage_plot_items"]
            if row.get("paired_with_id") in pair and row["id"] not in pair
        ]
        for row in self.tables["stage_plot_items"]:
            if row["id"] == p_item_id:
                changed.append(self._set_pair(row, p_partner_id))
            elif row["id"] == p_partner_id:
                changed.append(self._set_pair(row, p_item_id))
        return changed

    def rpc_unpair_stage_plot_item(self, p_item_id):
        return [
            self._set_pair(row, None)
            for row in self.tables["stage_plot_items"]
            if row["id"] == p_item_id or row.get("paired_with_id") == p_item_id
        ]

    def rpc_delete_stage_plot_item(self, p_item_id):
        row = next((r for r in self.tables["stage_plot_items"] if r["id"] == p_item_id), None)
        if row:
            self.delete_row("stage_plot_items", row)
        return None

    def rpc_renumber_stage_plot_channels(self, p_tech_spec_id, p_assignments):
        numbers = {a["id"]: a["channel_number"] for a in p_assignments}
        updated = []
        for row in self.tables["stage_plot_items"]:
            if row["id"] in numbers and row["tech_spec_id"] == p_tech_spec_id:
                row["channel_number"] = numbers[row["id"]]
                row["updated_at"] = self.next_timestamp()
                updated.append(copy.deepcopy(row))
        return updated


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    """Install an empty in-memory Supabase as the client singleton."""
    fake = FakeSupabase()
    SupabaseClient._instance = fake
    yield fake
    SupabaseClient.reset()


@pytest.fixture(autouse=True)
def reset_editor_sessions():
    """Editor states are process-global; start every test from scratch."""
    editor_sessions.clear()
    yield
    editor_sessions.clear()


@pytest.fixture
def tech_spec_row(fake_supabase):
    """A tech spec owned by USER_ID."""
    return fake_supabase.seed(
        "tech_specs",
        user_id=USER_ID,
        name="Summer Tour 2025",
        description="5-piece band",
    )


@pytest.fixture
def seed_item(fake_supabase, tech_spec_row):
    """Factory inserting stage plot items on tech_spec_row."""
    def _seed(**fields):
        fields.setdefault("tech_spec_id", tech_spec_row["id"])
        fields.setdefault("icon_type", "mic_short")
        return fake_supabase.seed("stage_plot_items", **fields)
    return _seed


@pytest.fixture
def make_item():
    """Factory for in-memory StagePlotItem values (no database)."""
    counter = count(1)

    def _make(**fields):
        number = next(counter)
        fields.setdefault("id", f"item-{number:03d}")
        fields.setdefault("tech_spec_id", "spec-1")
        fields.setdefault("icon_type", "mic_short")
        return StagePlotItem(**fields)
    return _make
