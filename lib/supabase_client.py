# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides specialized read methods for:
# - Tech specs (the stage plot documents)
# - Stage plot items belonging to a tech spec
# - Author profiles printed on exported PDFs
# - RPC calls to the stored procedures in supabase/migrations/
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   items = SupabaseClient.fetch_stage_plot_items(tech_spec_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings
from lib.utils import is_no_rows_error, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

TECH_SPECS_TABLE = "tech_specs"
STAGE_PLOT_ITEMS_TABLE = "stage_plot_items"
PROFILES_TABLE = "profiles"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion so callers can surface it directly.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        spec = SupabaseClient.fetch_tech_spec("550e8400-...")
        items = SupabaseClient.fetch_stage_plot_items(spec["id"])
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS), so
        ownership checks happen in the service layer.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Drop the cached client (used by tests and after key rotation)."""
        cls._instance = None

    # -------------------------------------------------------------------------
    # Tech Specs
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_tech_spec(cls, tech_spec_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a tech spec by ID.

        Returns:
            Tech spec dict with all fields, or None if not found

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        tech_spec_id_str = normalize_uuid(tech_spec_id)

        try:
            response = (
                client.table(TECH_SPECS_TABLE)
                .select("*")
                .eq("id", tech_spec_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch tech spec: {e}",
                code="FETCH_TECH_SPEC_FAILED",
                suggestion="Check that the tech_spec_id exists",
                details={"tech_spec_id": tech_spec_id_str}
            )

    # -------------------------------------------------------------------------
    # Stage Plot Items
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_stage_plot_items(cls, tech_spec_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch every item on a tech spec's stage plot, oldest first.

        Creation order is also the numbering order of markers on the
        exported PDF, so it must stay stable.

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        tech_spec_id_str = normalize_uuid(tech_spec_id)

        try:
            response = (
                client.table(STAGE_PLOT_ITEMS_TABLE)
                .select("*")
                .eq("tech_spec_id", tech_spec_id_str)
                .order("created_at", desc=False)
                .execute()
            )

            items = response.data or []
            logger.debug(f"Fetched {len(items)} stage plot items for tech spec {tech_spec_id_str}")
            return items

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch stage plot items: {e}",
                code="FETCH_ITEMS_FAILED",
                suggestion="Check that the tech spec exists and stage_plot_items is accessible",
                details={"tech_spec_id": tech_spec_id_str}
            )

    @classmethod
    def fetch_stage_plot_item(cls, item_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a single stage plot item.

        Returns:
            Item dict, or None if not found
        """
        client = cls.get_client()
        item_id_str = normalize_uuid(item_id)

        try:
            response = (
                client.table(STAGE_PLOT_ITEMS_TABLE)
                .select("*")
                .eq("id", item_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch stage plot item: {e}",
                code="FETCH_ITEM_FAILED",
                details={"item_id": item_id_str}
            )

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the public profile of a user (name, business, contact).

        Returns:
            Profile dict, or None if the user has no profile row yet
        """
        client = cls.get_client()
        user_id_str = normalize_uuid(user_id)

        try:
            response = (
                client.table(PROFILES_TABLE)
                .select("id, full_name, business_name, email, phone")
                .eq("id", user_id_str)
                .single()
                .execute()
            )

            return response.data

        except Exception as e:
            if is_no_rows_error(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"user_id": user_id_str}
            )

    # -------------------------------------------------------------------------
    # RPC
    # -------------------------------------------------------------------------

    @classmethod
    def call_rpc(cls, function_name: str, params: dict[str, Any]) -> Any:
        """
        Call a Postgres function exposed through PostgREST.

        Returns:
            The function's response data (rows, scalar or None)

        Raises:
            SupabaseClientError: If the call fails
        """
        client = cls.get_client()

        try:
            response = client.rpc(function_name, params).execute()
            logger.debug(f"RPC {function_name} completed")
            return response.data

        except Exception as e:
            raise SupabaseClientError(
                message=f"RPC {function_name} failed: {e}",
                code="RPC_FAILED",
                suggestion="Check that the migrations in supabase/migrations have been applied",
                details={"function": function_name}
            )
