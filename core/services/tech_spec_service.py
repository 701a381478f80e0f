# =============================================================================
# core/services/tech_spec_service.py - Tech Spec Business Logic
# =============================================================================
# Handles tech spec CRUD, public sharing and the shared read-only view.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import (
    RemoteStoreError,
    SharedTechSpecNotFoundError,
    TechSpecNotFoundError,
)
from core.models.tech_spec import AuthorProfile, SharedTechSpec, TechSpec
from lib.supabase_client import TECH_SPECS_TABLE, SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


class TechSpecService:
    """
    Service for tech spec management operations.

    The Supabase client runs with the service role, so ownership is
    verified here rather than by RLS.
    """

    @staticmethod
    def create_tech_spec(
        user_id: UUID | str,
        name: str,
        description: str | None = None,
    ) -> TechSpec:
        """
        Create a new, unshared tech spec.

        Raises:
            RemoteStoreError: If the insert fails
        """
        client = SupabaseClient.get_client()

        data = {
            "user_id": normalize_uuid(user_id),
            "name": name,
            "description": description or None,
        }

        try:
            response = (
                client.table(TECH_SPECS_TABLE)
                .insert(data)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to create tech spec: {e}")
            raise RemoteStoreError("create tech spec", str(e))

        if not response.data:
            raise RemoteStoreError("create tech spec", "insert returned no data")

        tech_spec = TechSpec.model_validate(response.data[0])
        logger.info(f"Created tech spec: {tech_spec.id} for user: {user_id}")
        return tech_spec

    @staticmethod
    def get_tech_spec(
        tech_spec_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> TechSpec:
        """
        Get a tech spec by ID.

        Args:
            tech_spec_id: The tech spec UUID
            user_id: If provided, verify the tech spec belongs to this user

        Raises:
            TechSpecNotFoundError: If it doesn't exist or the user doesn't own it
            RemoteStoreError: If the query fails
        """
        try:
            row = SupabaseClient.fetch_tech_spec(tech_spec_id)
        except SupabaseClientError as e:
            raise RemoteStoreError("load tech spec", e.message)

        if not row:
            raise TechSpecNotFoundError(str(tech_spec_id))

        # Don't reveal that someone else's tech spec exists
        if user_id and str(row.get("user_id")) != str(user_id):
            raise TechSpecNotFoundError(str(tech_spec_id))

        return TechSpec.model_validate(row)

    @staticmethod
    def list_tech_specs(user_id: UUID | str) -> list[TechSpec]:
        """List a user's tech specs, newest first."""
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(TECH_SPECS_TABLE)
                .select("*")
                .eq("user_id", normalize_uuid(user_id))
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to list tech specs: {e}")
            raise RemoteStoreError("load tech specs", str(e))

        return [TechSpec.model_validate(row) for row in response.data or []]

    @staticmethod
    def update_tech_spec(
        tech_spec_id: str | UUID,
        changes: dict[str, Any],
        user_id: UUID | str | None = None,
    ) -> TechSpec:
        """
        Update name, description, stage size or sharing flag.

        Raises:
            TechSpecNotFoundError: If it doesn't exist or the user doesn't own it
            RemoteStoreError: If the update fails
        """
        tech_spec = TechSpecService.get_tech_spec(tech_spec_id, user_id=user_id)

        if not changes:
            return tech_spec

        client = SupabaseClient.get_client()

        try:
            response = (
                client.table(TECH_SPECS_TABLE)
                .update(changes)
                .eq("id", tech_spec.id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update tech spec: {e}")
            raise RemoteStoreError("update tech spec", str(e))

        logger.info(f"Updated tech spec: {tech_spec.id} ({', '.join(changes)})")
        if response.data:
            return TechSpec.model_validate(response.data[0])
        return tech_spec.model_copy(update=changes)

    @staticmethod
    def set_public_share(
        tech_spec_id: str | UUID,
        is_public: bool,
        user_id: UUID | str | None = None,
    ) -> TechSpec:
        """Turn the public share link on or off."""
        return TechSpecService.update_tech_spec(
            tech_spec_id,
            {"is_publicly_shared": is_public},
            user_id=user_id,
        )

    @staticmethod
    def delete_tech_spec(
        tech_spec_id: str | UUID,
        user_id: UUID | str | None = None,
    ) -> None:
        """
        Delete a tech spec. Its stage plot items go with it (ON DELETE CASCADE).

        Raises:
            TechSpecNotFoundError: If it doesn't exist or the user doesn't own it
            RemoteStoreError: If the delete fails
        """
        tech_spec = TechSpecService.get_tech_spec(tech_spec_id, user_id=user_id)
        client = SupabaseClient.get_client()

        try:
            client.table(TECH_SPECS_TABLE).delete().eq("id", tech_spec.id).execute()
        except Exception as e:
            logger.error(f"Failed to delete tech spec: {e}")
            raise RemoteStoreError("delete tech spec", str(e))

        logger.info(f"Deleted tech spec: {tech_spec.id}")

    @staticmethod
    def get_shared_tech_spec(share_token: str | UUID) -> SharedTechSpec:
        """
        Resolve a public share token.

        Raises:
            SharedTechSpecNotFoundError: If the token is unknown or sharing is off
            RemoteStoreError: If the lookup itself fails
        """
        token = normalize_uuid(share_token)

        try:
            rows = SupabaseClient.call_rpc("get_shared_tech_spec", {"p_share_token": token})
        except SupabaseClientError as e:
            logger.error(f"Shared tech spec lookup failed: {e}")
            raise RemoteStoreError("load shared tech spec", e.message)

        if not rows:
            raise SharedTechSpecNotFoundError(token)

        return SharedTechSpec.model_validate(rows[0])

    @staticmethod
    def get_author_profile(user_id: UUID | str) -> AuthorProfile | None:
        """Contact details for the PDF header; None when the user has no profile."""
        try:
            row = SupabaseClient.fetch_profile(user_id)
        except SupabaseClientError as e:
            logger.warning(f"Could not fetch author profile: {e}")
            return None

        return AuthorProfile.model_validate(row) if row else None
