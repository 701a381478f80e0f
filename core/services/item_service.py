# =============================================================================
# core/services/item_service.py - Stage Plot Item Store
# =============================================================================
# Reads and writes the stage_plot_items table.
#
# Field rules enforced before anything is written:
# - mic_type only for icons that take a mic (mic stands, DI box)
# - phantom_power / insert_required only while the item has a channel
# - clearing a channel clears both flags
# - duplicate channel numbers follow settings.CHANNEL_NUMBER_POLICY
#
# Multi-row writes (pairing, unpairing, delete, channel renumbering) go
# through Postgres functions so they happen in one transaction. With
# ATOMIC_STAGE_PLOT_WRITES disabled they fall back to sequential updates.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.config import settings
from app.exceptions import (
    DuplicateChannelError,
    InvalidItemFieldError,
    PairingStateError,
    RemoteStoreError,
    StagePlotItemNotFoundError,
)
from core.models.editor import ChannelAssignment
from core.models.stage_plot import (
    IconType,
    StagePlotItem,
    StagePlotItemCreate,
    to_db_fields,
)
from core.stage_plot.channels import find_duplicate_channels, items_on_channel
from core.stage_plot.icons import get_icon, supports_mic_type, supports_pairing
from core.stage_plot.pairing import unpair_targets
from lib.supabase_client import STAGE_PLOT_ITEMS_TABLE, SupabaseClient, SupabaseClientError
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)


def _rows_to_items(rows: list[dict[str, Any]] | None) -> list[StagePlotItem]:
    return [StagePlotItem.from_db_row(row) for row in rows or []]


class ItemService:
    """
    Service for stage plot items.

    Every Supabase failure surfaces as RemoteStoreError so the editor can
    report it and carry on.
    """

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    @staticmethod
    def list_items(tech_spec_id: str | UUID) -> list[StagePlotItem]:
        """All items of a tech spec, oldest first."""
        try:
            rows = SupabaseClient.fetch_stage_plot_items(tech_spec_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to load stage plot items: {e}")
            raise RemoteStoreError("load stage plot items", e.message)
        return _rows_to_items(rows)

    @staticmethod
    def get_item(
        item_id: str | UUID,
        tech_spec_id: str | UUID | None = None,
    ) -> StagePlotItem:
        """
        Get one item.

        Args:
            item_id: Item UUID
            tech_spec_id: If provided, the item must belong to this tech spec

        Raises:
            StagePlotItemNotFoundError: If missing or on another tech spec
        """
        try:
            row = SupabaseClient.fetch_stage_plot_item(item_id)
        except SupabaseClientError as e:
            logger.error(f"Failed to load stage plot item: {e}")
            raise RemoteStoreError("load stage plot item", e.message)

        if not row:
            raise StagePlotItemNotFoundError(str(item_id))

        item = StagePlotItem.from_db_row(row)
        if tech_spec_id and item.tech_spec_id != normalize_uuid(tech_spec_id):
            raise StagePlotItemNotFoundError(str(item_id))
        return item

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    @staticmethod
    def validate_fields(
        icon_type: IconType,
        mic_type: Any,
        channel_number: int | None,
        phantom_power: bool,
        insert_required: bool,
        item_id: str | None = None,
    ) -> None:
        """
        Check capability and channel rules for the resulting item.

        Raises:
            InvalidItemFieldError: If a field doesn't apply
        """
        if mic_type is not None and not supports_mic_type(icon_type):
            raise InvalidItemFieldError(
                "mic_type",
                f"{get_icon(icon_type).label} doesn't take a microphone",
                item_id=item_id,
            )
        if channel_number is None:
            if phantom_power:
                raise InvalidItemFieldError("phantom_power", "item has no channel", item_id=item_id)
            if insert_required:
                raise InvalidItemFieldError("insert_required", "item has no channel", item_id=item_id)

    @staticmethod
    def check_channel_policy(
        existing_items: list[StagePlotItem],
        channel_number: int,
        exclude_id: str | None = None,
    ) -> None:
        """
        Apply CHANNEL_NUMBER_POLICY to a channel about to be written.

        Raises:
            DuplicateChannelError: If the policy is 'reject' and the number is taken
        """
        policy = settings.CHANNEL_NUMBER_POLICY
        if policy == "allow":
            return

        conflicts = items_on_channel(existing_items, channel_number, exclude_id=exclude_id)
        if not conflicts:
            return

        conflict_ids = [item.id for item in conflicts]
        if policy == "reject":
            raise DuplicateChannelError(channel_number, conflict_ids)
        logger.warning(f"Channel {channel_number} already used by {conflict_ids}")

    @staticmethod
    def channel_warnings(items: list[StagePlotItem]) -> list[str]:
        """Human-readable duplicate channel warnings (empty when policy is 'allow')."""
        if settings.CHANNEL_NUMBER_POLICY == "allow":
            return []
        return [
            f"Channel {duplicate.channel_number} is assigned to {len(duplicate.item_ids)} items"
            for duplicate in find_duplicate_channels(items)
        ]

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    @staticmethod
    def create_items(
        tech_spec_id: str | UUID,
        payloads: list[StagePlotItemCreate],
    ) -> list[StagePlotItem]:
        """
        Insert several items with one request (used for the drum kit).

        Raises:
            InvalidItemFieldError: If a payload breaks a field rule
            DuplicateChannelError: If a channel is taken under the 'reject' policy
            RemoteStoreError: If the insert fails
        """
        if not payloads:
            return []

        tech_spec_id_str = normalize_uuid(tech_spec_id)
        has_channels = any(p.channel_number is not None for p in payloads)
        existing = ItemService.list_items(tech_spec_id_str) if has_channels else []

        rows = []
        for payload in payloads:
            ItemService.validate_fields(
                payload.icon_type,
                payload.mic_type,
                payload.channel_number,
                payload.phantom_power,
                payload.insert_required,
            )
            if payload.channel_number is not None:
                ItemService.check_channel_policy(existing, payload.channel_number)
                # Later payloads in the same batch must not collide either
                existing.append(StagePlotItem(
                    id=f"pending-{len(rows)}",
                    tech_spec_id=tech_spec_id_str,
                    icon_type=payload.icon_type,
                    channel_number=payload.channel_number,
                ))
            rows.append(to_db_fields({"tech_spec_id": tech_spec_id_str, **payload.model_dump()}))

        client = SupabaseClient.get_client()
        try:
            response = client.table(STAGE_PLOT_ITEMS_TABLE).insert(rows).execute()
        except Exception as e:
            logger.error(f"Failed to create stage plot items: {e}")
            raise RemoteStoreError("add items to the stage plot", str(e))

        created = _rows_to_items(response.data)
        logger.info(f"Created {len(created)} stage plot item(s) on tech spec {tech_spec_id_str}")
        return created

    @staticmethod
    def create_item(
        tech_spec_id: str | UUID,
        icon_type: IconType,
        position_x: float,
        position_y: float,
        overrides: dict[str, Any] | None = None,
    ) -> StagePlotItem:
        """
        Place one item on the stage.

        Args:
            tech_spec_id: Owning tech spec
            icon_type: What was dropped
            position_x / position_y: Canvas percentages
            overrides: Optional label, channel_number, mic_type, provided_by, ...
        """
        payload = StagePlotItemCreate(
            icon_type=icon_type,
            position_x=position_x,
            position_y=position_y,
            **(overrides or {}),
        )
        created = ItemService.create_items(tech_spec_id, [payload])
        if not created:
            raise RemoteStoreError("add item to the stage plot", "insert returned no data")
        return created[0]

    @staticmethod
    def update_item(
        item_id: str | UUID,
        changes: dict[str, Any],
        tech_spec_id: str | UUID | None = None,
    ) -> StagePlotItem:
        """
        Apply a partial update.

        Sending channel_number=None also switches off phantom power and the
        insert. Field rules are checked against the item as it will be after
        the update.

        Raises:
            StagePlotItemNotFoundError: If the item doesn't exist
            InvalidItemFieldError: If a field doesn't apply
            DuplicateChannelError: If a channel is taken under the 'reject' policy
            RemoteStoreError: If the update fails
        """
        current = ItemService.get_item(item_id, tech_spec_id=tech_spec_id)
        if not changes:
            return current

        changes = dict(changes)
        if "channel_number" in changes and changes["channel_number"] is None:
            changes["phantom_power"] = False
            changes["insert_required"] = False

        merged = current.model_copy(update=changes)
        capability_changed = "mic_type" in changes or "icon_type" in changes
        ItemService.validate_fields(
            merged.icon_type,
            merged.mic_type if capability_changed else None,
            merged.channel_number,
            merged.phantom_power,
            merged.insert_required,
            item_id=current.id,
        )

        if changes.get("channel_number") is not None:
            ItemService.check_channel_policy(
                ItemService.list_items(current.tech_spec_id),
                changes["channel_number"],
                exclude_id=current.id,
            )

        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(STAGE_PLOT_ITEMS_TABLE)
                .update(to_db_fields(changes))
                .eq("id", current.id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update stage plot item {current.id}: {e}")
            raise RemoteStoreError("update item", str(e), details={"item_id": current.id})

        logger.debug(f"Updated stage plot item {current.id}: {sorted(changes)}")
        updated = _rows_to_items(response.data)
        return updated[0] if updated else merged

    @staticmethod
    def delete_item(
        item_id: str | UUID,
        tech_spec_id: str | UUID | None = None,
    ) -> StagePlotItem:
        """
        Delete an item and clear its partner's pairing.

        Returns:
            The deleted item as it was before deletion

        Raises:
            StagePlotItemNotFoundError: If the item doesn't exist
            RemoteStoreError: If the delete fails
        """
        item = ItemService.get_item(item_id, tech_spec_id=tech_spec_id)

        if settings.ATOMIC_STAGE_PLOT_WRITES:
            try:
                SupabaseClient.call_rpc("delete_stage_plot_item", {"p_item_id": item.id})
            except SupabaseClientError as e:
                logger.error(f"Failed to delete stage plot item {item.id}: {e}")
                raise RemoteStoreError("delete item", e.message, details={"item_id": item.id})
        else:
            if item.paired_with_id:
                ItemService._clear_partner_link(item.paired_with_id, item.id)

            client = SupabaseClient.get_client()
            try:
                client.table(STAGE_PLOT_ITEMS_TABLE).delete().eq("id", item.id).execute()
            except Exception as e:
                logger.error(f"Failed to delete stage plot item {item.id}: {e}")
                raise RemoteStoreError("delete item", str(e), details={"item_id": item.id})

        logger.info(f"Deleted stage plot item {item.id}")
        return item

    # -------------------------------------------------------------------------
    # Pairing
    # -------------------------------------------------------------------------

    @staticmethod
    def set_pairing(item_id: str, partner_id: str | None) -> StagePlotItem | None:
        """Write paired_with_id on one item. Returns None if the row is gone."""
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(STAGE_PLOT_ITEMS_TABLE)
                .update({"paired_with_id": partner_id})
                .eq("id", item_id)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to set pairing on {item_id}: {e}")
            raise RemoteStoreError("update pairing", str(e), details={"item_id": item_id})

        updated = _rows_to_items(response.data)
        return updated[0] if updated else None

    @staticmethod
    def _clear_partner_link(partner_id: str, item_id: str) -> StagePlotItem | None:
        """Clear partner_id's pairing if it still points at item_id."""
        try:
            partner = ItemService.get_item(partner_id)
        except StagePlotItemNotFoundError:
            return None
        if partner.paired_with_id != item_id:
            return None
        return ItemService.set_pairing(partner.id, None)

    @staticmethod
    def pair_items(
        item_id: str,
        partner_id: str,
        tech_spec_id: str | UUID | None = None,
    ) -> list[StagePlotItem]:
        """
        Pair two items with each other.

        Earlier partners of either item are unpaired first, so every link
        stays symmetric.

        Returns:
            Every item whose pairing changed

        Raises:
            StagePlotItemNotFoundError: If either item is missing
            PairingStateError: If an item is paired with itself or isn't a monitor
        """
        if item_id == partner_id:
            raise PairingStateError(
                "An item can't be paired with itself",
                suggestion="Click a different item to complete the pairing",
                details={"item_id": item_id},
            )

        item = ItemService.get_item(item_id, tech_spec_id=tech_spec_id)
        partner = ItemService.get_item(partner_id, tech_spec_id=item.tech_spec_id)
        for side in (item, partner):
            if not supports_pairing(side.icon_type):
                raise PairingStateError(
                    f"{get_icon(side.icon_type).label} items can't be paired",
                    suggestion="Only monitors can be paired with each other",
                    details={"item_id": side.id, "icon_type": side.icon_type.value},
                )

        if settings.ATOMIC_STAGE_PLOT_WRITES:
            try:
                rows = SupabaseClient.call_rpc(
                    "pair_stage_plot_items",
                    {"p_item_id": item.id, "p_partner_id": partner.id},
                )
            except SupabaseClientError as e:
                logger.error(f"Failed to pair {item.id} with {partner.id}: {e}")
                raise RemoteStoreError("pair items", e.message)
            updated = _rows_to_items(rows)
        else:
            updated = []
            for stale_owner, stale_partner in ((item, item.paired_with_id), (partner, partner.paired_with_id)):
                if stale_partner and stale_partner not in (item.id, partner.id):
                    cleared = ItemService._clear_partner_link(stale_partner, stale_owner.id)
                    if cleared:
                        updated.append(cleared)
            for source, target in ((item, partner), (partner, item)):
                written = ItemService.set_pairing(source.id, target.id)
                if written:
                    updated.append(written)

        logger.info(f"Paired stage plot items {item.id} <-> {partner.id}")
        return updated

    @staticmethod
    def unpair_item(
        item_id: str,
        tech_spec_id: str | UUID | None = None,
    ) -> list[StagePlotItem]:
        """
        Clear the pairing on an item and on its partner.

        Raises:
            StagePlotItemNotFoundError: If the item is missing
            PairingStateError: If the item isn't paired
        """
        item = ItemService.get_item(item_id, tech_spec_id=tech_spec_id)
        _, partner_id = unpair_targets(item)

        if settings.ATOMIC_STAGE_PLOT_WRITES:
            try:
                rows = SupabaseClient.call_rpc("unpair_stage_plot_item", {"p_item_id": item.id})
            except SupabaseClientError as e:
                logger.error(f"Failed to unpair {item.id}: {e}")
                raise RemoteStoreError("unpair item", e.message)
            updated = _rows_to_items(rows)
        else:
            updated = [written for written in (ItemService.set_pairing(item.id, None),) if written]
            cleared = ItemService._clear_partner_link(partner_id, item.id)
            if cleared:
                updated.append(cleared)

        logger.info(f"Unpaired stage plot item {item.id} from {partner_id}")
        return updated

    # -------------------------------------------------------------------------
    # Channels
    # -------------------------------------------------------------------------

    @staticmethod
    def apply_channel_assignments(
        tech_spec_id: str | UUID,
        assignments: list[ChannelAssignment],
    ) -> list[StagePlotItem]:
        """
        Write renumbered channels.

        Returns:
            The updated items
        """
        if not assignments:
            return []

        tech_spec_id_str = normalize_uuid(tech_spec_id)

        if settings.ATOMIC_STAGE_PLOT_WRITES:
            payload = [
                {"id": assignment.item_id, "channel_number": assignment.channel_number}
                for assignment in assignments
            ]
            try:
                rows = SupabaseClient.call_rpc(
                    "renumber_stage_plot_channels",
                    {"p_tech_spec_id": tech_spec_id_str, "p_assignments": payload},
                )
            except SupabaseClientError as e:
                logger.error(f"Failed to renumber channels on {tech_spec_id_str}: {e}")
                raise RemoteStoreError("reorder channels", e.message)
            updated = _rows_to_items(rows)
        else:
            client = SupabaseClient.get_client()
            updated = []
            for assignment in assignments:
                try:
                    response = (
                        client.table(STAGE_PLOT_ITEMS_TABLE)
                        .update({"channel_number": assignment.channel_number})
                        .eq("id", assignment.item_id)
                        .eq("tech_spec_id", tech_spec_id_str)
                        .execute()
                    )
                except Exception as e:
                    logger.error(f"Failed to renumber {assignment.item_id}: {e}")
                    raise RemoteStoreError("reorder channels", str(e), details={"item_id": assignment.item_id})
                updated.extend(_rows_to_items(response.data))

        logger.info(f"Renumbered {len(assignments)} channel(s) on tech spec {tech_spec_id_str}")
        return updated
