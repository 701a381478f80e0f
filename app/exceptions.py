# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Every error carries a user-facing message plus a suggestion on how to
# recover; the handlers below turn them into the JSON notification the
# editor shows.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class TechSpecException(Exception):
    """
    Base exception for the Tech Spec API.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        code: str = "TECHSPEC_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Tech Spec Exceptions
# =============================================================================

class TechSpecNotFoundError(TechSpecException):
    """Raised when a tech spec ID doesn't exist or isn't owned by the caller."""

    def __init__(self, tech_spec_id: str):
        super().__init__(
            message=f"Tech spec not found: {tech_spec_id}",
            code="TECH_SPEC_NOT_FOUND",
            status_code=404,
            suggestion="Check that the tech spec ID is correct and belongs to your account",
            details={"tech_spec_id": tech_spec_id}
        )


class SharedTechSpecNotFoundError(TechSpecException):
    """Raised when a share token doesn't resolve to a publicly shared tech spec."""

    def __init__(self, share_token: str):
        super().__init__(
            message="Tech spec not found or link has expired",
            code="SHARED_TECH_SPEC_NOT_FOUND",
            status_code=404,
            suggestion="Ask the owner to re-enable public sharing and send a fresh link",
            details={"share_token": share_token}
        )


# =============================================================================
# Stage Plot Item Exceptions
# =============================================================================

class StagePlotItemNotFoundError(TechSpecException):
    """Raised when an item ID doesn't exist in the given tech spec."""

    def __init__(self, item_id: str):
        super().__init__(
            message=f"Stage plot item not found: {item_id}",
            code="ITEM_NOT_FOUND",
            status_code=404,
            suggestion="Refresh the stage plot; the item may have been deleted",
            details={"item_id": item_id}
        )


class InvalidItemFieldError(TechSpecException):
    """Raised when a field doesn't apply to the item's icon type or state."""

    def __init__(self, field: str, reason: str, item_id: str | None = None):
        details = {"field": field}
        if item_id:
            details["item_id"] = item_id
        super().__init__(
            message=f"Cannot set {field}: {reason}",
            code="INVALID_ITEM_FIELD",
            status_code=422,
            suggestion="Only set fields that the selected equipment supports",
            details=details
        )


class DuplicateChannelError(TechSpecException):
    """Raised when CHANNEL_NUMBER_POLICY is 'reject' and a channel is already used."""

    def __init__(self, channel_number: int, conflicting_item_ids: list[str]):
        super().__init__(
            message=f"Channel {channel_number} is already assigned",
            code="DUPLICATE_CHANNEL",
            status_code=409,
            suggestion="Pick a free channel number or reorder the channel list",
            details={
                "channel_number": channel_number,
                "conflicting_item_ids": conflicting_item_ids,
            }
        )


class ChannelReorderError(TechSpecException):
    """Raised when a reorder request names items outside the channel list."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="INVALID_CHANNEL_REORDER",
            status_code=400,
            suggestion="Only items with a channel number can be reordered",
            details=details
        )


# =============================================================================
# Pairing Exceptions
# =============================================================================

class PairingStateError(TechSpecException):
    """Raised when a pairing action isn't valid in the current editor state."""

    def __init__(self, message: str, suggestion: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message=message,
            code="PAIRING_STATE_ERROR",
            status_code=409,
            suggestion=suggestion or "Select a monitor and start pairing first",
            details=details
        )


# =============================================================================
# Remote Store / Storage Exceptions
# =============================================================================

class RemoteStoreError(TechSpecException):
    """
    Raised when a Supabase read or write fails.

    The editor shows this as a transient notification; the action can be
    retried as-is.
    """

    def __init__(self, action: str, error: str, details: dict[str, Any] | None = None):
        super().__init__(
            message=f"Failed to {action}: {error}",
            code="REMOTE_STORE_ERROR",
            status_code=502,
            suggestion="Try again; if the problem persists refresh the stage plot",
            details=details
        )


class StorageUploadError(TechSpecException):
    """Raised when file upload to storage fails."""

    def __init__(self, error: str):
        super().__init__(
            message=f"Failed to upload file to storage: {error}",
            code="STORAGE_UPLOAD_ERROR",
            status_code=500,
            suggestion="Try again later or contact support if the issue persists",
            details={"error": error}
        )


class ExportError(TechSpecException):
    """Raised when the tech spec PDF cannot be rendered."""

    def __init__(self, tech_spec_id: str, error: str):
        super().__init__(
            message=f"Failed to generate PDF: {error}",
            code="EXPORT_FAILED",
            status_code=500,
            suggestion="Check item labels and notes for unusual characters and try again",
            details={"tech_spec_id": tech_spec_id}
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def techspec_exception_handler(
    request: Request,
    exc: TechSpecException
) -> JSONResponse:
    """
    Convert TechSpecException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
