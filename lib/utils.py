# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Small helpers shared by the Supabase wrapper and the services.
# =============================================================================

import re
from uuid import UUID

# PostgREST error code returned by .single() when no row matches
PGRST_NO_ROWS = "PGRST116"


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        tech_spec_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        tech_spec_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Supabase Response Helpers
# =============================================================================

def is_no_rows_error(error: Exception) -> bool:
    """Check whether a PostgREST error means `.single()` matched nothing."""
    return PGRST_NO_ROWS in str(error)


# =============================================================================
# Filenames
# =============================================================================

def safe_filename(name: str) -> str:
    """
    Replace every non-alphanumeric character with an underscore.

    Example:
        safe_filename("Summer Tour '25")  # "Summer_Tour__25"
    """
    return re.sub(r"[^a-zA-Z0-9]", "_", name)
