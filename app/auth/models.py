# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = {"frozen": True}

    id: UUID
    email: Optional[str] = None


class UserResponse(BaseModel):
    """
    Current user with the profile details printed on exported tech specs.
    """
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    business_name: Optional[str] = None
    phone: Optional[str] = None
