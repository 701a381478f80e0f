# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting user info after authentication.
# =============================================================================

import logging

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse
from core.services.tech_spec_service import TechSpecService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current user and their profile.

    Falls back to the token's email when the user has no profile row yet.
    """
    profile = TechSpecService.get_author_profile(user.id)

    if profile is None:
        return UserResponse(id=user.id, email=user.email)

    return UserResponse(
        id=user.id,
        email=profile.email or user.email,
        full_name=profile.full_name,
        business_name=profile.business_name,
        phone=profile.phone,
    )


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
