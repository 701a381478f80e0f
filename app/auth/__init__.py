# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Resolves the caller of every tech spec endpoint from a Supabase access token.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/tech-specs")
#   async def list_specs(user: AuthUser = Depends(get_current_user)):
#       return TechSpecService.list_tech_specs(user.id)
# =============================================================================

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser, UserResponse

__all__ = [
    "get_current_user",
    "AuthUser",
    "UserResponse",
]
