# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Resolves the caller from a Supabase access token.
#
# Supports both:
# - ES256 (Supabase JWT signing keys) via the project's JWKS endpoint
# - HS256 (legacy Supabase JWT secret)
# =============================================================================

import logging
import time
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from app.auth.models import AuthUser
from app.config import settings

logger = logging.getLogger(__name__)

# HTTP Bearer token extractor
security = HTTPBearer()

JWKS_CACHE_TTL = 3600  # 1 hour
_jwks_cache: dict = {}
_jwks_cache_time: float = 0


def _fetch_jwks() -> dict:
    """Fetch the signing keys from Supabase, cached for an hour."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache and now - _jwks_cache_time < JWKS_CACHE_TTL:
        return _jwks_cache

    url = f"{settings.SUPABASE_URL.rstrip('/')}/auth/v1/.well-known/jwks.json"
    try:
        response = httpx.get(url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = now
        logger.debug(f"Fetched JWKS from {url}")
    except httpx.HTTPError as e:
        # An expired cache beats no keys at all
        logger.warning(f"Failed to fetch JWKS: {e}")

    return _jwks_cache or {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Pick the verification key for a token.

    Returns:
        Tuple of (key, algorithm)
    """
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    algorithm = header.get("alg", "HS256")
    kid = header.get("kid")

    if algorithm == "HS256" or not kid:
        return settings.SUPABASE_JWT_SECRET, "HS256"

    for key in _fetch_jwks().get("keys", []):
        if key.get("kid") == kid:
            return key, algorithm

    logger.warning(f"No JWKS key for alg={algorithm}, kid={kid}; trying the JWT secret")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Validate the bearer token and return the caller.

    Raises:
        HTTPException: 401 if the token is missing, invalid or expired

    Usage:
        @router.get("/tech-specs")
        async def list_specs(user: AuthUser = Depends(get_current_user)):
            ...
    """
    token = credentials.credentials

    try:
        key, algorithm = _get_signing_key(token)
        payload = jwt.decode(token, key, algorithms=[algorithm], audience="authenticated")
    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {e}")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing 'sub' claim")
        raise _unauthorized("Invalid token: missing user ID")

    try:
        user_uuid = UUID(user_id)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {user_id}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_uuid, email=payload.get("email"))

