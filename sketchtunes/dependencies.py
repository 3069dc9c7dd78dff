from functools import lru_cache
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sketchtunes.core.logging import get_logger
from sketchtunes.services.jwt_service import verify_token
from sketchtunes.services.media_probe import MediaProbe
from sketchtunes.services.supabase_service import SupabaseService

logger = get_logger("Dependencies")
security = HTTPBearer()


@lru_cache()
def get_supabase_service() -> SupabaseService:
    """Shared SupabaseService, created on first use"""
    return SupabaseService()


def get_media_probe() -> MediaProbe:
    return MediaProbe()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    supabase_service: SupabaseService = Depends(get_supabase_service)
) -> dict:
    """
    Dependency that validates the JWT token and returns the current user.
    Use this to protect endpoints (uploads, comments).
    """
    user_id = verify_token(credentials.credentials)

    if user_id is None:
        logger.warning("Invalid or expired token attempted")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user = await supabase_service.get_user_by_id(user_id)
    except Exception:
        logger.error(f"Failed to validate credentials for user: {user_id}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.data:
        logger.warning(f"Token valid but user not found: {user_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    logger.debug(f"User authenticated: {user_id}")
    return user.data[0]
