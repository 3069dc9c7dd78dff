from fastapi import APIRouter, HTTPException, Depends, status
from sketchtunes.core.logging import get_logger
from sketchtunes.dependencies import get_current_user, get_supabase_service
from sketchtunes.schemas.auth import LoginRequest, TokenResponse, LogoutResponse
from sketchtunes.schemas.user import UserResponse
from sketchtunes.services.jwt_service import create_access_token
from sketchtunes.services.password_service import verify_password
from sketchtunes.services.supabase_service import SupabaseService
from sketchtunes.utils.formatters import format_user

logger = get_logger("api.auth")
router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """Exchange email and password for a bearer token"""
    logger.info(f"Login attempt for {request.email}")
    try:
        result = await supabase_service.get_user_by_email(request.email)
    except Exception as e:
        logger.error(f"Login lookup failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    user = result.data[0] if result.data else None
    if user is None or not verify_password(request.password, user.get("hashed_password")):
        logger.warning(f"Invalid credentials for {request.email}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"access_token": create_access_token(str(user["id"])), "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: dict = Depends(get_current_user)):
    """
    Get the current authenticated user's profile.
    Protected endpoint - requires valid JWT token.
    """
    logger.info(f"Fetching profile for user: {current_user['id']}")
    return format_user(current_user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(current_user: dict = Depends(get_current_user)):
    """
    Logout the user.
    Tokens are stateless; the frontend just discards the JWT.
    """
    logger.info(f"User logged out: {current_user['id']}")
    return {"message": "Logged out successfully"}
