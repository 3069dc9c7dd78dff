from fastapi import APIRouter, HTTPException, Depends, status
from sketchtunes.core.logging import get_logger
from sketchtunes.dependencies import get_supabase_service
from sketchtunes.models.user import UserCreate
from sketchtunes.schemas.user import SignupRequest, SignupResponse, UserLookupResponse
from sketchtunes.services.password_service import hash_password
from sketchtunes.services.supabase_service import SupabaseService
from sketchtunes.utils.formatters import format_user

logger = get_logger("api.users")
router = APIRouter()


@router.post("", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: SignupRequest,
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """Sign up with name, email and password"""
    logger.info(f"Signup attempt for {request.email}")
    try:
        existing = await supabase_service.get_user_by_email(request.email)
        if existing.data:
            logger.warning(f"Signup rejected, user already exists: {request.email}")
            raise HTTPException(status_code=400, detail="User already exists")

        user = UserCreate(
            name=request.name,
            email=request.email,
            hashed_password=hash_password(request.password)
        )
        await supabase_service.create_user(**user.model_dump())

        logger.info(f"User created: {request.email}")
        return {"message": "User created"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to create user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/{email}", response_model=UserLookupResponse)
async def get_user_by_email(
    email: str,
    supabase_service: SupabaseService = Depends(get_supabase_service)
):
    """Look up a user by email. Unknown emails return ``{"user": null}``."""
    logger.debug(f"Looking up user: {email}")
    try:
        result = await supabase_service.get_user_by_email(email)
        if not result.data:
            return {"user": None}
        return {"user": format_user(result.data[0])}
    except Exception as e:
        logger.error(f"Failed to look up user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
