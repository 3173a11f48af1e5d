from fastapi import APIRouter, Depends
from sqlmodel.ext.asyncio.session import AsyncSession

from database import get_session
from errors import NotFoundError
from middleware.auth import require_identity
from schemas import ApiResponse, Identity, ProfileUpdate, UserResponse
from stores.users import get_user_by_id, update_display_name

router = APIRouter()


@router.get("")
async def get_profile(
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """Get the authenticated user's profile"""
    user = await get_user_by_id(session, identity.user_id)

    if user is None:
        raise NotFoundError("User not found")

    return ApiResponse(
        success=True,
        data={"user": UserResponse.model_validate(user).model_dump()}
    )


@router.put("")
async def update_profile(
    profile_data: ProfileUpdate,
    identity: Identity = Depends(require_identity),
    session: AsyncSession = Depends(get_session)
) -> ApiResponse:
    """Change the display name; email and password are not editable here"""
    user = await update_display_name(session, identity.user_id, profile_data.name)

    if user is None:
        raise NotFoundError("User not found")

    return ApiResponse(
        success=True,
        data={
            "message": "Profile updated successfully",
            "user": UserResponse.model_validate(user).model_dump(),
        }
    )
