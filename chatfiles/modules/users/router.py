from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from chatfiles.core.auth.dependencies import CurrentUser
from chatfiles.core.auth.models import User
from chatfiles.core.database import get_db
from chatfiles.core.storage import ObjectStore, get_object_store
from chatfiles.modules.users.schemas import ProfileImageUpdate, ProfileResponse
from chatfiles.modules.users.service import UserService
from chatfiles.shared.schemas import SuccessResponse

router = APIRouter(prefix="/users", tags=["Users"])


def _profile(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        profile_image=user.profile_image_url or "",
        created_at=user.created_at,
    )


@router.put("/me/profile-image", response_model=SuccessResponse[ProfileResponse])
async def set_profile_image(
    data: ProfileImageUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Replace the current user's profile image."""
    service = UserService(db, store)
    user = await service.set_profile_image(current_user, data.storage_key)
    await db.commit()

    return SuccessResponse(data=_profile(user), message="Profile image updated")


@router.delete("/me/profile-image", response_model=SuccessResponse[ProfileResponse])
async def remove_profile_image(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Remove the current user's profile image."""
    service = UserService(db, store)
    user = await service.remove_profile_image(current_user)
    await db.commit()

    return SuccessResponse(data=_profile(user), message="Profile image removed")


@router.delete("/me", response_model=SuccessResponse[None])
async def delete_account(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
    store: ObjectStore = Depends(get_object_store),
):
    """Delete the current user's account together with their files."""
    service = UserService(db, store)
    await service.delete_account(current_user)
    await db.commit()

    return SuccessResponse(data=None, message="Account deleted")
