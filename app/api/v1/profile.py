import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_current_user, get_profile_repository, get_profile_service
from app.core.exceptions import CalorieCalculationError
from app.models.user import User
from app.repositories.profile_repository import ProfileRepository
from app.services.profile_service import ProfileService
from app.schemas.auth import MessageResponse
from app.schemas.profile import ProfileCreate, ProfileUpdate, ProfileResponse, ProfileMessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
async def get_profile(
        current_user: User = Depends(get_current_user),
        repo: ProfileRepository = Depends(get_profile_repository),
):
    """Получить профиль текущего пользователя"""
    profile = await repo.get_by_user_id(current_user.id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.post("", response_model=ProfileMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
        payload: ProfileCreate,
        current_user: User = Depends(get_current_user),
        repo: ProfileRepository = Depends(get_profile_repository),
        profile_service: ProfileService = Depends(get_profile_service),
):
    """Создать профиль; норма калорий рассчитывается, если не передана"""
    user_id = current_user.id
    if await repo.get_by_user_id(user_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Profile already exists. Use PUT method to update."
        )

    try:
        data = profile_service.resolve_for_create(payload.model_dump())
    except CalorieCalculationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to calculate daily calorie target"
        )

    try:
        profile = await repo.create(user_id, data)
    except Exception:
        await repo.db.rollback()
        logger.exception("Failed to create profile for user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to create profile")

    return ProfileMessageResponse(
        message="Profile created successfully",
        profile=ProfileResponse.model_validate(profile),
    )


@router.put("", response_model=ProfileMessageResponse)
async def update_profile(
        payload: ProfileUpdate,
        current_user: User = Depends(get_current_user),
        repo: ProfileRepository = Depends(get_profile_repository),
        profile_service: ProfileService = Depends(get_profile_service),
):
    """Обновить только переданные поля профиля"""
    user_id = current_user.id
    profile = await repo.get_by_user_id(user_id)
    if not profile:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Profile not found. Use POST method to create."
        )

    try:
        changes = profile_service.resolve_for_update(profile, payload.model_dump(exclude_unset=True))
    except CalorieCalculationError:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to recalculate daily calorie target"
        )

    try:
        profile = await repo.update(profile, changes)
    except Exception:
        await repo.db.rollback()
        logger.exception("Failed to update profile for user %s", user_id)
        raise HTTPException(status_code=500, detail="Failed to update profile")

    return ProfileMessageResponse(
        message="Profile updated successfully",
        profile=ProfileResponse.model_validate(profile),
    )


@router.delete("", response_model=MessageResponse)
async def delete_profile(
        current_user: User = Depends(get_current_user),
        repo: ProfileRepository = Depends(get_profile_repository),
):
    profile = await repo.get_by_user_id(current_user.id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")

    await repo.delete(profile)
    return MessageResponse(message="Profile deleted successfully")
