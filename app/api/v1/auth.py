from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_current_user, get_user_repository
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.auth_service import auth_service
from app.schemas.auth import (
    UserLogin, UserRegister, AuthResponse, RefreshTokenRequest, UserRead, MessageResponse
)

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=AuthResponse)
async def register(user: UserRegister, repo: UserRepository = Depends(get_user_repository)):
    """Регистрация нового пользователя и выдача JWT токенов"""
    new_user = await auth_service.register_user(repo, user)
    return await auth_service.issue_tokens(repo, new_user)


@router.post("/login", response_model=AuthResponse)
async def login(user: UserLogin, repo: UserRepository = Depends(get_user_repository)):
    """Аутентификация пользователя и выдача JWT токенов"""
    authenticated_user = await auth_service.authenticate_user(repo, user)
    if not authenticated_user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return await auth_service.issue_tokens(repo, authenticated_user)


@router.post("/refresh", response_model=AuthResponse)
async def refresh_token(request: RefreshTokenRequest, repo: UserRepository = Depends(get_user_repository)):
    """Обновление access token с помощью refresh token"""
    user = await auth_service.verify_refresh_token(repo, request.refresh_token)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired refresh token"
        )

    access_token = auth_service.create_access_token(data={"sub": str(user.id)})
    return AuthResponse(
        access_token=access_token,
        refresh_token=request.refresh_token,
        token_type="bearer"
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(
        current_user: User = Depends(get_current_user),
        repo: UserRepository = Depends(get_user_repository),
):
    await repo.revoke_refresh_token(current_user)
    return MessageResponse(message="Successfully logged out")


@router.get("/user", response_model=UserRead)
async def current_user_info(current_user: User = Depends(get_current_user)):
    return current_user
