"""
Общие фикстуры для всех тестов backend'а планировщика питания.

Стратегия:
- Тестовое FastAPI-приложение создаётся без startup-событий (нет подключения к PostgreSQL).
- Для auth-эндпоинтов UserRepository заменяется на AsyncMock (mock_repo).
- Для профиля, планов и избранного get_db заменяется на сессию in-memory SQLite (aiosqlite),
  а get_current_user — на лямбду с пользователем из этой БД.
- JWT-токены создаются через auth_service.create_access_token() для проверки middleware.
"""

import pytest
from unittest.mock import AsyncMock
from httpx import AsyncClient, ASGITransport
from fastapi import FastAPI
from datetime import datetime
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401  регистрирует все таблицы в metadata
from app.api.router import api_router
from app.core.base import Base
from app.core.db import get_db
from app.core.dependencies import get_current_user, get_user_repository, get_meal_plan_service
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.services.auth_service import auth_service
from app.services.meal_plan_service import MealPlanService


# ---------------------------------------------------------------------------
# Вспомогательные функции
# ---------------------------------------------------------------------------

def create_test_app() -> FastAPI:
    """Тестовое FastAPI-приложение без startup-событий."""
    test_app = FastAPI(title="Meal Planner Test App")
    test_app.include_router(api_router, prefix="/api")
    return test_app


def make_auth_headers(user: User) -> dict:
    """Создать заголовки авторизации с валидным JWT для указанного пользователя."""
    access_token = auth_service.create_access_token(data={"sub": str(user.id)})
    return {"Authorization": f"Bearer {access_token}"}


# ---------------------------------------------------------------------------
# Фикстуры пользователей
# ---------------------------------------------------------------------------

@pytest.fixture
def user_fixture() -> User:
    return User(
        id=1,
        name="Tester",
        email="test@example.com",
        password=auth_service.hash_password("password123"),
        created_at=datetime.utcnow(),
    )


@pytest.fixture
def mock_repo() -> AsyncMock:
    """Мокированный UserRepository для auth-эндпоинтов."""
    return AsyncMock(spec=UserRepository)


# ---------------------------------------------------------------------------
# In-memory БД
# ---------------------------------------------------------------------------

@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def db_user(db_session) -> User:
    user = User(
        name="Planner",
        email="planner@example.com",
        password=auth_service.hash_password("password123"),
        created_at=datetime.utcnow(),
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


# ---------------------------------------------------------------------------
# HTTP-клиенты
# ---------------------------------------------------------------------------

@pytest.fixture
async def client(mock_repo) -> AsyncGenerator[AsyncClient, None]:
    """
    Базовый клиент: get_user_repository → mock_repo.
    Используется для auth-эндпоинтов (register, login, refresh, logout, user).
    """
    app = create_test_app()
    app.dependency_overrides[get_user_repository] = lambda: mock_repo
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def db_app(db_session, db_user) -> FastAPI:
    """
    Приложение поверх in-memory БД: get_db → db_session, get_current_user → db_user.
    Тесты могут добавить свои overrides (генератор блюд и т.п.).
    """
    app = create_test_app()
    plan_service = MealPlanService()
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_current_user] = lambda: db_user
    app.dependency_overrides[get_meal_plan_service] = lambda: plan_service
    return app


@pytest.fixture
async def db_client(db_app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=db_app),
        base_url="http://test",
    ) as ac:
        yield ac
