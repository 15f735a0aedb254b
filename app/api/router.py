from fastapi import APIRouter
from app.api.v1.auth import router as auth_router
from app.api.v1.profile import router as profile_router
from app.api.v1.meal_plan import router as meal_plan_router
from app.api.v1.favorites import router as favorites_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(meal_plan_router)
api_router.include_router(favorites_router)
