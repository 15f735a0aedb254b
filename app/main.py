import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.router import api_router
from app.core.config import settings
from app.core.database import init_database
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Meal Planner - AI weekly meal plans")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    configure_logging(settings.LOG_LEVEL)
    await init_database()
    logger.info("Приложение запущено!")


@app.get("/")
async def root():
    return {
        "app": "Meal Planner",
        "message": "AI-generated weekly meal plans",
        "links": {
            "profile": "/api/profile",
            "generate": "/api/meal-plan/generate",
            "current": "/api/meal-plan/current",
            "docs": "/docs",
        }
    }
