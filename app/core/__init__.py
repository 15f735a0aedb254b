from app.core.config import settings
from app.core.base import Base
from app.core.db import engine, get_db

__all__ = ["settings", "engine", "Base", "get_db"]
