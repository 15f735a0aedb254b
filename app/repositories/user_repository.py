from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select

from app.models.user import User


class UserRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return await self.db.get(User, user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Поиск без учета регистра: Foo@Mail.com и foo@mail.com это один аккаунт"""
        result = await self.db.execute(select(User).where(func.lower(User.email) == email.lower()))
        return result.scalar_one_or_none()

    async def create_user(self, name: str, email: str, password_hash: str) -> User:
        user = User(name=name, email=email, password=password_hash, created_at=datetime.utcnow())
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        return user

    async def save_refresh_token(self, user: User, refresh_token: str, expires: datetime) -> None:
        user.refresh_token = refresh_token
        user.refresh_token_expires = expires
        await self.db.commit()

    async def revoke_refresh_token(self, user: User) -> None:
        """Logout: refresh-токен больше не принимается /refresh"""
        user.refresh_token = None
        user.refresh_token_expires = None
        await self.db.commit()
