from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import NotificationLog


class NotificationLogRepository(Protocol):
    async def add(self, entry: NotificationLog) -> None: ...


class SqlNotificationLogRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, entry: NotificationLog) -> None:
        self.db.add(entry)
        await self.db.flush()
