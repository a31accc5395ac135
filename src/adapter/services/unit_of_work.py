from typing import Optional
from sqlalchemy import text
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.services.unit_of_work import UnitOfWork


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession, lock_timeout_ms: Optional[int] = None):
        self.session = session
        self.lock_timeout_ms = lock_timeout_ms

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        await self.session.rollback()

    async def apply_lock_timeout(self):
        # SQLite locks the whole database and has no per-transaction setting
        if not self.lock_timeout_ms or self.session.bind is None:
            return
        if self.session.bind.dialect.name != "postgresql":
            return
        await self.session.execute(text(f"SET LOCAL lock_timeout = '{int(self.lock_timeout_ms)}ms'"))
