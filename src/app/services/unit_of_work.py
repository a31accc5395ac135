"""Unit of Work Interface

Transaction-scoped handle shared by the repositories of one use case.
"""

from abc import ABC, abstractmethod


class UnitOfWork(ABC):

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.rollback()

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass

    async def apply_lock_timeout(self):
        """Bound how long row locks are waited for in the current transaction"""
        pass
