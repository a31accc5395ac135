"""SQLAlchemy Invoice Position Repository Implementation

Implements invoice position persistence using SQLAlchemy async session.
"""

from typing import List
from sqlalchemy import delete
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.domain.invoice_position import InvoicePosition


class SqlAlchemyInvoicePositionRepository(InvoicePositionRepository):
    """
    SQLAlchemy implementation of InvoicePositionRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_invoice_id(self, invoice_id: int, owner_id: int) -> List[InvoicePosition]:
        """
        Retrieve all positions of an invoice, ordered by position

        Args:
            invoice_id: Invoice ID
            owner_id: Owner scope

        Returns:
            List of InvoicePosition items
        """
        statement = (
            select(InvoicePosition)
            .where(InvoicePosition.invoice_id == invoice_id)
            .where(InvoicePosition.owner_id == owner_id)
            .order_by(InvoicePosition.position)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def delete_by_invoice_id(self, invoice_id: int, owner_id: int) -> int:
        stmt = (
            delete(InvoicePosition)
            .where(InvoicePosition.invoice_id == invoice_id)
            .where(InvoicePosition.owner_id == owner_id)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def create_many(self, positions: List[InvoicePosition]) -> List[InvoicePosition]:
        """
        Insert new position rows

        Args:
            positions: Unsaved positions, already stamped with invoice and owner

        Returns:
            Created positions with generated IDs
        """
        self.session.add_all(positions)
        await self.session.flush()
        return positions
