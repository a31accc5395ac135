"""Invoice Position Repository Interface

Positions are never locked or edited individually: they are read, deleted
and recreated as a whole under their invoice's lock.
"""

from abc import ABC, abstractmethod
from typing import List
from src.domain.invoice_position import InvoicePosition


class InvoicePositionRepository(ABC):
    """Repository interface for InvoicePosition persistence"""

    @abstractmethod
    async def get_by_invoice_id(self, invoice_id: int, owner_id: int) -> List[InvoicePosition]:
        """
        Retrieve all positions of an invoice, ordered by position

        Args:
            invoice_id: Invoice ID
            owner_id: Owner scope

        Returns:
            List of InvoicePosition items
        """
        pass

    @abstractmethod
    async def delete_by_invoice_id(self, invoice_id: int, owner_id: int) -> int:
        """
        Delete all positions of an invoice within the owner scope

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    async def create_many(self, positions: List[InvoicePosition]) -> List[InvoicePosition]:
        """
        Insert new positions

        Args:
            positions: Unsaved positions, already stamped with invoice and owner

        Returns:
            Created positions with generated IDs
        """
        pass
