"""Invoice Repository Interface

Defines the contract for owner-scoped invoice persistence operations.
Every method takes the owner id; no method may touch another owner's rows.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from src.domain.invoice import Invoice, InvoiceStatus

DATE_FIELDS = ("invoice", "due")


class InvoiceFilter(BaseModel):
    """Search criteria for invoices of one owner"""

    owner_id: int
    statuses: List[InvoiceStatus] = Field(
        default_factory=list,
        description="Match any of these statuses, all when empty"
    )
    company_id: Optional[int] = None
    date_field: str = Field(
        default="invoice",
        description="Date the range applies to: invoice or due"
    )
    date_from: Optional[date] = Field(default=None, description="Inclusive lower bound")
    date_to: Optional[date] = Field(default=None, description="Inclusive upper bound")


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Methods support pessimistic locking (SELECT FOR UPDATE) so lifecycle
    transitions on the same invoice are serialized. Writes additionally
    accept the status read under the lock, so a write whose precondition
    no longer holds changes nothing.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice with generated ID
        """
        pass

    @abstractmethod
    async def get_by_id(
        self, invoice_id: int, owner_id: int, for_update: bool = False
    ) -> Optional[Invoice]:
        """
        Retrieve invoice by ID within the owner scope

        Args:
            invoice_id: Invoice ID
            owner_id: Owner scope
            for_update: If True, lock the row with SELECT FOR UPDATE

        Returns:
            Invoice if found for this owner, None otherwise
        """
        pass

    @abstractmethod
    async def update_fields(
        self,
        invoice_id: int,
        owner_id: int,
        fields: Dict[str, Any],
        expected_status: Optional[InvoiceStatus] = None,
    ) -> int:
        """
        Update the given columns of one invoice within the owner scope

        Args:
            invoice_id: Invoice ID
            owner_id: Owner scope
            fields: Column name -> new value
            expected_status: Only update while the row still has this status

        Returns:
            Number of rows updated (0 when not found for this owner or the
            status changed in the meantime)
        """
        pass

    @abstractmethod
    async def delete(
        self, invoice_id: int, owner_id: int, expected_status: Optional[InvoiceStatus] = None
    ) -> int:
        """
        Delete one invoice within the owner scope

        Returns:
            Number of rows deleted
        """
        pass

    @abstractmethod
    async def list_by_owner(
        self,
        filters: InvoiceFilter,
        limit: int = 50,
        offset: int = 0,
        sort: str = "date_desc",
    ) -> List[Invoice]:
        """
        Retrieve a page of invoices of one owner

        Args:
            filters: Owner scope and search criteria
            limit: Maximum number of invoices to return
            offset: Offset for pagination
            sort: date_desc, date_asc, due_asc, due_desc, total_asc,
                total_desc or created_desc

        Returns:
            List of invoices
        """
        pass

    @abstractmethod
    async def count_by_owner(self, filters: InvoiceFilter) -> int:
        """Number of invoices matching the filters, ignoring pagination"""
        pass

    @abstractmethod
    async def get_max_counter(self, owner_id: int, company_id: Optional[int] = None) -> int:
        """
        Highest counter used so far

        Args:
            owner_id: Owner scope
            company_id: Restrict to one buyer company (local counters)

        Returns:
            Highest counter, 0 when no invoice exists
        """
        pass
