"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session. Every
statement carries the owner filter.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import Float, cast, delete, update
from sqlmodel import select, func
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceFilter, InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus

SORT_MODES = {
    "date_asc": ("invoice_date", False),
    "date_desc": ("invoice_date", True),
    "due_asc": ("due_date", False),
    "due_desc": ("due_date", True),
    "total_asc": ("gross_total", False),
    "total_desc": ("gross_total", True),
    "created_desc": ("created_at", True),
}


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Uses async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(
        self, invoice_id: int, owner_id: int, for_update: bool = False
    ) -> Optional[Invoice]:
        """
        Retrieve invoice by ID within the owner scope

        Args:
            invoice_id: Invoice ID
            owner_id: Owner scope
            for_update: If True, locks the row with SELECT FOR UPDATE (prevents concurrent transitions)

        Returns:
            Invoice if found, None otherwise
        """
        stmt = select(Invoice).where(Invoice.id == invoice_id, Invoice.owner_id == owner_id)
        if for_update:
            stmt = stmt.with_for_update()
        # Always read the committed row, never a stale identity map copy
        stmt = stmt.execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_fields(
        self,
        invoice_id: int,
        owner_id: int,
        fields: Dict[str, Any],
        expected_status: Optional[InvoiceStatus] = None,
    ) -> int:
        stmt = update(Invoice).where(Invoice.id == invoice_id, Invoice.owner_id == owner_id)
        if expected_status is not None:
            stmt = stmt.where(Invoice.status == expected_status)
        # No RETURNING, rowcount must count the guarded match
        result = await self.session.execute(
            stmt.values(**fields).execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def delete(
        self, invoice_id: int, owner_id: int, expected_status: Optional[InvoiceStatus] = None
    ) -> int:
        stmt = delete(Invoice).where(Invoice.id == invoice_id, Invoice.owner_id == owner_id)
        if expected_status is not None:
            stmt = stmt.where(Invoice.status == expected_status)
        result = await self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount

    def _filtered(self, statement, filters: InvoiceFilter):
        statement = statement.where(Invoice.owner_id == filters.owner_id)

        if filters.statuses:
            statement = statement.where(Invoice.status.in_(filters.statuses))
        if filters.company_id is not None:
            statement = statement.where(Invoice.company_id == filters.company_id)

        column = Invoice.due_date if filters.date_field == "due" else Invoice.invoice_date
        if filters.date_from is not None:
            statement = statement.where(column >= filters.date_from)
        if filters.date_to is not None:
            statement = statement.where(column <= filters.date_to)

        return statement

    def _order_by(self, sort: str):
        column_name, descending = SORT_MODES.get(sort, SORT_MODES["date_desc"])
        column = getattr(Invoice, column_name)
        if column_name == "gross_total" and self.session.bind.dialect.name == "sqlite":
            # Amounts are stored as text on SQLite
            column = cast(column, Float)
        if descending:
            return column.desc(), Invoice.id.desc()
        return column.asc(), Invoice.id.asc()

    async def list_by_owner(
        self,
        filters: InvoiceFilter,
        limit: int = 50,
        offset: int = 0,
        sort: str = "date_desc",
    ) -> List[Invoice]:
        statement = self._filtered(select(Invoice), filters)
        statement = statement.order_by(*self._order_by(sort))
        statement = statement.limit(limit).offset(offset)

        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def count_by_owner(self, filters: InvoiceFilter) -> int:
        statement = self._filtered(select(func.count()).select_from(Invoice), filters)
        result = await self.session.execute(statement)
        return int(result.scalar_one())

    async def get_max_counter(self, owner_id: int, company_id: Optional[int] = None) -> int:
        statement = (
            select(func.coalesce(func.max(Invoice.counter), 0))
            .where(Invoice.owner_id == owner_id)
        )
        if company_id is not None:
            statement = statement.where(Invoice.company_id == company_id)

        result = await self.session.execute(statement)
        return int(result.scalar_one())
