"""Helpers shared by the invoicing use cases"""

from datetime import date
from typing import Optional
from libs.result import Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.invoice_number import InvoiceNumbering


def invoice_not_found(invoice_id: int) -> Error:
    """Identical for missing invoices and invoices of other owners"""
    return Error(
        code="INVOICE_NOT_FOUND",
        message=f"Invoice with ID {invoice_id} not found",
        reason="No invoice with this ID in the owner scope",
    )


def concurrent_change(invoice_id: int, expected: InvoiceStatus) -> Error:
    """The row left the status read under the lock before the write"""
    return Error(
        code="CONCURRENCY_CONFLICT",
        message="The invoice is being modified concurrently, please retry",
        reason=f"invoice {invoice_id} is no longer {expected.value}",
    )


async def load_invoice_aggregate(
    invoice_repo: InvoiceRepository,
    position_repo: InvoicePositionRepository,
    invoice_id: int,
    owner_id: int,
    for_update: bool = False,
) -> Optional[InvoiceAggregate]:
    """
    Load an invoice with its positions, both filtered by owner

    Drafts get freshly recomputed totals; issued and final invoices keep
    their frozen totals.
    """
    invoice = await invoice_repo.get_by_id(invoice_id, owner_id, for_update=for_update)
    if invoice is None:
        return None
    positions = await position_repo.get_by_invoice_id(invoice.id, owner_id)
    aggregate = InvoiceAggregate(invoice, positions)
    aggregate.refresh_after_load()
    return aggregate


async def assign_number(
    invoice_repo: InvoiceRepository,
    numbering: InvoiceNumbering,
    invoice: Invoice,
    today: date,
    customer_number: str = "",
) -> None:
    """
    Give a new invoice its counter and number when the caller left them empty

    The counter is the highest existing counter of the owner (or of the
    owner and buyer company with local counters) plus one, read inside the
    caller's transaction.
    """
    if not invoice.counter:
        scope = numbering.counter_scope(invoice.company_id)
        invoice.counter = await invoice_repo.get_max_counter(invoice.owner_id, scope) + 1
    if not invoice.number:
        invoice.number = numbering.format(invoice.counter, today, customer_number)
