"""DuplicateInvoice Use Case

Copies an invoice of any status into a new draft.
"""

import logging
from datetime import date, timedelta
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.invoice_number import InvoiceNumbering
from src.domain.money import ZERO
from .dtos import InvoiceResponseDTO
from .support import assign_number, invoice_not_found, load_invoice_aggregate
from .transaction import run_in_transaction

logger = logging.getLogger(__name__)

# Content carried over to the copy
COPIED_FIELDS = (
    "company_id",
    "template_id",
    "currency",
    "tax_type",
    "exemption_reason",
    "opening",
    "footer",
    "contact_invoice",
    "order_number",
    "supplier_number",
    "tax_number",
)


class DuplicateInvoice:
    """
    Use Case: Duplicate invoice as a new draft

    Business Rules:
    1. The source invoice must be in the owner scope; its status is irrelevant
    2. The copy is a draft with a fresh counter and number
    3. Invoice and delivery date are today, due date is today plus the
       payment term
    4. Positions are copied with new identities; the source stays untouched
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
        numbering: Optional[InvoiceNumbering] = None,
        payment_days: int = 14,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo
        self.numbering = numbering or InvoiceNumbering()
        self.payment_days = payment_days

    async def execute(
        self,
        invoice_id: int,
        owner_id: int,
        customer_number: str = "",
        today: Optional[date] = None,
        timeout: Optional[float] = None,
    ) -> Result[InvoiceResponseDTO]:
        today = today or date.today()

        async def operation() -> Result[InvoiceResponseDTO]:
            source = await load_invoice_aggregate(
                self.invoice_repo, self.position_repo, invoice_id, owner_id
            )
            if source is None:
                return Return.err(invoice_not_found(invoice_id))

            copy = Invoice(
                owner_id=owner_id,
                status=InvoiceStatus.DRAFT,
                invoice_date=today,
                occurrence_date=today,
                due_date=today + timedelta(days=self.payment_days),
                net_total=ZERO,
                gross_total=ZERO,
                **{name: getattr(source.invoice, name) for name in COPIED_FIELDS},
            )
            await assign_number(self.invoice_repo, self.numbering, copy, today, customer_number)
            created = await self.invoice_repo.create(copy)

            positions = await self.position_repo.create_many(
                InvoiceAggregate(created, source.positions).fresh_positions(created.id)
            )

            logger.info(
                f"Duplicated invoice {invoice_id} as {created.id} ({created.number}) "
                f"for owner {owner_id}"
            )
            result = InvoiceAggregate(created, positions)
            result.recompute_totals()
            return Return.ok(InvoiceResponseDTO.from_aggregate(result))

        return await run_in_transaction(
            self.uow,
            operation,
            failure_code="DUPLICATE_INVOICE_FAILED",
            failure_message="Failed to duplicate invoice",
            timeout=timeout,
        )
