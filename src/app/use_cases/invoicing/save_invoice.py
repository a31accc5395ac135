"""SaveInvoice Use Case

Saves an invoice together with its positions in one transaction.
"""

import logging
from datetime import date, datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.domain.invoice import InvoiceStatus
from src.domain.invoice_aggregate import InvoiceAggregate
from src.domain.invoice_position import same_position_content
from src.domain.invoice_number import InvoiceNumbering
from src.domain.money import ZERO
from .dtos import InvoiceResponseDTO
from .support import assign_number, concurrent_change, invoice_not_found
from .transaction import run_in_transaction

logger = logging.getLogger(__name__)

# Columns this path may write on an existing invoice. Status, owner,
# transition timestamps and totals are system owned.
EDITABLE_FIELDS = (
    "company_id",
    "template_id",
    "currency",
    "invoice_date",
    "due_date",
    "occurrence_date",
    "tax_type",
    "exemption_reason",
    "opening",
    "footer",
    "contact_invoice",
    "order_number",
    "supplier_number",
    "tax_number",
)

# Only editable while the invoice is a draft
NUMBERING_FIELDS = ("number", "counter")


class SaveInvoice:
    """
    Use Case: Save invoice and replace its positions

    Business Rules:
    1. The invoice must belong to the caller's owner scope
    2. New invoices are inserted as draft with the next counter and number
    3. Existing invoices are updated through a column whitelist only
    4. Positions are replaced wholesale: delete all, insert all, fresh ids
    5. Draft totals are persisted as zero; otherwise the in-memory totals
       are persisted as they are
    6. Paid and voided invoices are never modified; issued invoices only
       when require_draft is False, and then only their header: the
       positions must match the stored ones
    7. The update is guarded by the status read under the lock

    Flow:
    1. Validate owner scope
    2. Insert, or lock and update the invoice row
    3. Delete the old positions (owner scoped)
    4. Insert the new positions stamped with invoice and owner
    5. Commit (any failure rolls back all steps)
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
        numbering: Optional[InvoiceNumbering] = None,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo
        self.numbering = numbering or InvoiceNumbering()

    async def execute(
        self,
        aggregate: InvoiceAggregate,
        owner_id: int,
        customer_number: str = "",
        today: Optional[date] = None,
        require_draft: bool = True,
        timeout: Optional[float] = None,
    ) -> Result[InvoiceResponseDTO]:
        """
        Execute invoice save

        Args:
            aggregate: Invoice with the complete new set of positions
            owner_id: Owner scope of the caller
            customer_number: Buyer customer number for %CN% in new numbers
            today: Date used for new numbers (defaults to today)
            require_draft: Reject existing invoices that are not drafts
            timeout: Transaction deadline in seconds

        Returns:
            Result[InvoiceResponseDTO]: Saved invoice or error
        """
        # Step 1: Owner scope
        if not aggregate.belongs_to(owner_id):
            logger.warning(
                f"Rejected save of invoice {aggregate.invoice.id}: "
                f"owner {aggregate.owner_id} outside scope {owner_id}"
            )
            return Return.err(
                Error(
                    code="OWNERSHIP_VIOLATION",
                    message="Invoice does not belong to the requesting owner",
                    reason=f"invoice owner_id={aggregate.owner_id}, scope owner_id={owner_id}",
                )
            )

        async def operation() -> Result[InvoiceResponseDTO]:
            if aggregate.invoice.id is None:
                return await self._insert(aggregate, owner_id, customer_number, today or date.today())
            return await self._update(aggregate, owner_id, require_draft)

        return await run_in_transaction(
            self.uow,
            operation,
            failure_code="SAVE_INVOICE_FAILED",
            failure_message="Failed to save invoice",
            timeout=timeout,
        )

    async def _insert(
        self, aggregate: InvoiceAggregate, owner_id: int, customer_number: str, today: date
    ) -> Result[InvoiceResponseDTO]:
        invoice = aggregate.invoice

        # New invoices always start as drafts without frozen figures
        invoice.status = InvoiceStatus.DRAFT
        invoice.issued_at = None
        invoice.paid_at = None
        invoice.voided_at = None
        invoice.net_total = ZERO
        invoice.gross_total = ZERO

        await assign_number(self.invoice_repo, self.numbering, invoice, today, customer_number)
        created = await self.invoice_repo.create(invoice)

        positions = await self.position_repo.create_many(aggregate.fresh_positions(created.id))

        logger.info(
            f"Created invoice {created.id} ({created.number}) for owner {owner_id} "
            f"with {len(positions)} positions"
        )
        saved = InvoiceAggregate(created, positions)
        saved.recompute_totals()
        return Return.ok(InvoiceResponseDTO.from_aggregate(saved))

    async def _update(
        self, aggregate: InvoiceAggregate, owner_id: int, require_draft: bool
    ) -> Result[InvoiceResponseDTO]:
        invoice_id = aggregate.invoice.id

        # Capture the new content before the locked read refreshes the session
        fields = {name: getattr(aggregate.invoice, name) for name in EDITABLE_FIELDS}
        # Empty number or zero counter keeps the current value
        numbering = {
            name: getattr(aggregate.invoice, name)
            for name in NUMBERING_FIELDS
            if getattr(aggregate.invoice, name)
        }
        new_positions = aggregate.fresh_positions(invoice_id)
        net_total, gross_total = aggregate.net_total, aggregate.gross_total

        current = await self.invoice_repo.get_by_id(invoice_id, owner_id, for_update=True)
        if current is None:
            return Return.err(invoice_not_found(invoice_id))

        status = InvoiceStatus(current.status)
        if status.is_final or (require_draft and status != InvoiceStatus.DRAFT):
            return Return.err(
                Error(
                    code="INVOICE_NOT_EDITABLE",
                    message=f"Invoice {invoice_id} cannot be edited in status {status.value}",
                    reason="Only draft invoices can be edited",
                )
            )

        stored_positions = None
        if status == InvoiceStatus.DRAFT:
            fields.update(numbering)
            fields["net_total"] = ZERO
            fields["gross_total"] = ZERO
        else:
            # Positions of an issued invoice back its frozen totals
            stored_positions = await self.position_repo.get_by_invoice_id(invoice_id, owner_id)
            if not same_position_content(new_positions, stored_positions):
                return Return.err(
                    Error(
                        code="INVOICE_POSITIONS_FROZEN",
                        message=f"Positions of invoice {invoice_id} cannot change after issuing",
                        reason="Roll the invoice back to draft to edit its positions",
                    )
                )
            fields["net_total"] = net_total
            fields["gross_total"] = gross_total
        fields["updated_at"] = datetime.utcnow()

        updated = await self.invoice_repo.update_fields(
            invoice_id, owner_id, fields, expected_status=status
        )
        if updated == 0:
            logger.warning(f"Invoice {invoice_id} left status {status.value} during save")
            return Return.err(concurrent_change(invoice_id, status))

        if stored_positions is None:
            await self.position_repo.delete_by_invoice_id(invoice_id, owner_id)
            positions = await self.position_repo.create_many(new_positions)
            logger.info(
                f"Updated invoice {invoice_id} for owner {owner_id}, "
                f"replaced positions with {len(positions)} new rows"
            )
        else:
            positions = stored_positions
            logger.info(f"Updated header of issued invoice {invoice_id} for owner {owner_id}")

        saved = await self.invoice_repo.get_by_id(invoice_id, owner_id)
        result = InvoiceAggregate(saved, positions)
        result.refresh_after_load()
        return Return.ok(InvoiceResponseDTO.from_aggregate(result))
