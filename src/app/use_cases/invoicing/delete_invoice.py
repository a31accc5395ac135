"""DeleteInvoice Use Case

Deletes a draft invoice and all its positions.
"""

import logging
from typing import Optional
from libs.result import Result, Return, Error
from src.app.services.unit_of_work import UnitOfWork
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.invoice_position_repository import InvoicePositionRepository
from src.domain.invoice import InvoiceStatus
from .support import concurrent_change, invoice_not_found
from .transaction import run_in_transaction

logger = logging.getLogger(__name__)


class DeleteInvoice:
    """
    Use Case: Delete invoice

    Business Rules:
    1. Owner scoped; other owners' invoices are reported as not found
    2. Only drafts can be deleted, issued invoices must be voided instead
    3. Positions are removed in the same transaction
    4. The row is only deleted while it is still a draft
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        position_repo: InvoicePositionRepository,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.position_repo = position_repo

    async def execute(
        self, invoice_id: int, owner_id: int, timeout: Optional[float] = None
    ) -> Result[int]:
        """
        Execute invoice deletion

        Returns:
            Result[int]: ID of the deleted invoice or error
        """

        async def operation() -> Result[int]:
            invoice = await self.invoice_repo.get_by_id(invoice_id, owner_id, for_update=True)
            if invoice is None:
                return Return.err(invoice_not_found(invoice_id))

            if invoice.status != InvoiceStatus.DRAFT:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_DELETABLE",
                        message="Invoice cannot be deleted after issuing",
                        reason=f"status={InvoiceStatus(invoice.status).value}",
                    )
                )

            await self.position_repo.delete_by_invoice_id(invoice_id, owner_id)
            deleted = await self.invoice_repo.delete(
                invoice_id, owner_id, expected_status=InvoiceStatus.DRAFT
            )
            if deleted == 0:
                # Issued in the meantime; the rollback restores the positions
                return Return.err(concurrent_change(invoice_id, InvoiceStatus.DRAFT))
            logger.info(f"Deleted draft invoice {invoice_id} of owner {owner_id}")
            return Return.ok(invoice_id)

        return await run_in_transaction(
            self.uow,
            operation,
            failure_code="DELETE_INVOICE_FAILED",
            failure_message="Failed to delete invoice",
            timeout=timeout,
        )
